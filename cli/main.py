"""homeshelf CLI entry point."""

import argparse
import os
from typing import List, Optional, Tuple

from common.logging_config import setup_logging
from cli.commands import get_client
from cli.parser import ParseError, _parse_server
from cli.repl import repl_loop


def parse_server_address(value: str) -> Tuple[str, int]:
    """
    Split a HOST:PORT argument.

    Raises:
        argparse.ArgumentTypeError: If the port is missing or out of range
    """
    host, sep, port = value.rpartition(':')
    if not sep or not host:
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got '{value}'")
    try:
        cmd = _parse_server([host, port])
    except ParseError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return cmd.host, cmd.port


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='homeshelf', description='Interactive client for a homeshelf server')
    parser.add_argument('--debug', action='store_true', help='enable debug logging')
    parser.add_argument(
        '--server',
        type=parse_server_address,
        metavar='HOST:PORT',
        help='talk to this server for this session without changing the saved config',
    )
    return parser


def apply_server_override(client, address: Optional[Tuple[str, int]]) -> None:
    """Point the client at another server without writing the config file."""
    if address is None:
        return
    host, port = address
    client.config.data['server_host'] = host
    client.config.data['server_port'] = port
    client.reconnect()


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for CLI."""
    args = build_arg_parser().parse_args(argv)
    log_level = 'DEBUG' if args.debug else os.getenv('LOG_LEVEL', 'WARNING')

    logger = setup_logging('cli', log_level=log_level)
    if args.debug:
        logger.info("Debug logging enabled")

    apply_server_override(get_client(), args.server)
    if args.server:
        logger.info(f"Using server {args.server[0]}:{args.server[1]} for this session")

    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
