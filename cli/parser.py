"""Command parser for CLI input."""

import re
import shlex

from cli.constants import MOVIE_FIELDS
from cli.models import (
    CommandRequest,
    DeleteMovieCommand,
    DeletePrintCommand,
    DownloadPrintCommand,
    HealthCommand,
    ListMoviesCommand,
    ListPrintsCommand,
    ServerCommand,
    StreamMovieCommand,
    UploadMovieCommand,
    UploadPrintCommand,
)

_RANGE_ARG = re.compile(r"(\d+)-(\d*)")


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a command object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        One of the command dataclasses from cli.models

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name, args = tokens[0], tokens[1:]

    if command_name == "health":
        _expect_no_args(command_name, args)
        return HealthCommand()
    elif command_name == "movies":
        _expect_no_args(command_name, args)
        return ListMoviesCommand()
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "stream":
        return _parse_stream(args)
    elif command_name == "delete":
        return DeleteMovieCommand(movie_id=_single_id(command_name, args))
    elif command_name == "prints":
        _expect_no_args(command_name, args)
        return ListPrintsCommand()
    elif command_name == "upload-print":
        return _parse_upload_print(args)
    elif command_name == "download-print":
        return _parse_download_print(args)
    elif command_name == "delete-print":
        return DeletePrintCommand(print_id=_single_id(command_name, args))
    elif command_name == "server":
        return _parse_server(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _expect_no_args(command_name: str, args: list[str]) -> None:
    if args:
        raise ParseError(f"{command_name} takes no arguments")


def _single_id(command_name: str, args: list[str]) -> str:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: <id>")
    return args[0]


def _parse_fields(args: list[str], allowed: tuple[str, ...]) -> dict:
    """Parse 'key=value' pairs, rejecting keys outside allowed."""
    fields = {}
    for arg in args:
        key, separator, value = arg.partition("=")
        if not separator or not key:
            raise ParseError(f"Expected field=value, got '{arg}'")
        if key not in allowed:
            raise ParseError(f"Unknown field '{key}' (allowed: {', '.join(allowed)})")
        fields[key] = value
    return fields


def _parse_upload(args: list[str]) -> UploadMovieCommand:
    """Parse 'upload <path> [field=value ...]' command."""
    if not args:
        raise ParseError("upload requires a file path")

    return UploadMovieCommand(file_path=args[0], fields=_parse_fields(args[1:], MOVIE_FIELDS))


def _parse_stream(args: list[str]) -> StreamMovieCommand:
    """Parse 'stream <id> <output> [start-end]' command."""
    if len(args) not in (2, 3):
        raise ParseError("stream requires <id> <output> and an optional start-end range")

    byte_range = None
    if len(args) == 3:
        match = _RANGE_ARG.fullmatch(args[2])
        if not match:
            raise ParseError(f"Invalid range '{args[2]}', expected start-end or start-")
        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else None
        if end is not None and end < start:
            raise ParseError("Range end must not precede its start")
        byte_range = (start, end)

    return StreamMovieCommand(movie_id=args[0], output_path=args[1], byte_range=byte_range)


def _parse_upload_print(args: list[str]) -> UploadPrintCommand:
    """Parse 'upload-print <path> [id=value]' command."""
    if not args:
        raise ParseError("upload-print requires a file path")

    fields = _parse_fields(args[1:], ("id",))
    return UploadPrintCommand(file_path=args[0], print_id=fields.get("id"))


def _parse_download_print(args: list[str]) -> DownloadPrintCommand:
    """Parse 'download-print <id> [output]' command."""
    if len(args) not in (1, 2):
        raise ParseError("download-print requires <id> and an optional output path")

    return DownloadPrintCommand(print_id=args[0], output_path=args[1] if len(args) > 1 else None)


def _parse_server(args: list[str]) -> ServerCommand:
    """Parse 'server <host> <port>' command."""
    if len(args) != 2:
        raise ParseError("server requires exactly 2 arguments: <host> <port>")

    host, port = args
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ParseError(f"Invalid port: {port}")
    return ServerCommand(host=host, port=int(port))
