"""Interactive prompt_toolkit shell for the homeshelf CLI."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.client import MediaClient
from cli.commands import dispatch_command, get_client
from cli.completer import ShelfCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.parser import ParseError, parse_command


def clear_screen() -> None:
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome(client: MediaClient) -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(f"Server: {client.config.get_base_url()}")
    print(WELCOME_HELP)


def prompt_message(client: MediaClient) -> list:
    """
    Prompt fragments naming the server the CLI currently talks to.

    Re-evaluated on every prompt, so a 'server' command shows up immediately.
    """
    host = client.config.data.get('server_host')
    port = client.config.data.get('server_port')
    return [
        ("class:prompt", PROMPT_TEXT),
        ("class:server", f"({host}:{port})"),
        ("class:prompt", "> "),
    ]


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    client = get_client()
    session: PromptSession = PromptSession(
        completer=ShelfCompleter(), history=InMemoryHistory(), style=STYLE
    )

    clear_screen()
    show_welcome(client)

    while True:
        try:
            user_input = session.prompt(lambda: prompt_message(client)).strip()

            if not user_input:
                continue

            if user_input in ("exit", "quit"):
                print("Goodbye!")
                break

            if user_input == "help":
                print(HELP_TEXT)
                continue

            if user_input == "clear":
                clear_screen()
                show_welcome(client)
                continue

            print(dispatch_command(parse_command(user_input), client=client))

        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
