"""Completer for the homeshelf CLI with local file autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, UPLOAD_EXTENSIONS


class ShelfCompleter(Completer):
    """
    Completes command names for the first token, and local files with a
    matching extension for the path argument of 'upload' and 'upload-print'.
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        extensions = UPLOAD_EXTENSIONS.get(command)
        if extensions is None:
            return

        # Only the path argument gets file completion
        arg_index = len(tokens) if is_typing_new_token else len(tokens) - 1
        if arg_index != 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_files(current_word, extensions)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_files(self, partial: str, extensions: tuple) -> Iterable[Completion]:
        """
        Complete directories and files with a supported extension.

        The partial word is split into the directory to list and the name
        prefix to match inside it.
        """
        head, separator, name_prefix = partial.rpartition("/")
        directory_part = head + separator

        directory = Path(directory_part).expanduser() if directory_part else Path.cwd()
        if not directory.is_dir():
            return

        try:
            entries = sorted(directory.iterdir())
        except OSError:
            return

        prefix_lower = name_prefix.lower()
        for entry in entries:
            if entry.name.startswith(".") and not name_prefix.startswith("."):
                continue
            if not entry.name.lower().startswith(prefix_lower):
                continue
            if entry.is_dir():
                yield Completion(f"{directory_part}{entry.name}/", start_position=-len(partial))
            elif entry.name.lower().endswith(extensions):
                yield Completion(f"{directory_part}{entry.name}", start_position=-len(partial))
