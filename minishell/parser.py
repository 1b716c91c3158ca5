"""Turning an input line into a list of commands."""

from __future__ import annotations

import re
from collections.abc import Iterable

from minishell.models import Command, new_command, number_commands

DOLLAR_MARK = "&"
META_CHARS = "<>|"

_META_SPLIT = re.compile(r"([<>|]+) ?")
_MARKED_VARIABLE = re.compile(r"&([^&$ ]*)")


class UnclosedQuotesError(ValueError):
    """Raised when a line ends inside single or double quotes."""

    def __init__(self, buffer: str) -> None:
        super().__init__("quotes not closed")
        self.buffer = buffer


def find_char(buffer: str, needle: str) -> bool:
    """Whether ``needle`` starts at any position of ``buffer`` but the last."""
    return any(buffer.startswith(needle, pos) for pos in range(len(buffer) - 1))


def find_meta_char(buffer: str) -> bool:
    """Whether ``buffer`` holds a pipe or redirection operator."""
    return any(find_char(buffer, meta) for meta in META_CHARS)


def _split_words(buffer: str) -> tuple[list[str], bool]:
    """Split ``buffer`` into words; also report whether a quote was left open."""
    words: list[str] = []
    current: list[str] = []
    pending = True
    in_double = in_single = False
    length = len(buffer)
    pos = 0
    while pos < length:
        char = buffer[pos]
        if char == '"' and not in_single:
            if in_double:
                # A closing double quote ends the word.
                in_double = False
                words.append("".join(current))
                current = []
                while pos + 1 < length and buffer[pos + 1] == " ":
                    pos += 1
                pending = pos + 1 < length
            else:
                in_double = True
            pos += 1
        elif char == "'" and not in_double:
            in_single = not in_single
            pos += 1
        elif char == " " and not in_double and not in_single:
            words.append("".join(current))
            current = []
            while pos < length and buffer[pos] == " ":
                pos += 1
            pending = pos < length
        else:
            current.append(DOLLAR_MARK if char == "$" and not in_single else char)
            pos += 1
    if pending:
        words.append("".join(current))
    return words, in_double or in_single


def parse_quotes(buffer: str) -> list[str]:
    """Split ``buffer`` into words, honouring quotes.

    A ``$`` outside single quotes is replaced by the expansion mark.
    Raises UnclosedQuotesError if a quote is left open.
    """
    words, unclosed = _split_words(buffer)
    if unclosed:
        raise UnclosedQuotesError(buffer)
    return words


def parse_meta_chars(buffer: str) -> tuple[list[str], list[str]]:
    """Split ``buffer`` at runs of operator characters.

    Returns the command segments and the operators between them; one space
    right after an operator is dropped.
    """
    parts = _META_SPLIT.split(buffer)
    return parts[0::2], parts[1::2]


def get_dolar_var(name: str, command: Command, status: int) -> str:
    """Value that ``$name`` expands to."""
    if name.startswith("?"):
        return str(status)
    value = command.lookup(name)
    return "" if value is None else value


def _expand_word(word: str, command: Command, status: int) -> str:
    return _MARKED_VARIABLE.sub(
        lambda match: get_dolar_var(match.group(1), command, status), word
    )


def expand_dollars(args: Iterable[str], command: Command, status: int) -> list[str]:
    """Replace marked variables in ``args`` using the environment of ``command``."""
    return [
        _expand_word(word, command, status)
        if word and find_char(word, DOLLAR_MARK)
        else word
        for word in args
    ]


def get_commands(
    args: list[str], commands: list[Command], envp: Iterable[str]
) -> Command:
    """Store ``args`` as a command in ``commands`` and return that command.

    The first command is filled while it has no arguments; after that a new
    command is appended for each call. Empty words are dropped from argv.
    """
    if not commands or commands[0].argc != 0:
        commands.append(new_command(envp))
    target = commands[-1]
    target.cmd = args[0] if args else None
    target.argv = [word for word in args if word]
    return target


def buffer_parsing(
    buffer: str, envp: Iterable[str], status: int = 0
) -> list[Command]:
    """Parse one input line into numbered commands.

    Raises UnclosedQuotesError when a line without operators leaves a quote
    open.
    """
    environment = list(envp)
    head = new_command(environment)
    commands = [head]
    if find_meta_char(buffer):
        segments, metas = parse_meta_chars(buffer)
        for segment in segments:
            if segment.startswith(" "):
                segment = segment[1:]
            words, _ = _split_words(segment)
            if find_char(segment, "$"):
                words = expand_dollars(words, head, status)
            get_commands(words, commands, environment)
        for index, command in enumerate(commands):
            command.meta_char = metas[index] if index < len(metas) else None
    else:
        words = parse_quotes(buffer)
        if find_char(buffer, "$"):
            words = expand_dollars(words, head, status)
        get_commands(words, commands, environment)
    number_commands(commands)
    return commands