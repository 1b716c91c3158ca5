"""The shell's mutable environment and the builtins that edit it."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from typing import TextIO


def is_valid_env_var(var: str) -> bool:
    """Whether the part of ``var`` before ``=`` is a valid identifier."""
    if not var:
        return False
    first = var[0]
    if not (first.isascii() and first.isalpha()) and first != "_":
        return False
    for char in var[1:]:
        if char == "=":
            break
        if not (char.isascii() and char.isalnum()) and char != "_":
            return False
    return True


def parse_var(var: str) -> str | None:
    """Return the name in a ``NAME=VALUE`` assignment.

    Returns None when there is no ``=`` or the name contains a space.
    """
    name, sep, _ = var.partition("=")
    if not sep or " " in name:
        return None
    return name


def _stream(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


class Environment:
    """An ordered list of ``NAME=VALUE`` entries owned by the shell."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self.entries: list[str] = list(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str) -> str | None:
        """Value of the variable called exactly ``name``, or None."""
        prefix = name + "="
        for entry in self.entries:
            if entry.startswith(prefix):
                return entry[len(prefix):]
        return None

    def var_exist(self, name: str) -> int | None:
        """Index of the first entry that begins with ``name``, or None."""
        for index, entry in enumerate(self.entries):
            if entry.startswith(name):
                return index
        return None

    def replace_var(self, name: str, entry: str) -> None:
        """Replace the entry found for ``name`` with ``entry``."""
        index = self.var_exist(name)
        if index is None:
            raise KeyError(name)
        self.entries[index] = entry

    def delete_var(self, index: int) -> str:
        """Remove the entry at ``index`` and return it.

        Later entries move up by one place.
        """
        if not -len(self.entries) <= index < len(self.entries):
            raise IndexError(f"no environment entry at index {index}")
        return self.entries.pop(index)

    def _define(self, name: str, entry: str) -> None:
        if self.var_exist(name) is not None:
            self.replace_var(name, entry)
        elif self.entries:
            # New variables go in just before the last entry.
            self.entries.insert(len(self.entries) - 1, entry)
        else:
            self.entries.append(entry)

    def export(self, args: list[str], out: TextIO | None = None) -> int:
        """Run ``export`` with ``args`` (``args[0]`` is the command name)."""
        stream = _stream(out)
        status = 0
        if len(args) < 2:
            self.export_list(stream)
        for arg in args[1:]:
            if not is_valid_env_var(arg):
                stream.write(f"bash: export: `{arg}`: not a valid identifier \n")
                status = 1
            elif "=" in arg:
                name = parse_var(arg)
                if name is not None:
                    self._define(name, arg)
                status = 0
        return status

    def unset(self, args: list[str], out: TextIO | None = None) -> int:
        """Run ``unset`` with ``args`` (``args[0]`` is the command name)."""
        stream = _stream(out)
        status = 0
        for arg in args[1:]:
            if not is_valid_env_var(arg):
                stream.write(f"bash: unset: `{arg}`: not a valid identifier \n")
                status = 1
            prefix = arg + "="
            remaining = [e for e in self.entries if not e.startswith(prefix)]
            if len(remaining) != len(self.entries):
                self.entries = remaining
                status = 0
        return status

    def env(self, out: TextIO | None = None) -> int:
        """Print every entry, one per line."""
        stream = _stream(out)
        for entry in self.entries:
            stream.write(f"{entry}\n")
        return 0

    def export_list(self, out: TextIO | None = None) -> None:
        """Print every entry in ``declare -x`` form."""
        stream = _stream(out)
        for entry in self.entries:
            stream.write(f"declare -x {entry}\n")