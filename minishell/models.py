"""Parsed command records and helpers for building them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


def split_environment(envp: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split ``NAME=VALUE`` entries into parallel lists of names and values.

    Only the first ``=`` separates name from value; an entry without one
    has an empty value.
    """
    names: list[str] = []
    values: list[str] = []
    for entry in envp:
        name, _, value = entry.partition("=")
        names.append(name)
        values.append(value)
    return names, values


@dataclass
class Command:
    """One simple command of an input line, with the operator that follows it."""

    cmd: str | None = None
    argv: list[str] = field(default_factory=list)
    envp: list[str] = field(default_factory=list)
    envp_val: list[str] = field(default_factory=list)
    meta_char: str | None = None
    id: int = 0

    @property
    def argc(self) -> int:
        """Number of arguments, the command name included."""
        return len(self.argv)

    def lookup(self, name: str) -> str | None:
        """Value of the environment variable ``name`` as captured at creation."""
        for key, value in zip(self.envp, self.envp_val):
            if key == name:
                return value
        return None


def new_command(envp: Iterable[str]) -> Command:
    """Create an empty command carrying a snapshot of ``envp``."""
    names, values = split_environment(envp)
    return Command(envp=names, envp_val=values)


def number_commands(commands: Iterable[Command]) -> None:
    """Give the commands consecutive ids, starting from 1."""
    for number, command in enumerate(commands, start=1):
        command.id = number