"""Commands the shell carries out itself instead of starting a program."""

from __future__ import annotations

import contextlib
import os
import sys
from typing import TextIO

from minishell.environment import Environment
from minishell.models import Command


def _stream(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _echo_without_newline(args: list[str]) -> str:
    """Text printed by ``echo -n``.

    Output starts at the first argument that begins with ``-`` and is not
    made only of ``n`` flags; arguments before it are dropped.
    """
    for index, arg in enumerate(args):
        if arg.startswith("-") and arg.strip("n") != "-":
            return " ".join(args[index:])
    return ""


def echo(argv: list[str], out: TextIO | None = None) -> int:
    """Print the arguments of ``argv`` (``argv[0]`` is the command name)."""
    stream = _stream(out)
    args = argv[1:]
    if not args:
        stream.write("\n")
    elif args[0].startswith("-n"):
        stream.write(_echo_without_newline(args))
    else:
        stream.write("".join(f"{arg} " for arg in args) + "\n")
    return 0


def pwd(out: TextIO | None = None) -> int:
    """Print the current working directory."""
    _stream(out).write(f"{os.getcwd()}\n")
    return 0


def cd(argv: list[str], env: Environment) -> int:
    """Change directory and keep ``PWD`` in ``env`` up to date.

    Without an argument the directory named by ``HOME`` in the process
    environment is used. Returns 1 and reports on stderr when the change
    fails.
    """
    if len(argv) > 1:
        try:
            os.chdir(argv[1])
        except OSError as exc:
            print(f"bash: {exc.strerror}", file=sys.stderr)
            return 1
        cwd = os.getcwd()
        env.entries = [
            f"PWD={cwd}" if entry.startswith("PWD") else entry
            for entry in env.entries
        ]
        return 0
    home = os.environ.get("HOME")
    if home is not None:
        with contextlib.suppress(OSError):
            os.chdir(home)
    return 0


def builtin_env(
    command: Command, env: Environment, out: TextIO | None = None
) -> int | None:
    """Run ``env``, ``export`` or ``unset``.

    Returns the builtin's status, or None if ``command`` is none of them.
    """
    if command.cmd == "env":
        return env.env(out)
    if command.cmd == "export":
        return env.export(command.argv, out)
    if command.cmd == "unset":
        return env.unset(command.argv, out)
    return None


def builtin(
    command: Command, env: Environment, out: TextIO | None = None
) -> int | None:
    """Run ``echo``, ``pwd`` or ``exit``.

    Returns the builtin's status, or None if ``command`` is none of them.
    ``exit`` raises SystemExit with status 0.
    """
    if command.cmd == "echo":
        return echo(command.argv, out)
    if command.cmd == "pwd":
        return pwd(out)
    if command.cmd == "exit":
        raise SystemExit(0)
    return None