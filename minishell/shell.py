"""The interactive prompt loop and the program entry point."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from collections.abc import Iterable, Sequence
from typing import TextIO

from minishell.environment import Environment
from minishell.models import Command
from minishell.parser import UnclosedQuotesError, buffer_parsing, find_meta_char
from minishell.pipeline import Reader, exec_complex
from minishell.runner import exec_simple

BLACK_CLR = "\033[39m"
RED_CLR = "\001\033[1;91m\002"
GREEN_CLR = "\001\033[1;92m\002"
YELLOW_CLR = "\001\033[1;93m\002"
BLUE_CLR = "\001\033[1;94m\002"
MAGENTA_CLR = "\001\033[1;95m\002"
CYAN_CLR = "\033[36m"
LIGHT_GRAY_CLR = "\033[37m"
WHITE_CLR = "\001\033[0;97m\002"
NORMAL_CLR = "\001\033[0;39m\002"
BOLD = "\033[1m"
RESET_ATT = "\033[0m"

LOGO_PATH = "assets/logo.txt"
QUOTES_ERROR = "MiNiShEeL : error <QUOTES NOT CLOSED>\n"


def parse_prompt(user: str | None, cwd: str | None) -> str:
    """Build the coloured prompt shown before each line."""
    return (
        f"{RED_CLR}{user or ''}{GREEN_CLR}@MINISHELL:"
        f"{BLUE_CLR}~{cwd or ''}{WHITE_CLR}$ "
    )


def logo(path: str, out: TextIO | None = None) -> int:
    """Print the banner stored at ``path``; return 1 if it cannot be read."""
    stream = sys.stdout if out is None else out
    try:
        with open(path, encoding="utf-8", errors="replace") as banner:
            text = banner.read()
    except OSError:
        return 1
    stream.write(YELLOW_CLR)
    stream.write(text)
    return 0


def format_commands(commands: Iterable[Command]) -> str:
    """Describe parsed commands, one block per command."""
    lines = ["_____________OUTPUTED____________________\n\n"]
    for command in commands:
        lines.append(f"id -> {command.id}\n")
        cmd = "(null)" if command.cmd is None else command.cmd
        lines.append(f"command -> {cmd}\n")
        lines.append(f"argc -> {command.argc}\n")
        lines.extend(
            f"argv[{index}] -> {arg}\n"
            for index, arg in enumerate(command.argv)
            if arg
        )
        if command.meta_char:
            lines.append(f"meta_char -> {command.meta_char}\n")
        lines.append("_____________________________\n\n")
    lines.append("_____________TESTED_____________\n")
    return "".join(lines)


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None
    except KeyboardInterrupt:
        print()
        return ""


class Shell:
    """Holds the environment and last status across input lines."""

    def __init__(self, envp: Iterable[str] = (), out: TextIO | None = None) -> None:
        self.env = Environment(envp)
        self.out: TextIO = sys.stdout if out is None else out
        self.status = 0
        self._reader: Reader | None = None

    def run_line(self, line: str) -> int:
        """Parse and run one line; return the shell status afterwards.

        The ``exit`` builtin raises SystemExit.
        """
        if not line:
            return self.status
        try:
            commands = buffer_parsing(line, self.env.entries, self.status)
        except UnclosedQuotesError:
            sys.stderr.write(QUOTES_ERROR)
            return self.status
        if find_meta_char(line):
            self.status = exec_complex(commands, self.env, self._reader)
        else:
            self.status = exec_simple(commands[0], self.env, None, self.out)
        self.out.write(format_commands(commands))
        return self.status

    def loop(self, reader: Reader | None = None) -> int:
        """Read and run lines until end of input or ``exit``.

        ``reader`` is called with the prompt and returns a line, or None at
        end of input. Returns the exit status.
        """
        read = _read_line if reader is None else reader
        self._reader = reader
        while True:
            line = read(parse_prompt(os.environ.get("USER"), os.getcwd()))
            if line is None:
                self.out.write("EXIT\n")
                return 0
            if not line:
                continue
            try:
                self.run_line(line)
            except SystemExit as exc:
                return exc.code if isinstance(exc.code, int) else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Start the interactive shell."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("No <ARGUMENTS> are needed")
        return 1
    with contextlib.suppress(ImportError):
        import readline  # noqa: F401  (line editing and history for input())
    if hasattr(signal, "SIGQUIT"):
        with contextlib.suppress(ValueError, OSError):
            signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    shell = Shell(f"{key}={value}" for key, value in os.environ.items())
    logo(LOGO_PATH, shell.out)
    return shell.loop()


if __name__ == "__main__":
    raise SystemExit(main())