"""Running lines that hold pipes and redirections."""

from __future__ import annotations

import contextlib
import io
import os
import sys
from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import IO, Any, Optional, TextIO

from minishell.environment import Environment
from minishell.models import Command
from minishell.runner import exec_simple

Reader = Callable[[str], Optional[str]]

HEREDOC_PROMPT = "> "


def count_pipes(commands: Sequence[Command]) -> int:
    """Number of commands followed by a pipe."""
    return sum(
        1 for command in commands
        if command.meta_char and command.meta_char.startswith("|")
    )


def count_files(commands: Sequence[Command]) -> int:
    """Number of commands followed by an output redirection."""
    return sum(
        1 for command in commands
        if command.meta_char and command.meta_char.startswith(">")
    )


def get_last_meta(commands: Sequence[Command], command: Command) -> str | None:
    """Operator of the command just before ``command``, or None."""
    for previous, current in zip(commands, commands[1:]):
        if current.id == command.id:
            return previous.meta_char
    return None


def open_redirect(path: str, meta: str) -> TextIO:
    """Open ``path`` for an output redirection written with ``meta``.

    An existing file is appended to for ``>>`` and truncated for ``>``;
    a missing file is created.
    """
    exists = os.path.exists(path)
    if exists and meta.startswith(">>"):
        flags = os.O_WRONLY | os.O_APPEND
    elif exists and meta.startswith(">"):
        flags = os.O_WRONLY | os.O_TRUNC
    else:
        flags = os.O_WRONLY | os.O_CREAT
    descriptor = os.open(path, flags, 0o777)
    return os.fdopen(descriptor, "w", encoding="utf-8")


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def read_heredoc(delimiter: str, reader: Reader | None = None) -> str | None:
    """Collect here-document lines until one starts with ``delimiter``.

    ``reader`` is called with the prompt and returns a line, or None at
    end of input, in which case None is returned.
    """
    read = _read_line if reader is None else reader
    lines: list[str] = []
    while True:
        line = read(HEREDOC_PROMPT)
        if line is None:
            return None
        if line.startswith(delimiter):
            break
        lines.append(f"{line}\n")
    return "".join(lines)


def _target(command: Command) -> str:
    return command.argv[0] if command.argv else ""


def _report(exc: OSError, name: str) -> None:
    sys.stderr.write(f"bash: {name}: {exc.strerror}\n")


class _Execution:
    """Walks a parsed line and runs each stage with its streams wired up."""

    def __init__(
        self, commands: Sequence[Command], env: Environment, reader: Reader | None
    ) -> None:
        self.commands = list(commands)
        self.env = env
        self.reader = reader
        self.pos = 0
        self.pipe_index = 0
        self.pipes: defaultdict[int, io.StringIO] = defaultdict(io.StringIO)
        self.status = 0

    @property
    def current(self) -> Command:
        return self.commands[self.pos]

    def _has(self, offset: int) -> bool:
        return self.pos + offset < len(self.commands)

    def _pipe_input(self, index: int) -> io.StringIO:
        return io.StringIO(self.pipes[index].getvalue())

    def _follows_pipe(self, command: Command) -> bool:
        return (get_last_meta(self.commands, command) or "").startswith("|")

    def run(self) -> int:
        while self.pos < len(self.commands):
            meta = self.current.meta_char or ""
            has_next = self._has(1)
            if meta.startswith("|"):
                self._pipe()
            elif meta.startswith(">") and has_next:
                self._redirect_out()
            elif meta.startswith("<<") and has_next:
                self._heredoc()
            elif meta.startswith("<") and has_next:
                self._redirect_in()
            else:
                self._last_cmd()
        return self.status

    def _stage(
        self, command: Command, stdin: IO[Any] | None, stdout: IO[Any]
    ) -> None:
        """Run ``command`` without letting it change the shell's state."""
        cwd = os.getcwd()
        try:
            self.status = exec_simple(
                command, Environment(self.env.entries), stdin, stdout
            )
        except SystemExit as exc:
            self.status = exc.code if isinstance(exc.code, int) else 0
        finally:
            with contextlib.suppress(OSError):
                os.chdir(cwd)

    def _pipe(self) -> None:
        command = self.current
        stdin = None if command.id == 1 else self._pipe_input(self.pipe_index - 1)
        self._stage(command, stdin, self.pipes[self.pipe_index])
        self.pipe_index += 1
        self.pos += 1

    def _last_cmd(self) -> None:
        command = self.current
        if self._follows_pipe(command):
            self._stage(command, self._pipe_input(self.pipe_index - 1), sys.stdout)
        self.pos += 1

    def _open_output_chain(self) -> TextIO:
        """Open every file of a ``>`` chain; the last one receives the output."""
        handle: TextIO | None = None
        index = self.pos
        while index + 1 < len(self.commands) and (
            self.commands[index].meta_char or ""
        ).startswith(">"):
            if handle is not None:
                handle.close()
                handle = None
            handle = open_redirect(
                _target(self.commands[index + 1]), self.commands[index].meta_char or ""
            )
            index += 1
        if handle is None:
            raise FileNotFoundError("no redirection target")
        return handle

    def _redirect_out(self) -> None:
        command = self.current
        stdin = (
            self._pipe_input(self.pipe_index - 1)
            if self._follows_pipe(command)
            else None
        )
        try:
            handle = self._open_output_chain()
        except OSError as exc:
            _report(exc, exc.filename or "")
            self.status = 1
        else:
            with handle:
                self._stage(command, stdin, handle)
        self.pipe_index += 1
        while self._has(1) and (self.current.meta_char or "").startswith(">"):
            self.pos += 1

    def _stage_with_output(self, stdin: IO[Any]) -> None:
        """Run the current command reading ``stdin``, writing where the next
        operator says."""
        command = self.current
        target = self.commands[self.pos + 1]
        meta = target.meta_char or ""
        if meta.startswith(">") and self._has(2):
            name = _target(self.commands[self.pos + 2])
            try:
                handle = open_redirect(name, meta)
            except OSError as exc:
                _report(exc, name)
                self.status = 1
                return
            with handle:
                self._stage(command, stdin, handle)
        elif meta:
            self._stage(command, stdin, self.pipes[self.pipe_index])
        else:
            self._stage(command, stdin, sys.stdout)

    def _advance_past_input(self) -> None:
        self.pipe_index += 1
        self.pos += 1
        if self.current.meta_char:
            self.pos += 1

    def _redirect_in(self) -> None:
        name = _target(self.commands[self.pos + 1])
        if not os.path.exists(name):
            sys.stderr.write(f"bash : {name} No such file or directory\n")
            self.status = 1
            self.pos += 1
            return
        try:
            with open(name, encoding="utf-8") as source:
                self._stage_with_output(source)
        except OSError as exc:
            _report(exc, name)
            self.status = 1
        self._advance_past_input()

    def _heredoc(self) -> None:
        text = read_heredoc(_target(self.commands[self.pos + 1]), self.reader)
        if text is None:
            self.pos = len(self.commands) - 1
            return
        self._stage_with_output(io.StringIO(text))
        self._advance_past_input()


def exec_complex(
    commands: Sequence[Command], env: Environment, reader: Reader | None = None
) -> int:
    """Run a line made of commands joined by pipes and redirections.

    Every stage runs with its own copy of ``env`` and cannot change the
    shell's working directory. ``reader`` supplies here-document lines.
    Returns the status of the last stage that ran.
    """
    return _Execution(commands, env, reader).run()