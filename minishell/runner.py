"""Running a single command, builtin or external program."""

from __future__ import annotations

import io
import os
import subprocess
import sys
from typing import IO, Any, TextIO

from minishell.builtins import builtin, builtin_env, cd
from minishell.environment import Environment
from minishell.models import Command


def get_single_path(cmd: str, directory: str) -> str:
    """Join a search directory and a command name."""
    return f"{directory}/{cmd}"


def check_path(env: Environment) -> bool:
    """Whether a ``PATH`` entry of ``env`` is a prefix of the process ``PATH``.

    Searching the path is only allowed while this holds, so unsetting
    ``PATH`` in the shell stops commands from being found by name.
    """
    system_path = os.environ.get("PATH", "")
    return any(
        system_path.startswith(entry[5:])
        for entry in env
        if entry.startswith("PATH")
    )


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def resolve_command(command: Command, env: Environment) -> str | None:
    """Path of the program ``command`` names, or None if none is found."""
    cmd = command.cmd
    if not cmd:
        return None
    if _is_executable(cmd):
        return cmd
    if not check_path(env):
        return None
    directories = [d for d in os.environ.get("PATH", "").split(":") if d]
    for directory in directories:
        candidate = get_single_path(cmd, directory)
        if _is_executable(candidate):
            return candidate
    return None


def exit_status(returncode: int) -> int:
    """Shell status for a child's return code."""
    if returncode == 0:
        return 0
    if returncode in (126, 127):
        return returncode
    if returncode > 0:
        return 1
    return 2


def verify_access(cmd: str, err: TextIO | None = None) -> int:
    """Report why ``cmd`` could not be run and return the matching status."""
    stream = sys.stderr if err is None else err
    if os.path.exists(cmd):
        stream.write(f"{cmd}: is a directory\n")
        return 126
    stream.write(f"{cmd}: command not found\n")
    return 127


def _has_fileno(stream: Any) -> bool:
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    return True


def _run_program(
    path: str,
    command: Command,
    env: Environment,
    stdin: IO[Any] | None,
    stdout: IO[Any] | None,
) -> int:
    options: dict[str, Any] = {
        "executable": path,
        "env": dict(entry.partition("=")[::2] for entry in env),
    }
    if stdin is not None:
        if _has_fileno(stdin):
            options["stdin"] = stdin
        else:
            data = stdin.read()
            options["input"] = data.encode() if isinstance(data, str) else data
    capture = stdout is not None and not _has_fileno(stdout)
    if capture:
        options["stdout"] = subprocess.PIPE
    else:
        target = sys.stdout if stdout is None else stdout
        target.flush()
        options["stdout"] = target
    result = subprocess.run(command.argv, check=False, **options)
    if capture and stdout is not None:
        if isinstance(stdout, io.TextIOBase):
            stdout.write(result.stdout.decode(errors="replace"))
        else:
            stdout.write(result.stdout)
    return exit_status(result.returncode)


def exec_simple(
    command: Command,
    env: Environment,
    stdin: IO[Any] | None = None,
    stdout: IO[Any] | None = None,
) -> int:
    """Run one command and return its status.

    Any command name beginning with ``cd`` changes directory; other
    builtins run in the shell; everything else is started as a program
    with ``env`` as its environment.
    """
    cmd = command.cmd
    if not cmd:
        return 0
    if cmd.startswith("cd"):
        return cd(command.argv, env)
    status = builtin_env(command, env, stdout)
    if status is None:
        status = builtin(command, env, stdout)
    if status is not None:
        return status
    path = resolve_command(command, env)
    if path is None:
        return verify_access(cmd)
    try:
        return _run_program(path, command, env, stdin, stdout)
    except OSError:
        return verify_access(cmd)