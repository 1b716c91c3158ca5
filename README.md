# minishell

A small interactive shell. It reads a line, splits it into commands joined by
pipes and redirections, expands `$NAME` and `$?`, and runs the commands,
either as builtins or as programs looked up on `PATH`.

## Installing

```
pip install .
```

## Running

```
minishell
```

The command takes no arguments; given more than one, it prints
`No <ARGUMENTS> are needed` and exits with status 1. If a file
`assets/logo.txt` exists in the current directory, it is printed as a banner
at start-up.

The prompt shows the user, the current directory and a `$`. Press Ctrl-D on an
empty line, or type `exit`, to leave.

After each line has run, the shell prints a description of how it parsed the
line: each command's id, name, argument count, arguments and the operator that
follows it.

## What it understands

- Quoting: text in double quotes becomes one word. Text in single quotes is
  kept as written, with no `$` expansion. On a line without pipes or
  redirections, a quote that is never closed is reported as
  `MiNiShEeL : error <QUOTES NOT CLOSED>` and the line is not run.
- Expansion: `$NAME` becomes the value of an environment variable, and `$?`
  becomes the status of the last command.
- Pipes: `cmd1 | cmd2 | cmd3`.
- Output redirection: `cmd > file` truncates the file and `cmd >> file`
  appends to it; a missing file is created.
- Input redirection: `cmd < file` reads from a file, and `cmd << END` reads a
  here-document up to the first line that starts with `END`.
- Builtins: `echo` (with `-n`), `pwd`, `cd`, `env`, `export`, `unset`, `exit`.
  `cd` without an argument goes to the directory named by `HOME`.

A command that cannot be found ends with status 127 and the message
`command not found`. A path that exists but cannot be run ends with status 126.

## Using it from Python

```python
import sys

from minishell.shell import Shell

shell = Shell(["HOME=/tmp", "PATH=/usr/bin:/bin"], sys.stdout)
shell.run_line("export GREETING=hello")
shell.run_line("echo $GREETING | cat")
```

`Shell.run_line` returns the status of the line; `Shell.loop` reads lines from
a callable that takes the prompt and returns a line, or `None` at end of input.

Other parts can be used on their own:

- `minishell.parser.buffer_parsing` turns a line into a list of
  `minishell.models.Command` objects without running anything; it raises
  `minishell.parser.UnclosedQuotesError` for an unclosed quote.
- `minishell.environment.Environment` holds the shell's `NAME=VALUE` entries
  and provides the `export`, `unset` and `env` builtins.
- `minishell.runner.exec_simple` runs one command;
  `minishell.pipeline.exec_complex` runs a line of commands joined by pipes
  and redirections.

## What it does not do

- The stages of a pipeline run one after another, each stage's output held
  in memory until the next stage starts; they do not run at the same time.
- Builtins inside a pipeline or redirection work on a copy of the environment,
  so `export`, `unset` and `cd` there do not change the shell.
- There is no `;`, `&&`, `||`, background jobs, job control, wildcards or
  scripts read from files.