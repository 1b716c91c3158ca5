import io
import os

import pytest

from minishell.builtins import echo
from minishell.environment import Environment
from minishell.parser import buffer_parsing
from minishell.pipeline import (
    count_files,
    count_pipes,
    exec_complex,
    get_last_meta,
    open_redirect,
    read_heredoc,
)


def _echo_output(*words):
    buffer = io.StringIO()
    echo(["echo", *words], buffer)
    return buffer.getvalue()


def _lines(*lines):
    iterator = iter(lines)
    return lambda prompt: next(iterator, None)


@pytest.fixture
def env():
    return Environment([f"PATH={os.environ.get('PATH', '')}", "HOME=/tmp"])


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_count_pipes_matches_line():
    line = "ls | wc | cat"
    assert count_pipes(buffer_parsing(line, [])) == line.count("|")


def test_count_files_counts_output_redirections():
    assert count_files(buffer_parsing("a > b >> c | d", [])) == 2
    assert count_files(buffer_parsing("a < b", [])) == 0


def test_get_last_meta():
    commands = buffer_parsing("a | b > c", [])
    assert get_last_meta(commands, commands[0]) is None
    assert get_last_meta(commands, commands[1]) == "|"
    assert get_last_meta(commands, commands[2]) == ">"


def test_open_redirect_truncates_and_appends(tmp_path):
    path = tmp_path / "f.txt"
    with open_redirect(str(path), ">") as handle:
        handle.write("first")
    assert path.read_text() == "first"
    with open_redirect(str(path), ">") as handle:
        handle.write("x")
    assert path.read_text() == "x"
    with open_redirect(str(path), ">>") as handle:
        handle.write("y")
    assert path.read_text() == "xy"


def test_open_redirect_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_redirect(str(tmp_path / "no" / "file"), ">")


def test_read_heredoc_collects_until_delimiter():
    prompts = []
    lines = iter(["one", "two", "EOF", "three"])

    def reader(prompt):
        prompts.append(prompt)
        return next(lines)

    assert read_heredoc("EOF", reader) == "one\ntwo\n"
    assert prompts == ["> "] * 3


def test_read_heredoc_prefix_stops_and_eof_returns_none():
    assert read_heredoc("END", _lines("a", "ENDING")) == "a\n"
    assert read_heredoc("END", _lines("a")) is None


def test_redirect_out_writes_file(workdir, env):
    exec_complex(buffer_parsing("echo hello > out.txt", env.entries), env)
    assert (workdir / "out.txt").read_text() == _echo_output("hello")


def test_append_redirect_twice(workdir, env):
    for _ in range(2):
        exec_complex(buffer_parsing("echo hi >> log", env.entries), env)
    assert (workdir / "log").read_text() == _echo_output("hi") * 2


def test_chain_creates_every_file_and_writes_last(workdir, env):
    exec_complex(buffer_parsing("echo hi > a > b", env.entries), env)
    assert (workdir / "a").read_text() == ""
    assert (workdir / "b").read_text() == _echo_output("hi")


def test_pipe_to_program(workdir, env, capsys):
    exec_complex(buffer_parsing("echo hello | cat", env.entries), env)
    assert capsys.readouterr().out == _echo_output("hello")


def test_input_redirect_to_output_file(workdir, env):
    (workdir / "in.txt").write_text("some text\n")
    commands = buffer_parsing("cat < in.txt > out.txt", env.entries)
    assert count_files(commands) == 1
    assert get_last_meta(commands, commands[1]) == "<"
    exec_complex(commands, env)
    assert (workdir / "out.txt").read_text() == "some text\n"


def test_missing_input_file_reports(workdir, env, capsys):
    exec_complex(buffer_parsing("cat < missing.txt", env.entries), env)
    captured = capsys.readouterr()
    assert captured.err == "bash : missing.txt No such file or directory\n"
    assert captured.out == ""


def test_heredoc_feeds_command(workdir, env, capsys):
    exec_complex(buffer_parsing("cat << END", env.entries), env, _lines("a", "b", "END"))
    assert capsys.readouterr().out == "a\nb\n"


def test_heredoc_end_of_input_runs_nothing(workdir, env, capsys):
    exec_complex(buffer_parsing("cat << END", env.entries), env, _lines())
    assert capsys.readouterr().out == ""


def test_export_in_pipeline_leaves_environment(workdir, env):
    before = list(env.entries)
    exec_complex(buffer_parsing("export FOO=bar | cat", env.entries), env)
    assert env.get("FOO") is None
    assert env.entries == before


def test_cd_in_pipeline_keeps_directory(workdir, env):
    cwd = os.getcwd()
    commands = buffer_parsing("cd .. | cat", env.entries)
    assert count_pipes(commands) == 1
    assert get_last_meta(commands, commands[1]) == "|"
    exec_complex(commands, env)
    assert os.getcwd() == cwd