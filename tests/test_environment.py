import io

import pytest

from minishell.environment import Environment, is_valid_env_var, parse_var


@pytest.mark.parametrize("var", ["HOME", "_x", "A1=", "name=value with space", "a_b_c=1"])
def test_valid_identifiers(var):
    assert is_valid_env_var(var) is True


@pytest.mark.parametrize("var", ["", "1A", "=x", "A-B=1", "A B=1", "$X"])
def test_invalid_identifiers(var):
    assert is_valid_env_var(var) is False


def test_parse_var():
    assert parse_var("NAME=value") == "NAME"
    assert parse_var("NAME") is None
    assert parse_var("BAD NAME=value") is None


def test_constructor_copies_entries():
    entries = ["A=1"]
    env = Environment(entries)
    entries.append("B=2")
    assert env.entries == ["A=1"]
    assert len(env) == 1


def test_get_exact_name():
    env = Environment(["PATHX=1", "PATH=/bin"])
    assert env.get("PATH") == "/bin"
    assert env.get("MISSING") is None


def test_var_exist_and_replace():
    env = Environment(["A=1", "B=2"])
    assert env.var_exist("B") == 1
    assert env.var_exist("Z") is None
    env.replace_var("B", "B=3")
    assert env.entries == ["A=1", "B=3"]


def test_replace_missing_raises():
    env = Environment(["A=1"])
    with pytest.raises(KeyError):
        env.replace_var("Z", "Z=1")


def test_delete_var():
    env = Environment(["A=1", "B=2", "C=3"])
    env.delete_var(1)
    assert env.entries == ["A=1", "C=3"]


def test_export_new_variable_goes_before_last():
    env = Environment(["A=1", "B=2"])
    status = env.export(["export", "NEW=x"], io.StringIO())
    assert status == 0
    assert env.entries == ["A=1", "NEW=x", "B=2"]
    assert env.get("NEW") == "x"


def test_export_into_empty_environment():
    env = Environment()
    assert env.export(["export", "X=1"], io.StringIO()) == 0
    assert env.entries == ["X=1"]


def test_export_replaces_existing():
    env = Environment(["A=1", "B=2"])
    env.export(["export", "A=9"], io.StringIO())
    assert env.entries == ["A=9", "B=2"]


def test_export_invalid_identifier():
    env = Environment(["A=1"])
    out = io.StringIO()
    status = env.export(["export", "1A=2"], out)
    assert status == 1
    assert out.getvalue() == "bash: export: `1A=2`: not a valid identifier \n"
    assert env.entries == ["A=1"]


def test_export_without_equals_changes_nothing():
    env = Environment(["A=1"])
    assert env.export(["export", "B"], io.StringIO()) == 0
    assert env.entries == ["A=1"]


def test_export_without_arguments_lists():
    env = Environment(["A=1", "B=2"])
    out = io.StringIO()
    env.export(["export"], out)
    assert out.getvalue() == "declare -x A=1\ndeclare -x B=2\n"


def test_unset_removes_variable():
    env = Environment(["A=1", "AB=2", "C=3"])
    status = env.unset(["unset", "A"], io.StringIO())
    assert status == 0
    assert env.entries == ["AB=2", "C=3"]


def test_unset_several():
    env = Environment(["A=1", "B=2", "C=3"])
    env.unset(["unset", "A", "C"], io.StringIO())
    assert env.entries == ["B=2"]


def test_unset_invalid_identifier():
    env = Environment(["A=1"])
    out = io.StringIO()
    assert env.unset(["unset", "9x"], out) == 1
    assert out.getvalue() == "bash: unset: `9x`: not a valid identifier \n"
    assert env.entries == ["A=1"]


def test_env_prints_entries():
    env = Environment(["A=1", "B=2"])
    out = io.StringIO()
    assert env.env(out) == 0
    assert out.getvalue().splitlines() == env.entries


def test_export_then_unset_round_trip():
    original = ["A=1", "B=2"]
    env = Environment(original)
    env.export(["export", "TMPVAR=1"], io.StringIO())
    env.unset(["unset", "TMPVAR"], io.StringIO())
    assert env.entries == original
    assert list(env) == original