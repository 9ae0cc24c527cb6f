import pytest

from tinyshell.environment import (
    Environment,
    EnvVar,
    is_valid_identifier,
    split_assignment,
)


@pytest.fixture
def env():
    return Environment(["HOME=/home/user", "PWD=/tmp", "OLDPWD=/", "PATH=/bin:/usr/bin"])


@pytest.mark.parametrize("text", ["A", "_x", "abc_12", "NAME=value", "X=1=2", "Z="])
def test_valid_identifiers(text):
    assert is_valid_identifier(text) is True


@pytest.mark.parametrize("text", ["", "1A", "a-b", "=x", "a.b=1", "é"])
def test_invalid_identifiers(text):
    assert is_valid_identifier(text) is False


def test_split_assignment_keeps_later_equals():
    assert split_assignment("A=b=c") == ("A", "b=c")


def test_split_assignment_without_equals_gives_empty_value():
    assert split_assignment("A") == ("A", "")


def test_init_from_strings_keeps_order(env):
    assert [var.name for var in env] == ["HOME", "PWD", "OLDPWD", "PATH"]
    assert env.get("PATH") == "/bin:/usr/bin"
    assert len(env) == 4


def test_init_from_mapping():
    e = Environment({"B": "2", "A": "1"})
    assert [var.name for var in e] == ["B", "A"]
    assert e.get("A") == "1"


def test_get_hides_non_printable():
    e = Environment([EnvVar("SECRET_DIR", "/x", printable=False)])
    assert e.get("SECRET_DIR") is None
    assert e.contains("SECRET_DIR") is True


def test_get_missing_is_none(env):
    assert env.get("NOPE") is None
    assert env.contains("NOPE") is False


def test_replace_existing_only(env):
    assert env.replace("HOME", "/root") is True
    assert env.get("HOME") == "/root"
    assert env.replace("NEW", "v") is False
    assert env.contains("NEW") is False


def test_assign_new_appends(env):
    env.assign("FOO=bar")
    assert [var.name for var in env][-1] == "FOO"
    assert env.get("FOO") == "bar"
    assert len(env) == 5


def test_assign_existing_keeps_position(env):
    env.assign("PWD=/var")
    assert [var.name for var in env] == ["HOME", "PWD", "OLDPWD", "PATH"]
    assert env.get("PWD") == "/var"


def test_assign_without_value_sets_empty(env):
    env.assign("EMPTY")
    assert env.get("EMPTY") == ""


def test_assign_makes_variable_printable():
    e = Environment([EnvVar("X", None, printable=False)])
    e.assign("X=1")
    assert e.get("X") == "1"


def test_assign_invalid_raises(env):
    with pytest.raises(ValueError):
        env.assign("1BAD=x")
    assert len(env) == 4


def test_unset(env):
    assert env.unset("PWD") is True
    assert env.contains("PWD") is False
    assert env.unset("PWD") is False
    assert len(env) == 3


def test_unset_then_assign_moves_to_end(env):
    env.unset("HOME")
    env.assign("HOME=/again")
    assert [var.name for var in env][-1] == "HOME"


def test_change_pwd_with_pwd(env):
    env.change_pwd("/tmp", "/usr")
    assert env.get("OLDPWD") == "/tmp"
    assert env.get("PWD") == "/usr"


def test_change_pwd_uses_stored_pwd_not_previous(env):
    env.change_pwd("/elsewhere", "/usr")
    assert env.get("OLDPWD") == "/tmp"


def test_change_pwd_without_pwd_sets_oldpwd_to_previous(env):
    env.unset("PWD")
    env.change_pwd("/start", "/usr")
    assert env.get("OLDPWD") == "/start"
    assert env.contains("PWD") is False


def test_change_pwd_unknown_current_changes_nothing(env):
    before = env.to_envp()
    env.change_pwd("/a", None)
    assert env.to_envp() == before


def test_to_envp_round_trip(env):
    copy = Environment(env.to_envp())
    assert copy.to_envp() == env.to_envp()


def test_to_envp_skips_valueless():
    e = Environment([EnvVar("A", "1"), EnvVar("B", None)])
    assert e.to_envp() == ["A=1"]
    assert e.lines() == e.to_envp()


def test_sorted_vars_ordered_by_name(env):
    names = [var.name for var in env.sorted_vars()]
    assert names == sorted(names)
    assert set(names) == {var.name for var in env}


def test_sorted_vars_does_not_reorder_environment(env):
    env.sorted_vars()
    assert [var.name for var in env] == ["HOME", "PWD", "OLDPWD", "PATH"]


def test_empty_environment():
    e = Environment()
    assert len(e) == 0
    assert e.to_envp() == []