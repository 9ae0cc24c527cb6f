import pytest

from tinyshell.expand import expand, lookup_variable

ENV = ["USER=someone", "HOME=/home/user", "PATH=/bin"]


def test_lookup_found():
    assert lookup_variable("HOME", ENV) == "/home/user"


def test_lookup_requires_exact_name():
    assert lookup_variable("HOM", ENV) is None
    assert lookup_variable("HOME", ["HOMEX=/x", "HOME=/h"]) == "/h"


def test_lookup_first_match_wins():
    assert lookup_variable("A", ["A=first", "A=second"]) == "first"


def test_lookup_empty_value():
    assert lookup_variable("E", ["E="]) == ""


def test_expand_whole_word():
    assert expand("$HOME", ENV, 0) == "/home/user"


def test_expand_keeps_prefix_and_suffix():
    assert expand("ab$HOME", ENV, 0) == "ab/home/user"
    assert expand("$HOME rest", ENV, 0) == "/home/user rest"


@pytest.mark.parametrize("status", [0, 1, 127])
def test_expand_status(status):
    assert expand("$?", ENV, status) == str(status)


def test_unresolved_reference_kept():
    assert expand("$NOPE", ENV, 0) == "$NOPE"


def test_text_without_dollar_unchanged():
    assert expand("plain", ENV, 0) == "plain"


def test_only_first_reference_expanded():
    assert expand("$A $A", ["A=x"], 0) == "x $A"


def test_unresolved_before_resolved_is_dropped():
    assert expand("$NOPE$HOME", ENV, 0) == "/home/user"


def test_value_equal_to_word_is_left():
    assert expand("$A", ["A=$A"], 0) == "$A"


def test_name_stops_only_at_space_or_dollar():
    assert expand("$HOME/x", ENV, 0) == "$HOME/x"