from tinyshell.environment import Environment
from tinyshell.heredoc import (
    clean_delimiter,
    collect_heredocs,
    expand_delimiter,
    expand_heredoc_line,
    is_delimiter,
    read_heredoc,
)
from tinyshell.parser import Command, Redirection, RedirType


def make_reader(lines):
    iterator = iter(lines)
    prompts = []

    def reader(prompt):
        prompts.append(prompt)
        return next(iterator, None)

    reader.prompts = prompts
    return reader


def env():
    return Environment({"USER": "bob", "HOME": "/home/bob"})


def test_expand_known_variable():
    assert expand_heredoc_line("hello $USER", env()) == "hello bob"


def test_expand_status():
    assert expand_heredoc_line("code $?", env(), 42) == "code 42"


def test_expand_unknown_variable_is_empty():
    assert expand_heredoc_line("a $NOPE b", env()) == "a  b"


def test_expand_two_references():
    assert expand_heredoc_line("$USER$HOME", env()) == "bob/home/bob"


def test_line_without_references_unchanged():
    assert expand_heredoc_line("plain text", env()) == "plain text"


def test_clean_delimiter_removes_quotes():
    assert clean_delimiter("\"E\"O'F'") == "EOF"


def test_expand_delimiter_drops_dollar_before_quote():
    assert expand_delimiter('$"EOF"') == "EOF"
    assert expand_delimiter("a$'b'") == "ab"


def test_expand_delimiter_keeps_plain_dollars():
    assert expand_delimiter("$$x") == "$$x"
    assert expand_delimiter("$EOF") == "$EOF"


def test_is_delimiter_ignores_quotes_in_delimiter():
    assert is_delimiter('"EOF"', "EOF")
    assert is_delimiter("EOF", "EOF")


def test_is_delimiter_rejects_other_lines():
    assert not is_delimiter("EOF", "EOFX")
    assert not is_delimiter("EOF", "'EOF'")
    assert not is_delimiter("EOF", "")


def test_read_heredoc_stops_at_delimiter():
    reader = make_reader(["a $USER", "EOF", "never"])
    assert read_heredoc("EOF", env(), 0, reader) == "a bob\n"
    assert reader.prompts == ["> ", "> "]


def test_read_heredoc_with_quoted_delimiter_does_not_expand():
    reader = make_reader(["a $USER", "EOF"])
    assert read_heredoc("'EOF'", env(), 0, reader) == "a $USER\n"


def test_read_heredoc_stops_at_end_of_input():
    reader = make_reader(["one", "two"])
    assert read_heredoc("EOF", env(), 0, reader) == "one\ntwo\n"


def test_collect_heredocs_fills_content():
    heredoc = Redirection(RedirType.HEREDOC, "END")
    output = Redirection(RedirType.OUT, "out")
    commands = [Command("cat", ["cat"], [heredoc, output])]
    reader = make_reader(["x", "END"])
    assert collect_heredocs(commands, env(), 0, reader) is True
    assert heredoc.content == "x\n"
    assert output.content is None


def test_collect_heredocs_interrupted():
    def reader(prompt):
        raise KeyboardInterrupt

    heredoc = Redirection(RedirType.HEREDOC, "END")
    commands = [Command("cat", ["cat"], [heredoc])]
    assert collect_heredocs(commands, env(), 0, reader) is False
    assert heredoc.content is None