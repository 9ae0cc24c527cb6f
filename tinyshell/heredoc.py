"""Reading here-documents and matching their delimiters."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Optional

from .environment import Environment
from .parser import Command, RedirType

Reader = Callable[[str], Optional[str]]

_QUOTES = "\"'"
_REFERENCE = re.compile(r"\$(\?|[^$ ]*)")
PROMPT = "> "


def _read_input(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def expand_heredoc_line(line: str, env: Environment, status: int = 0) -> str:
    """Expand ``$NAME`` and ``$?`` in one here-document line.

    A name runs up to the next space or ``$``. Unknown names, and a ``$``
    with no name after it, expand to nothing.
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "?":
            return str(status)
        if not name:
            return ""
        return env.get(name) or ""

    return _REFERENCE.sub(substitute, line)


def clean_delimiter(text: str) -> str:
    """Remove every quote character from a delimiter."""
    return "".join(ch for ch in text if ch not in _QUOTES)


def expand_delimiter(path: str) -> str:
    """Normalise a here-document delimiter as written on the command line.

    A ``$`` directly before a quote is dropped, unless it follows another
    ``$``; every other ``$`` is kept. Quote characters are then removed.
    """
    parts: list[str] = []
    i = 0
    while i < len(path):
        if path[i] == "$":
            before_quote = path[i + 1:i + 2] in tuple(_QUOTES)
            if not (before_quote and (i == 0 or path[i - 1] != "$")):
                parts.append("$")
            i += 1
        start = i
        while i < len(path) and path[i] != "$":
            i += 1
        parts.append(path[start:i])
    return clean_delimiter("".join(parts))


def is_delimiter(delim: str, line: str) -> bool:
    """Tell whether ``line`` ends a here-document opened with ``delim``.

    Quote characters in ``delim`` are ignored.
    """
    return line == clean_delimiter(delim)


def read_heredoc(
    delimiter: str,
    env: Environment,
    status: int = 0,
    reader: Optional[Reader] = None,
) -> str:
    """Read lines until ``delimiter`` or end of input; return the document.

    Lines are expanded unless the delimiter contains a quote. Each stored
    line ends with a newline. ``reader`` is called with the prompt and
    returns a line, or None at end of input.
    """
    read = reader or _read_input
    expand_lines = not any(ch in _QUOTES for ch in delimiter)
    lines: list[str] = []
    while True:
        line = read(PROMPT)
        if line is None or is_delimiter(delimiter, line):
            break
        if expand_lines:
            line = expand_heredoc_line(line, env, status)
        lines.append(line + "\n")
    return "".join(lines)


def collect_heredocs(
    commands: Iterable[Command],
    env: Environment,
    status: int = 0,
    reader: Optional[Reader] = None,
) -> bool:
    """Read the text of every here-document in ``commands``, in order.

    The text is stored on each redirection's ``content``. Returns False if
    reading was interrupted, True once every document has been read.
    """
    for command in commands:
        for redirection in command.redirections:
            if redirection.type is not RedirType.HEREDOC:
                continue
            try:
                redirection.content = read_heredoc(
                    redirection.path, env, status, reader
                )
            except KeyboardInterrupt:
                return False
    return True