"""Token kinds and the splitting of a command line into raw words."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from enum import IntEnum

_QUOTES = "\"'"
_OPERATORS = "|<>"


class TokenType(IntEnum):
    """Kinds of lexical tokens.

    The order matters: separators come first, then words, then the pipe,
    and every kind above ``PIPE`` is a redirection operator.
    """

    SPACE = 0
    ARG = 1
    EXP_ARG = 2
    PIPE = 3
    HEREDOC = 4
    APPEND = 5
    TRUNC = 6
    INPUT = 7

    @property
    def is_word(self) -> bool:
        """Tell whether this kind is a plain or quoted argument."""
        return TokenType.SPACE < self < TokenType.PIPE

    @property
    def is_redirection(self) -> bool:
        """Tell whether this kind is a redirection operator."""
        return self > TokenType.PIPE


def classify(word: str) -> TokenType:
    """Return the token kind of a raw word produced by :func:`split_words`."""
    if word.startswith("|"):
        return TokenType.PIPE
    if word.startswith("<<"):
        return TokenType.HEREDOC
    if word.startswith(">>"):
        return TokenType.APPEND
    if word.startswith(">"):
        return TokenType.TRUNC
    if word.startswith("<"):
        return TokenType.INPUT
    if word.startswith("'") and word.endswith("'"):
        return TokenType.EXP_ARG
    if word.startswith('"') and word.endswith('"'):
        return TokenType.ARG
    if word and not word.strip(" "):
        return TokenType.SPACE
    return TokenType.ARG


def _scan(line: str, separator: str) -> Iterator[str]:
    if len(separator) != 1:
        raise ValueError("separator must be a single character")
    stops = separator + _QUOTES + _OPERATORS
    length = len(line)
    i = 0
    while i < length:
        ch = line[i]
        if ch == separator:
            while i < length and line[i] == separator:
                i += 1
            yield separator
        elif ch in _QUOTES:
            end = line.find(ch, i + 1)
            if end == -1:
                sys.stderr.write("unclosed quote\n")
                yield line[i + 1:]
                i = length
            else:
                yield line[i + 1:end]
                i = end + 1
        elif ch in _OPERATORS:
            size = 2 if ch != "|" and line[i + 1:i + 2] == ch else 1
            yield line[i:i + size]
            i += size
        else:
            end = i
            while end < length and line[end] not in stops:
                end += 1
            yield line[i:end]
            i = end


def count_words(line: str, separator: str = " ") -> int:
    """Return how many words :func:`split_words` yields for ``line``."""
    return sum(1 for _ in _scan(line, separator))


def split_words(line: str, separator: str = " ") -> list[str]:
    """Split ``line`` into words, operators and separator markers.

    A run of separators becomes one word holding a single separator.
    Quoted text becomes one word without its quotes. ``<<`` and ``>>``
    are single operators; every ``|`` stands alone. An unclosed quote
    takes the rest of the line and is reported on stderr.
    """
    return list(_scan(line, separator))