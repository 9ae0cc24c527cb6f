"""Turning a command line into a checked list of tokens."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Optional

from .errors import ShellSyntaxError
from .expand import expand
from .tokens import TokenType, classify, split_words


@dataclass(frozen=True)
class Token:
    """One lexical token: its text and its kind."""

    text: str
    kind: TokenType


def strip_single_quotes(text: str) -> str:
    """Remove every single quote from ``text``."""
    return text.replace("'", "")


def merge_args(tokens: Iterable[Token]) -> list[Token]:
    """Join runs of adjacent word tokens into one; the first keeps its kind."""
    merged: list[Token] = []
    for token in tokens:
        if merged and token.kind.is_word and merged[-1].kind.is_word:
            merged[-1] = replace(merged[-1], text=merged[-1].text + token.text)
        else:
            merged.append(token)
    return merged


def remove_spaces(tokens: Iterable[Token]) -> list[Token]:
    """Drop separator tokens."""
    return [token for token in tokens if token.kind is not TokenType.SPACE]


def _offending(
    token: Token,
    prev: Optional[Token],
    nxt: Optional[Token],
    after: Optional[Token],
) -> Optional[str]:
    is_pipe = token.kind is TokenType.PIPE
    is_redir = token.kind.is_redirection
    if is_pipe and (prev is None or nxt is None):
        return token.text
    if nxt is not None:
        if (
            is_redir
            and nxt.kind.is_redirection
            and after is not None
            and after.kind is TokenType.PIPE
        ):
            return after.text
        if is_pipe and nxt.kind is TokenType.PIPE:
            return nxt.text
        if is_redir and (
            nxt.kind.is_redirection
            or (
                nxt.kind is TokenType.PIPE
                and after is not None
                and after.kind.is_redirection
            )
        ):
            return nxt.text
    elif is_redir:
        return "newline"
    return None


def check_syntax(tokens: list[Token]) -> None:
    """Raise :class:`ShellSyntaxError` at the first misplaced operator."""
    for index, token in enumerate(tokens):
        prev = tokens[index - 1] if index > 0 else None
        nxt = tokens[index + 1] if index + 1 < len(tokens) else None
        after = tokens[index + 2] if index + 2 < len(tokens) else None
        offending = _offending(token, prev, nxt, after)
        if offending is not None:
            raise ShellSyntaxError(offending)


def _make_token(word: str, envp: list[str], status: int) -> Token:
    kind = classify(word)
    if kind is TokenType.EXP_ARG:
        return Token(strip_single_quotes(word), kind)
    return Token(expand(word, envp, status), kind)


def lex(line: str, envp: Iterable[str], status: int = 0) -> list[Token]:
    """Split, expand, merge and check ``line``; return its tokens.

    Raises :class:`ShellSyntaxError` when operators are misplaced.
    """
    envp = list(envp)
    tokens = [_make_token(word, envp, status) for word in split_words(line, " ")]
    tokens = remove_spaces(merge_args(tokens))
    check_syntax(tokens)
    return tokens