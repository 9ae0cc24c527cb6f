"""Grouping a checked token list into the commands of a pipeline."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import ShellSyntaxError
from .lexer import Token
from .tokens import TokenType


class RedirType(Enum):
    """The kinds of redirection a command can carry."""

    IN = "<"
    OUT = ">"
    APPEND = ">>"
    HEREDOC = "<<"


_REDIR_FOR_TOKEN = {
    TokenType.INPUT: RedirType.IN,
    TokenType.TRUNC: RedirType.OUT,
    TokenType.APPEND: RedirType.APPEND,
    TokenType.HEREDOC: RedirType.HEREDOC,
}


@dataclass
class Redirection:
    """One redirection: its kind, its target and, for a here-document, its text."""

    type: RedirType
    path: str
    content: Optional[str] = None


@dataclass
class Command:
    """One stage of a pipeline.

    ``args`` starts with the command name when there is one; a stage that
    holds only redirections has no ``cmd`` and empty ``args``.
    """

    cmd: Optional[str] = None
    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)


def parse(tokens: Iterable[Token]) -> list[Command]:
    """Build the pipeline's commands from lexed tokens.

    Words fill the current command in order, the first one naming it;
    redirections attach to the current command wherever they appear;
    each pipe starts a new command. Raises :class:`ShellSyntaxError`
    when a redirection has no target.
    """
    tokens = list(tokens)
    if not tokens:
        return []
    current = Command()
    commands = [current]
    position = 0
    while position < len(tokens):
        token = tokens[position]
        if token.kind is TokenType.PIPE:
            current = Command()
            commands.append(current)
            position += 1
        elif token.kind.is_redirection:
            if position + 1 >= len(tokens):
                raise ShellSyntaxError("newline")
            target = tokens[position + 1]
            current.redirections.append(
                Redirection(_REDIR_FOR_TOKEN[token.kind], target.text)
            )
            position += 2
        else:
            if current.cmd is None:
                current.cmd = token.text
            current.args.append(token.text)
            position += 1
    return commands