"""Error kinds and the diagnostic messages the shell writes to stderr."""

from __future__ import annotations

import sys
from enum import Enum, auto
from typing import Optional, TextIO

SHELL_NAME = "minishell"


class ErrorKind(Enum):
    """Kinds of diagnostics reported through :func:`report_error`."""

    ARGS = auto()
    EXPORT = auto()
    EXPORT_OPT = auto()
    UNSET = auto()
    UNSET_OPT = auto()
    EXIT_NB = auto()
    PATH = auto()
    NOCMD = auto()
    PERM_DENIED = auto()
    UNCLEAR_REDIR = auto()


class ShellSyntaxError(Exception):
    """Raised when a command line contains a misplaced token."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"syntax error near unexpected token `{token}'")


_SIMPLE_SUFFIXES = {
    ErrorKind.ARGS: ": too many arguments\n",
    ErrorKind.PATH: ": HOME not set\n",
    ErrorKind.NOCMD: ": Commnd not found\n",
    ErrorKind.PERM_DENIED: ": Permission denied\n",
    ErrorKind.UNCLEAR_REDIR: ": Ambiguous redirect\n",
}


def _stream(stream: Optional[TextIO]) -> TextIO:
    return sys.stderr if stream is None else stream


def two_first_chars(cmd: str) -> str:
    """Return the first two characters of ``cmd`` (an option such as ``-x``)."""
    return cmd[:2]


def error_message(kind: ErrorKind, cmd: str) -> Optional[str]:
    """Build the message body for the builtin-specific error kinds.

    Returns None for kinds that have no builtin-specific message, and for
    ``EXPORT_OPT``, which produces no message at all.
    """
    if kind is ErrorKind.EXIT_NB:
        return f"exit:{cmd}: numeric argument required\n"
    if kind in (ErrorKind.EXPORT, ErrorKind.UNSET):
        detail = f"{cmd}' : not a valid identifier"
    elif kind in (ErrorKind.EXPORT_OPT, ErrorKind.UNSET_OPT):
        detail = f"{two_first_chars(cmd)}': invalid option\n"
    else:
        return None
    if kind in (ErrorKind.EXPORT, ErrorKind.UNSET_OPT):
        return "export: `" + detail
    if kind is ErrorKind.UNSET:
        return "unset : `" + detail
    return None


def format_error(kind: ErrorKind, text: str) -> Optional[str]:
    """Return the full diagnostic for ``kind`` about ``text``, or None."""
    suffix = _SIMPLE_SUFFIXES.get(kind)
    body = text + suffix if suffix is not None else error_message(kind, text)
    if body is None:
        return None
    return f"{SHELL_NAME}: {body}"


def report_error(kind: ErrorKind, text: str, stream: Optional[TextIO] = None) -> None:
    """Write the diagnostic for ``kind`` to ``stream`` (stderr by default)."""
    message = format_error(kind, text)
    if message:
        _stream(stream).write(message)


def syntax_error(token: str, stream: Optional[TextIO] = None) -> None:
    """Report an unexpected token."""
    _stream(stream).write(
        f"{SHELL_NAME}: syntax error near unexpected token `{token}'\n"
    )


def quote_error(quote: str, stream: Optional[TextIO] = None) -> None:
    """Report an unterminated quote."""
    _stream(stream).write(
        f"{SHELL_NAME} : unexpected EOF while looking for matching `{quote}`\n"
    )


def getcwd_error(builtin: str, stream: Optional[TextIO] = None) -> None:
    """Report that the current directory could not be retrieved.

    ``builtin`` is ``"cd"`` for a failure during a directory change; any other
    value reports it on behalf of ``pwd``.
    """
    prefix = "chdir" if builtin == "cd" else "pwd"
    _stream(stream).write(
        f"{prefix}: error retrieving current directory: "
        "getcwd: cannot access parent directories: "
        "No such file or directory\n"
    )