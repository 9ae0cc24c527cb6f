"""The commands the shell runs itself rather than as child processes."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import Optional, TextIO

from .environment import Environment, is_valid_identifier
from .errors import SHELL_NAME, ErrorKind, format_error

BUILTINS = frozenset({"cd", "pwd", "env", "echo", "exit", "unset", "export"})

_ATOI_SPACES = " \t\n\v\f\r"


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``code``."""

    def __init__(self, code: int) -> None:
        self.code = code & 0xFF
        super().__init__(f"exit {self.code}")


def _out(stream: Optional[TextIO]) -> TextIO:
    return sys.stdout if stream is None else stream


def _err(stream: Optional[TextIO]) -> TextIO:
    return sys.stderr if stream is None else stream


def is_builtin(name: Optional[str]) -> bool:
    """Tell whether ``name`` is one of the shell's own commands."""
    return name in BUILTINS


def _is_n_option(arg: str) -> bool:
    return len(arg) >= 2 and arg[0] == "-" and set(arg[1:]) == {"n"}


def echo(args: Sequence[str], stdout: Optional[TextIO] = None) -> int:
    """Print the arguments separated by spaces; ``-n`` (or ``-nnn``) drops the newline."""
    words = list(args[1:])
    skipped = 0
    for word in words:
        if not _is_n_option(word):
            break
        skipped += 1
    out = _out(stdout)
    out.write(" ".join(words[skipped:]))
    if not skipped:
        out.write("\n")
    return 0


def print_env(env: Environment, stdout: Optional[TextIO] = None) -> int:
    """Print ``NAME=value`` for every variable that has a value."""
    out = _out(stdout)
    for line in env.lines():
        out.write(line + "\n")
    return 0


def pwd(env: Environment, stdout: Optional[TextIO] = None) -> int:
    """Print the value of the ``PWD`` variable, if there is one."""
    for var in env:
        if var.name == "PWD":
            _out(stdout).write((var.value or "") + "\n")
            break
    return 0


def _current_dir() -> Optional[str]:
    try:
        return os.getcwd()
    except OSError:
        return None


def _cd_home(env: Environment, stderr: Optional[TextIO]) -> int:
    home = env.get("HOME")
    if home is None:
        _err(stderr).write(format_error(ErrorKind.PATH, "cd") or "")
        return 1
    try:
        os.chdir(home)
    except OSError:
        return 1
    old_pwd = env.get("PWD")
    if old_pwd is None:
        return 1
    env.replace("OLDPWD", old_pwd)
    env.replace("PWD", home)
    return 0


def cd(args: Sequence[str], env: Environment, stderr: Optional[TextIO] = None) -> int:
    """Change directory and keep ``PWD`` and ``OLDPWD`` up to date."""
    err = _err(stderr)
    if len(args) > 2:
        err.write(f"{SHELL_NAME}: cd: too many arguments\n")
        return 1
    if len(args) < 2 or args[1] == "~":
        return _cd_home(env, stderr)
    target = args[1]
    previous = _current_dir()
    if previous is None:
        err.write("chdir: error retrieving current directory: ")
        return 1
    try:
        os.chdir(target)
    except OSError:
        err.write(f"{SHELL_NAME}: cd: {target}: No such file or directory\n")
        return 1
    env.change_pwd(previous, _current_dir())
    return 0


def _print_sorted(env: Environment, out: TextIO) -> None:
    for var in env.sorted_vars():
        if var.value is not None:
            out.write(f'export {var.name}="{var.value}"\n')
        else:
            out.write(f"export {var.name}\n")


def export(
    args: Sequence[str],
    env: Environment,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Set variables from ``NAME=value`` arguments, or list them sorted."""
    if len(args) < 2:
        _print_sorted(env, _out(stdout))
        return 0
    status = 0
    for arg in args[1:]:
        if not is_valid_identifier(arg):
            _err(stderr).write(
                f"{SHELL_NAME}: export: `{arg}': not a valid identifier\n"
            )
            status = 1
            continue
        env.assign(arg)
    return status


def unset(args: Sequence[str], env: Environment, stderr: Optional[TextIO] = None) -> int:
    """Remove the named variables."""
    status = 0
    for arg in args[1:]:
        if not is_valid_identifier(arg):
            _err(stderr).write(
                f"{SHELL_NAME}: unset: `{arg}': not a valid identifier\n"
            )
            status = 1
            continue
        env.unset(arg)
    return status


def _atoi(text: str) -> int:
    stripped = text.lstrip(_ATOI_SPACES)
    sign = 1
    if stripped[:1] in ("+", "-"):
        if stripped[0] == "-":
            sign = -1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if not ch.isdigit() or not ch.isascii():
            break
        digits += ch
    value = sign * int(digits) if digits else 0
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def exit_builtin(
    args: Sequence[str],
    status: int = 0,
    announce: bool = True,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Leave the shell by raising :class:`ShellExit`.

    Without an argument the exit code is ``status``. A non-numeric argument
    exits with 255. With more than one argument nothing happens and 1 is
    returned.
    """
    out = _out(stdout)
    if announce:
        out.write("exit\n")
    if len(args) < 2:
        raise ShellExit(status)
    if len(args) > 2:
        _err(stderr).write("exit: too many arguments\n")
        return 1
    arg = args[1]
    code = _atoi(arg)
    if arg != "0" and code == 0:
        _err(stderr).write(f"exit: {arg}: numeric argument required\n")
        raise ShellExit(255)
    out.write("exit\n")
    raise ShellExit(code)


def run_builtin(
    args: Sequence[str],
    env: Environment,
    status: int = 0,
    announce: bool = True,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Run the builtin named by ``args[0]`` and return its exit status."""
    name = args[0] if args else None
    if name == "cd":
        return cd(args, env, stderr)
    if name == "pwd":
        return pwd(env, stdout)
    if name == "env":
        return print_env(env, stdout)
    if name == "echo":
        return echo(args, stdout)
    if name == "exit":
        return exit_builtin(args, status, announce, stdout, stderr)
    if name == "unset":
        return unset(args, env, stderr)
    if name == "export":
        return export(args, env, stdout, stderr)
    raise ValueError(f"not a builtin: {name!r}")