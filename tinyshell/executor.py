"""Running parsed pipelines: builtins in-process, other programs as children."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import tempfile
from collections.abc import Iterable
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Optional, TextIO, Union

from .builtins import ShellExit, is_builtin, run_builtin
from .environment import Environment
from .errors import SHELL_NAME, ShellSyntaxError, syntax_error
from .heredoc import Reader, collect_heredocs
from .lexer import lex
from .parser import Command, RedirType, parse

NOT_FOUND_STATUS = 127
SYNTAX_STATUS = 2
INTERRUPTED_STATUS = 130

_FILE_MODE = 0o644
_OPEN_LABELS = {
    RedirType.IN: "open infile",
    RedirType.OUT: "open outfile",
    RedirType.APPEND: "open append",
    RedirType.HEREDOC: "open heredoc",
}

# What feeds a pipeline stage: None inherits the shell's stdin, bytes are
# the captured output of a builtin, a file object is a pipe or an open file.
_Input = Union[None, bytes, IO[bytes]]


def _err(stream: Optional[TextIO]) -> TextIO:
    return sys.stderr if stream is None else stream


def find_path(cmd: str, env: Environment) -> Optional[str]:
    """Locate the executable for ``cmd``.

    Nothing is found while ``PATH`` is unset. A name containing ``/`` is
    used as given when it is executable; otherwise each ``PATH`` directory
    is searched in order.
    """
    search = env.get("PATH")
    if search is None or not cmd:
        return None
    if "/" in cmd:
        return cmd if os.access(cmd, os.X_OK) else None
    for directory in filter(None, search.split(":")):
        candidate = f"{directory}/{cmd}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def is_dot(cmd: Optional[str], stderr: Optional[TextIO] = None) -> bool:
    """Report and return True when the command is a bare ``.``."""
    if cmd != ".":
        return False
    _err(stderr).write(f"{SHELL_NAME}: {cmd}: filename argument required\n")
    return True


def is_directory(cmd: Optional[str], stderr: Optional[TextIO] = None) -> bool:
    """Report and return True when the command names a directory."""
    if not cmd or not os.path.isdir(cmd):
        return False
    _err(stderr).write(f"{SHELL_NAME}: {cmd}: Is a directory\n")
    return True


def install_prompt_signals() -> dict[int, object]:
    """Ignore SIGQUIT and let SIGINT raise KeyboardInterrupt at the prompt.

    Returns the handlers that were in place, keyed by signal number.
    """
    previous: dict[int, object] = {}
    if hasattr(signal, "SIGQUIT"):
        previous[signal.SIGQUIT] = signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    previous[signal.SIGINT] = signal.signal(signal.SIGINT, signal.default_int_handler)
    return previous


class _RedirectionError(Exception):
    """A redirection target could not be opened."""


@dataclass
class _Streams:
    stdin: Optional[IO[bytes]] = None
    stdout: Optional[IO[bytes]] = None


def _opener(path: str, flags: int) -> int:
    return os.open(path, flags, _FILE_MODE)


def _bytes_file(data: bytes, stack: ExitStack) -> IO[bytes]:
    handle = stack.enter_context(tempfile.TemporaryFile())
    handle.write(data)
    handle.seek(0)
    return handle


def _open_redirections(command: Command, stack: ExitStack) -> _Streams:
    streams = _Streams()
    for redirection in command.redirections:
        try:
            if redirection.type is RedirType.IN:
                streams.stdin = stack.enter_context(open(redirection.path, "rb"))
            elif redirection.type is RedirType.HEREDOC:
                text = redirection.content or ""
                streams.stdin = _bytes_file(text.encode(), stack)
            elif redirection.type is RedirType.OUT:
                streams.stdout = stack.enter_context(
                    open(redirection.path, "wb", opener=_opener)
                )
            else:
                streams.stdout = stack.enter_context(
                    open(redirection.path, "ab", opener=_opener)
                )
        except OSError as exc:
            label = _OPEN_LABELS[redirection.type]
            raise _RedirectionError(f"{label}: {exc.strerror}\n") from exc
    return streams


def _fileno(stream: TextIO) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _child_stream(stream: TextIO, stack: ExitStack) -> tuple[object, Optional[IO[bytes]]]:
    """Return what a child should write to, and a capture file if one is needed."""
    fd = _fileno(stream)
    if fd is not None:
        stream.flush()
        return fd, None
    capture = stack.enter_context(tempfile.TemporaryFile())
    return capture, capture


def _drain(capture: Optional[IO[bytes]], stream: TextIO) -> None:
    if capture is None:
        return
    capture.seek(0)
    data = capture.read()
    if data:
        stream.write(data.decode(errors="replace"))


def _close(source: _Input) -> None:
    if source is not None and not isinstance(source, bytes):
        source.close()


def _as_stdin(source: _Input, stack: ExitStack) -> object:
    if source is None:
        return None
    if isinstance(source, bytes):
        return _bytes_file(source, stack) if source else subprocess.DEVNULL
    return source


def _exit_status(code: int) -> int:
    return code if code >= 0 else 128 - code


def _current_dir() -> Optional[str]:
    try:
        return os.getcwd()
    except OSError:
        return None


class Executor:
    """Runs command lines against one environment, tracking the last status."""

    def __init__(
        self,
        env: Optional[Environment] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.env = env if env is not None else Environment(os.environ)
        self.stdout = sys.stdout if stdout is None else stdout
        self.stderr = sys.stderr if stderr is None else stderr
        self.status = 0

    def run_line(self, line: str, reader: Optional[Reader] = None) -> int:
        """Lex, parse, read here-documents for and run one command line."""
        try:
            commands = parse(lex(line, self.env.to_envp(), self.status))
        except ShellSyntaxError as exc:
            syntax_error(exc.token, self.stderr)
            self.status = SYNTAX_STATUS
            return self.status
        if not commands:
            return self.status
        if not collect_heredocs(commands, self.env, self.status, reader):
            self.status = INTERRUPTED_STATUS
            return self.status
        return self.run(commands)

    def run(self, commands: Iterable[Command]) -> int:
        """Run a pipeline and return its status (that of the last stage).

        A lone builtin runs in the shell itself; inside a pipeline builtins
        work on a copy of the environment, as a child process would.
        Raises :class:`ShellExit` when a lone ``exit`` ends the shell.
        """
        commands = list(commands)
        if not commands:
            return self.status
        if len(commands) == 1:
            self.status = self._run_single(commands[0])
        else:
            self.status = self._run_pipeline(commands)
        return self.status

    def _flush(self) -> None:
        self.stdout.flush()
        self.stderr.flush()

    def _child_env(self) -> dict[str, str]:
        return {var.name: var.value for var in self.env if var.value is not None}

    def _spawn(
        self, command: Command, stdin: object, stdout: object, stderr: object
    ) -> Optional[subprocess.Popen]:
        if is_dot(command.cmd, self.stderr) or is_directory(command.cmd, self.stderr):
            return None
        path = find_path(command.cmd or "", self.env)
        if path is None:
            self.stderr.write(f"{SHELL_NAME}: {command.cmd}: command not found\n")
            return None
        self._flush()
        try:
            return subprocess.Popen(
                command.args,
                executable=path,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                env=self._child_env(),
            )
        except OSError as exc:
            self.stderr.write(f"execve: {exc.strerror}\n")
            return None

    def _run_single(self, command: Command) -> int:
        with ExitStack() as stack:
            try:
                streams = _open_redirections(command, stack)
            except _RedirectionError as exc:
                self.stderr.write(str(exc))
                return 1
            if command.cmd is None:
                return 0
            if is_builtin(command.cmd):
                return self._builtin_here(command, streams.stdout)
            if streams.stdout is not None:
                out, out_capture = streams.stdout, None
            else:
                out, out_capture = _child_stream(self.stdout, stack)
            err, err_capture = _child_stream(self.stderr, stack)
            proc = self._spawn(command, streams.stdin, out, err)
            if proc is None:
                return NOT_FOUND_STATUS
            code = proc.wait()
            _drain(out_capture, self.stdout)
            _drain(err_capture, self.stderr)
            return _exit_status(code)

    def _builtin_here(self, command: Command, target: Optional[IO[bytes]]) -> int:
        buffer = io.StringIO()
        try:
            return run_builtin(
                command.args, self.env, self.status, True, buffer, self.stderr
            )
        finally:
            text = buffer.getvalue()
            if target is not None:
                target.write(text.encode())
            else:
                self.stdout.write(text)

    def _builtin_in_pipeline(self, command: Command, announce: bool) -> tuple[int, str]:
        buffer = io.StringIO()
        env = Environment(list(self.env))
        cwd = _current_dir()
        try:
            status = run_builtin(
                command.args, env, self.status, announce, buffer, self.stderr
            )
        except ShellExit as exc:
            status = exc.code
        finally:
            if cwd is not None:
                try:
                    os.chdir(cwd)
                except OSError:
                    pass
        return status, buffer.getvalue()

    def _run_pipeline(self, commands: list[Command]) -> int:
        last = len(commands) - 1
        results: list[Union[int, subprocess.Popen]] = []
        with ExitStack() as stack:
            out, out_capture = _child_stream(self.stdout, stack)
            err, err_capture = _child_stream(self.stderr, stack)
            incoming: _Input = None
            for index, command in enumerate(commands):
                is_last = index == last
                try:
                    streams = _open_redirections(command, stack)
                except _RedirectionError as exc:
                    self.stderr.write(str(exc))
                    _close(incoming)
                    results.append(1)
                    incoming = b""
                    continue
                if streams.stdin is not None:
                    _close(incoming)
                    source: _Input = streams.stdin
                else:
                    source = incoming

                if command.cmd is None or is_builtin(command.cmd):
                    _close(source)
                    if command.cmd is None:
                        status, text = 0, ""
                    else:
                        status, text = self._builtin_in_pipeline(
                            command, announce=index in (0, last)
                        )
                    results.append(status)
                    if streams.stdout is not None:
                        streams.stdout.write(text.encode())
                        incoming = b""
                    elif is_last:
                        self.stdout.write(text)
                    else:
                        incoming = text.encode()
                    continue

                stdin = _as_stdin(source, stack)
                if streams.stdout is not None:
                    stdout: object = streams.stdout
                elif is_last:
                    stdout = out
                else:
                    stdout = subprocess.PIPE
                proc = self._spawn(command, stdin, stdout, err)
                _close(source)
                if proc is None:
                    results.append(NOT_FOUND_STATUS)
                    incoming = b""
                else:
                    results.append(proc)
                    incoming = proc.stdout if stdout is subprocess.PIPE else b""
            _close(incoming)

            statuses = [
                _exit_status(result.wait())
                if isinstance(result, subprocess.Popen)
                else result
                for result in results
            ]
            _drain(out_capture, self.stdout)
            _drain(err_capture, self.stderr)
        return statuses[-1]