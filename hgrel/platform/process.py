"""Blocking subprocess execution with complete output capture.

``run_captured`` starts one external program, drains its standard output
and standard error on two reader threads while waiting for it to exit, and
returns the exit code with both captured streams. A non-zero exit code is a
normal ``ProcessResult``; only a failure to start the program is an error.

Usage:
    invocation = ProcessInvocation("hg", ("log", "--rev", "tip"), cwd=clone_dir)
    match run_captured(invocation):
        case Ok(result) if result.ok:
            print(result.stdout)
        case Ok(result):
            print(f"hg exited with {result.returncode}")
        case Err(error):
            print(f"could not start hg: {error.message}")
"""

from __future__ import annotations

import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Protocol

from hgrel.core.result import Err, Ok, Result

from .cmdline import join_command_line
from .detection import is_windows

__all__ = [
    "CommandRunner",
    "ProcessError",
    "ProcessInvocation",
    "ProcessResult",
    "SubprocessRunner",
    "run_captured",
]

_STREAM_ENCODING = "utf-8"


@dataclass(frozen=True, slots=True)
class ProcessInvocation:
    """One external program call.

    Attributes:
        executable: Program name (resolved on PATH) or path.
        args: Arguments, one token each, not yet encoded.
        cwd: Working directory of the child.
    """

    executable: str
    args: tuple[str, ...]
    cwd: Path

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def command_line(self) -> str:
        """Single-string form with every token quoted for the Windows parser."""
        return join_command_line(self.argv)

    def __str__(self) -> str:
        shown = " ".join(self.argv[:3])
        if len(self.argv) > 3:
            shown += " ..."
        return shown


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Exit status and captured output of a finished child process.

    Each captured line is followed by a newline, including the last one.
    """

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """The program could not be started at all.

    Attributes:
        command: The command that was attempted.
        message: OS error description.
    """

    command: tuple[str, ...]
    message: str

    def __str__(self) -> str:
        return f"unable to start {self.command[0]}: {self.message}"


class CommandRunner(Protocol):
    """Protocol for running external programs.

    This abstraction allows replacing real processes with fakes in tests.
    """

    def run(self, invocation: ProcessInvocation) -> Result[ProcessResult, ProcessError]:
        """Run the program to completion and capture its output."""
        ...


class SubprocessRunner:
    """Default command runner backed by ``run_captured``."""

    def run(self, invocation: ProcessInvocation) -> Result[ProcessResult, ProcessError]:
        return run_captured(invocation)


def _drain(stream: IO[str], lines: list[str]) -> None:
    # Text mode translates \r\n and \r, so every line ends with \n except
    # possibly the last one.
    with stream:
        for line in stream:
            lines.append(line.removesuffix("\n"))


def _join_lines(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


def _popen_kwargs() -> dict[str, Any]:
    if not is_windows():
        return {}
    return {"creationflags": subprocess.CREATE_NO_WINDOW}


def run_captured(invocation: ProcessInvocation) -> Result[ProcessResult, ProcessError]:
    """Execute a program, blocking until it exits.

    Both output streams are read concurrently with the wait, so a child that
    fills one pipe while the other is idle cannot deadlock. There is no
    timeout: a hung child blocks the caller.

    Args:
        invocation: Program, arguments and working directory.

    Returns:
        Ok(ProcessResult) once the child exited (whatever its exit code),
        Err(ProcessError) if it could not be started.

    Raises:
        ValueError: If the executable name is empty.
        TypeError: If args or cwd is None.
    """
    if not invocation.executable or not invocation.executable.strip():
        raise ValueError("an executable name must be specified")
    if invocation.args is None:
        raise TypeError("args must not be None")
    if invocation.cwd is None:
        raise TypeError("cwd must not be None")

    command: str | list[str] = (
        invocation.command_line() if is_windows() else invocation.argv
    )

    try:
        proc = subprocess.Popen(
            command,
            cwd=str(invocation.cwd),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding=_STREAM_ENCODING,
            errors="replace",
            **_popen_kwargs(),
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(invocation.argv), message=str(e)))

    assert proc.stdout is not None
    assert proc.stderr is not None

    out_lines: list[str] = []
    err_lines: list[str] = []
    readers = [
        threading.Thread(target=_drain, args=(proc.stdout, out_lines), daemon=True),
        threading.Thread(target=_drain, args=(proc.stderr, err_lines), daemon=True),
    ]
    for reader in readers:
        reader.start()

    returncode = proc.wait()
    for reader in readers:
        reader.join()

    return Ok(
        ProcessResult(
            returncode=returncode,
            stdout=_join_lines(out_lines),
            stderr=_join_lines(err_lines),
        )
    )
