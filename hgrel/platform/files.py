"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Callable, Iterable
from pathlib import Path

from .detection import is_windows

__all__ = [
    "invalid_filename_chars",
    "remove_tree",
    "write_ascii_lines",
]

_WINDOWS_INVALID = frozenset('"<>|:*?\\/') | frozenset(chr(c) for c in range(32))
_POSIX_INVALID = frozenset("/\0")


def invalid_filename_chars() -> frozenset[str]:
    """Characters the host refuses in a single file or directory name."""
    return _WINDOWS_INVALID if is_windows() else _POSIX_INVALID


def write_ascii_lines(path: Path, lines: Iterable[str]) -> None:
    """Write one line per item, encoded as strict 7-bit ASCII.

    The whole content is encoded before the file is opened, so a
    non-ASCII line raises without leaving a partial file behind.

    Raises:
        UnicodeEncodeError: If any line holds a non-ASCII character.
        OSError: If the file cannot be written.
    """
    content = "".join(f"{line}{os.linesep}" for line in lines)
    data = content.encode("ascii", errors="strict")
    path.write_bytes(data)


def _remove_readonly(_func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Handle read-only files on Windows (e.g. .hg/store/*.i)."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def remove_tree(path: Path) -> None:
    """Recursively delete a directory, including read-only entries."""
    shutil.rmtree(path, onerror=lambda func, p, exc_info: _remove_readonly(func, p, exc_info[1]))
