"""Parsing of hg output and generation of the pattern listfile."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from hgrel.core.result import Err, Ok, Result
from hgrel.hg.commands import PATH_PATTERN_PREFIX
from hgrel.platform.files import write_ascii_lines

from .errors import ReleaseError

__all__ = [
    "manifest_patterns",
    "parse_changed_files",
    "parse_latest_tag",
    "split_lines",
    "write_manifest",
]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split on line terminators, dropping the empty item after a final one."""
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_latest_tag(stdout: str) -> str:
    """Only the first line is the tag; anything after it is ignored."""
    lines = split_lines(stdout)
    return lines[0] if lines else ""


def parse_changed_files(stdout: str) -> list[str]:
    """One relative path per line, in hg's order."""
    return split_lines(stdout)


def manifest_patterns(paths: Iterable[str], exclude_prefix: str) -> list[str]:
    """Exact-path patterns for every releasable changed file.

    Paths starting with ``exclude_prefix`` (case-insensitive, ``.hgtags``,
    ``.hgignore`` and friends) and empty lines are left out.
    """
    prefix = exclude_prefix.lower()
    return [
        f"{PATH_PATTERN_PREFIX}{path}"
        for path in paths
        if path and not path.lower().startswith(prefix)
    ]


def write_manifest(path: Path, patterns: list[str]) -> Result[None, ReleaseError]:
    """Write the listfile as strict ASCII; any other character is an error."""
    try:
        write_ascii_lines(path, patterns)
    except UnicodeEncodeError as e:
        bad = e.object[e.start : e.end]
        return Err(
            ReleaseError(
                kind="encoding",
                message="Unable to write listfile!",
                detail=f"non-ASCII character {bad!r} in a changed path: {e}",
                hint="hg cannot archive non-ASCII file names reliably on every platform",
            )
        )
    except OSError as e:
        return Err(
            ReleaseError(kind="filesystem", message="Unable to write listfile!", detail=str(e))
        )
    return Ok(None)
