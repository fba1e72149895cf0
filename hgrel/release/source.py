"""Source location parsing and release directory naming."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote_to_bytes, urlsplit

from hgrel.core.result import Err, Ok, Result
from hgrel.platform.files import invalid_filename_chars

from .errors import ReleaseError

__all__ = [
    "SourceLocation",
    "parse_source",
    "repo_display_name",
]

_ESCAPE_RUN = re.compile(r"(?:%[0-9A-Fa-f]{2})+")


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """A parsed repository location.

    Attributes:
        url: Absolute URL handed to ``hg clone``.
        path: URL path component, still percent-encoded.
    """

    url: str
    path: str


def _looks_like_url(scheme: str) -> bool:
    # A one-letter scheme is a Windows drive ("C:\repos\app"), not a URL.
    return len(scheme) > 1


def parse_source(raw: str) -> Result[SourceLocation, ReleaseError]:
    """Parse an absolute URL, or an absolute local path as a ``file://`` URL."""
    text = raw.strip()
    if not text:
        return Err(ReleaseError(kind="invalid_source", message="Invalid source location"))

    try:
        parts = urlsplit(text)
    except ValueError as e:
        return Err(
            ReleaseError(kind="invalid_source", message="Invalid source location", detail=str(e))
        )

    if _looks_like_url(parts.scheme):
        # file: URLs may omit the host (file:///srv/repo); anything else needs one.
        if parts.scheme.lower() == "file":
            missing = None if parts.path else "path"
        else:
            missing = None if parts.netloc else "host"
        if missing:
            return Err(
                ReleaseError(
                    kind="invalid_source",
                    message="Invalid source location",
                    detail=f"no {missing} in {text!r}",
                )
            )
        return Ok(SourceLocation(url=parts.geturl(), path=parts.path))

    local = Path(text)
    if not local.is_absolute():
        return Err(
            ReleaseError(
                kind="invalid_source",
                message="Invalid source location",
                detail=f"{text!r} is neither an absolute URL nor an absolute path",
                hint="Use a full URL such as https://hg.example.org/project",
            )
        )
    url = local.as_uri()
    return Ok(SourceLocation(url=url, path=urlsplit(url).path))


def _unescape(segment: str) -> str:
    # Each run of escapes is decoded as UTF-8; a run that is not valid UTF-8
    # stays as written.
    def decode(match: re.Match[str]) -> str:
        run = match.group(0)
        try:
            return unquote_to_bytes(run).decode("utf-8")
        except UnicodeDecodeError:
            return run

    return _ESCAPE_RUN.sub(decode, segment)


def repo_display_name(source: SourceLocation) -> Result[str, ReleaseError]:
    """Derive the release directory name from the last path segment.

    Percent-escapes are decoded; ``+`` is left alone since it only means a
    space inside query strings. Escapes that do not form UTF-8 (``%FF``) are
    kept verbatim.
    """
    segment = source.path.rstrip("/").rsplit("/", 1)[-1]
    name = _unescape(segment)

    if name in ("", ".", ".."):
        return Err(
            ReleaseError(
                kind="invalid_name",
                message="Unable to derive a repository name from the source location",
                detail=f"source: {source.url}",
            )
        )

    forbidden = invalid_filename_chars()
    if any(c in forbidden for c in name):
        return Err(
            ReleaseError(
                kind="invalid_name",
                message="Invalid characters in repository name",
                detail=repr(name),
            )
        )
    return Ok(name)
