from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from hgrel.core.errors import ErrorCode
from hgrel.platform.process import ProcessResult

ReleaseErrorKind = Literal[
    "invalid_source",
    "invalid_name",
    "target_exists",
    "filesystem",
    "tool_missing",
    "tool_failed",
    "encoding",
    "config",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Failure of one release step.

    Attributes:
        kind: Error category.
        message: One-line description.
        exit_code: Process exit status for the whole run.
        detail: Underlying exception text, if any.
        process: Captured result of a failed hg call (``tool_failed`` only).
        hint: Suggestion shown to the user.
    """

    kind: ReleaseErrorKind
    message: str
    exit_code: int = int(ErrorCode.FAILURE)
    detail: str | None = None
    process: ProcessResult | None = None
    hint: str | None = None
