"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hgrel.core.errors import ErrorCode
from hgrel.output.console import Style
from hgrel.release.errors import ReleaseError

if TYPE_CHECKING:
    from hgrel.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error, including captured hg output when present."""
    console.error(error.message)

    if error.process is not None:
        console.print(f"Process exited with code {error.process.returncode}!")
        console.newline()
        console.print("Standard Error:")
        console.print(error.process.stderr, Style.DIM)
        console.print("Standard Output:")
        console.print(error.process.stdout, Style.DIM)

    if error.detail:
        console.print(error.detail, Style.DIM)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "tool_failed":
            return error.exit_code
        case _:
            return int(ErrorCode.FAILURE)
