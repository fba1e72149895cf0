"""Exit codes for the CLI.

Local failures (usage, validation, filesystem, manifest encoding) all share
exit code 1. A failing ``hg`` invocation propagates its own exit code, which
is why it has no member here.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes owned by hgrel itself."""

    OK = 0
    FAILURE = 1
