"""Platform abstraction layer."""

from .cmdline import (
    decode_command_line,
    encode_arg,
    join_command_line,
)
from .detection import (
    Platform,
    detect_platform,
    is_windows,
)
from .files import (
    invalid_filename_chars,
    remove_tree,
    write_ascii_lines,
)
from .process import (
    CommandRunner,
    ProcessError,
    ProcessInvocation,
    ProcessResult,
    SubprocessRunner,
    run_captured,
)

__all__ = [
    # cmdline
    "decode_command_line",
    "encode_arg",
    "join_command_line",
    # detection
    "Platform",
    "detect_platform",
    "is_windows",
    # files
    "invalid_filename_chars",
    "remove_tree",
    "write_ascii_lines",
    # process
    "CommandRunner",
    "ProcessError",
    "ProcessInvocation",
    "ProcessResult",
    "SubprocessRunner",
    "run_captured",
]
