"""Windows command-line argument encoding.

On Windows a child process receives one command-line string and splits it
itself with the C runtime rules. ``encode_arg`` quotes a single token so that
the split yields the original string back, including embedded quotes and
trailing backslash runs. ``decode_command_line`` is the inverse split and
lets the round trip be verified on any host.

Usage:
    line = join_command_line(["log", "--template", "{latesttag}"])
    assert decode_command_line(line) == ["log", "--template", "{latesttag}"]
"""

from __future__ import annotations

import re
from collections.abc import Iterable

__all__ = [
    "decode_command_line",
    "encode_arg",
    "join_command_line",
]

_BACKSLASHES_BEFORE_QUOTE = re.compile(r'(\\*)"')
_TRAILING_BACKSLASHES = re.compile(r"(\\+)\Z")


def encode_arg(arg: str) -> str:
    """Quote one command-line token for the Windows C runtime parser.

    Backslashes are only special when they precede a double quote, so every
    backslash run in front of a quote is doubled and the quote escaped. A
    trailing run is doubled too, because it will sit in front of the closing
    quote.
    """
    arg = _BACKSLASHES_BEFORE_QUOTE.sub(r'\1\1\\"', arg)
    return '"' + _TRAILING_BACKSLASHES.sub(r"\1\1", arg) + '"'


def join_command_line(args: Iterable[str]) -> str:
    """Encode every token and join them into a single command line."""
    return " ".join(encode_arg(a) for a in args)


def decode_command_line(line: str) -> list[str]:
    """Split a command line the way the Windows C runtime does.

    - 2n backslashes + ``"``: n backslashes, quote toggles quoting
    - 2n+1 backslashes + ``"``: n backslashes and a literal quote
    - backslashes not followed by a quote are literal
    - ``""`` inside a quoted region is a literal quote
    """
    args: list[str] = []
    current: list[str] = []
    in_arg = False
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        c = line[i]

        if c in " \t" and not in_quotes:
            if in_arg:
                args.append("".join(current))
                current = []
                in_arg = False
            i += 1
            continue

        in_arg = True

        if c == "\\":
            start = i
            while i < n and line[i] == "\\":
                i += 1
            count = i - start
            if i < n and line[i] == '"':
                current.append("\\" * (count // 2))
                if count % 2:
                    current.append('"')
                    i += 1
            else:
                current.append("\\" * count)
            continue

        if c == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        current.append(c)
        i += 1

    if in_arg:
        args.append("".join(current))
    return args
