"""Mercurial command construction.

Usage:
    from hgrel.hg import HgCommands

    hg = HgCommands("hg")
    invocation = hg.clone(url, release_dir / "_repo_", cwd=Path.cwd())
"""

from hgrel.hg.commands import (
    ARCHIVE_META_OFF,
    LATEST_TAG_TEMPLATE,
    LISTFILE_PREFIX,
    PATH_PATTERN_PREFIX,
    HgCommands,
    tag_to_tip_revset,
)

__all__ = [
    "ARCHIVE_META_OFF",
    "LATEST_TAG_TEMPLATE",
    "LISTFILE_PREFIX",
    "PATH_PATTERN_PREFIX",
    "HgCommands",
    "tag_to_tip_revset",
]
