"""Mercurial command builders.

Each method returns the ``ProcessInvocation`` for one ``hg`` call; running
it is left to a ``CommandRunner`` so the pipeline decides how failures are
handled.

Usage:
    hg = HgCommands("hg")
    invocation = hg.latest_tag(clone_dir)
"""

from __future__ import annotations

from pathlib import Path

from hgrel.platform.process import ProcessInvocation

__all__ = [
    "ARCHIVE_META_OFF",
    "LATEST_TAG_TEMPLATE",
    "LISTFILE_PREFIX",
    "PATH_PATTERN_PREFIX",
    "HgCommands",
    "tag_to_tip_revset",
]

LATEST_TAG_TEMPLATE = "{latesttag}"
ARCHIVE_META_OFF = "ui.archivemeta=false"

# "path:" makes hg match a file name literally instead of as a glob.
PATH_PATTERN_PREFIX = "path:"
LISTFILE_PREFIX = "listfile:"


def tag_to_tip_revset(tag: str) -> str:
    """Revset selecting everything after ``tag`` up to and including tip."""
    return f'"{tag}"::tip'


class HgCommands:
    """Builds the hg invocations used by a release run.

    Attributes:
        executable: hg program name or path
    """

    def __init__(self, executable: str) -> None:
        self.executable = executable

    def clone(self, source: str, dest: Path, *, cwd: Path) -> ProcessInvocation:
        """``hg clone --noupdate``: full history, no working copy."""
        return self._invocation(["clone", "--noupdate", source, str(dest)], cwd=cwd)

    def latest_tag(self, repo: Path) -> ProcessInvocation:
        """``hg log`` printing the most recent tag reachable from tip."""
        return self._invocation(
            ["log", "--rev", "tip", "--template", LATEST_TAG_TEMPLATE],
            cwd=repo,
        )

    def changed_files(self, repo: Path, tag: str) -> ProcessInvocation:
        """``hg status`` listing added/modified paths between ``tag`` and tip."""
        return self._invocation(
            [
                "status",
                "--added",
                "--modified",
                "--no-status",
                "--rev",
                tag_to_tip_revset(tag),
            ],
            cwd=repo,
        )

    def archive(self, repo: Path, listfile: str, dest: str) -> ProcessInvocation:
        """``hg archive`` of tip as plain files, restricted to a listfile."""
        return self._invocation(
            [
                "archive",
                "--rev",
                "tip",
                "--type",
                "files",
                "--config",
                ARCHIVE_META_OFF,
                "--include",
                f"{LISTFILE_PREFIX}{listfile}",
                dest,
            ],
            cwd=repo,
        )

    def _invocation(self, args: list[str], *, cwd: Path) -> ProcessInvocation:
        return ProcessInvocation(executable=self.executable, args=tuple(args), cwd=cwd)
