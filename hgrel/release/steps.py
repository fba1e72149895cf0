"""Ordered step descriptors of a release run.

A run is a fixed list of steps. ``LocalStep`` does filesystem work in
process; ``ToolStep`` builds one hg invocation from the state, runs it, and
parses its output back into the state. ``run_steps`` executes them in
order and stops at the first failure.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, TypeVar

from hgrel.core.config import ReleaseConfig
from hgrel.core.result import Err, Ok, Result
from hgrel.hg.commands import HgCommands
from hgrel.output.console import ConsoleProtocol, Style
from hgrel.platform.files import remove_tree
from hgrel.platform.process import CommandRunner, ProcessInvocation, ProcessResult

from .errors import ReleaseError
from .manifest import manifest_patterns, parse_changed_files, parse_latest_tag, write_manifest
from .source import SourceLocation, parse_source, repo_display_name

__all__ = [
    "ARCHIVE_DEST",
    "LocalStep",
    "PipelineState",
    "Step",
    "StepContext",
    "ToolStep",
    "default_steps",
    "run_steps",
]

# The archive runs inside the clone; its parent is the release directory.
ARCHIVE_DEST = ".."


def _empty_paths() -> list[str]:
    return []


@dataclass(slots=True)
class PipelineState:
    """Values discovered during one run.

    Each field is written once by the step that discovers it and only read
    afterwards.
    """

    source_text: str
    base_dir: Path
    source: SourceLocation | None = None
    repo_name: str | None = None
    release_dir: Path | None = None
    clone_dir: Path | None = None
    latest_tag: str | None = None
    changed_files: list[str] = field(default_factory=_empty_paths)
    patterns: list[str] = field(default_factory=_empty_paths)
    manifest_path: Path | None = None


@dataclass(frozen=True, slots=True)
class StepContext:
    """Collaborators shared by every step."""

    runner: CommandRunner
    hg: HgCommands
    release: ReleaseConfig
    console: ConsoleProtocol


T = TypeVar("T")


def _need(value: T | None, name: str) -> T:
    if value is None:
        raise RuntimeError(f"pipeline state '{name}' used before it was set")
    return value


class Step(Protocol):
    name: str
    progress: str

    def execute(self, state: PipelineState, ctx: StepContext) -> Result[None, ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class LocalStep:
    """In-process step (no external program)."""

    name: str
    progress: str
    action: Callable[[PipelineState, StepContext], Result[None, ReleaseError]]

    def execute(self, state: PipelineState, ctx: StepContext) -> Result[None, ReleaseError]:
        return self.action(state, ctx)


@dataclass(frozen=True, slots=True)
class ToolStep:
    """Step backed by a single hg invocation.

    Attributes:
        name: Step identifier.
        progress: Line printed before the step starts.
        build: Creates the invocation from the current state.
        failure: Message used when hg fails or cannot be started.
        parse: Stores values from the successful result into the state.
    """

    name: str
    progress: str
    build: Callable[[PipelineState, StepContext], ProcessInvocation]
    failure: str
    parse: Callable[[PipelineState, ProcessResult, StepContext], None] | None = None

    def execute(self, state: PipelineState, ctx: StepContext) -> Result[None, ReleaseError]:
        invocation = self.build(state, ctx)
        match ctx.runner.run(invocation):
            case Err(e):
                return Err(
                    ReleaseError(
                        kind="tool_missing",
                        message=f"{self.failure}: unable to start '{invocation.executable}'",
                        detail=e.message,
                        hint="Install Mercurial or point --hg / HGREL_HG at the hg executable",
                    )
                )
            case Ok(result) if not result.ok:
                return Err(
                    ReleaseError(
                        kind="tool_failed",
                        message=f"{self.failure} ({invocation})",
                        exit_code=result.returncode,
                        process=result,
                    )
                )
            case Ok(result):
                if self.parse is not None:
                    self.parse(state, result, ctx)
                return Ok(None)


# -----------------------------------------------------------------------------
# Step implementations
# -----------------------------------------------------------------------------


def _resolve_target(state: PipelineState, ctx: StepContext) -> Result[None, ReleaseError]:
    source = parse_source(state.source_text)
    if isinstance(source, Err):
        return source

    name = repo_display_name(source.value)
    if isinstance(name, Err):
        return name

    release_dir = state.base_dir / name.value
    if release_dir.exists():
        return Err(
            ReleaseError(
                kind="target_exists",
                message=f"Release directory '{name.value}' already exists",
                hint="Remove or rename it, then run again",
            )
        )

    try:
        release_dir.mkdir()
    except OSError as e:
        return Err(
            ReleaseError(
                kind="filesystem",
                message="Unable to create release directory",
                detail=str(e),
            )
        )

    state.source = source.value
    state.repo_name = name.value
    state.release_dir = release_dir
    state.clone_dir = release_dir / ctx.release.clone_dir
    return Ok(None)


def _clone(state: PipelineState, ctx: StepContext) -> ProcessInvocation:
    source = _need(state.source, "source")
    return ctx.hg.clone(source.url, _need(state.clone_dir, "clone_dir"), cwd=state.base_dir)


def _latest_tag(state: PipelineState, ctx: StepContext) -> ProcessInvocation:
    return ctx.hg.latest_tag(_need(state.clone_dir, "clone_dir"))


def _store_latest_tag(state: PipelineState, result: ProcessResult, ctx: StepContext) -> None:
    state.latest_tag = parse_latest_tag(result.stdout)
    ctx.console.print(f"  {state.latest_tag}", Style.DIM)


def _changed_files(state: PipelineState, ctx: StepContext) -> ProcessInvocation:
    return ctx.hg.changed_files(
        _need(state.clone_dir, "clone_dir"),
        _need(state.latest_tag, "latest_tag"),
    )


def _store_changed_files(state: PipelineState, result: ProcessResult, ctx: StepContext) -> None:
    state.changed_files = parse_changed_files(result.stdout)
    for path in state.changed_files:
        ctx.console.print(f"  {path}", Style.DIM)


def _write_manifest(state: PipelineState, ctx: StepContext) -> Result[None, ReleaseError]:
    state.patterns = manifest_patterns(state.changed_files, ctx.release.exclude_prefix)
    state.manifest_path = _need(state.clone_dir, "clone_dir") / ctx.release.manifest
    return write_manifest(state.manifest_path, state.patterns)


def _archive(state: PipelineState, ctx: StepContext) -> ProcessInvocation:
    return ctx.hg.archive(_need(state.clone_dir, "clone_dir"), ctx.release.manifest, ARCHIVE_DEST)


def _cleanup(state: PipelineState, ctx: StepContext) -> Result[None, ReleaseError]:
    try:
        remove_tree(_need(state.clone_dir, "clone_dir"))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="filesystem",
                message="Unable to delete repository directory!",
                detail=str(e),
                hint="The released files are complete; remove the clone by hand",
            )
        )
    return Ok(None)


def default_steps() -> list[Step]:
    """The release workflow, in execution order."""
    return [
        LocalStep("resolve", "Preparing release directory...", _resolve_target),
        ToolStep(
            "clone",
            "Cloning repository...",
            build=_clone,
            failure="Unable to clone repository",
        ),
        ToolStep(
            "latest-tag",
            "Getting latest tag...",
            build=_latest_tag,
            failure="Unable to get latest tag",
            parse=_store_latest_tag,
        ),
        ToolStep(
            "changed-files",
            "Getting added/modified files since latest tag and tip...",
            build=_changed_files,
            failure="Unable to list changed files",
            parse=_store_changed_files,
        ),
        LocalStep("manifest", "Generating listfile...", _write_manifest),
        ToolStep(
            "archive",
            "Extracting changed files to release directory...",
            build=_archive,
            failure="Unable to extract changed files",
        ),
        LocalStep("cleanup", "Deleting repository directory...", _cleanup),
    ]


def run_steps(
    steps: Sequence[Step],
    state: PipelineState,
    ctx: StepContext,
) -> Result[None, ReleaseError]:
    """Execute steps in order, stopping at the first failure."""
    for step in steps:
        ctx.console.print(step.progress)
        result = step.execute(state, ctx)
        if isinstance(result, Err):
            return result
    return Ok(None)
