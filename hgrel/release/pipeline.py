from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from hgrel.core.config import Config
from hgrel.core.result import Err, Ok, Result
from hgrel.hg.commands import HgCommands
from hgrel.output.console import ConsoleProtocol
from hgrel.platform.process import CommandRunner, SubprocessRunner

from .errors import ReleaseError
from .steps import PipelineState, Step, StepContext, default_steps, run_steps

__all__ = ["ReleasePipeline", "ReleaseSummary"]


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    """Outcome of a successful run."""

    repo_name: str
    release_dir: Path
    latest_tag: str
    changed_files: tuple[str, ...]
    patterns: tuple[str, ...]


class ReleasePipeline:
    """Extract the files changed since the latest tag into a release directory.

    Policy:
    - Steps run strictly in order; each depends on the previous one's output.
    - The first failure ends the run. Nothing is rolled back: the release
      directory, the clone and the listfile stay for inspection.
    - The release directory must not exist beforehand; it is created next to
      ``base_dir`` and named after the repository.
    """

    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
        base_dir: Path | None = None,
        steps: Sequence[Step] | None = None,
    ) -> None:
        self._config = config
        self._console = console
        self._runner = runner or SubprocessRunner()
        self._base_dir = base_dir or Path.cwd()
        self._steps = list(steps) if steps is not None else default_steps()

    def run(self, source: str) -> Result[ReleaseSummary, ReleaseError]:
        state = PipelineState(source_text=source, base_dir=self._base_dir)
        ctx = StepContext(
            runner=self._runner,
            hg=HgCommands(self._config.hg.executable),
            release=self._config.release,
            console=self._console,
        )

        result = run_steps(self._steps, state, ctx)
        if isinstance(result, Err):
            return result

        assert state.repo_name is not None
        assert state.release_dir is not None
        return Ok(
            ReleaseSummary(
                repo_name=state.repo_name,
                release_dir=state.release_dir,
                latest_tag=state.latest_tag or "",
                changed_files=tuple(state.changed_files),
                patterns=tuple(state.patterns),
            )
        )
