"""Release extraction workflow.

Usage:
    from hgrel.release import ReleasePipeline

    pipeline = ReleasePipeline(config=Config(), console=RichConsole())
    match pipeline.run("https://hg.example.org/project"):
        case Ok(summary):
            print(summary.release_dir)
        case Err(error):
            print(error.message)
"""

from hgrel.release.errors import ReleaseError, ReleaseErrorKind
from hgrel.release.pipeline import ReleasePipeline, ReleaseSummary
from hgrel.release.steps import (
    LocalStep,
    PipelineState,
    Step,
    StepContext,
    ToolStep,
    default_steps,
    run_steps,
)

__all__ = [
    "LocalStep",
    "PipelineState",
    "ReleaseError",
    "ReleaseErrorKind",
    "ReleasePipeline",
    "ReleaseSummary",
    "Step",
    "StepContext",
    "ToolStep",
    "default_steps",
    "run_steps",
]
