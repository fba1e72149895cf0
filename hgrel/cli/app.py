from __future__ import annotations

from pathlib import Path

import typer

from hgrel import __version__
from hgrel.core.config import resolve_config
from hgrel.core.errors import ErrorCode
from hgrel.core.result import Err
from hgrel.output.console import RichConsole
from hgrel.output.errors import print_release_error, release_error_exit_code
from hgrel.release.errors import ReleaseError
from hgrel.release.pipeline import ReleasePipeline

USAGE = """\
Copy the files added or modified since the latest tag of a Mercurial
repository into a new directory named after the repository.

Usage: hgrel [OPTIONS] <source>

  source    Location of the source Mercurial repository.

Options:
  --hg PATH       hg executable to use (default: hg, or $HGREL_HG)
  --config PATH   TOML configuration file (default: ./hgrel.toml, or $HGREL_CONFIG)
  --version       Show version and exit.

Example: hgrel https://hg.example.org/project
         Creates ./project/ holding the files changed since the last tag.
"""


app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def extract(
    ctx: typer.Context,
    source: str | None = typer.Argument(None, show_default=False),
    hg: str | None = typer.Option(None, "--hg", help="hg executable to use."),
    config: Path | None = typer.Option(None, "--config", help="TOML configuration file."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Extract the files changed since the latest tag."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    # No source: showing usage is the expected outcome. Anything extra is a
    # syntax error.
    if source is None or ctx.args:
        typer.echo(USAGE, nl=False)
        code = ErrorCode.FAILURE if ctx.args else ErrorCode.OK
        raise typer.Exit(code=int(code))

    console = RichConsole()

    executable: str | None = None
    if hg is not None:
        executable = hg.strip()
        if not executable:
            typer.echo(USAGE, nl=False)
            console.error("--hg needs a non-empty executable name")
            raise typer.Exit(code=int(ErrorCode.FAILURE))

    config_result = resolve_config(config)
    if isinstance(config_result, Err):
        config_error = config_result.error
        error = ReleaseError(
            kind="config",
            message=config_error.message,
            detail=f"config file: {config_error.path}" if config_error.path else None,
            hint="Fix the file or point --config / HGREL_CONFIG elsewhere",
        )
        print_release_error(error, console)
        raise typer.Exit(code=release_error_exit_code(error))

    cfg = config_result.value
    if executable is not None:
        cfg = cfg.with_executable(executable)

    pipeline = ReleasePipeline(config=cfg, console=console)
    match pipeline.run(source):
        case Err(error):
            print_release_error(error, console)
            raise typer.Exit(code=release_error_exit_code(error))
        case _:
            console.success("Complete!")


def main() -> None:
    app()
