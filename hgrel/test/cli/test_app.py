"""Tests for the hgrel command line."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

import hgrel.cli.app as cli_app
from hgrel import __version__
from hgrel.core.result import Err, Ok
from hgrel.platform.process import ProcessResult
from hgrel.release.errors import ReleaseError
from hgrel.release.pipeline import ReleaseSummary

from ..release._fakes import install_fake_hg

runner = CliRunner()


def _patch_pipeline(monkeypatch: pytest.MonkeyPatch, outcome: object) -> list[str]:
    sources: list[str] = []

    class FakePipeline:
        def __init__(self, **_: object) -> None:
            pass

        def run(self, source: str) -> object:
            sources.append(source)
            return outcome

    monkeypatch.setattr(cli_app, "ReleasePipeline", FakePipeline)
    return sources


class TestArguments:
    def test_no_arguments_prints_usage_and_succeeds(self) -> None:
        result = runner.invoke(cli_app.app, [])

        assert result.exit_code == 0
        assert "Usage: hgrel" in result.output

    def test_two_sources_is_a_usage_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sources = _patch_pipeline(monkeypatch, Ok(None))

        result = runner.invoke(cli_app.app, ["https://h/a", "https://h/b"])

        assert result.exit_code == 1
        assert "Usage: hgrel" in result.output
        assert sources == []

    def test_unknown_option_is_a_usage_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sources = _patch_pipeline(monkeypatch, Ok(None))

        result = runner.invoke(cli_app.app, ["--bogus", "https://h/a"])

        assert result.exit_code == 1
        assert sources == []

    @pytest.mark.parametrize("hg", ["", " ", "\t"])
    def test_blank_hg_is_a_usage_error(
        self, hg: str, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("HGREL_CONFIG", raising=False)

        result = runner.invoke(cli_app.app, ["--hg", hg, "https://h/project"])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Usage: hgrel" in result.output
        assert "--hg needs a non-empty executable name" in result.output
        assert list(tmp_path.iterdir()) == []

    def test_hg_surrounding_whitespace_stripped(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("HGREL_CONFIG", raising=False)
        monkeypatch.delenv("HGREL_HG", raising=False)
        configs: list[object] = []

        class FakePipeline:
            def __init__(self, *, config: object, **_: object) -> None:
                configs.append(config)

            def run(self, source: str) -> object:
                return Ok(None)

        monkeypatch.setattr(cli_app, "ReleasePipeline", FakePipeline)

        result = runner.invoke(cli_app.app, ["--hg", "  /opt/hg/bin/hg ", "https://h/project"])

        assert result.exit_code == 0
        assert configs[0].hg.executable == "/opt/hg/bin/hg"  # type: ignore[attr-defined]

    def test_version(self) -> None:
        result = runner.invoke(cli_app.app, ["--version"])

        assert result.exit_code == 0
        assert result.output.strip() == __version__


class TestOutcomes:
    def test_success(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        summary = ReleaseSummary(
            repo_name="project",
            release_dir=tmp_path / "project",
            latest_tag="v1",
            changed_files=("a",),
            patterns=("path:a",),
        )
        sources = _patch_pipeline(monkeypatch, Ok(summary))

        result = runner.invoke(cli_app.app, ["https://h/project"])

        assert result.exit_code == 0
        assert "Complete!" in result.output
        assert sources == ["https://h/project"]

    def test_tool_failure_exit_code_and_output(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        error = ReleaseError(
            kind="tool_failed",
            message="Unable to clone repository",
            exit_code=255,
            process=ProcessResult(255, "out line\n", "abort: gone\n"),
        )
        _patch_pipeline(monkeypatch, Err(error))

        result = runner.invoke(cli_app.app, ["https://h/project"])

        assert result.exit_code == 255
        assert "Process exited with code 255!" in result.output
        assert "Standard Error:" in result.output
        assert "abort: gone" in result.output
        assert "out line" in result.output

    def test_long_hg_output_lines_kept_whole(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        long_path = "src/" + "/".join(["deeply_nested_directory_name"] * 4) + "/file.c"
        error = ReleaseError(
            kind="tool_failed",
            message="Unable to extract files",
            exit_code=1,
            process=ProcessResult(1, "", f"abort: {long_path}: permission denied\n"),
        )
        _patch_pipeline(monkeypatch, Err(error))

        result = runner.invoke(cli_app.app, ["https://h/project"])

        assert f"abort: {long_path}: permission denied" in result.output.splitlines()

    def test_local_failure_exits_one(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        _patch_pipeline(
            monkeypatch, Err(ReleaseError(kind="target_exists", message="already exists"))
        )

        result = runner.invoke(cli_app.app, ["https://h/project"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_invalid_config_exits_one(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        sources = _patch_pipeline(monkeypatch, Ok(None))
        (tmp_path / "broken.toml").write_text("[hg\n", encoding="utf-8")

        result = runner.invoke(cli_app.app, ["--config", "broken.toml", "https://h/project"])

        assert result.exit_code == 1
        assert sources == []
        assert "error: Invalid TOML syntax" in result.output
        assert "config file: broken.toml" in result.output
        assert "hint: Fix the file" in result.output

    def test_missing_config_reported(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        sources = _patch_pipeline(monkeypatch, Ok(None))
        monkeypatch.setenv("HGREL_CONFIG", str(tmp_path / "nowhere.toml"))

        result = runner.invoke(cli_app.app, ["https://h/project"])

        assert result.exit_code == 1
        assert sources == []
        assert "Config file not found" in result.output


@pytest.mark.skipif(sys.platform == "win32", reason="fake hg is a shebang script")
class TestWithFakeHg:
    def test_full_run(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        fake = install_fake_hg(tmp_path)
        work = tmp_path / "work"
        work.mkdir()
        monkeypatch.chdir(work)
        monkeypatch.setenv("FAKE_HG_LOG", str(tmp_path / "calls.jsonl"))
        monkeypatch.delenv("HGREL_CONFIG", raising=False)

        result = runner.invoke(cli_app.app, ["--hg", str(fake), "https://hg.example.org/project"])

        assert result.exit_code == 0, result.output
        assert "v1.0" in result.output
        assert "Complete!" in result.output
        assert (work / "project" / "src" / "a.c").is_file()
        assert not (work / "project" / "_repo_").exists()

    def test_existing_target(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        fake = install_fake_hg(tmp_path)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FAKE_HG_LOG", str(tmp_path / "calls.jsonl"))
        (tmp_path / "existing").mkdir()

        result = runner.invoke(cli_app.app, ["--hg", str(fake), "https://hg.example.org/existing"])

        assert result.exit_code == 1
        assert not (tmp_path / "calls.jsonl").exists()

    def test_hg_env_var(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        fake = install_fake_hg(tmp_path)
        work = tmp_path / "work"
        work.mkdir()
        monkeypatch.chdir(work)
        monkeypatch.setenv("FAKE_HG_LOG", str(tmp_path / "calls.jsonl"))
        monkeypatch.setenv("HGREL_HG", str(fake))
        monkeypatch.setenv("FAKE_HG_FAIL_LOG", "9")

        result = runner.invoke(cli_app.app, ["https://hg.example.org/project"])

        assert result.exit_code == 9
        assert "abort: log failed" in result.output
