"""Tests for hgrel.release.source."""

from __future__ import annotations

from pathlib import Path

import pytest

from hgrel.core.result import Err, Ok
from hgrel.platform import files
from hgrel.release.source import SourceLocation, parse_source, repo_display_name


class TestParseSource:
    def test_https_url(self) -> None:
        result = parse_source("https://hg.example.org/project")

        assert isinstance(result, Ok)
        assert result.value.url == "https://hg.example.org/project"
        assert result.value.path == "/project"

    def test_ssh_url(self) -> None:
        result = parse_source("ssh://hg@hg.example.org//srv/repos/tool")

        assert isinstance(result, Ok)
        assert result.value.path == "//srv/repos/tool"

    def test_surrounding_whitespace_ignored(self) -> None:
        result = parse_source("  https://hg.example.org/project  ")

        assert isinstance(result, Ok)
        assert result.value.url == "https://hg.example.org/project"

    def test_absolute_local_path_becomes_file_url(self, tmp_path: Path) -> None:
        repo = tmp_path / "local repo"

        result = parse_source(str(repo))

        assert isinstance(result, Ok)
        assert result.value.url == repo.as_uri()
        assert result.value.url.startswith("file://")

    def test_file_url_without_host(self) -> None:
        result = parse_source("file:///srv/repos/tool")

        assert isinstance(result, Ok)
        assert result.value.path == "/srv/repos/tool"

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "project", "relative/path", "https://", "http:foo", "ssh:/srv/repo", "file:"],
    )
    def test_rejected(self, raw: str) -> None:
        result = parse_source(raw)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_source"
        assert result.error.exit_code == 1

    def test_malformed_url(self) -> None:
        result = parse_source("http://[::1")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_source"


class TestRepoDisplayName:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/project", "project"),
            ("/group/project/", "project"),
            ("/my%20repo", "my repo"),
            ("/c%2B%2B-tools", "c++-tools"),
            ("/a+b", "a+b"),
            ("/caf%C3%A9", "café"),
            ("/repo%FF", "repo%FF"),
            ("/caf%C3%A9-%FE%FF", "café-%FE%FF"),
        ],
    )
    def test_names(self, path: str, expected: str) -> None:
        result = repo_display_name(SourceLocation(url=f"https://h{path}", path=path))

        assert result == Ok(expected)

    @pytest.mark.parametrize("path", ["", "/", "/.", "/..", "/x/%2E%2E"])
    def test_unusable_names(self, path: str) -> None:
        result = repo_display_name(SourceLocation(url="https://h" + path, path=path))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_name"

    def test_decoded_separator_rejected(self) -> None:
        result = repo_display_name(SourceLocation(url="https://h/a%2Fb", path="/a%2Fb"))

        assert isinstance(result, Err)
        assert result.error.message == "Invalid characters in repository name"

    def test_windows_forbidden_characters(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(files, "is_windows", lambda: True)

        result = repo_display_name(SourceLocation(url="https://h/what%3F", path="/what%3F"))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_name"
