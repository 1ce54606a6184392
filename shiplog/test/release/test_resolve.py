"""Tests for option layering and git-derived defaults."""

from __future__ import annotations

from pathlib import Path

import pytest

from shiplog.core.config import ChangelogOptions
from shiplog.core.result import Err, Ok
from shiplog.git.repository import MockGitHistory
from shiplog.release.resolve import normalize_base_url, resolve_config


class TestDefaults:
    def test_everything_from_git(self, tmp_path: Path, git: MockGitHistory) -> None:
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)

        assert isinstance(result, Ok)
        config = result.value
        assert config.repo_provider == "github"
        assert config.base_url == "https://github.com"
        assert config.base_url_api == "https://api.github.com"
        assert config.to_ref == "v1.1.0"
        assert config.from_ref == "v1.0.0"
        assert config.repo == "acme/widgets"
        assert config.release_repo == "acme/widgets"
        assert config.prerelease is False
        assert config.tag == "v%s"
        assert config.token is None

    def test_from_falls_back_to_first_commit(self, tmp_path: Path) -> None:
        git = MockGitHistory(previous_tag=None, first_commit="deadbeef")
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.from_ref == "deadbeef"

    def test_tag_filter_applies(self, tmp_path: Path, git: MockGitHistory) -> None:
        options = ChangelogOptions(tag_filter=lambda tag: tag.startswith("app-"))
        result = resolve_config(options, git=git, project_root=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.from_ref == "0000000"

    def test_prerelease_from_ref(self, tmp_path: Path) -> None:
        git = MockGitHistory(ref="v2.0.0-beta.1")
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.prerelease is True

    def test_gitlab_provider_defaults(self, tmp_path: Path) -> None:
        git = MockGitHistory(remote="git@gitlab.com:group/sub/project.git")
        options = ChangelogOptions(repo_provider="gitlab")
        result = resolve_config(options, git=git, project_root=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.base_url == "https://gitlab.com"
        assert result.value.base_url_api == "https://gitlab.com/api/v4"
        assert result.value.repo == "group/sub/project"

    def test_self_hosted_base_url_normalized(self, tmp_path: Path, git: MockGitHistory) -> None:
        options = ChangelogOptions(
            repo="team/app",
            repo_provider="gitlab",
            base_url="git.example.com/",
            base_url_api="https://git.example.com/api/v4/",
        )
        result = resolve_config(options, git=git, project_root=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.base_url == "https://git.example.com"
        assert result.value.base_url_api == "https://git.example.com/api/v4"


class TestLayering:
    def test_options_override_project_file(self, tmp_path: Path, git: MockGitHistory) -> None:
        (tmp_path / "shiplog.toml").write_text(
            'repo = "from/file"\nname = "File name"\ncontributors = false\n', encoding="utf-8"
        )
        options = ChangelogOptions(name="Flag name", token="t")
        result = resolve_config(options, git=git, project_root=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.repo == "from/file"
        assert result.value.name == "Flag name"
        assert result.value.contributors is False
        assert result.value.token == "t"

    def test_bad_project_file(self, tmp_path: Path, git: MockGitHistory) -> None:
        (tmp_path / "shiplog.toml").write_text("repo = ", encoding="utf-8")
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)
        assert isinstance(result, Err)

    def test_token_from_environment(
        self, tmp_path: Path, git: MockGitHistory, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.token == "env-token"


class TestInvalidRepository:
    def test_unresolvable_repo(self, tmp_path: Path) -> None:
        git = MockGitHistory(remote="https://bitbucket.org/acme/widgets.git")
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)

        assert isinstance(result, Err)
        assert result.error.message == "Invalid repository, expected a string but got None"

    def test_no_remote(self, tmp_path: Path) -> None:
        git = MockGitHistory(remote=None)
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)
        assert isinstance(result, Err)

    def test_no_ref(self, tmp_path: Path) -> None:
        git = MockGitHistory(ref=None)
        result = resolve_config(ChangelogOptions(), git=git, project_root=tmp_path)
        assert isinstance(result, Err)
        assert "--to" in result.error.message


def test_normalize_base_url() -> None:
    assert normalize_base_url("gitlab.example.com/") == "https://gitlab.example.com"
    assert normalize_base_url("http://localhost:8080") == "http://localhost:8080"
