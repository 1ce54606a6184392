"""Shared fixtures: in-memory git, mock HTTP, capturing console."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from shiplog.core.config import ResolvedConfig
from shiplog.core.result import Err, Result
from shiplog.git.repository import MockGitHistory, RawCommit
from shiplog.output.console import MockConsole
from shiplog.platform.http import MockHttpClient
from shiplog.platform.process import ProcessError
from shiplog.providers.gitlab import clear_project_id_cache

_TOKEN_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_TOKEN_PATH",
    "GITLAB_TOKEN",
    "GITLAB_PRIVATE_TOKEN",
    "GITLAB_TOKEN_PATH",
    "GITLAB_PRIVATE_TOKEN_PATH",
    "GITLAB_PROJECT_ID",
)


def _raw_commit(
    message: str,
    *,
    short_hash: str = "abc1234",
    name: str = "Alice",
    email: str = "alice@example.com",
    body: str = "",
) -> RawCommit:
    return RawCommit(
        hash=short_hash.ljust(40, "0"),
        short_hash=short_hash,
        author_name=name,
        author_email=email,
        message=message,
        body=body,
    )


def _make_config(**overrides: object) -> ResolvedConfig:
    values: dict[str, object] = {
        "repo": "acme/widgets",
        "from_ref": "v1.0.0",
        "to_ref": "v1.1.0",
        "token": "t0ken",
    }
    values.update(overrides)
    return ResolvedConfig(**values)  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """No real tokens, no `gh`/`glab` calls, no cached GitLab project ids."""
    for name in _TOKEN_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    def no_cli(
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        return Err(ProcessError(command=tuple(cmd), returncode=127, stdout="", stderr=""))

    monkeypatch.setattr("shiplog.release.tokens.run_process", no_cli)
    clear_project_id_cache()


@pytest.fixture
def raw_commit() -> Callable[..., RawCommit]:
    return _raw_commit


@pytest.fixture
def make_config() -> Callable[..., ResolvedConfig]:
    return _make_config


@pytest.fixture
def git() -> MockGitHistory:
    return MockGitHistory()


@pytest.fixture
def http() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()
