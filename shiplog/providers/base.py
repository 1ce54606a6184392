"""Provider capability interface and selection."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from shiplog.changelog.model import AuthorInfo, Commit
from shiplog.core.config import ResolvedConfig
from shiplog.core.result import Result
from shiplog.providers.assets import AssetInput, AssetReport
from shiplog.release.errors import ReleaseError


class RepoProvider(Protocol):
    """What the release flow needs from a hosting provider.

    The orchestrator and author resolution are written against this
    protocol only; they never branch on which provider is active.
    """

    name: str
    display_name: str
    token_env_name: str

    def send_release(self, config: ResolvedConfig, content: str) -> Result[str, ReleaseError]:
        """Create or update the release for `config.to_ref`; returns its URL."""
        ...

    def resolve_authors(self, commits: list[Commit], config: ResolvedConfig) -> list[AuthorInfo]:
        ...

    def has_tag(self, tag: str, config: ResolvedConfig) -> bool:
        ...

    def upload_assets(self, config: ResolvedConfig, assets: AssetInput) -> AssetReport:
        ...


def auth_headers(headers: Mapping[str, str], token: str | None, **auth: str) -> dict[str, str]:
    """Merge static headers with auth headers, which only apply when a token is set."""
    out = dict(headers)
    if token:
        out.update(auth)
    return out
