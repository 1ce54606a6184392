"""Hosting provider adapters.

Usage:
    match get_provider(config.repo_provider, http=RealHttpClient(), console=console):
        case Ok(provider):
            provider.send_release(config, markdown)
        case Err(e):
            console.error(e.message)
"""

from __future__ import annotations

from shiplog.core.result import Err, Ok, Result
from shiplog.output.console import ConsoleProtocol
from shiplog.platform.http import HttpClient
from shiplog.providers.base import RepoProvider
from shiplog.providers.github import GitHubProvider
from shiplog.providers.gitlab import GitLabProvider
from shiplog.release.errors import ReleaseError

__all__ = [
    "GitHubProvider",
    "GitLabProvider",
    "RepoProvider",
    "SUPPORTED_PROVIDERS",
    "get_provider",
]

SUPPORTED_PROVIDERS = ("github", "gitlab")


def get_provider(
    name: str, *, http: HttpClient, console: ConsoleProtocol
) -> Result[RepoProvider, ReleaseError]:
    """Select the adapter for `name`; unknown names fail before any request."""
    match name:
        case "github":
            return Ok(GitHubProvider(http=http, console=console))
        case "gitlab":
            return Ok(GitLabProvider(http=http, console=console))
        case _:
            return Err(
                ReleaseError(
                    kind="unsupported_provider",
                    message=f"Unsupported repository provider: {name}",
                    hint=f"expected one of: {', '.join(SUPPORTED_PROVIDERS)}",
                )
            )
