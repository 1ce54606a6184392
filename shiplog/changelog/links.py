"""URLs derived from a resolved config.

Pure functions: the same config (and markdown, for the manual release
link) always yields the same URL.
"""

from __future__ import annotations

from urllib.parse import quote

from shiplog.core.config import ResolvedConfig

_DISPLAY_NAMES = {"github": "GitHub", "gitlab": "GitLab"}


def provider_display_name(provider: str) -> str:
    return _DISPLAY_NAMES.get(provider, "GitHub")


def _web_prefix(config: ResolvedConfig) -> str:
    # GitLab routes project pages under `/-/`.
    return "/-" if config.repo_provider == "gitlab" else ""


def compare_url(config: ResolvedConfig) -> str:
    return (
        f"{config.base_url}/{config.repo}{_web_prefix(config)}"
        f"/compare/{config.from_ref}...{config.to_ref}"
    )


def issue_url(config: ResolvedConfig, number: str) -> str:
    return f"{config.base_url}/{config.repo}{_web_prefix(config)}/issues/{number.lstrip('#')}"


def commit_url(config: ResolvedConfig, sha: str) -> str:
    return f"{config.base_url}/{config.repo}{_web_prefix(config)}/commit/{sha}"


def release_web_url(config: ResolvedConfig, markdown: str) -> str:
    """Prefilled "new release" page, for creating the release by hand."""
    tag = quote(config.to_ref, safe="")
    title = quote(config.release_name, safe="")
    body = quote(markdown, safe="")
    prerelease = "true" if config.prerelease else "false"

    if config.repo_provider == "gitlab":
        return (
            f"{config.base_url}/{config.release_repo}/-/releases/new"
            f"?tag_name={tag}&release_title={title}&release_notes={body}"
            f"&pre_release={prerelease}"
        )

    return (
        f"{config.base_url}/{config.release_repo}/releases/new"
        f"?title={title}&body={body}&tag={tag}&prerelease={prerelease}"
    )
