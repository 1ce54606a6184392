"""Resolve caller options into a ResolvedConfig.

Layers, most specific first: caller options, the project file, built-in
defaults, then values asked from git (current ref, previous tag, remote).
"""

from __future__ import annotations

import re
from pathlib import Path

from shiplog.core.config import (
    DEFAULT_ASSET_BRANCH,
    DEFAULT_BREAKING_TITLE,
    DEFAULT_PROVIDER,
    DEFAULT_TAG_TEMPLATE,
    DEFAULT_TYPES,
    PROVIDER_API_DOMAINS,
    PROVIDER_DOMAINS,
    ChangelogOptions,
    ConfigError,
    ResolvedConfig,
    load_project_options,
    merge_options,
)
from shiplog.core.result import Err, Ok, Result
from shiplog.git.repository import GitHistory, parse_repo_from_url
from shiplog.git.semver import is_prerelease, safe_tag_template
from shiplog.release.tokens import resolve_token

__all__ = ["normalize_base_url", "resolve_config"]

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def normalize_base_url(url: str) -> str:
    """`gitlab.example.com/` -> `https://gitlab.example.com`."""
    url = url.strip().rstrip("/")
    return url if _SCHEME_RE.match(url) else f"https://{url}"


def _accept_all(_tag: str) -> bool:
    return True


def resolve_config(
    options: ChangelogOptions,
    *,
    git: GitHistory,
    project_root: Path,
    use_token_cli: bool = True,
) -> Result[ResolvedConfig, ConfigError]:
    """Merge options with the project file and fill every default.

    Fails only when the repository cannot be determined; nothing here
    touches the network.
    """
    loaded = load_project_options(project_root)
    if isinstance(loaded, Err):
        return loaded
    opts = merge_options(loaded.value, options)

    provider = (opts.repo_provider or DEFAULT_PROVIDER).strip().lower()
    base_url = normalize_base_url(
        opts.base_url or PROVIDER_DOMAINS.get(provider, PROVIDER_DOMAINS[DEFAULT_PROVIDER])
    )
    base_url_api = normalize_base_url(
        opts.base_url_api
        or PROVIDER_API_DOMAINS.get(provider, PROVIDER_API_DOMAINS[DEFAULT_PROVIDER])
    )

    tag = safe_tag_template(opts.tag or DEFAULT_TAG_TEMPLATE)
    to_ref = opts.to_ref or git.current_ref()
    if not to_ref:
        return Err(ConfigError("Cannot determine the release ref: pass --to"))

    from_ref = (
        opts.from_ref
        or git.latest_matching_tag(to_ref, opts.tag_filter or _accept_all, tag)
        or git.first_commit_hash()
    )
    if not from_ref:
        return Err(ConfigError("Cannot determine the start ref: pass --from"))

    repo: object = opts.repo
    if repo is None:
        remote = git.remote_url()
        repo = parse_repo_from_url(remote, base_url) if remote else None
    if not isinstance(repo, str) or not repo.strip():
        return Err(
            ConfigError(f"Invalid repository, expected a string but got {repo!r}")
        )
    repo = repo.strip()

    return Ok(
        ResolvedConfig(
            repo=repo,
            from_ref=from_ref,
            to_ref=to_ref,
            repo_provider=provider,
            release_repo=(opts.release_repo or repo).strip(),
            base_url=base_url,
            base_url_api=base_url_api,
            token=resolve_token(
                provider, opts.token, cwd=project_root, use_cli=use_token_cli
            ),
            name=opts.name,
            draft=bool(opts.draft),
            prerelease=opts.prerelease if opts.prerelease is not None else is_prerelease(to_ref),
            output=opts.output,
            dry=bool(opts.dry),
            assets=opts.assets or (),
            contributors=opts.contributors if opts.contributors is not None else True,
            capitalize=opts.capitalize if opts.capitalize is not None else True,
            group=opts.group if opts.group is not None else True,
            emoji=opts.emoji if opts.emoji is not None else True,
            tag=tag,
            types=dict(opts.types) if opts.types is not None else dict(DEFAULT_TYPES),
            breaking_title=opts.breaking_title or DEFAULT_BREAKING_TITLE,
            scope_map=dict(opts.scope_map or {}),
            gitlab_project_id=opts.gitlab_project_id,
            asset_branch=opts.asset_branch or DEFAULT_ASSET_BRANCH,
        )
    )
