"""Release orchestration: prepare a changelog, then drive it to a terminal state.

prepare_release resolves config, reads the commit range and renders the
markdown. perform_release then walks the checks in a fixed order; the
purely local ones (dry run, output file) come first so they never touch
the network:

    dry -> output-saved -> missing token -> missing tag -> shallow repo -> released

The three halting states are returned as Err(ReleaseError) carrying the
manual release URL, so a caller can still publish by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from shiplog.changelog.links import compare_url, release_web_url
from shiplog.changelog.markdown import render_markdown, sanitize_markdown
from shiplog.changelog.model import Commit
from shiplog.changelog.parse import parse_commits
from shiplog.core.config import ChangelogOptions, ResolvedConfig
from shiplog.core.result import Err, Ok, Result
from shiplog.git.repository import GitHistory
from shiplog.output.console import ConsoleProtocol, Style
from shiplog.platform.http import HttpClient
from shiplog.providers import get_provider
from shiplog.providers.assets import AssetInput, AssetReport, normalize_assets
from shiplog.release.errors import ReleaseError
from shiplog.release.resolve import resolve_config

__all__ = [
    "ExecutionMode",
    "ExecutionResult",
    "ReleaseContext",
    "ReleaseOutcome",
    "ReleaseResult",
    "execute_changelog",
    "json_payload",
    "perform_release",
    "prepare_release",
    "run_release",
]

ReleaseOutcome = Literal["dry-run", "output-saved", "released"]
ExecutionMode = Literal["release", "json", "print-md"]


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    config: ResolvedConfig
    markdown: str
    commits: tuple[Commit, ...]
    web_url: str
    compare_url: str


@dataclass(frozen=True, slots=True)
class ReleaseResult:
    outcome: ReleaseOutcome
    output_path: Path | None = None
    uploaded_assets: tuple[str, ...] = ()
    asset_report: AssetReport | None = None


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    context: ReleaseContext
    markdown: str
    mode: ExecutionMode
    payload: dict[str, object] | None = None
    release: ReleaseResult | None = None


def prepare_release(
    options: ChangelogOptions,
    *,
    git: GitHistory,
    http: HttpClient,
    console: ConsoleProtocol,
    project_root: Path,
) -> Result[ReleaseContext, ReleaseError]:
    resolved = resolve_config(options, git=git, project_root=project_root).map_err(
        lambda e: ReleaseError(kind="invalid_config", message=e.message)
    )
    if isinstance(resolved, Err):
        return resolved
    config = resolved.value

    provider = get_provider(config.repo_provider, http=http, console=console)
    if isinstance(provider, Err):
        return provider

    diff = git.get_diff(config.from_ref, config.to_ref)
    if isinstance(diff, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message=f"Cannot read commits {config.from_ref}...{config.to_ref}",
                hint=diff.error.message,
            )
        )

    commits = parse_commits(diff.value, config)
    if config.contributors:
        provider.value.resolve_authors(commits, config)
    markdown = render_markdown(commits, config)

    return Ok(
        ReleaseContext(
            config=config,
            markdown=markdown,
            commits=tuple(commits),
            web_url=release_web_url(config, markdown),
            compare_url=compare_url(config),
        )
    )


def perform_release(
    context: ReleaseContext,
    *,
    git: GitHistory,
    http: HttpClient,
    console: ConsoleProtocol,
    assets: AssetInput = None,
) -> Result[ReleaseResult, ReleaseError]:
    config = context.config

    if config.dry:
        console.print("Dry run. Release skipped.", Style.DIM)
        return Ok(ReleaseResult(outcome="dry-run"))

    if config.output is not None:
        try:
            config.output.write_bytes(context.markdown.encode("utf-8"))
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"Cannot write changelog to {config.output}",
                    hint=str(e),
                )
            )
        console.success(f"Saved to {config.output}")
        return Ok(ReleaseResult(outcome="output-saved", output_path=config.output))

    selected = get_provider(config.repo_provider, http=http, console=console)
    if isinstance(selected, Err):
        return selected
    provider = selected.value

    if not config.token:
        return Err(
            ReleaseError(
                kind="missing_token",
                message=(
                    f"No {provider.display_name} token found, specify it via "
                    f"{provider.token_env_name} env. Release skipped."
                ),
                web_url=context.web_url,
                compare_url=context.compare_url,
                provider_name=provider.display_name,
                token_env_name=provider.token_env_name,
            )
        )

    if not provider.has_tag(config.to_ref, config):
        return Err(
            ReleaseError(
                kind="missing_tag",
                message=(
                    f'Current ref "{config.to_ref}" is not available as tags on '
                    f"{provider.display_name}. Release skipped."
                ),
                hint="push the tag before releasing",
                web_url=context.web_url,
                compare_url=context.compare_url,
                provider_name=provider.display_name,
            )
        )

    if not context.commits and git.is_shallow():
        return Err(
            ReleaseError(
                kind="shallow_repo",
                message=(
                    "The repo seems to be cloned shallowly, so the changelog "
                    "cannot be generated."
                ),
                hint="fetch the full history (e.g. `fetch-depth: 0` in CI)",
                web_url=context.web_url,
                compare_url=context.compare_url,
                provider_name=provider.display_name,
            )
        )

    sent = provider.send_release(config, context.markdown)
    if isinstance(sent, Err):
        return sent

    requested = assets if assets is not None else config.assets
    normalized = tuple(normalize_assets(requested))
    report: AssetReport | None = None
    if normalized:
        report = provider.upload_assets(config, list(normalized))

    return Ok(ReleaseResult(outcome="released", uploaded_assets=normalized, asset_report=report))


def run_release(
    options: ChangelogOptions,
    *,
    git: GitHistory,
    http: HttpClient,
    console: ConsoleProtocol,
    project_root: Path,
) -> Result[tuple[ReleaseContext, ReleaseResult], ReleaseError]:
    prepared = prepare_release(
        options, git=git, http=http, console=console, project_root=project_root
    )
    if isinstance(prepared, Err):
        return prepared

    performed = perform_release(prepared.value, git=git, http=http, console=console)
    if isinstance(performed, Err):
        return performed
    return Ok((prepared.value, performed.value))


def json_payload(context: ReleaseContext, markdown: str) -> dict[str, object]:
    """Summary printed by `--json`.

    Keys are `md`, `repoProvider` and `commitsCount` (not `markdown`,
    `provider`, `commitCount`) so existing consumers of the JSON output keep
    parsing it unchanged.
    """
    config = context.config
    return {
        "md": markdown,
        "from": config.from_ref,
        "to": config.to_ref,
        "repoProvider": config.repo_provider,
        "repo": config.repo,
        "releaseRepo": config.release_repo,
        "prerelease": config.prerelease,
        "commitsCount": len(context.commits),
        "compareUrl": context.compare_url,
    }


def execute_changelog(
    options: ChangelogOptions,
    *,
    mode: ExecutionMode,
    git: GitHistory,
    http: HttpClient,
    console: ConsoleProtocol,
    project_root: Path,
    assets: AssetInput = None,
) -> Result[ExecutionResult, ReleaseError]:
    """Prepare, then either describe the changelog (json/print-md) or release it."""
    prepared = prepare_release(
        options, git=git, http=http, console=console, project_root=project_root
    )
    if isinstance(prepared, Err):
        return prepared
    context = prepared.value
    markdown = sanitize_markdown(context.markdown)

    match mode:
        case "json":
            return Ok(
                ExecutionResult(
                    context=context,
                    markdown=markdown,
                    mode=mode,
                    payload=json_payload(context, markdown),
                )
            )
        case "print-md":
            return Ok(ExecutionResult(context=context, markdown=markdown, mode=mode))
        case "release":
            performed = perform_release(
                context, git=git, http=http, console=console, assets=assets
            )
            if isinstance(performed, Err):
                return performed
            return Ok(
                ExecutionResult(
                    context=context, markdown=markdown, mode=mode, release=performed.value
                )
            )
