from __future__ import annotations

import json
from pathlib import Path

import typer

from shiplog import __version__
from shiplog.cli import context as cli_context
from shiplog.core.config import ChangelogOptions, GroupMode
from shiplog.core.errors import ErrorCode, exit_code_for
from shiplog.core.result import Err
from shiplog.output.console import ConsoleProtocol, Style
from shiplog.release.errors import ReleaseError
from shiplog.release.run import ExecutionMode, ExecutionResult, execute_changelog

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    help="Generate a changelog from conventional commits and publish it as a release.",
)


def _parse_group(value: str | None) -> GroupMode | None:
    if value is None:
        return None
    match value.strip().lower():
        case "true" | "yes" | "1":
            return True
        case "false" | "no" | "0":
            return False
        case "multiple":
            return "multiple"
        case _:
            raise typer.BadParameter("expected true, false or multiple", param_hint="--group")


def _print_manual_link(console: ConsoleProtocol, web_url: str) -> None:
    console.newline()
    console.warning("Using the following link to create it manually:")
    console.warning(web_url)


def _report_error(console: ConsoleProtocol, error: ReleaseError) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    if error.web_url:
        _print_manual_link(console, error.web_url)


def _print_summary(console: ConsoleProtocol, outcome: ExecutionResult) -> None:
    config = outcome.context.config
    console.print(
        f"{config.from_ref} -> {config.to_ref} ({len(outcome.context.commits)} commits)",
        Style.INFO,
    )
    console.print("--------------", Style.DIM)
    console.newline()
    console.print(outcome.markdown)
    console.newline()
    console.print("--------------", Style.DIM)


@app.command()
def changelog(
    token: str | None = typer.Option(
        None, "--token", "-t", help="Repository token, or a path to a file holding it."
    ),
    from_ref: str | None = typer.Option(None, "--from", help="From tag"),
    to_ref: str | None = typer.Option(None, "--to", help="To tag"),
    github: str | None = typer.Option(None, "--github", help="GitHub repository, e.g. owner/name"),
    gitlab: str | None = typer.Option(
        None, "--gitlab", help="GitLab repository, e.g. group/project"
    ),
    release_github: str | None = typer.Option(
        None, "--release-github", help="GitHub repository to release to (defaults to the repo)"
    ),
    release_gitlab: str | None = typer.Option(
        None, "--release-gitlab", help="GitLab repository to release to (defaults to the repo)"
    ),
    name: str | None = typer.Option(None, "--name", help="Name of the release"),
    contributors: bool | None = typer.Option(
        None, "--contributors/--no-contributors", help="Resolve and credit commit authors"
    ),
    prerelease: bool | None = typer.Option(
        None, "--prerelease/--no-prerelease", help="Mark release as prerelease"
    ),
    draft: bool | None = typer.Option(None, "--draft/--no-draft", help="Mark release as draft"),
    output: Path | None = typer.Option(
        None, "--output", help="Write the changelog to a file instead of releasing"
    ),
    capitalize: bool | None = typer.Option(
        None, "--capitalize/--no-capitalize", help="Capitalize each commit message"
    ),
    emoji: bool | None = typer.Option(
        None, "--emoji/--no-emoji", help="Use emojis in section titles"
    ),
    group: str | None = typer.Option(
        None, "--group", help="Nest commits under their scopes: true, false or multiple"
    ),
    dry: bool | None = typer.Option(None, "--dry/--no-dry", help="Dry run"),
    repo_provider: str | None = typer.Option(
        None, "--repo-provider", help="Repository provider (github or gitlab)"
    ),
    assets: list[str] | None = typer.Option(
        None,
        "--assets",
        help="Files to upload as release assets (globs, repeatable, comma-separated)",
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print changelog and metadata as JSON and exit"
    ),
    print_md: bool = typer.Option(False, "--print-md", help="Print only the markdown and exit"),
    quiet: bool = typer.Option(False, "--quiet", help="Only print errors"),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    mode: ExecutionMode = "json" if as_json else "print-md" if print_md else "release"
    ctx = cli_context.build_context(quiet=quiet, machine_output=mode != "release")
    console = ctx.console

    options = ChangelogOptions(
        token=token,
        from_ref=from_ref,
        to_ref=to_ref,
        repo=github or gitlab,
        release_repo=release_github or release_gitlab,
        repo_provider=repo_provider or ("gitlab" if gitlab and not github else None),
        name=name,
        draft=draft,
        prerelease=prerelease,
        output=output,
        dry=dry,
        contributors=contributors,
        capitalize=capitalize,
        group=_parse_group(group),
        emoji=emoji,
        assets=tuple(assets) if assets else None,
    )

    console.header(f"shiplog v{__version__}")
    result = execute_changelog(
        options,
        mode=mode,
        git=ctx.git,
        http=ctx.http,
        console=console,
        project_root=ctx.project_root,
        assets=list(assets) if assets else None,
    )
    if isinstance(result, Err):
        _report_error(console, result.error)
        raise typer.Exit(code=int(exit_code_for(result.error.kind)))

    outcome = result.value
    match outcome.mode:
        case "json":
            typer.echo(json.dumps(outcome.payload, ensure_ascii=False))
            return
        case "print-md":
            typer.echo(outcome.markdown)
            return
        case "release":
            pass

    _print_summary(console, outcome)
    release = outcome.release
    if release is None:
        return
    if release.outcome == "dry-run":
        _print_manual_link(console, outcome.context.web_url)
    elif release.asset_report is not None and not release.asset_report.ok:
        failed = len(release.asset_report.failed)
        console.warning(f"{failed} asset(s) failed to upload")


def main() -> None:
    app()
