"""Markdown rendering of a parsed commit range.

Sections: breaking changes first, then one per configured commit type in
configuration order. Inside a section, scopes are sorted with unscoped
commits first, and commits within a scope are listed oldest first.
"""

from __future__ import annotations

import re
from collections import defaultdict

from shiplog.changelog.links import commit_url, compare_url, issue_url, provider_display_name
from shiplog.changelog.model import Commit
from shiplog.core.config import ResolvedConfig

_EMOJI_RE = re.compile(r"[\u2600-\u27bf\U0001f300-\U0001faff\u200d\ufe0f]")
_NBSP = "&nbsp;"


def render_markdown(commits: list[Commit], config: ResolvedConfig) -> str:
    lines: list[str] = []

    breaking = [c for c in commits if c.is_breaking]
    by_type: dict[str, list[Commit]] = defaultdict(list)
    for c in commits:
        if not c.is_breaking:
            by_type[c.type].append(c)

    lines.extend(_format_section(breaking, config.breaking_title, config))
    for commit_type, title in config.types.items():
        lines.extend(_format_section(by_type.get(commit_type, []), title, config))

    if not lines:
        lines.append("*No significant changes*")

    provider = provider_display_name(config.repo_provider)
    lines.extend(
        [
            "",
            f"##### {_NBSP * 4}[View changes on {provider}]({compare_url(config)})",
        ]
    )
    return "\n".join(lines).strip()


def sanitize_markdown(markdown: str) -> str:
    """Drop the `&nbsp;` padding, for output that is not rendered as HTML."""
    return markdown.replace(_NBSP, "")


def _format_title(name: str, config: ResolvedConfig) -> str:
    if not config.emoji:
        name = _EMOJI_RE.sub("", name)
    return f"### {_NBSP * 3}{name.strip()}"


def _format_section(commits: list[Commit], title: str, config: ResolvedConfig) -> list[str]:
    if not commits:
        return []

    lines = ["", _format_title(title, config), ""]

    scopes: dict[str, list[Commit]] = defaultdict(list)
    for c in commits:
        scopes[c.scope].append(c)

    for scope in sorted(scopes):
        items = list(reversed(scopes[scope]))
        padding = ""
        prefix = ""
        if scope:
            label = f"**{scope}**"
            nest = config.group is True or (config.group == "multiple" and len(items) > 1)
            if nest:
                lines.append(f"- {label}:")
                padding = "  "
            else:
                prefix = f"{label}: "
        lines.extend(f"{padding}- {prefix}{_format_line(c, config)}" for c in items)

    return lines


def _format_line(commit: Commit, config: ResolvedConfig) -> str:
    description = commit.description
    if config.capitalize and description:
        description = description[0].upper() + description[1:]

    refs = [
        part
        for part in (
            _format_authors(commit),
            _format_issue_refs(commit, config),
            _format_hash_refs(commit, config),
        )
        if part
    ]
    if not refs:
        return description
    return f"{description} {_NBSP}-{_NBSP} {' '.join(refs)}"


def _format_authors(commit: Commit) -> str:
    seen: list[str] = []
    for info in commit.resolved_authors:
        label = f"@{info.login}" if info.login else f"**{info.name}**"
        if label not in seen:
            seen.append(label)
    if not seen:
        return ""
    return f"by {_join(seen)}"


def _format_issue_refs(commit: Commit, config: ResolvedConfig) -> str:
    urls = [
        issue_url(config, ref.value)
        for ref in commit.references
        if ref.type in ("issue", "pull-request")
    ]
    if not urls:
        return ""
    return f"in {_join(urls)}"


def _format_hash_refs(commit: Commit, config: ResolvedConfig) -> str:
    return " ".join(
        f"[<samp>({ref.value[:5]})</samp>]({commit_url(config, ref.value)})"
        for ref in commit.references
        if ref.type == "hash"
    )


def _join(items: list[str]) -> str:
    if len(items) <= 1:
        return "".join(items)
    return f"{', '.join(items[:-1])} and {items[-1]}"
