"""Conventional-commit parsing.

Only the header form `type(scope)!: description` is recognised, with an
optional leading emoji. Breaking changes are flagged by `!` or a
`BREAKING CHANGE:` footer. Co-authors come from `Co-authored-by:` trailers.
"""

from __future__ import annotations

import re

from shiplog.changelog.model import Commit, RawAuthor, Reference
from shiplog.core.config import ResolvedConfig
from shiplog.git.repository import RawCommit

_CONVENTIONAL_RE = re.compile(
    r"^(?::\w+:\s*|[\u2600-\u27bf\U0001f300-\U0001faff]\s*)?"
    r"(?P<type>[a-z]+)(?:\((?P<scope>[^)]+)\))?(?P<breaking>!)?: (?P<description>.+)$",
    re.IGNORECASE,
)
_BREAKING_FOOTER_RE = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)
_PULL_REQUEST_RE = re.compile(r"\([ a-z]*(#\d+)\s*\)", re.IGNORECASE)
_ISSUE_RE = re.compile(r"(#\d+)")
_CO_AUTHOR_RE = re.compile(
    r"^co-authored-by:\s*(?P<name>.+?)\s*<(?P<email>[^>]+)>", re.IGNORECASE | re.MULTILINE
)


def parse_commit(raw: RawCommit, scope_map: dict[str, str] | None = None) -> Commit | None:
    """Parse a raw commit; None when the subject is not conventional."""
    m = _CONVENTIONAL_RE.match(raw.message.strip())
    if m is None:
        return None

    commit_type = m.group("type").lower()
    scope = (m.group("scope") or "").strip()
    if scope_map:
        scope = scope_map.get(scope, scope)

    description = m.group("description")
    references: list[Reference] = []
    for pr in _PULL_REQUEST_RE.finditer(description):
        references.append(Reference(type="pull-request", value=pr.group(1)))
    description = _PULL_REQUEST_RE.sub("", description).strip()

    pr_values = {r.value for r in references}
    for issue in _ISSUE_RE.finditer(description):
        if issue.group(1) not in pr_values:
            references.append(Reference(type="issue", value=issue.group(1)))
    references.append(Reference(type="hash", value=raw.short_hash))

    authors = [RawAuthor(name=raw.author_name, email=raw.author_email)]
    for co in _CO_AUTHOR_RE.finditer(raw.body):
        authors.append(RawAuthor(name=co.group("name").strip(), email=co.group("email").strip()))

    return Commit(
        hash=raw.hash,
        short_hash=raw.short_hash,
        message=raw.message,
        body=raw.body,
        type=commit_type,
        scope=scope,
        description=description,
        is_breaking=bool(m.group("breaking")) or bool(_BREAKING_FOOTER_RE.search(raw.body)),
        authors=authors,
        references=tuple(references),
    )


def parse_commits(raw_commits: list[RawCommit], config: ResolvedConfig) -> list[Commit]:
    """Parse the range, keeping configured types and every breaking change."""
    out: list[Commit] = []
    for raw in raw_commits:
        commit = parse_commit(raw, dict(config.scope_map))
        if commit is None:
            continue
        if commit.type not in config.types and not commit.is_breaking:
            continue
        out.append(commit)
    return out
