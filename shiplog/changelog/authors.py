"""Author resolution: merge commit attributions into a contributor list.

The pass runs in five steps:

1. Drop bot authors (`[bot]`, `dependabot`, `(bot)`) and attributions
   missing a name or an email.
2. Merge by email: one AuthorInfo per email, shared by every commit that
   references it.
3. Credit a commit's short hash only to its primary (first) author.
4. Look up platform logins for authors that lack one, concurrently. This
   is enrichment: lookup failures leave the login unset and are never
   propagated.
5. Sort by `login or name`, case-insensitively, and drop later entries
   whose login (or, without a login, name) was already seen.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from shiplog.changelog.model import AuthorInfo, Commit, RawAuthor
from shiplog.core.config import ResolvedConfig
from shiplog.core.result import Err, Ok, Result
from shiplog.output.console import ConsoleProtocol, Style
from shiplog.platform.http import HttpError

_EXCLUDED_AUTHORS = (
    re.compile(r"\[bot\]", re.IGNORECASE),
    re.compile(r"dependabot", re.IGNORECASE),
    re.compile(r"\(bot\)", re.IGNORECASE),
)

_MAX_LOOKUP_WORKERS = 8


class IdentitySource(Protocol):
    """Provider endpoints able to map an author to a platform login."""

    def login_by_email(
        self, email: str, config: ResolvedConfig
    ) -> Result[str | None, HttpError]: ...

    def login_by_commit(
        self, short_hash: str, config: ResolvedConfig
    ) -> Result[str | None, HttpError]: ...


def is_excluded(author: RawAuthor) -> bool:
    return any(pattern.search(author.name) for pattern in _EXCLUDED_AUTHORS)


def collect_authors(commits: list[Commit]) -> list[AuthorInfo]:
    """Steps 1-3: fill `commit.resolved_authors` and return unique authors.

    The returned list is in first-seen order.
    """
    by_email: dict[str, AuthorInfo] = {}

    for commit in commits:
        resolved: list[AuthorInfo] = []
        for idx, author in enumerate(commit.authors):
            if not author.name or not author.email:
                continue
            if is_excluded(author):
                continue

            info = by_email.get(author.email)
            if info is None:
                info = AuthorInfo(name=author.name, email=author.email)
                by_email[author.email] = info

            if idx == 0:
                info.commits.append(commit.short_hash)

            resolved.append(info)
        commit.resolved_authors = resolved

    return list(by_email.values())


def resolve_login(
    info: AuthorInfo,
    config: ResolvedConfig,
    *,
    identity: IdentitySource,
    console: ConsoleProtocol,
) -> AuthorInfo:
    """Step 4 for a single author. Mutates and returns `info`."""
    if info.login:
        return info
    if not config.token:
        return info

    by_email = identity.login_by_email(info.email, config)
    match by_email:
        case Ok(login) if login:
            info.login = login
            return info
        case Err(e):
            console.print(f"login lookup failed for {info.email}: {e}", Style.DIM)
        case _:
            pass

    if not info.commits:
        return info

    by_commit = identity.login_by_commit(info.commits[0], config)
    match by_commit:
        case Ok(login) if login:
            info.login = login
        case Err(e):
            console.print(f"login lookup failed for {info.commits[0]}: {e}", Style.DIM)
        case _:
            pass

    return info


def _sort_key(info: AuthorInfo) -> tuple[str, str]:
    key = info.display_key
    return (key.casefold(), key)


def dedupe_authors(authors: list[AuthorInfo]) -> list[AuthorInfo]:
    """Step 5: sort, then keep the first entry per login (or name)."""
    ordered = sorted(authors, key=_sort_key)

    logins: set[str] = set()
    names: set[str] = set()
    out: list[AuthorInfo] = []
    for info in ordered:
        if info.login:
            if info.login in logins:
                continue
            logins.add(info.login)
        else:
            if info.name in names:
                continue
            names.add(info.name)
        out.append(info)
    return out


def resolve_authors(
    commits: list[Commit],
    config: ResolvedConfig,
    *,
    identity: IdentitySource,
    console: ConsoleProtocol,
) -> list[AuthorInfo]:
    """Run the full pass and return the deduplicated contributor list."""
    authors = collect_authors(commits)

    pending = [a for a in authors if not a.login]
    if pending and config.token:
        workers = min(_MAX_LOOKUP_WORKERS, len(pending))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # list() waits for every lookup to settle before sorting.
            list(
                pool.map(
                    lambda info: resolve_login(
                        info, config, identity=identity, console=console
                    ),
                    pending,
                )
            )

    return dedupe_authors(authors)
