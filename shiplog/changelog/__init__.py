"""Changelog generation: commit parsing, author resolution, markdown."""

from shiplog.changelog.authors import (
    IdentitySource,
    collect_authors,
    dedupe_authors,
    resolve_authors,
)
from shiplog.changelog.markdown import render_markdown, sanitize_markdown
from shiplog.changelog.model import AuthorInfo, Commit, RawAuthor, Reference
from shiplog.changelog.parse import parse_commit, parse_commits

__all__ = [
    "AuthorInfo",
    "Commit",
    "IdentitySource",
    "RawAuthor",
    "Reference",
    "collect_authors",
    "dedupe_authors",
    "parse_commit",
    "parse_commits",
    "render_markdown",
    "resolve_authors",
    "sanitize_markdown",
]
