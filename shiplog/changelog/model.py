from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

ReferenceType = Literal["hash", "issue", "pull-request"]


@dataclass(frozen=True, slots=True)
class RawAuthor:
    """An author attribution as written in git (author header or trailer)."""

    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Reference:
    type: ReferenceType
    value: str


@dataclass(slots=True, eq=False)
class AuthorInfo:
    """One contributor, keyed by email within a resolution run.

    Compared by identity: every commit by the same email holds the very
    same instance, so a login resolved once is visible from all of them.
    `commits` lists short hashes where this author is the primary author.
    """

    name: str
    email: str
    login: str | None = None
    commits: list[str] = field(default_factory=list)

    @property
    def display_key(self) -> str:
        return self.login or self.name


@dataclass(slots=True)
class Commit:
    """A parsed conventional commit.

    `authors[0]` is the primary author; the rest are co-authors.
    `resolved_authors` is filled in once by the author resolution pass.
    """

    hash: str
    short_hash: str
    message: str
    body: str
    type: str
    scope: str
    description: str
    is_breaking: bool
    authors: list[RawAuthor]
    references: tuple[Reference, ...] = ()
    resolved_authors: list[AuthorInfo] = field(default_factory=list)
