"""Git repository access for changelog generation.

Repository wraps the handful of read-only git queries a release needs:
the commit range, shallow-clone detection, the current ref, the root
commit, tag lookup and the origin remote. All operations return Result
types or degrade to None/False where a missing answer is meaningful.

Usage:
    repo = Repository(Path("."))

    match repo.get_diff("v1.0.0", "v1.1.0"):
        case Ok(commits):
            print(f"{len(commits)} commits")
        case Err(e):
            print(f"git log failed: {e.message}")
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from shiplog.core.result import Err, Ok, Result
from shiplog.git.semver import parse_version, version_from_tag
from shiplog.platform.process import ProcessError
from shiplog.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

# Field and record separators for `git log --pretty`.
_FS = "\x1f"
_RS = "\x1e"
_LOG_FORMAT = "%x1f".join(["%H", "%h", "%an", "%ae", "%s", "%b"]) + "%x1e"

__all__ = [
    "GitError",
    "GitHistory",
    "MockGitHistory",
    "RawCommit",
    "Repository",
    "TagFilter",
    "parse_repo_from_url",
]

TagFilter = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class RawCommit:
    """A commit as read from `git log`, before conventional parsing."""

    hash: str
    short_hash: str
    author_name: str
    author_email: str
    message: str
    body: str


class GitHistory(Protocol):
    """Version-control queries consumed by the release flow."""

    def get_diff(self, from_ref: str, to_ref: str) -> Result[list[RawCommit], GitError]: ...

    def is_shallow(self) -> bool: ...

    def current_ref(self) -> str | None: ...

    def first_commit_hash(self) -> str | None: ...

    def latest_matching_tag(
        self, to_ref: str, tag_filter: TagFilter, tag_template: str
    ) -> str | None: ...

    def remote_url(self) -> str | None: ...


class Repository:
    """Read-only git queries against a working copy.

    Attributes:
        path: Path to the repository (or any directory inside it)
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def get_diff(self, from_ref: str, to_ref: str) -> Result[list[RawCommit], GitError]:
        """List commits in `from_ref...to_ref`, newest first."""
        rev_range = f"{from_ref}...{to_ref}"
        result = self._run(["--no-pager", "log", rev_range, f"--pretty=format:{_LOG_FORMAT}"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=f"log {rev_range}",
                        message=e.detail,
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(parse_log_output(stdout))

    def is_shallow(self) -> bool:
        """True if the clone has truncated history.

        Returns False if git cannot answer.
        """
        result = self._run(["rev-parse", "--is-shallow-repository"])
        match result:
            case Ok(stdout):
                return stdout.strip() == "true"
            case Err(_):
                return False

    def current_ref(self) -> str | None:
        """Tag pointing at HEAD, else the current branch name.

        Returns None on detached HEAD without a tag, or on error.
        """
        tags = self._run(["tag", "--points-at", "HEAD"])
        if isinstance(tags, Ok):
            first = next((ln.strip() for ln in tags.value.splitlines() if ln.strip()), None)
            if first:
                return first

        branch = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match branch:
            case Ok(stdout):
                name = stdout.strip()
                return None if name in {"", "HEAD"} else name
            case Err(_):
                return None

    def first_commit_hash(self) -> str | None:
        result = self._run(["rev-list", "--max-parents=0", "HEAD"])
        match result:
            case Ok(stdout):
                return next((ln.strip() for ln in stdout.splitlines() if ln.strip()), None)
            case Err(_):
                return None

    def tags(self) -> list[str]:
        """All tags, most recently created first."""
        result = self._run(["--no-pager", "tag", "-l", "--sort=-creatordate"])
        match result:
            case Ok(stdout):
                return [ln.strip() for ln in stdout.splitlines() if ln.strip()]
            case Err(_):
                return []

    def latest_matching_tag(
        self, to_ref: str, tag_filter: TagFilter, tag_template: str
    ) -> str | None:
        return pick_previous_tag(self.tags(), to_ref, tag_filter, tag_template)

    def remote_url(self) -> str | None:
        result = self._run(["config", "--get", "remote.origin.url"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(["git", *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS)


def parse_log_output(output: str) -> list[RawCommit]:
    """Parse `git log` output produced with the record/field separators above."""
    commits: list[RawCommit] = []
    for record in output.split(_RS):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(_FS)
        if len(parts) < 6:
            continue
        full, short, name, email, subject, body = parts[:6]
        commits.append(
            RawCommit(
                hash=full.strip(),
                short_hash=short.strip(),
                author_name=name.strip(),
                author_email=email.strip(),
                message=subject.strip(),
                body=body.strip(),
            )
        )
    return commits


def pick_previous_tag(
    tags: list[str], to_ref: str, tag_filter: TagFilter, tag_template: str
) -> str | None:
    """Pick the tag a release of `to_ref` should be compared against.

    `tags` must be ordered newest first. For a stable version, the newest
    other stable version tag wins; otherwise (prereleases, branches) the
    newest other tag.
    """
    candidates = [t for t in tags if tag_filter(t) and t != to_ref]

    to_version = parse_version(version_from_tag(to_ref, tag_template) or to_ref)
    if to_version is not None and not to_version.is_prerelease:
        for tag in candidates:
            version = version_from_tag(tag, tag_template)
            parsed = parse_version(version) if version is not None else None
            if parsed is not None and not parsed.is_prerelease:
                return tag

    return candidates[0] if candidates else None


def parse_repo_from_url(url: str, base_url: str) -> str | None:
    """Extract `owner/name` from a remote URL hosted on `base_url`.

    Accepts https and scp-style remotes, with or without `.git`. Nested
    GitLab groups (`group/sub/project`) are kept whole.
    """
    host = re.sub(r"^[a-z]+://", "", base_url.strip()).rstrip("/")
    pattern = re.compile(rf"{re.escape(host)}[/:]((?:[\w.-]+/)+?[\w.-]+?)(?:\.git)?/?$")
    m = pattern.search(url.strip())
    if m is None:
        return None
    return m.group(1)


@dataclass
class MockGitHistory:
    """In-memory GitHistory for tests.

    Usage:
        git = MockGitHistory(commits=[...], shallow=True)
        prepare_release(options, git=git, ...)
    """

    commits: list[RawCommit] = field(default_factory=list)
    shallow: bool = False
    ref: str | None = "v1.1.0"
    first_commit: str | None = "0000000"
    previous_tag: str | None = "v1.0.0"
    remote: str | None = "git@github.com:acme/widgets.git"
    diff_error: GitError | None = None
    diff_calls: list[tuple[str, str]] = field(default_factory=list)

    def get_diff(self, from_ref: str, to_ref: str) -> Result[list[RawCommit], GitError]:
        self.diff_calls.append((from_ref, to_ref))
        if self.diff_error is not None:
            return Err(self.diff_error)
        return Ok(list(self.commits))

    def is_shallow(self) -> bool:
        return self.shallow

    def current_ref(self) -> str | None:
        return self.ref

    def first_commit_hash(self) -> str | None:
        return self.first_commit

    def latest_matching_tag(
        self, to_ref: str, tag_filter: TagFilter, tag_template: str
    ) -> str | None:
        if self.previous_tag is None or not tag_filter(self.previous_tag):
            return None
        return self.previous_tag

    def remote_url(self) -> str | None:
        return self.remote
