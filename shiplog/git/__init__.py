"""Git access for changelog generation.

Usage:
    from shiplog.git import Repository

    repo = Repository(Path("."))
    if repo.is_shallow():
        print("history truncated")
"""

from shiplog.git.repository import (
    GitError,
    GitHistory,
    MockGitHistory,
    RawCommit,
    Repository,
    TagFilter,
    parse_repo_from_url,
)
from shiplog.git.semver import SemVer, is_prerelease, parse_version, safe_tag_template

__all__ = [
    "GitError",
    "GitHistory",
    "MockGitHistory",
    "RawCommit",
    "Repository",
    "SemVer",
    "TagFilter",
    "is_prerelease",
    "parse_repo_from_url",
    "parse_version",
    "safe_tag_template",
]
