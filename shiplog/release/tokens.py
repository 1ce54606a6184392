"""Provider token lookup.

Order: the explicit value (read as a file when it names one), the
provider's environment variables, then the provider's own CLI
(`gh auth token` / `glab auth token`). Not finding a token is not an
error here: the release flow halts on a missing token later, with a
manual release link.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from shiplog.core.result import Ok
from shiplog.platform.process import run as run_process

__all__ = ["TOKEN_ENV_VARS", "TOKEN_CLI", "resolve_token"]

_CLI_TIMEOUT_SECONDS = 10.0

# Plain variables first, then `*_PATH` variables naming a token file.
TOKEN_ENV_VARS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "github": (("GITHUB_TOKEN",), ("GITHUB_TOKEN_PATH",)),
    "gitlab": (
        ("GITLAB_TOKEN", "GITLAB_PRIVATE_TOKEN"),
        ("GITLAB_TOKEN_PATH", "GITLAB_PRIVATE_TOKEN_PATH"),
    ),
}

TOKEN_CLI: dict[str, list[str]] = {
    "github": ["gh", "auth", "token"],
    "gitlab": ["glab", "auth", "token"],
}


def _read_token_file(path: Path) -> str | None:
    try:
        token = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return token or None


def _looks_like_path(value: str) -> bool:
    return "/" in value or "\\" in value or value.startswith("~")


def resolve_token(
    provider: str,
    explicit: str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    use_cli: bool = True,
) -> str | None:
    """Find a token for `provider`, or None."""
    environ = os.environ if env is None else env

    if explicit:
        explicit = explicit.strip()
        if _looks_like_path(explicit):
            candidate = Path(explicit).expanduser()
            if candidate.is_file():
                return _read_token_file(candidate)
        return explicit or None

    plain, paths = TOKEN_ENV_VARS.get(provider, ((), ()))
    for name in plain:
        value = environ.get(name, "").strip()
        if value:
            return value
    for name in paths:
        value = environ.get(name, "").strip()
        if value:
            token = _read_token_file(Path(value).expanduser())
            if token:
                return token

    cli = TOKEN_CLI.get(provider)
    if not use_cli or cli is None:
        return None
    result = run_process(cli, cwd=cwd or Path.cwd(), timeout=_CLI_TIMEOUT_SECONDS)
    if isinstance(result, Ok):
        return result.value.strip() or None
    return None
