"""Error types for the release flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_config",
    "unsupported_provider",
    "missing_token",
    "missing_tag",
    "shallow_repo",
    "git_failed",
    "release_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    Halting kinds (`missing_token`, `missing_tag`, `shallow_repo`) carry
    the manual release `web_url` so the caller can still publish by hand.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    web_url: str | None = None
    compare_url: str | None = None
    provider_name: str | None = None
    token_env_name: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
