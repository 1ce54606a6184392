from __future__ import annotations

import re
from dataclasses import dataclass

# A ref "looks stable" when it is dotted digits after an optional prefix
# without dots (v1.2.3, release-2.0). Anything else counts as a prerelease.
_STABLE_REF_RE = re.compile(r"^[^.]*(?:\.[\d.]*|\d)$")

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None


def parse_version(value: str) -> SemVer | None:
    """Parse `1.2.3`, `v1.2.3-beta.1` or `1.2.3+build`; None when not semver."""
    m = _SEMVER_RE.match(value.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def is_prerelease(ref: str) -> bool:
    return _STABLE_REF_RE.match(ref) is None


def safe_tag_template(template: str) -> str:
    """Ensure a tag template carries the `%s` version placeholder."""
    return template if "%s" in template else f"{template}%s"


def version_from_tag(tag: str, template: str) -> str | None:
    """Extract the version part of `tag` according to a `v%s`-style template."""
    prefix, _, suffix = safe_tag_template(template).partition("%s")
    pattern = re.compile(f"^{re.escape(prefix)}(.+){re.escape(suffix)}$")
    m = pattern.match(tag)
    return m.group(1) if m else None
