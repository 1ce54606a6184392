"""Typed configuration for a changelog/release run.

Three layers, most specific first:
- ChangelogOptions passed by the caller (CLI flags or library code)
- the project file: `shiplog.toml`, or `[tool.shiplog]` in pyproject.toml
- built-in defaults

`shiplog.release.resolve.resolve_config` merges them and fills in the
git-derived values, producing a frozen ResolvedConfig.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "ChangelogOptions",
    "ConfigError",
    "GroupMode",
    "ResolvedConfig",
    "DEFAULT_BREAKING_TITLE",
    "DEFAULT_PROVIDER",
    "DEFAULT_TAG_TEMPLATE",
    "DEFAULT_TYPES",
    "PROVIDER_API_DOMAINS",
    "PROVIDER_DOMAINS",
    "PROJECT_FILE",
    "load_project_options",
    "merge_options",
]

GroupMode = bool | Literal["multiple"]

DEFAULT_PROVIDER = "github"
DEFAULT_TAG_TEMPLATE = "v%s"
DEFAULT_ASSET_BRANCH = "main"
DEFAULT_BREAKING_TITLE = "🚨 Breaking Changes"
DEFAULT_TYPES: dict[str, str] = {
    "feat": "🚀 Features",
    "fix": "🐞 Bug Fixes",
    "perf": "🏎 Performance",
}

PROVIDER_DOMAINS: dict[str, str] = {
    "github": "https://github.com",
    "gitlab": "https://gitlab.com",
}
PROVIDER_API_DOMAINS: dict[str, str] = {
    "github": "https://api.github.com",
    "gitlab": "https://gitlab.com/api/v4",
}

PROJECT_FILE = "shiplog.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration cannot be loaded or resolved."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ChangelogOptions:
    """Raw caller options; None means "not given, use the next layer"."""

    token: str | None = None
    from_ref: str | None = None
    to_ref: str | None = None
    repo: str | None = None
    release_repo: str | None = None
    repo_provider: str | None = None
    base_url: str | None = None
    base_url_api: str | None = None
    name: str | None = None
    draft: bool | None = None
    prerelease: bool | None = None
    output: Path | None = None
    dry: bool | None = None
    assets: tuple[str, ...] | None = None
    contributors: bool | None = None
    capitalize: bool | None = None
    group: GroupMode | None = None
    emoji: bool | None = None
    tag: str | None = None
    tag_filter: Callable[[str], bool] | None = None
    types: Mapping[str, str] | None = None
    breaking_title: str | None = None
    scope_map: Mapping[str, str] | None = None
    gitlab_project_id: int | None = None
    asset_branch: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """Fully-defaulted, provider-aware snapshot used for a whole run."""

    repo: str
    from_ref: str
    to_ref: str
    repo_provider: str = DEFAULT_PROVIDER
    release_repo: str = ""
    base_url: str = PROVIDER_DOMAINS[DEFAULT_PROVIDER]
    base_url_api: str = PROVIDER_API_DOMAINS[DEFAULT_PROVIDER]
    token: str | None = None
    name: str | None = None
    draft: bool = False
    prerelease: bool = False
    output: Path | None = None
    dry: bool = False
    assets: tuple[str, ...] = ()
    contributors: bool = True
    capitalize: bool = True
    group: GroupMode = True
    emoji: bool = True
    tag: str = DEFAULT_TAG_TEMPLATE
    types: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPES))
    breaking_title: str = DEFAULT_BREAKING_TITLE
    scope_map: Mapping[str, str] = field(default_factory=dict)
    gitlab_project_id: int | None = None
    asset_branch: str = DEFAULT_ASSET_BRANCH

    def __post_init__(self) -> None:
        if not self.release_repo:
            object.__setattr__(self, "release_repo", self.repo)

    @property
    def release_name(self) -> str:
        return self.name or self.to_ref


def merge_options(base: ChangelogOptions, override: ChangelogOptions) -> ChangelogOptions:
    """Overlay every non-None field of `override` onto `base`."""
    changes = {
        f.name: getattr(override, f.name)
        for f in fields(override)
        if getattr(override, f.name) is not None
    }
    return replace(base, **changes)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def _str_table(data: Mapping[str, object], key: str) -> dict[str, str] | None:
    table = get_table(data, key)
    if table is None:
        return None
    out: dict[str, str] = {}
    for k, v in table.items():
        if isinstance(v, str):
            out[k] = v
        else:
            # `feat = { title = "Features" }`
            title = get_str(as_str_dict(v) or {}, "title")
            if title is not None:
                out[k] = title
    return out


def options_from_table(data: Mapping[str, object]) -> ChangelogOptions:
    """Build options from a parsed project-file table. Unknown keys are ignored."""
    group_raw = data.get("group")
    group: GroupMode | None = None
    if isinstance(group_raw, bool):
        group = group_raw
    elif group_raw == "multiple":
        group = "multiple"

    assets = get_str_list(data, "assets")
    if assets is None and (single := get_str(data, "assets")) is not None:
        assets = [single]

    titles = get_table(data, "titles") or {}

    return ChangelogOptions(
        repo=get_str(data, "repo"),
        release_repo=get_str(data, "release_repo"),
        repo_provider=get_str(data, "repo_provider"),
        base_url=get_str(data, "base_url"),
        base_url_api=get_str(data, "base_url_api"),
        name=get_str(data, "name"),
        draft=get_bool(data, "draft"),
        prerelease=get_bool(data, "prerelease"),
        contributors=get_bool(data, "contributors"),
        capitalize=get_bool(data, "capitalize"),
        group=group,
        emoji=get_bool(data, "emoji"),
        tag=get_str(data, "tag"),
        assets=tuple(assets) if assets is not None else None,
        types=_str_table(data, "types"),
        breaking_title=get_str(titles, "breaking_changes"),
        scope_map=_str_table(data, "scope_map"),
        gitlab_project_id=get_int(data, "gitlab_project_id"),
        asset_branch=get_str(data, "asset_branch"),
    )


def load_project_options(root: Path) -> Result[ChangelogOptions, ConfigError]:
    """Load options from `shiplog.toml` or `[tool.shiplog]` in pyproject.toml.

    Missing files are not an error: empty options are returned.
    """
    project_file = root / PROJECT_FILE
    if project_file.is_file():
        parsed = _parse_toml(project_file)
        if isinstance(parsed, Err):
            return parsed
        return Ok(options_from_table(parsed.value))

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        parsed = _parse_toml(pyproject)
        if isinstance(parsed, Err):
            return parsed
        tool = get_table(parsed.value, "tool") or {}
        table = get_table(tool, "shiplog")
        if table is not None:
            return Ok(options_from_table(table))

    return Ok(ChangelogOptions())
