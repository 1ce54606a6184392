"""GitHub releases adapter (REST v3)."""

from __future__ import annotations

import re
from urllib.parse import quote

from shiplog.changelog.authors import resolve_authors
from shiplog.changelog.model import AuthorInfo, Commit
from shiplog.core.config import ResolvedConfig
from shiplog.core.result import Err, Ok, Result
from shiplog.core.structured import as_obj_list, as_str_dict, get_str, get_table
from shiplog.output.console import ConsoleProtocol
from shiplog.platform.http import HttpClient, HttpError, request_json
from shiplog.providers.assets import (
    AssetInput,
    AssetReport,
    expand_assets,
    fail_all,
    normalize_assets,
    upload_each,
)
from shiplog.providers.base import auth_headers
from shiplog.release.errors import ReleaseError

_UPLOAD_URL_TEMPLATE_RE = re.compile(r"\{[^}]*\}$")
_UPLOAD_WORKERS = 4


class GitHubProvider:
    name = "github"
    display_name = "GitHub"
    token_env_name = "GITHUB_TOKEN or GITHUB_TOKEN_PATH"

    def __init__(self, *, http: HttpClient, console: ConsoleProtocol) -> None:
        self._http = http
        self._console = console

    def _headers(self, config: ResolvedConfig) -> dict[str, str]:
        return auth_headers(
            {"Accept": "application/vnd.github.v3+json"},
            config.token,
            Authorization=f"token {config.token}",
        )

    def _release_by_tag_url(self, config: ResolvedConfig) -> str:
        tag = quote(config.to_ref, safe="")
        return f"{config.base_url_api}/repos/{config.release_repo}/releases/tags/{tag}"

    def send_release(self, config: ResolvedConfig, content: str) -> Result[str, ReleaseError]:
        headers = self._headers(config)
        url = f"{config.base_url_api}/repos/{config.release_repo}/releases"
        method = "POST"

        by_tag = self._release_by_tag_url(config)
        existing = request_json(self._http, "GET", by_tag, headers=headers)
        if isinstance(existing, Ok):
            existing_url = get_str(as_str_dict(existing.value) or {}, "url")
            if existing_url:
                url = existing_url
                method = "PATCH"

        body = {
            "tag_name": config.to_ref,
            "name": config.release_name,
            "body": content,
            "draft": config.draft,
            "prerelease": config.prerelease,
        }

        self._console.info(
            "Creating release notes..." if method == "POST" else "Updating release notes..."
        )
        result = request_json(self._http, method, url, headers=headers, json_body=body)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="release_failed",
                    message=f"GitHub rejected the release for {config.to_ref}",
                    hint=str(result.error),
                )
            )

        html_url = get_str(as_str_dict(result.value) or {}, "html_url") or url
        self._console.success(f"Released on {html_url}")
        return Ok(html_url)

    def login_by_email(self, email: str, config: ResolvedConfig) -> Result[str | None, HttpError]:
        url = f"{config.base_url_api}/search/users?q={quote(email, safe='')}"
        result = request_json(self._http, "GET", url, headers=self._headers(config))
        if isinstance(result, Err):
            return result

        items = as_obj_list((as_str_dict(result.value) or {}).get("items")) or []
        if not items:
            return Ok(None)
        return Ok(get_str(as_str_dict(items[0]) or {}, "login"))

    def login_by_commit(
        self, short_hash: str, config: ResolvedConfig
    ) -> Result[str | None, HttpError]:
        url = f"{config.base_url_api}/repos/{config.repo}/commits/{short_hash}"
        result = request_json(self._http, "GET", url, headers=self._headers(config))
        if isinstance(result, Err):
            return result

        author = get_table(as_str_dict(result.value) or {}, "author") or {}
        return Ok(get_str(author, "login"))

    def resolve_authors(self, commits: list[Commit], config: ResolvedConfig) -> list[AuthorInfo]:
        return resolve_authors(commits, config, identity=self, console=self._console)

    def has_tag(self, tag: str, config: ResolvedConfig) -> bool:
        url = f"{config.base_url_api}/repos/{config.repo}/git/ref/tags/{quote(tag, safe='')}"
        result = self._http.request("GET", url, headers=self._headers(config))
        return isinstance(result, Ok)

    def upload_assets(self, config: ResolvedConfig, assets: AssetInput) -> AssetReport:
        paths = expand_assets(normalize_assets(assets))
        if not paths:
            return AssetReport()

        headers = self._headers(config)
        by_tag = self._release_by_tag_url(config)
        release = request_json(self._http, "GET", by_tag, headers=headers)
        if isinstance(release, Err):
            self._console.error(f"Cannot find release {config.to_ref}: {release.error}")
            return fail_all(paths, str(release.error))

        upload_url = get_str(as_str_dict(release.value) or {}, "upload_url")
        if upload_url is None:
            self._console.error(f"Release {config.to_ref} has no upload_url")
            return fail_all(paths, "missing upload_url")
        upload_base = _UPLOAD_URL_TEMPLATE_RE.sub("", upload_url)

        def upload_one(name: str, data: bytes) -> Result[str | None, HttpError]:
            result = self._http.request(
                "POST",
                f"{upload_base}?name={quote(name, safe='')}",
                headers={**headers, "Content-Type": "application/octet-stream"},
                data=data,
            )
            if isinstance(result, Err):
                return result
            payload = result.value.json()
            if isinstance(payload, Err):
                return Ok(None)
            return Ok(get_str(as_str_dict(payload.value) or {}, "browser_download_url"))

        return upload_each(paths, upload_one, console=self._console, max_workers=_UPLOAD_WORKERS)
