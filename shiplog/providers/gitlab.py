"""GitLab releases adapter (REST v4).

GitLab has no "attach a binary to a release" call: assets are committed
to the repository file store and linked from the release description.
"""

from __future__ import annotations

import base64
import os
import threading
from datetime import UTC, datetime
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
    UploadedAsset,
    expand_assets,
    fail_all,
    normalize_assets,
    upload_each,
)
from shiplog.providers.base import auth_headers
from shiplog.release.errors import ReleaseError

PROJECT_ID_ENV = "GITLAB_PROJECT_ID"

# A project id never changes for a given repository, so it is cached for
# the lifetime of the process.
_project_ids: dict[tuple[str, str], int] = {}
_project_ids_lock = threading.Lock()


def clear_project_id_cache() -> None:
    with _project_ids_lock:
        _project_ids.clear()


def _env_project_id() -> int | None:
    raw = os.environ.get(PROJECT_ID_ENV, "").strip()
    return int(raw) if raw.isdigit() else None


class GitLabProvider:
    name = "gitlab"
    display_name = "GitLab"
    token_env_name = "GITLAB_TOKEN or GITLAB_PRIVATE_TOKEN"

    def __init__(self, *, http: HttpClient, console: ConsoleProtocol) -> None:
        self._http = http
        self._console = console

    def _headers(self, config: ResolvedConfig) -> dict[str, str]:
        return auth_headers({}, config.token, **{"PRIVATE-TOKEN": config.token or ""})

    def project_id(self, config: ResolvedConfig) -> Result[int, HttpError]:
        """Numeric project id: explicit option, env override, or one API call."""
        if config.gitlab_project_id is not None:
            return Ok(config.gitlab_project_id)
        env_id = _env_project_id()
        if env_id is not None:
            return Ok(env_id)

        key = (config.base_url_api, config.release_repo)
        with _project_ids_lock:
            cached = _project_ids.get(key)
        if cached is not None:
            return Ok(cached)

        url = f"{config.base_url_api}/projects/{quote(config.release_repo, safe='')}"
        result = request_json(self._http, "GET", url, headers=self._headers(config))
        if isinstance(result, Err):
            return result

        project_id = (as_str_dict(result.value) or {}).get("id")
        if isinstance(project_id, bool) or not isinstance(project_id, int):
            return Err(HttpError(url=url, status=0, message="Cannot get the project id"))

        with _project_ids_lock:
            _project_ids[key] = project_id
        return Ok(project_id)

    def _release_url(self, config: ResolvedConfig, project_id: int) -> str:
        tag = quote(config.to_ref, safe="")
        return f"{config.base_url_api}/projects/{project_id}/releases/{tag}"

    def send_release(self, config: ResolvedConfig, content: str) -> Result[str, ReleaseError]:
        pid = self.project_id(config)
        if isinstance(pid, Err):
            return Err(
                ReleaseError(
                    kind="release_failed",
                    message=f"Cannot resolve GitLab project {config.release_repo}",
                    hint=str(pid.error),
                )
            )

        headers = self._headers(config)
        release_url = self._release_url(config, pid.value)

        # Releases are keyed by tag: update in place when one already exists.
        existing = self._http.request("GET", release_url, headers=headers)
        if isinstance(existing, Ok):
            method, url = "PUT", release_url
        else:
            method, url = "POST", f"{config.base_url_api}/projects/{pid.value}/releases"

        body = {
            "name": config.release_name,
            "tag_name": config.to_ref,
            "description": content,
            "released_at": None if config.draft else datetime.now(UTC).isoformat(),
        }

        self._console.info(
            "Creating release notes..." if method == "POST" else "Updating release notes..."
        )
        result = request_json(self._http, method, url, headers=headers, json_body=body)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="release_failed",
                    message=f"GitLab rejected the release for {config.to_ref}",
                    hint=str(result.error),
                )
            )

        links = get_table(as_str_dict(result.value) or {}, "_links") or {}
        web_url = get_str(links, "self") or (
            f"{config.base_url}/{config.release_repo}/-/releases/{config.to_ref}"
        )
        self._console.success(f"Released on {web_url}")
        return Ok(web_url)

    def login_by_email(self, email: str, config: ResolvedConfig) -> Result[str | None, HttpError]:
        url = f"{config.base_url_api}/users?search={quote(email, safe='')}"
        result = request_json(self._http, "GET", url, headers=self._headers(config))
        if isinstance(result, Err):
            return result

        for item in as_obj_list(result.value) or []:
            user = as_str_dict(item) or {}
            if email in (get_str(user, "email"), get_str(user, "public_email")):
                return Ok(get_str(user, "username"))
        return Ok(None)

    def login_by_commit(
        self, short_hash: str, config: ResolvedConfig
    ) -> Result[str | None, HttpError]:
        pid = self.project_id(config)
        if isinstance(pid, Err):
            return pid

        url = f"{config.base_url_api}/projects/{pid.value}/repository/commits/{short_hash}"
        result = request_json(self._http, "GET", url, headers=self._headers(config))
        if isinstance(result, Err):
            return result
        return Ok(get_str(as_str_dict(result.value) or {}, "author_name"))

    def resolve_authors(self, commits: list[Commit], config: ResolvedConfig) -> list[AuthorInfo]:
        return resolve_authors(commits, config, identity=self, console=self._console)

    def has_tag(self, tag: str, config: ResolvedConfig) -> bool:
        pid = self.project_id(config)
        if isinstance(pid, Err):
            return False
        url = (
            f"{config.base_url_api}/projects/{pid.value}/repository/tags/{quote(tag, safe='')}"
        )
        return isinstance(self._http.request("GET", url, headers=self._headers(config)), Ok)

    def upload_assets(self, config: ResolvedConfig, assets: AssetInput) -> AssetReport:
        paths = expand_assets(normalize_assets(assets))
        if not paths:
            return AssetReport()

        pid = self.project_id(config)
        if isinstance(pid, Err):
            self._console.error(f"Cannot resolve GitLab project: {pid.error}")
            return fail_all(paths, str(pid.error))

        headers = self._headers(config)
        branch = config.asset_branch
        files_url = f"{config.base_url_api}/projects/{pid.value}/repository/files"

        def upload_one(name: str, data: bytes) -> Result[str | None, HttpError]:
            result = self._http.request(
                "POST",
                f"{files_url}/{quote(name, safe='')}",
                headers=headers,
                json_body={
                    "branch": branch,
                    "content": base64.b64encode(data).decode("ascii"),
                    "commit_message": f"Add release asset: {name}",
                    "encoding": "base64",
                },
            )
            if isinstance(result, Err):
                return result
            return Ok(f"{config.base_url}/{config.release_repo}/-/blob/{branch}/{name}")

        # Each upload is a commit on the same branch: keep them sequential.
        report = upload_each(paths, upload_one, console=self._console, max_workers=1)
        if report.uploaded:
            self._append_asset_links(config, pid.value, report.uploaded)
        return report

    def _append_asset_links(
        self, config: ResolvedConfig, project_id: int, uploaded: tuple[UploadedAsset, ...]
    ) -> None:
        headers = self._headers(config)
        release_url = self._release_url(config, project_id)

        release = request_json(self._http, "GET", release_url, headers=headers)
        if isinstance(release, Err):
            self._console.error(f"Failed to update release with asset links: {release.error}")
            return

        description = (as_str_dict(release.value) or {}).get("description")
        links = "\n".join(f"- [{a.name}]({a.url})" for a in uploaded)
        updated = f"{description if isinstance(description, str) else ''}\n\n## Assets\n{links}"

        result = self._http.request(
            "PUT", release_url, headers=headers, json_body={"description": updated}
        )
        if isinstance(result, Err):
            self._console.error(f"Failed to update release with asset links: {result.error}")
            return
        self._console.success("Updated release with asset links.")
