"""Tests for the GitHub adapter against a mock HTTP client."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from shiplog.core.config import ResolvedConfig
from shiplog.core.result import Err, Ok
from shiplog.output.console import MockConsole
from shiplog.platform.http import HttpError, MockHttpClient
from shiplog.providers.github import GitHubProvider

ConfigFactory = Callable[..., ResolvedConfig]

API = "https://api.github.com"
RELEASES = f"{API}/repos/acme/widgets/releases"
BY_TAG = f"{RELEASES}/tags/v1.1.0"


def _provider(http: MockHttpClient, console: MockConsole) -> GitHubProvider:
    return GitHubProvider(http=http, console=console)


class TestSendRelease:
    def test_creates_when_no_release_exists(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        http.set_response("POST", RELEASES, {"html_url": "https://github.com/acme/widgets/r/1"})
        config = make_config(name="Widgets 1.1", draft=True)

        result = _provider(http, console).send_release(config, "## notes")

        assert result == Ok("https://github.com/acme/widgets/r/1")
        post = http.calls_for("POST")[0]
        assert post.json_body == {
            "tag_name": "v1.1.0",
            "name": "Widgets 1.1",
            "body": "## notes",
            "draft": True,
            "prerelease": False,
        }
        assert post.headers["Authorization"] == "token t0ken"
        assert post.headers["Accept"] == "application/vnd.github.v3+json"
        assert http.calls_for("PATCH") == []
        assert console.find("Creating release notes")

    def test_updates_existing_release(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        existing = f"{RELEASES}/99"
        http.set_response("GET", BY_TAG, {"url": existing})
        http.set_response("PATCH", existing, {"html_url": "https://github.com/r/99"})

        result = _provider(http, console).send_release(make_config(), "notes")

        assert result == Ok("https://github.com/r/99")
        assert [c.url for c in http.calls_for("PATCH")] == [existing]
        assert http.calls_for("POST") == []

    def test_release_repo_is_used(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        target = f"{API}/repos/acme/releases/releases"
        http.set_response("POST", target, {})
        config = make_config(release_repo="acme/releases")

        result = _provider(http, console).send_release(config, "notes")

        assert isinstance(result, Ok)
        assert http.calls_for("POST")[0].url == target

    def test_rejected(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        http.set_response("POST", RELEASES, HttpError(url=RELEASES, status=422, message="bad"))

        result = _provider(http, console).send_release(make_config(), "notes")

        assert isinstance(result, Err)
        assert result.error.kind == "release_failed"
        assert "422" in (result.error.hint or "")


class TestIdentity:
    def test_login_by_email(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        http.set_response(
            "GET",
            f"{API}/search/users?q=alice%40example.com",
            {"items": [{"login": "alice"}, {"login": "other"}]},
        )
        result = _provider(http, console).login_by_email("alice@example.com", make_config())
        assert result == Ok("alice")

    def test_login_by_email_no_match(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        http.set_response("GET", f"{API}/search/users?q=x%40y", {"items": []})
        assert _provider(http, console).login_by_email("x@y", make_config()) == Ok(None)

    def test_login_by_commit(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        http.set_response(
            "GET", f"{API}/repos/acme/widgets/commits/abc1234", {"author": {"login": "bob"}}
        )
        result = _provider(http, console).login_by_commit("abc1234", make_config())
        assert result == Ok("bob")

    def test_lookup_error_propagates_to_caller(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        result = _provider(http, console).login_by_commit("abc1234", make_config())
        assert isinstance(result, Err)


class TestHasTag:
    def test_present(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        http.set_response("GET", f"{API}/repos/acme/widgets/git/ref/tags/v1.1.0", {"ref": "x"})
        assert _provider(http, console).has_tag("v1.1.0", make_config()) is True

    def test_any_failure_is_false(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        assert _provider(http, console).has_tag("v1.1.0", make_config()) is False


class TestUploadAssets:
    def test_uploads_to_release_upload_url(
        self,
        tmp_path: Path,
        http: MockHttpClient,
        console: MockConsole,
        make_config: ConfigFactory,
    ) -> None:
        (tmp_path / "a.zip").write_bytes(b"A")
        (tmp_path / "b.zip").write_bytes(b"B")
        upload = "https://uploads.github.com/repos/acme/widgets/releases/99/assets"
        http.set_response("GET", BY_TAG, {"upload_url": upload + "{?name,label}"})
        http.set_response("POST", f"{upload}?name=a.zip", {"browser_download_url": "dl/a.zip"})
        http.set_response("POST", f"{upload}?name=b.zip", {"browser_download_url": "dl/b.zip"})

        report = _provider(http, console).upload_assets(
            make_config(), str(tmp_path / "*.zip")
        )

        assert report.ok
        assert [(a.name, a.url) for a in report.uploaded] == [
            ("a.zip", "dl/a.zip"),
            ("b.zip", "dl/b.zip"),
        ]
        posts = {c.url: c for c in http.calls_for("POST")}
        assert posts[f"{upload}?name=a.zip"].data == b"A"
        assert posts[f"{upload}?name=a.zip"].headers["Content-Type"] == (
            "application/octet-stream"
        )

    def test_literal_path_is_attempted(
        self,
        tmp_path: Path,
        http: MockHttpClient,
        console: MockConsole,
        make_config: ConfigFactory,
    ) -> None:
        http.set_response("GET", BY_TAG, {"upload_url": "https://uploads/x{?name}"})
        report = _provider(http, console).upload_assets(
            make_config(), str(tmp_path / "nothing-*.zip")
        )

        assert [f.path.name for f in report.failed] == ["nothing-*.zip"]
        assert console.find("Failed to read file")

    def test_missing_release_fails_every_asset(
        self,
        tmp_path: Path,
        http: MockHttpClient,
        console: MockConsole,
        make_config: ConfigFactory,
    ) -> None:
        (tmp_path / "a.zip").write_bytes(b"A")
        report = _provider(http, console).upload_assets(make_config(), [str(tmp_path / "a.zip")])

        assert len(report.failed) == 1
        assert http.calls_for("POST") == []

    def test_nothing_requested(
        self, http: MockHttpClient, console: MockConsole, make_config: ConfigFactory
    ) -> None:
        report = _provider(http, console).upload_assets(make_config(), " , ")
        assert report.uploaded == () and report.failed == ()
        assert http.calls == []
