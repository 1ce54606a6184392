"""Tests for markdown rendering."""

from __future__ import annotations

from collections.abc import Callable

from shiplog.changelog.markdown import render_markdown, sanitize_markdown
from shiplog.changelog.model import AuthorInfo, Commit
from shiplog.changelog.parse import parse_commits
from shiplog.core.config import ResolvedConfig
from shiplog.git.repository import RawCommit

RawFactory = Callable[..., RawCommit]
ConfigFactory = Callable[..., ResolvedConfig]


def _scenario(raw_commit: RawFactory, config: ResolvedConfig) -> list[Commit]:
    # git log order: newest first
    raws = [
        raw_commit("feat(cli)!: rename flags", short_hash="aaa1111"),
        raw_commit("feat(contributors): show avatars", short_hash="bbb2222"),
        raw_commit("feat: add json output", short_hash="ccc3333"),
    ]
    return parse_commits(raws, config)


class TestSections:
    """Breaking changes first, then one section per configured type."""

    def test_breaking_and_features_scenario(
        self, raw_commit: RawFactory, make_config: ConfigFactory
    ) -> None:
        config = make_config()
        md = render_markdown(_scenario(raw_commit, config), config)
        lines = md.splitlines()

        breaking = lines.index("### &nbsp;&nbsp;&nbsp;🚨 Breaking Changes")
        features = lines.index("### &nbsp;&nbsp;&nbsp;🚀 Features")
        assert breaking < features

        breaking_block = lines[breaking:features]
        assert "- **cli**:" in breaking_block
        assert any(line.startswith("  - Rename flags") for line in breaking_block)

        features_block = lines[features:]
        unscoped = next(i for i, ln in enumerate(features_block) if "Add json output" in ln)
        scope_label = features_block.index("- **contributors**:")
        assert features_block[unscoped].startswith("- Add json output")
        assert unscoped < scope_label
        assert features_block[scope_label + 1].startswith("  - Show avatars")
        assert "Rename flags" not in "\n".join(features_block)

    def test_commit_line_format(self, raw_commit: RawFactory, make_config: ConfigFactory) -> None:
        config = make_config()
        md = render_markdown(_scenario(raw_commit, config), config)
        assert (
            "- Add json output &nbsp;-&nbsp; "
            "[<samp>(ccc33)</samp>](https://github.com/acme/widgets/commit/ccc3333)"
        ) in md

    def test_footer_links_compare(self, raw_commit: RawFactory, make_config: ConfigFactory) -> None:
        config = make_config()
        md = render_markdown(_scenario(raw_commit, config), config)
        assert md.splitlines()[-1] == (
            "##### &nbsp;&nbsp;&nbsp;&nbsp;[View changes on GitHub]"
            "(https://github.com/acme/widgets/compare/v1.0.0...v1.1.0)"
        )

    def test_empty(self, make_config: ConfigFactory) -> None:
        md = render_markdown([], make_config())
        assert md.startswith("*No significant changes*")

    def test_no_emoji(self, raw_commit: RawFactory, make_config: ConfigFactory) -> None:
        config = make_config(emoji=False)
        md = render_markdown(_scenario(raw_commit, config), config)
        assert "### &nbsp;&nbsp;&nbsp;Breaking Changes" in md
        assert "### &nbsp;&nbsp;&nbsp;Features" in md


class TestGrouping:
    def _two_in_scope(self, raw_commit: RawFactory, config: ResolvedConfig) -> list[Commit]:
        raws = [
            raw_commit("fix(api): second", short_hash="b000002"),
            raw_commit("fix(api): first", short_hash="b000001"),
            raw_commit("fix(docs): lonely", short_hash="b000003"),
        ]
        return parse_commits(raws, config)

    def test_group_false_inlines_scope(
        self, raw_commit: RawFactory, make_config: ConfigFactory
    ) -> None:
        config = make_config(group=False)
        md = render_markdown(self._two_in_scope(raw_commit, config), config)
        assert "- **api**: First" in md
        assert "- **docs**: Lonely" in md
        assert "- **api**:\n" not in md

    def test_group_multiple_nests_only_shared_scopes(
        self, raw_commit: RawFactory, make_config: ConfigFactory
    ) -> None:
        config = make_config(group="multiple")
        md = render_markdown(self._two_in_scope(raw_commit, config), config)
        assert "- **api**:\n  - First" in md
        assert "- **docs**: Lonely" in md

    def test_oldest_first_within_scope(
        self, raw_commit: RawFactory, make_config: ConfigFactory
    ) -> None:
        config = make_config()
        md = render_markdown(self._two_in_scope(raw_commit, config), config)
        assert md.index("First") < md.index("Second")


class TestInlineReferences:
    def test_authors_and_issues(self, raw_commit: RawFactory, make_config: ConfigFactory) -> None:
        config = make_config()
        commits = parse_commits([raw_commit("fix: crash on start (#12)")], config)
        commits[0].resolved_authors = [
            AuthorInfo(name="Alice", email="alice@example.com", login="alice"),
            AuthorInfo(name="Bob Smith", email="bob@example.com"),
        ]
        md = render_markdown(commits, config)
        assert "by @alice and **Bob Smith**" in md
        assert "in https://github.com/acme/widgets/issues/12" in md

    def test_capitalize_off(self, raw_commit: RawFactory, make_config: ConfigFactory) -> None:
        config = make_config(capitalize=False)
        md = render_markdown(parse_commits([raw_commit("fix: lower case")], config), config)
        assert "- lower case" in md

    def test_gitlab_links(self, raw_commit: RawFactory, make_config: ConfigFactory) -> None:
        config = make_config(
            repo_provider="gitlab",
            base_url="https://gitlab.com",
            base_url_api="https://gitlab.com/api/v4",
            repo="group/project",
        )
        md = render_markdown(parse_commits([raw_commit("fix: x (#3)")], config), config)
        assert "https://gitlab.com/group/project/-/issues/3" in md
        assert "https://gitlab.com/group/project/-/commit/abc1234" in md
        assert "[View changes on GitLab](https://gitlab.com/group/project/-/compare/" in md


def test_sanitize_removes_nbsp() -> None:
    assert sanitize_markdown("### &nbsp;&nbsp;Title &nbsp;-&nbsp; x") == "### Title - x"
