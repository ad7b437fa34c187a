"""
CI Summarizer - Commit Range Tests
==================================

Unit tests for range parsing, resolution planning, and the compare
and fallback steps.
"""

import httpx
import pytest

from ci_summarizer.core.commit_range import (
    normalize_range,
    parse_range,
    plan_resolution,
    resolve_commit_messages,
    resolve_commits,
    single_commit_fallback,
)
from ci_summarizer.exceptions import ConfigurationError, UpstreamError
from ci_summarizer.schemas import ResolutionMode


class TestRangeParsing:
    """Tests for normalize_range and parse_range."""

    def test_two_dot_becomes_three_dot(self):
        assert normalize_range("abc..def") == "abc...def"

    def test_three_dot_unchanged(self):
        assert normalize_range("abc...def") == "abc...def"

    def test_blank_range_is_absent(self):
        assert normalize_range(None) is None
        assert normalize_range("") is None
        assert normalize_range("   ") is None

    def test_only_first_two_dot_replaced(self):
        assert normalize_range("a..b..c") == "a...b..c"

    def test_parse_range_splits_base_and_head(self):
        parsed = parse_range("v1.0.0..v1.1.0")

        assert parsed.base == "v1.0.0"
        assert parsed.head == "v1.1.0"
        assert parsed.spec == "v1.0.0...v1.1.0"

    def test_parse_range_without_head(self):
        """A range missing one side cannot be compared."""
        assert parse_range("abc...") is None
        assert parse_range("...def") is None

    def test_parse_range_without_separator(self):
        assert parse_range("abc123") is None


class TestResolutionPlan:
    """Tests for the network-free planning step."""

    def test_two_dot_plan_equals_three_dot_plan(self):
        assert plan_resolution("abc..def", None) == plan_resolution("abc...def", None)

    def test_range_plans_compare_with_head_fallback(self):
        plan = plan_resolution("abc...def", "zzz")

        assert plan.mode == ResolutionMode.COMPARE
        assert plan.commit_range.base == "abc"
        assert single_commit_fallback(plan) == ["def"]

    def test_no_range_uses_pipeline_sha(self):
        plan = plan_resolution(None, "xyz")

        assert plan.mode == ResolutionMode.SINGLE
        assert single_commit_fallback(plan) == ["xyz"]

    def test_range_without_separator_is_single_ref(self):
        plan = plan_resolution("abc123", "xyz")

        assert plan.mode == ResolutionMode.SINGLE
        assert plan.fallback_sha == "abc123"

    def test_incomplete_range_uses_pipeline_sha(self):
        plan = plan_resolution("abc..", "xyz")

        assert single_commit_fallback(plan) == ["xyz"]

    def test_nothing_configured_raises(self):
        with pytest.raises(ConfigurationError, match="No commit or commit range"):
            plan_resolution(None, None)

        with pytest.raises(ConfigurationError):
            plan_resolution("", "  ")


class TestResolveCommits:
    """Tests for the compare step and single-commit fallback."""

    @pytest.mark.asyncio
    async def test_compare_returns_commits_in_order(self, make_settings, make_github, compare_handler):
        """Example: 'abc..def' resolves to the compare commit list."""
        handler = compare_handler(compare_shas=["d1", "d2", "def"])
        settings = make_settings(semaphore_git_commit_range="abc..def")

        async with make_github(handler) as github:
            commits = await resolve_commits(settings, github)

        assert commits == ["d1", "d2", "def"]
        assert handler.calls[0].url.path == "/repos/acme/widgets/compare/abc...def"
        assert handler.calls[0].headers["Authorization"] == "Bearer gh-token"

    @pytest.mark.asyncio
    async def test_two_dot_behaves_like_three_dot(self, make_settings, make_github, compare_handler):
        results = []
        paths = []
        for commit_range in ("abc..def", "abc...def"):
            handler = compare_handler(compare_shas=["d1", "def"])
            async with make_github(handler) as github:
                results.append(await resolve_commits(
                    make_settings(semaphore_git_commit_range=commit_range), github
                ))
            paths.append([r.url.path for r in handler.calls])

        assert results[0] == results[1]
        assert paths[0] == paths[1]

    @pytest.mark.asyncio
    async def test_compare_error_status_falls_back_to_head(self, make_settings, make_github, compare_handler):
        handler = compare_handler(compare_status=404)
        settings = make_settings(semaphore_git_commit_range="abc...def", semaphore_git_sha="zzz")

        async with make_github(handler) as github:
            commits = await resolve_commits(settings, github)

        assert commits == ["def"]

    @pytest.mark.asyncio
    async def test_compare_network_error_falls_back_to_head(self, make_settings, make_github):
        """Example: compare throws, so only the head commit is reviewed."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_github(handler) as github:
            commits = await resolve_commits(
                make_settings(semaphore_git_commit_range="abc...def"), github
            )

        assert commits == ["def"]

    @pytest.mark.asyncio
    async def test_empty_compare_falls_back_to_head(self, make_settings, make_github, compare_handler):
        handler = compare_handler(compare_shas=[])

        async with make_github(handler) as github:
            commits = await resolve_commits(
                make_settings(semaphore_git_commit_range="abc...def"), github
            )

        assert commits == ["def"]

    @pytest.mark.asyncio
    async def test_missing_commits_key_falls_back_to_head(self, make_settings, make_github, compare_handler):
        handler = compare_handler(compare_body={"status": "diverged"})

        async with make_github(handler) as github:
            commits = await resolve_commits(
                make_settings(semaphore_git_commit_range="abc...def"), github
            )

        assert commits == ["def"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"commits": "oops"},
        {"commits": [{"sha": None}]},
        {"commits": ["d1"]},
        {"commits": [{"commit": {"message": "feat: no sha"}}]},
        {"commits": [{"sha": "d1"}, {"sha": ""}]},
    ])
    async def test_malformed_compare_falls_back_to_head(self, body, make_settings, make_github, compare_handler):
        """Malformed compare payloads are treated as a failed comparison."""
        handler = compare_handler(compare_body=body)

        async with make_github(handler) as github:
            commits = await resolve_commits(
                make_settings(semaphore_git_commit_range="abc...def"), github
            )

        assert commits == ["def"]

    @pytest.mark.asyncio
    async def test_single_sha_makes_no_request(self, make_settings, make_github, compare_handler):
        """Example: no range and SEMAPHORE_GIT_SHA='xyz' resolves to ['xyz']."""
        handler = compare_handler(compare_shas=["d1"])

        async with make_github(handler) as github:
            commits = await resolve_commits(make_settings(semaphore_git_sha="xyz"), github)

        assert commits == ["xyz"]
        assert handler.calls == []

    @pytest.mark.asyncio
    async def test_nothing_configured_fails_before_network(self, make_settings, make_github, compare_handler):
        handler = compare_handler(compare_shas=["d1"])

        async with make_github(handler) as github:
            with pytest.raises(ConfigurationError):
                await resolve_commits(make_settings(), github)

        assert handler.calls == []


class TestResolveCommitMessages:
    """Tests for release-note commit message resolution."""

    @pytest.mark.asyncio
    async def test_compare_messages(self, make_github, compare_handler):
        handler = compare_handler(compare_shas=["a1", "a2"], recent_shas=["r1"])

        async with make_github(handler) as github:
            messages = await resolve_commit_messages(github, "v1.0.0..v1.1.0")

        assert messages == ["feat: change a1", "feat: change a2"]
        assert handler.calls[0].url.path.endswith("/compare/v1.0.0...v1.1.0")

    @pytest.mark.asyncio
    async def test_compare_failure_falls_back_to_recent(self, make_github, compare_handler):
        handler = compare_handler(compare_status=404, recent_shas=["r1", "r2"])

        async with make_github(handler) as github:
            messages = await resolve_commit_messages(github, "v1.0.0...v1.1.0", per_page=5)

        assert messages == ["feat: change r1", "feat: change r2"]
        assert handler.calls[-1].url.params["per_page"] == "5"

    @pytest.mark.asyncio
    async def test_invalid_range_falls_back_to_recent(self, make_github, compare_handler):
        handler = compare_handler(recent_shas=["r1"])

        async with make_github(handler) as github:
            messages = await resolve_commit_messages(github, "v1.0.0")

        assert messages == ["feat: change r1"]
        assert all("/compare/" not in r.url.path for r in handler.calls)

    @pytest.mark.asyncio
    async def test_no_range_uses_recent(self, make_github, compare_handler):
        handler = compare_handler(recent_shas=["r1"])

        async with make_github(handler) as github:
            messages = await resolve_commit_messages(github, None)

        assert messages == ["feat: change r1"]
        assert handler.calls[0].url.params["per_page"] == "10"

    @pytest.mark.asyncio
    async def test_nothing_found_raises(self, make_github, compare_handler):
        handler = compare_handler(compare_shas=[], recent_shas=[])

        async with make_github(handler) as github:
            with pytest.raises(UpstreamError, match="No commit messages"):
                await resolve_commit_messages(github, "v1..v2")
