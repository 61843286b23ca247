"""
Tests for the GitHub stats aggregation.

Tests cover:
1. Activity heatmap shape (365 ascending days ending today)
2. Language totals summed across sampled repositories
3. Missing credentials -> 400 without any outbound request
4. One failing repository does not sink the others
5. Repository listing failure -> 500 with a generic message
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.core.config import settings
from app.core.errors import ConfigurationError, UpstreamError
from app.services.github_stats import (
    ACTIVITY_DAYS,
    aggregate_github_stats,
    build_activity,
    get_github_stats,
    merge_language_stats,
)

USERNAME = "octocat"


def make_repos(count: int):
    return [
        {"name": f"repo{i}", "full_name": f"{USERNAME}/repo{i}", "updated_at": "2025-01-01T00:00:00Z"}
        for i in range(count)
    ]


class FakeGitHub:
    """MockTransport handler that serves a small GitHub account."""

    def __init__(self, repos=None, events=None, failing_repos=(), broken_repos=(), repos_status=200):
        self.repos = make_repos(7) if repos is None else repos
        self.events = events or []
        self.failing_repos = set(failing_repos)
        self.broken_repos = set(broken_repos)
        self.repos_status = repos_status
        self.paths = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.paths.append(path)

        if path == f"/users/{USERNAME}/repos":
            if self.repos_status != 200:
                return httpx.Response(self.repos_status, text="Bad credentials")
            return httpx.Response(200, json=self.repos)
        if path == f"/users/{USERNAME}/events":
            return httpx.Response(200, json=self.events)

        repo = path.split("/")[3]
        if repo in self.broken_repos:
            raise httpx.ConnectError("connection reset", request=request)
        if repo in self.failing_repos:
            return httpx.Response(500, text="boom")
        if path.endswith("/commits"):
            return httpx.Response(200, json=[{"sha": f"{repo}-a"}, {"sha": f"{repo}-b"}])
        if path.endswith("/languages"):
            return httpx.Response(200, json={"Python": 100, "TypeScript": 50})
        return httpx.Response(404)


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="https://api.github.test", transport=httpx.MockTransport(handler))


@pytest.fixture
def github_credentials():
    with patch.object(settings, "GITHUB_TOKEN", "ghp_test"), patch.object(settings, "GITHUB_USERNAME", USERNAME):
        yield


class TestBuildActivity:
    """Tests for the 365-day heatmap."""

    def test_exactly_365_ascending_days_ending_today(self):
        today = date(2025, 3, 1)
        activity = build_activity([], today)

        assert len(activity) == ACTIVITY_DAYS
        assert activity[-1]["date"] == "2025-03-01"
        assert activity[0]["date"] == (today - timedelta(days=364)).isoformat()
        dates = [entry["date"] for entry in activity]
        assert dates == sorted(dates)
        assert all(entry["count"] == 0 for entry in activity)

    def test_counts_events_per_utc_day(self):
        today = date(2025, 3, 1)
        events = [
            {"created_at": "2025-03-01T10:00:00Z"},
            {"created_at": "2025-03-01T23:59:59Z"},
            {"created_at": "2025-02-28T08:00:00Z"},
        ]
        activity = build_activity(events, today)

        assert activity[-1] == {"date": "2025-03-01", "count": 2}
        assert activity[-2] == {"date": "2025-02-28", "count": 1}

    def test_ignores_events_outside_window_and_malformed_dates(self):
        today = date(2025, 3, 1)
        events = [
            {"created_at": "2023-01-01T00:00:00Z"},
            {"created_at": "not a date"},
            {"created_at": None},
            {},
        ]
        activity = build_activity(events, today)

        assert len(activity) == ACTIVITY_DAYS
        assert sum(entry["count"] for entry in activity) == 0


class TestMergeLanguageStats:
    def test_sums_bytes_across_repos(self):
        merged = merge_language_stats([{"Python": 100, "Go": 10}, {"Python": 5}, {}])
        assert merged == {"Python": 105, "Go": 10}


class TestAggregateGithubStats:
    """Tests for aggregate_github_stats against a fake GitHub."""

    @pytest.mark.asyncio
    async def test_summary_shape(self):
        today = datetime.now(timezone.utc).date()
        fake = FakeGitHub(events=[{"created_at": f"{today.isoformat()}T12:00:00Z"}])

        async with client_for(fake) as client:
            stats = await aggregate_github_stats(client, USERNAME)

        assert stats["totalRepos"] == 7
        assert len(stats["recentRepos"]) == 7
        # 5 sampled repos x 2 commits each
        assert stats["totalCommits"] == 10
        assert stats["languageStats"] == {"Python": 500, "TypeScript": 250}
        assert len(stats["activity"]) == ACTIVITY_DAYS
        assert stats["activity"][-1] == {"date": today.isoformat(), "count": 1}

    @pytest.mark.asyncio
    async def test_only_five_most_recent_repos_are_sampled(self):
        fake = FakeGitHub(repos=make_repos(8))

        async with client_for(fake) as client:
            await aggregate_github_stats(client, USERNAME)

        sampled = {path.split("/")[3] for path in fake.paths if path.startswith("/repos/")}
        assert sampled == {f"repo{i}" for i in range(5)}

    @pytest.mark.asyncio
    async def test_recent_repos_capped_at_ten(self):
        fake = FakeGitHub(repos=make_repos(12))

        async with client_for(fake) as client:
            stats = await aggregate_github_stats(client, USERNAME)

        assert stats["totalRepos"] == 12
        assert [r["name"] for r in stats["recentRepos"]] == [f"repo{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_failing_repo_is_skipped(self):
        fake = FakeGitHub(failing_repos={"repo1"}, broken_repos={"repo3"})

        async with client_for(fake) as client:
            stats = await aggregate_github_stats(client, USERNAME)

        # Only repo0, repo2 and repo4 contribute
        assert stats["totalCommits"] == 6
        assert stats["languageStats"] == {"Python": 300, "TypeScript": 150}
        assert len(stats["activity"]) == ACTIVITY_DAYS

    @pytest.mark.asyncio
    async def test_all_sampled_repos_failing_still_succeeds(self):
        fake = FakeGitHub(failing_repos={f"repo{i}" for i in range(5)})

        async with client_for(fake) as client:
            stats = await aggregate_github_stats(client, USERNAME)

        assert stats["totalCommits"] == 0
        assert stats["languageStats"] == {}
        assert stats["totalRepos"] == 7

    @pytest.mark.asyncio
    async def test_repository_listing_failure_raises(self):
        fake = FakeGitHub(repos_status=401)

        async with client_for(fake) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await aggregate_github_stats(client, USERNAME)

        assert exc_info.value.status_code == 401


class TestGetGithubStats:
    @pytest.mark.asyncio
    async def test_missing_credentials_make_no_requests(self):
        builder = MagicMock()
        with patch.object(settings, "GITHUB_TOKEN", None), patch.object(settings, "GITHUB_USERNAME", USERNAME), patch(
            "app.services.github_stats.build_client", builder
        ):
            with pytest.raises(ConfigurationError) as exc_info:
                await get_github_stats()

        assert exc_info.value.missing == {"hasToken": False, "hasUsername": True}
        builder.assert_not_called()


class TestGithubStatsEndpoint:
    """Tests for GET /api/v1/github/stats."""

    def test_missing_username_returns_400(self, client):
        builder = MagicMock()
        with patch.object(settings, "GITHUB_TOKEN", "ghp_test"), patch.object(settings, "GITHUB_USERNAME", None), patch(
            "app.services.github_stats.build_client", builder
        ):
            response = client.get("/api/v1/github/stats")

        assert response.status_code == 400
        body = response.json()
        assert "error" in body
        assert body["debug"] == {"hasToken": True, "hasUsername": False}
        builder.assert_not_called()

    def test_success(self, client, github_credentials):
        fake = FakeGitHub()
        with patch("app.services.github_stats.build_client", side_effect=lambda token: client_for(fake)):
            response = client.get("/api/v1/github/stats")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"totalRepos", "totalCommits", "languageStats", "activity", "recentRepos"}
        assert len(body["activity"]) == ACTIVITY_DAYS

    def test_upstream_failure_returns_500(self, client, github_credentials):
        fake = FakeGitHub(repos_status=500)
        with patch("app.services.github_stats.build_client", side_effect=lambda token: client_for(fake)):
            response = client.get("/api/v1/github/stats")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch GitHub data"}
