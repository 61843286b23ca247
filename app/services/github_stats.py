"""
GitHub activity aggregation for the dashboard.

Builds one summary for the configured account:
- total public repositories and the 10 most recently updated ones
- a 365-day event heatmap (one entry per UTC day, oldest first, ending today)
- commits authored in the last 30 days across the 5 most recently updated repos
- language byte totals summed across those same 5 repos

Failure policy:
- missing token or username -> ConfigurationError, before any HTTP call
- repository listing fails -> UpstreamError (the endpoint answers 500)
- one sampled repo fails -> logged and skipped, the others still count
"""

import asyncio
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog

from app.core.config import settings
from app.core.errors import ConfigurationError, ErrorHandler, UpstreamError

logger = structlog.get_logger(__name__)

ACTIVITY_DAYS = 365
SAMPLED_REPOS = 5
RECENT_REPOS = 10
COMMIT_WINDOW_DAYS = 30
PER_PAGE = 100


def build_client(token: str) -> httpx.AsyncClient:
    """HTTP client for the GitHub REST API."""
    return httpx.AsyncClient(
        base_url=settings.GITHUB_API_BASE,
        headers={
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "Portfolio-Dashboard",
        },
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )


def _event_day(created_at: Any) -> Optional[date]:
    if not isinstance(created_at, str):
        return None
    try:
        return datetime.fromisoformat(created_at.replace("Z", "+00:00")).astimezone(timezone.utc).date()
    except ValueError:
        return None


def build_activity(events: List[Dict[str, Any]], today: date, days: int = ACTIVITY_DAYS) -> List[Dict[str, Any]]:
    """
    Count events per day over the `days` days ending `today` (inclusive).

    Always returns exactly `days` entries in ascending date order; days
    without events have a count of 0 and events outside the window are ignored.
    """
    counts = Counter(day for day in (_event_day(e.get("created_at")) for e in events) if day is not None)
    start = today - timedelta(days=days - 1)
    return [
        {"date": (start + timedelta(days=offset)).isoformat(), "count": counts.get(start + timedelta(days=offset), 0)}
        for offset in range(days)
    ]


def merge_language_stats(per_repo: List[Dict[str, int]]) -> Dict[str, int]:
    """Sum language byte counts across repositories."""
    totals: Dict[str, int] = {}
    for languages in per_repo:
        for language, byte_count in languages.items():
            totals[language] = totals.get(language, 0) + int(byte_count)
    return totals


async def _fetch_repo_details(
    client: httpx.AsyncClient, username: str, repo: Dict[str, Any], since: str
) -> Tuple[List[Any], Dict[str, int]]:
    """Commits by `username` since `since` and language bytes for one repository."""
    full_name = repo.get("full_name") or f"{username}/{repo['name']}"
    commits: List[Any] = []
    languages: Dict[str, int] = {}

    commits_response = await client.get(
        f"/repos/{full_name}/commits",
        params={"author": username, "per_page": PER_PAGE, "since": since},
    )
    if commits_response.is_success:
        commits = commits_response.json()
    else:
        logger.warning(
            "GitHub commits unavailable",
            repo=full_name,
            status_code=commits_response.status_code,
            body=commits_response.text[:200],
        )

    languages_response = await client.get(f"/repos/{full_name}/languages")
    if languages_response.is_success:
        languages = languages_response.json()
    else:
        logger.warning(
            "GitHub languages unavailable",
            repo=full_name,
            status_code=languages_response.status_code,
            body=languages_response.text[:200],
        )

    if not isinstance(commits, list):
        commits = []
    if not isinstance(languages, dict):
        languages = {}
    return commits, {name: count for name, count in languages.items() if isinstance(count, int)}


async def _sample_repo(
    client: httpx.AsyncClient, username: str, repo: Dict[str, Any], since: str
) -> Tuple[List[Any], Dict[str, int]]:
    """Fetch one repository's details; any failure yields empty results."""
    with ErrorHandler("github_repo_details", context={"repo": repo.get("name")}, level="warning"):
        return await _fetch_repo_details(client, username, repo, since)
    return [], {}


async def _get(client: httpx.AsyncClient, path: str, **params: Any) -> httpx.Response:
    try:
        return await client.get(path, params=params or None)
    except httpx.HTTPError as e:
        raise UpstreamError(f"GitHub request failed: {path}: {e}") from e


async def aggregate_github_stats(client: httpx.AsyncClient, username: str) -> Dict[str, Any]:
    """Run the full aggregation against an already-authenticated client."""
    repos_response = await _get(client, f"/users/{username}/repos", sort="updated", per_page=PER_PAGE)
    if not repos_response.is_success:
        raise UpstreamError(
            f"GitHub API error: {repos_response.status_code} {repos_response.reason_phrase}",
            status_code=repos_response.status_code,
            body=repos_response.text[:500],
        )
    repos = repos_response.json()
    if not isinstance(repos, list):
        raise UpstreamError("GitHub returned an unexpected repository payload")

    events_response = await _get(client, f"/users/{username}/events", per_page=PER_PAGE)
    events = events_response.json() if events_response.is_success else []
    if not events_response.is_success:
        logger.warning("GitHub events unavailable", status_code=events_response.status_code)
    if not isinstance(events, list):
        events = []

    now = datetime.now(timezone.utc)
    activity = build_activity(events, now.date())

    since = (now - timedelta(days=COMMIT_WINDOW_DAYS)).isoformat()
    results = await asyncio.gather(
        *(_sample_repo(client, username, repo, since) for repo in repos[:SAMPLED_REPOS])
    )

    total_commits = sum(len(commits) for commits, _ in results)
    language_stats = merge_language_stats([languages for _, languages in results])

    logger.info(
        "GitHub stats aggregated",
        repos=len(repos),
        events=len(events),
        commits=total_commits,
        languages=len(language_stats),
    )

    return {
        "totalRepos": len(repos),
        "totalCommits": total_commits,
        "languageStats": language_stats,
        "activity": activity,
        "recentRepos": repos[:RECENT_REPOS],
    }


async def get_github_stats() -> Dict[str, Any]:
    """
    Aggregate GitHub stats for the configured account.

    Raises:
        ConfigurationError: token or username missing (no request is made)
        UpstreamError: the repository or event listing could not be fetched
    """
    token = settings.GITHUB_TOKEN
    username = settings.GITHUB_USERNAME

    if not token or not username:
        missing = {"hasToken": bool(token), "hasUsername": bool(username)}
        logger.warning("GitHub credentials not configured", **missing)
        raise ConfigurationError("GitHub credentials not configured", missing=missing)

    async with build_client(token) as client:
        return await aggregate_github_stats(client, username)
