"""
WakaTime coding-time aggregation for the dashboard.

Two views:
- "stats": language/project breakdown for a named range (e.g. last_30_days)
- "summaries": one entry per day for the last 30 days

This endpoint never fails its caller. A missing API key, a non-2xx answer,
a timeout, a transport error or an unexpected body all produce placeholder
data instead. Every placeholder response is logged as
"wakatime.placeholder_served" with the reason, so a deployment that is
permanently serving demo data shows up in the logs.
"""

import base64
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import structlog

from app.core.config import settings

logger = structlog.get_logger(__name__)

DEFAULT_RANGE = "last_30_days"
ENDPOINT_STATS = "stats"
ENDPOINT_SUMMARIES = "summaries"
SUMMARY_WINDOW_DAYS = 30

SOURCE_LIVE = "live"
SOURCE_PLACEHOLDER = "placeholder"

PLACEHOLDER_LANGUAGES = [
    {"name": "TypeScript", "hours": 45.5, "percent": 35},
    {"name": "React", "hours": 32.2, "percent": 25},
    {"name": "Next.js", "hours": 25.8, "percent": 20},
    {"name": "CSS", "hours": 19.4, "percent": 15},
    {"name": "JavaScript", "hours": 6.5, "percent": 5},
]
PLACEHOLDER_PROJECTS = [
    {"name": "Portfolio Dashboard", "hours": 89.2, "percent": 70},
    {"name": "Learning Platform", "hours": 25.5, "percent": 20},
    {"name": "Blog CMS", "hours": 12.8, "percent": 10},
]
PLACEHOLDER_TOTAL_SECONDS = 324000
PLACEHOLDER_DAILY_AVERAGE = 3600

# Weekly shape for the placeholder heatmap (hours per weekday)
PLACEHOLDER_WEEK = [2.0, 3.5, 5.0, 6.5, 4.0, 1.5, 0.5]


@dataclass
class WakaTimeResult:
    data: Dict[str, Any]
    source: str = SOURCE_LIVE
    reason: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.source == SOURCE_PLACEHOLDER


def placeholder_daily_hours(today: date, days: int = SUMMARY_WINDOW_DAYS) -> List[Dict[str, Any]]:
    """`days` synthetic entries ending today, oldest first."""
    entries = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        hours = PLACEHOLDER_WEEK[day.weekday()]
        entries.append(
            {
                "date": day.isoformat(),
                "hours": hours,
                "total_seconds": int(hours * 3600),
                "languages": [],
                "projects": [],
            }
        )
    return entries


def placeholder_data(endpoint: str, today: Optional[date] = None) -> Dict[str, Any]:
    if endpoint == ENDPOINT_SUMMARIES:
        return {"dailyHours": placeholder_daily_hours(today or datetime.now(timezone.utc).date())}
    return {
        "languageStats": [dict(item) for item in PLACEHOLDER_LANGUAGES],
        "projectStats": [dict(item) for item in PLACEHOLDER_PROJECTS],
        "totalSeconds": PLACEHOLDER_TOTAL_SECONDS,
        "dailyAverage": PLACEHOLDER_DAILY_AVERAGE,
    }


def _placeholder(endpoint: str, reason: str, **context: Any) -> WakaTimeResult:
    logger.warning("wakatime.placeholder_served", endpoint=endpoint, reason=reason, **context)
    return WakaTimeResult(data=placeholder_data(endpoint), source=SOURCE_PLACEHOLDER, reason=reason)


def build_client(api_key: str) -> httpx.AsyncClient:
    """HTTP client for the WakaTime API (API key sent as HTTP Basic)."""
    encoded = base64.b64encode(api_key.encode()).decode()
    return httpx.AsyncClient(
        base_url=settings.WAKATIME_API_BASE,
        headers={"Authorization": f"Basic {encoded}", "Accept": "application/json"},
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )


def map_summaries(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten the summaries payload into one entry per day."""
    daily_hours = []
    for day in payload.get("data") or []:
        grand_total = day.get("grand_total") or {}
        daily_hours.append(
            {
                "date": (day.get("range") or {}).get("date"),
                "hours": (grand_total.get("hours") or 0) + (grand_total.get("minutes") or 0) / 60,
                "total_seconds": int(grand_total.get("total_seconds") or 0),
                "languages": day.get("languages") or [],
                "projects": day.get("projects") or [],
            }
        )
    return {"dailyHours": daily_hours}


def map_stats(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = payload.get("data") or {}
    return {
        "languageStats": data.get("languages") or [],
        "projectStats": data.get("projects") or [],
        "totalSeconds": int(data.get("total_seconds") or 0),
        "dailyAverage": data.get("daily_average") or 0,
    }


async def _fetch(client: httpx.AsyncClient, endpoint: str, range_: str, today: date) -> httpx.Response:
    if endpoint == ENDPOINT_SUMMARIES:
        start = today - timedelta(days=SUMMARY_WINDOW_DAYS)
        return await client.get(
            "/users/current/summaries",
            params={"start": start.isoformat(), "end": today.isoformat()},
        )
    return await client.get(f"/users/current/stats/{range_}")


async def get_wakatime_stats(range_: str = DEFAULT_RANGE, endpoint: str = ENDPOINT_STATS) -> WakaTimeResult:
    """
    Fetch and reshape WakaTime data. Never raises: falls back to placeholder data.
    """
    if endpoint != ENDPOINT_SUMMARIES:
        endpoint = ENDPOINT_STATS
    range_ = range_ or DEFAULT_RANGE

    api_key = settings.WAKATIME_API_KEY
    if not api_key:
        return _placeholder(endpoint, "missing_api_key")

    today = datetime.now(timezone.utc).date()
    try:
        async with build_client(api_key) as client:
            response = await _fetch(client, endpoint, range_, today)

        if not response.is_success:
            return _placeholder(
                endpoint,
                "upstream_status",
                status_code=response.status_code,
                body=response.text[:500],
            )

        payload = response.json()
        data = map_summaries(payload) if endpoint == ENDPOINT_SUMMARIES else map_stats(payload)
    except httpx.TimeoutException:
        return _placeholder(endpoint, "upstream_timeout")
    except httpx.HTTPError as e:
        return _placeholder(endpoint, "upstream_unreachable", error=str(e))
    except Exception as e:
        # Malformed bodies and anything else unexpected
        return _placeholder(endpoint, "unexpected_error", error=str(e), error_type=type(e).__name__)

    logger.info("WakaTime stats served", endpoint=endpoint, range=range_)
    return WakaTimeResult(data=data)
