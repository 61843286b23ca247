"""Dashboard analytics endpoints backed by GitHub and WakaTime."""

from typing import Any

import structlog
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.core.errors import ConfigurationError, capture_exception
from app.services.github_stats import get_github_stats
from app.services.wakatime_stats import DEFAULT_RANGE, ENDPOINT_STATS, get_wakatime_stats

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/github/stats")
async def github_stats() -> Any:
    """
    Repository, commit, language and 365-day activity summary.

    400 when credentials are missing, 500 when GitHub cannot be reached.
    """
    try:
        return await get_github_stats()
    except ConfigurationError as e:
        return JSONResponse(
            content={"error": str(e), "debug": e.missing},
            status_code=400,
        )
    except Exception as e:
        capture_exception(e, context={"operation": "github_stats"})
        return JSONResponse(content={"error": "Failed to fetch GitHub data"}, status_code=500)


@router.get("/wakatime/stats")
async def wakatime_stats(
    range_: str = Query(default=DEFAULT_RANGE, alias="range"),
    endpoint: str = Query(default=ENDPOINT_STATS),
) -> Any:
    """
    Coding-time stats (endpoint=stats) or daily hours (endpoint=summaries).

    Always 200; the X-Data-Source header says whether the data is live or placeholder.
    """
    result = await get_wakatime_stats(range_=range_, endpoint=endpoint)
    return JSONResponse(content=result.data, headers={"X-Data-Source": result.source})
