from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app.api import articles, experiments, learning, preferences, stats
from app.core.config import settings
from app.core.errors import init_sentry
from app.core.logging_config import get_logger
from app.db import create_db_and_tables
from app.middleware.context import RequestContextMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Portfolio dashboard API starting", environment=settings.ENVIRONMENT)
    create_db_and_tables()
    if settings.SENTRY_DSN:
        init_sentry(settings.SENTRY_DSN, environment=settings.ENVIRONMENT)

    logger.info(
        "Upstream credentials",
        github=bool(settings.GITHUB_TOKEN and settings.GITHUB_USERNAME),
        wakatime=bool(settings.WAKATIME_API_KEY),
    )
    yield
    logger.info("Portfolio dashboard API stopped")


app = FastAPI(title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json", lifespan=lifespan)

# Set all CORS enabled origins
origins = [
    "http://localhost:3000",  # Next/React default
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    settings.FRONTEND_URL,  # Dynamic from env
]

# Clean up duplicates and empty strings
origins = list(set([o for o in origins if o]))

# GZip compression for responses > 1KB
app.add_middleware(cast(Any, GZipMiddleware), minimum_size=1000)

app.add_middleware(cast(Any, RequestContextMiddleware))

app.add_middleware(
    cast(Any, CORSMiddleware),
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Data-Source"],
)

app.include_router(stats.router, prefix=settings.API_V1_STR, tags=["stats"])
app.include_router(articles.router, prefix=f"{settings.API_V1_STR}/articles", tags=["articles"])
app.include_router(experiments.router, prefix=f"{settings.API_V1_STR}/experiments", tags=["experiments"])
app.include_router(learning.router, prefix=f"{settings.API_V1_STR}/learning-entries", tags=["learning"])
app.include_router(preferences.router, prefix=f"{settings.API_V1_STR}/preferences", tags=["preferences"])


@app.get("/")
def root():
    return {"message": "Welcome to the Portfolio Dashboard API"}


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "healthy"}
