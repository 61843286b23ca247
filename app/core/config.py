from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "Portfolio Dashboard"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"  # "production" switches logs to JSON
    LOG_LEVEL: str = "INFO"

    # Local SQLite by default; point at the hosted Postgres in deployment
    DATABASE_URL: str = "sqlite:///./portfolio.db"

    # Frontend URL for CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # GitHub (source activity). Both are required by the stats endpoint.
    GITHUB_TOKEN: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GITHUB_TOKEN", "NEXT_PUBLIC_GITHUB_TOKEN")
    )
    GITHUB_USERNAME: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GITHUB_USERNAME", "NEXT_PUBLIC_GITHUB_USERNAME")
    )
    GITHUB_API_BASE: str = "https://api.github.com"

    # WakaTime (time tracking). Optional: placeholder data is served without it.
    WAKATIME_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("WAKATIME_API_KEY", "NEXT_PUBLIC_WAKATIME_API_KEY", "WAKATIME_SECRET"),
    )
    WAKATIME_API_BASE: str = "https://wakatime.com/api/v1"

    # Timeout applied to every third-party provider call (seconds)
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # Table API used by the client-side collection mirrors
    STORE_URL: Optional[str] = "http://localhost:8000/api/v1"
    STORE_TIMEOUT_SECONDS: float = 10.0

    # Key-value preferences (sidebar state, profile text blocks)
    PREFERENCES_PATH: str = "preferences.json"

    # Error tracking (optional)
    SENTRY_DSN: str = ""

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore", populate_by_name=True)


settings = Settings()
