"""Application settings loaded from environment variables."""

from __future__ import annotations

from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase
    supabase_url: str
    supabase_service_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # App
    app_name: str = "Streak API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"
    slow_query_log_threshold_ms: int = 0

    # Streaks
    streak_timezone: str = "America/Bogota"
    streak_milestone_weeks: int = 4
    streak_reset_after_weeks: int = 3
    streak_timeline_weeks: int = 6
    milestone_bonus_points: int = 100

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def streak_zone(self) -> ZoneInfo:
        """Reference timezone used to decide weekdays and Saturdays."""
        return ZoneInfo(self.streak_timezone)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
