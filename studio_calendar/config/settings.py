import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is only meant for local development; production deployments point
    DATABASE_URL at the hosted PostgreSQL instance.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "studio.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(
        f"Using SQLite database (LOCAL DEV ONLY): {db_url}\n"
        "Set DATABASE_URL environment variable to use PostgreSQL in production."
    )
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    default_timezone: str = Field(
        default="UTC",
        validation_alias="DEFAULT_TIMEZONE",
        description="IANA timezone used when a studio has none configured",
    )
    week_row_height_px: float = Field(
        default=80.0,
        validation_alias="WEEK_ROW_HEIGHT_PX",
        description="Height of one hour row in the week grid",
        gt=0,
    )
    month_max_visible_sessions: int = Field(
        default=3,
        validation_alias="MONTH_MAX_VISIBLE_SESSIONS",
        description="Sessions listed per month cell before the '+N more' indicator",
        ge=0,
    )
    fetch_months_back: int = Field(default=3, validation_alias="FETCH_MONTHS_BACK", ge=0)
    fetch_months_forward: int = Field(default=6, validation_alias="FETCH_MONTHS_FORWARD", ge=0)
    max_session_days: int = Field(
        default=7,
        validation_alias="MAX_SESSION_DAYS",
        description="Longest session span the calendar loads continuation days for",
        ge=1,
    )
    now_refresh_seconds: int = Field(
        default=60,
        validation_alias="NOW_REFRESH_SECONDS",
        description="Refresh interval of the week view current-time indicator",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("default_timezone")
    @classmethod
    def validate_default_timezone(cls, value: str) -> str:
        """Validate that the default timezone is a known IANA name."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Invalid DEFAULT_TIMEZONE '{value}'. Defaulting to UTC.")
            return "UTC"
        return value


settings = Settings()
