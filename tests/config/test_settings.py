"""Tests for environment-driven settings."""

from studio_calendar.config.settings import Settings


def test_defaults(monkeypatch):
    for name in ("WEEK_ROW_HEIGHT_PX", "MONTH_MAX_VISIBLE_SESSIONS", "NOW_REFRESH_SECONDS", "DEFAULT_TIMEZONE", "MAX_SESSION_DAYS"):
        monkeypatch.delenv(name, raising=False)
    config = Settings(_env_file=None)
    assert config.week_row_height_px == 80
    assert config.month_max_visible_sessions == 3
    assert config.now_refresh_seconds == 60
    assert config.default_timezone == "UTC"
    assert config.max_session_days == 7


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("WEEK_ROW_HEIGHT_PX", "96")
    monkeypatch.setenv("FETCH_MONTHS_BACK", "1")
    monkeypatch.setenv("DEFAULT_TIMEZONE", "America/Chicago")
    config = Settings(_env_file=None)
    assert config.week_row_height_px == 96
    assert config.fetch_months_back == 1
    assert config.default_timezone == "America/Chicago"


def test_invalid_log_level_falls_back(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert Settings(_env_file=None).log_level == "INFO"


def test_log_level_is_uppercased(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings(_env_file=None).log_level == "DEBUG"


def test_invalid_timezone_falls_back(monkeypatch):
    monkeypatch.setenv("DEFAULT_TIMEZONE", "Atlantis/Capital")
    assert Settings(_env_file=None).default_timezone == "UTC"


def test_database_url_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/studio")
    assert Settings(_env_file=None).database_url == "postgresql://localhost/studio"


def test_max_session_days_from_environment(monkeypatch):
    monkeypatch.setenv("MAX_SESSION_DAYS", "14")
    assert Settings(_env_file=None).max_session_days == 14
