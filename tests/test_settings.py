"""Tests for settings parsing and the time helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.core.clock import day_of, local_day, utc_day
from app.core.config import Settings
from app.database.connection import get_async_database_url


class TestSettings:
    """Tests for environment parsing."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ADMIN_USERS", raising=False)
        monkeypatch.delenv("SNAPSHOT_TIMEZONE", raising=False)
        settings = Settings(_env_file=None)

        assert settings.admin_users == ["admin"]
        assert settings.snapshot_timezone == "UTC"
        assert settings.content_refresh_cron == "5 0 * * *"

    def test_csv_lists_from_env(self, monkeypatch):
        monkeypatch.setenv("ADMIN_USERS", "root, ops ,")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
        settings = Settings(_env_file=None)

        assert settings.admin_users == ["root", "ops"]
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_timezone(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, snapshot_timezone="Mars/Olympus")

    def test_environment_flags(self):
        assert Settings(_env_file=None, environment="development").is_development
        assert Settings(_env_file=None, environment="production").is_production

    def test_async_database_url(self):
        assert get_async_database_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert get_async_database_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert get_async_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestClockHelpers:
    """Tests for calendar-day helpers."""

    def test_utc_day_and_local_day_can_differ(self, clock):
        clock.moment = datetime(2026, 10, 19, 23, 30, tzinfo=UTC)

        assert utc_day(clock) == date(2026, 10, 19)
        assert local_day(clock, "Asia/Tokyo") == date(2026, 10, 20)
        assert local_day(clock, "UTC") == date(2026, 10, 19)

    def test_day_of_converts_to_utc(self):
        moment = datetime(2026, 10, 20, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert day_of(moment) == date(2026, 10, 19)

    def test_day_of_naive_is_utc(self):
        assert day_of(datetime(2026, 10, 19, 23, 59)) == date(2026, 10, 19)
