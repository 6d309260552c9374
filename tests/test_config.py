"""Tests for configuration module."""

from __future__ import annotations

import pytest

from halftrack.config import Settings, _ENV_PROFILES, get_database_url, get_settings


def test_settings_dataclass():
    s = Settings(database_url="sqlite:///x.db")
    assert s.database_url == "sqlite:///x.db"
    assert s.app_env == "dev"
    assert s.state_key == "halftrack_v2"
    assert s.stale_completion_days == 7
    assert s.request_id_header_name == "X-Request-ID"


def test_settings_frozen():
    s = Settings(database_url="x")
    with pytest.raises(AttributeError):
        s.database_url = "y"


def test_settings_is_production():
    s = Settings(database_url="x", app_env="production")
    assert s.is_production is True
    assert Settings(database_url="x").is_production is False


def test_get_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://from-env/db")
    assert get_database_url() == "postgresql://from-env/db"


def test_get_database_url_default(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert get_database_url() == "sqlite:///halftrack.db"


def test_get_settings_uses_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("STATE_KEY", "club_plan")
    monkeypatch.setenv("STALE_COMPLETION_DAYS", "3")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    s = get_settings()
    assert s.app_env == "production"
    assert s.state_key == "club_plan"
    assert s.stale_completion_days == 3
    assert s.cors_origins == ["http://a.test", "http://b.test"]


def test_get_settings_cached():
    assert get_settings() is get_settings()


def test_profile_defaults(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert get_settings().log_level == "WARNING"


def test_unknown_env_falls_back_to_dev(monkeypatch):
    monkeypatch.setenv("APP_ENV", "qa")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert get_settings().log_level == "DEBUG"


def test_env_profiles_exist():
    assert set(_ENV_PROFILES) == {"dev", "staging", "production"}
