from pathlib import Path

import pytest

from gift_tracker.settings import load_settings, sqlite_path


def test_load_settings_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LEAP_DAY_RULE", raising=False)
    monkeypatch.delenv("SESSION_MAX_AGE_DAYS", raising=False)

    settings = load_settings()

    assert settings.secret_key == "s3cret"
    assert settings.leap_day_rule == "mar1"
    assert settings.session_max_age_days == 30
    assert sqlite_path(settings.database_url) == tmp_path / "data" / "gift_tracker.db"


def test_load_settings_requires_secret(monkeypatch) -> None:
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(ValueError, match="SECRET_KEY"):
        load_settings()


def test_load_settings_rejects_unknown_leap_rule(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.setenv("LEAP_DAY_RULE", "skip")

    with pytest.raises(ValueError, match="LEAP_DAY_RULE"):
        load_settings()


def test_load_settings_rejects_bad_session_age(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.delenv("LEAP_DAY_RULE", raising=False)
    monkeypatch.setenv("SESSION_MAX_AGE_DAYS", "0")

    with pytest.raises(ValueError, match="SESSION_MAX_AGE_DAYS"):
        load_settings()


def test_sqlite_path_ignores_memory_and_other_engines() -> None:
    assert sqlite_path("sqlite:///:memory:") is None
    assert sqlite_path("postgresql://localhost/gifts") is None
