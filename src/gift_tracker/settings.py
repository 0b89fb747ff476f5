from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from gift_tracker.date_logic import DEFAULT_LEAP_DAY_RULE, LEAP_DAY_RULES

DEFAULT_SESSION_MAX_AGE_DAYS = 30


@dataclass(frozen=True)
class Settings:
    secret_key: str
    database_url: str
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE
    session_max_age_days: int = DEFAULT_SESSION_MAX_AGE_DAYS


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise ValueError(f"Missing required environment variable: {name}")
    return value.strip()


def _leap_day_rule(value: str) -> str:
    rule = value.strip().lower()
    if rule not in LEAP_DAY_RULES:
        raise ValueError(f"LEAP_DAY_RULE must be one of {sorted(LEAP_DAY_RULES)}")
    return rule


def _positive_int(name: str, value: str) -> int:
    if not value.strip().isdigit() or int(value) <= 0:
        raise ValueError(f"{name} must be a positive integer")
    return int(value)


def sqlite_path(database_url: str) -> Path | None:
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return None
    raw = database_url[len(prefix):]
    if not raw or raw == ":memory:":
        return None
    return Path(raw)


def load_settings() -> Settings:
    root = Path.cwd()

    secret_key = _required_env("SECRET_KEY")
    database_url = os.getenv(
        "DATABASE_URL", f"sqlite:///{root / 'data' / 'gift_tracker.db'}"
    )
    leap_day_rule = _leap_day_rule(os.getenv("LEAP_DAY_RULE", DEFAULT_LEAP_DAY_RULE))
    session_max_age_days = _positive_int(
        "SESSION_MAX_AGE_DAYS",
        os.getenv("SESSION_MAX_AGE_DAYS", str(DEFAULT_SESSION_MAX_AGE_DAYS)),
    )

    return Settings(
        secret_key=secret_key,
        database_url=database_url,
        leap_day_rule=leap_day_rule,
        session_max_age_days=session_max_age_days,
    )
