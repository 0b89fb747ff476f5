from __future__ import annotations

import calendar
import functools
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum

LEAP_DAY_RULES = {"mar1", "feb28"}
DEFAULT_LEAP_DAY_RULE = "mar1"

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class InvalidDateError(ValueError):
    pass


@functools.total_ordering
class Tier(Enum):
    """Urgency of an upcoming birthday, most urgent first."""

    URGENT = (0, "danger")
    SOON = (1, "warning")
    UPCOMING = (2, "primary")
    DISTANT = (3, "default")

    def __init__(self, rank: int, badge: str) -> None:
        self.rank = rank
        self.badge = badge

    def __lt__(self, other: Tier) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank


@dataclass(frozen=True)
class CountdownResult:
    days_until: int
    tier: Tier
    next_birthday: date
    display_date: str


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def to_utc_date(value: date | datetime | str) -> date:
    """Reduce ``value`` to its UTC calendar date.

    Naive datetimes are taken to already be in UTC. Strings are ISO-8601,
    either a bare ``YYYY-MM-DD`` or a full timestamp with ``Z`` or an offset.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc)
            except OverflowError as exc:
                raise InvalidDateError(f"Date out of range: {value.isoformat()}") from exc
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise InvalidDateError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if not text:
        raise InvalidDateError("Date must not be empty")

    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return to_utc_date(datetime.fromisoformat(text))
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(f"Invalid date: {text}") from exc


def parse_birthday(value: date | datetime | str) -> date:
    return to_utc_date(value)


def birthday_date_for_year(birthday: date, year: int, leap_day_rule: str = DEFAULT_LEAP_DAY_RULE) -> date:
    if birthday.month == 2 and birthday.day == 29 and not is_leap_year(year):
        if leap_day_rule == "mar1":
            return date(year, 3, 1)
        if leap_day_rule == "feb28":
            return date(year, 2, 28)
        raise InvalidDateError(f"Unsupported leap day rule: {leap_day_rule}")
    return date(year, birthday.month, birthday.day)


def next_occurrence(
    birthday: date | datetime | str,
    today: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> date:
    birthday = parse_birthday(birthday)
    today = to_utc_date(today)

    candidate = birthday_date_for_year(birthday, today.year, leap_day_rule)
    if candidate >= today:
        return candidate
    return birthday_date_for_year(birthday, today.year + 1, leap_day_rule)


def days_until(
    birthday: date | datetime | str,
    today: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> int:
    today = to_utc_date(today)
    nxt = next_occurrence(birthday, today, leap_day_rule)
    return (nxt - today).days


def classify(days: int) -> Tier:
    if days < 0:
        raise ValueError(f"days_until must be non-negative, got {days}")
    if days == 0:
        return Tier.URGENT
    if days <= 7:
        return Tier.SOON
    if days <= 30:
        return Tier.UPCOMING
    return Tier.DISTANT


def format_display_date(birthday: date | datetime | str) -> str:
    birthday = parse_birthday(birthday)
    return f"{MONTH_NAMES[birthday.month - 1]} {birthday.day}"


def countdown(
    birthday: date | datetime | str,
    today: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> CountdownResult:
    birthday = parse_birthday(birthday)
    today = to_utc_date(today)

    nxt = next_occurrence(birthday, today, leap_day_rule)
    remaining = (nxt - today).days
    return CountdownResult(
        days_until=remaining,
        tier=classify(remaining),
        next_birthday=nxt,
        display_date=format_display_date(birthday),
    )


def age_on(birthday: date | datetime | str, today: date | datetime) -> int:
    birthday = parse_birthday(birthday)
    today = to_utc_date(today)

    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return max(age, 0)


def turning_age(birthday: date | datetime | str, occurrence: date) -> int | None:
    age = occurrence.year - parse_birthday(birthday).year
    if age < 0:
        return None
    return age

