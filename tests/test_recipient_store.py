from datetime import date

import pytest

from gift_tracker.date_logic import InvalidDateError, Tier
from gift_tracker.models import User, db
from gift_tracker.recipient_store import (
    RecipientValidationError,
    create_recipient,
    get_owned_recipient,
    upcoming_reminders,
    validate_payload,
)


def _user(email: str = "owner@example.com") -> User:
    user = User(email=email, password_hash="x")
    db.session.add(user)
    db.session.commit()
    return user


def test_validate_payload_joins_list_tags() -> None:
    values = validate_payload({"name": " Ann ", "birthday": "1990-03-14", "interests": ["a", " b ", ""]})

    assert values["name"] == "Ann"
    assert values["birthday"] == date(1990, 3, 14)
    assert values["interests"] == "a,b"


def test_validate_payload_partial_allows_missing_fields() -> None:
    assert validate_payload({"budget": 10}, partial=True) == {"budget": 10.0}


@pytest.mark.parametrize("budget", [-1, "lots", True, float("nan"), "inf", "1e999", "-inf"])
def test_validate_payload_rejects_bad_budget(budget) -> None:
    with pytest.raises(RecipientValidationError):
        validate_payload({"name": "Ann", "birthday": "1990-03-14", "budget": budget})


def test_validate_payload_rejects_negative_age() -> None:
    with pytest.raises(RecipientValidationError):
        validate_payload({"name": "Ann", "birthday": "1990-03-14", "age": -3})


def test_validate_payload_rejects_impossible_birthday() -> None:
    with pytest.raises(InvalidDateError):
        validate_payload({"name": "Ann", "birthday": "1990-02-30"})


def test_get_owned_recipient_checks_owner(app_context) -> None:
    owner = _user()
    stranger = _user("stranger@example.com")
    recipient = create_recipient(owner.id, {"name": "Ann", "birthday": "1990-03-14"})

    assert get_owned_recipient(owner.id, recipient.id) is recipient
    assert get_owned_recipient(stranger.id, recipient.id) is None
    assert get_owned_recipient(owner.id, 9999) is None


def test_upcoming_reminders_leap_day_policy(app_context) -> None:
    owner = _user()
    create_recipient(owner.id, {"name": "Leap", "birthday": "2000-02-29"})

    mar1 = upcoming_reminders(owner.id, date(2023, 3, 1), "mar1")
    feb28 = upcoming_reminders(owner.id, date(2023, 3, 1), "feb28")

    assert mar1[0].days_until == 0
    assert mar1[0].tier is Tier.URGENT
    assert mar1[0].turning_age == 23
    assert feb28[0].next_date == date(2024, 2, 29)


@pytest.mark.parametrize("age", [3.7, "3.7", -0.5])
def test_validate_payload_rejects_fractional_age(age) -> None:
    with pytest.raises(RecipientValidationError):
        validate_payload({"name": "Ann", "birthday": "1990-03-14", "age": age})


def test_validate_payload_accepts_whole_float_age() -> None:
    assert validate_payload({"age": 34.0}, partial=True) == {"age": 34}


def test_upcoming_reminders_future_birth_year_has_no_turning_age(app_context) -> None:
    owner = _user()
    create_recipient(owner.id, {"name": "Typo", "birthday": "2030-05-01"})

    rows = upcoming_reminders(owner.id, date(2024, 3, 14))

    assert rows[0].next_date == date(2024, 5, 1)
    assert rows[0].turning_age is None
