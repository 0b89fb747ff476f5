from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any

from gift_tracker.date_logic import (
    DEFAULT_LEAP_DAY_RULE,
    Tier,
    age_on,
    countdown,
    parse_birthday,
    turning_age,
)
from gift_tracker.models import Recipient, db

LOGGER = logging.getLogger(__name__)


class RecipientValidationError(ValueError):
    pass


@dataclass(frozen=True)
class ReminderRow:
    recipient_id: int
    name: str
    days_until: int
    tier: Tier
    next_date: date
    display_date: str
    turning_age: int | None


def _join_tags(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        pieces = [str(piece).strip() for piece in value]
        return ",".join(piece for piece in pieces if piece)
    return str(value).strip()


def _parse_name(value: Any) -> str:
    name = str(value or "").strip()
    if not name:
        raise RecipientValidationError("Name and birthday are required")
    if len(name) > 120:
        raise RecipientValidationError("Name must be at most 120 characters")
    return name


def _parse_age(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise RecipientValidationError("age must be a non-negative integer")
    if isinstance(value, float) and not value.is_integer():
        raise RecipientValidationError("age must be a non-negative integer")
    try:
        age = int(value)
    except (TypeError, ValueError) as exc:
        raise RecipientValidationError("age must be a non-negative integer") from exc
    if age < 0:
        raise RecipientValidationError("age must be a non-negative integer")
    return age


def _parse_budget(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise RecipientValidationError("budget must be a non-negative number")
    try:
        budget = float(value)
    except (TypeError, ValueError) as exc:
        raise RecipientValidationError("budget must be a non-negative number") from exc
    if budget < 0 or not math.isfinite(budget):
        raise RecipientValidationError("budget must be a non-negative number")
    return budget


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate_payload(payload: dict[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Check a create/update body and return the column values it sets.

    Birthdays go through ``parse_birthday`` so bad dates surface as
    ``InvalidDateError`` rather than as a storage error.
    """
    if not isinstance(payload, dict):
        raise RecipientValidationError("Request body must be a JSON object")

    if not partial and (not payload.get("name") or not payload.get("birthday")):
        raise RecipientValidationError("Name and birthday are required")

    values: dict[str, Any] = {}
    if "name" in payload:
        values["name"] = _parse_name(payload["name"])
    if "birthday" in payload:
        if not payload["birthday"]:
            raise RecipientValidationError("Name and birthday are required")
        values["birthday"] = parse_birthday(payload["birthday"])
    if "age" in payload:
        values["age"] = _parse_age(payload["age"])
    if "gender" in payload:
        values["gender"] = _optional_text(payload["gender"])
    if "interests" in payload:
        values["interests"] = _join_tags(payload["interests"])
    if "likes" in payload:
        values["likes"] = _join_tags(payload["likes"])
    if "budget" in payload:
        values["budget"] = _parse_budget(payload["budget"])

    return values


def list_recipients(user_id: int) -> list[Recipient]:
    query = (
        db.select(Recipient)
        .where(Recipient.user_id == user_id)
        .order_by(Recipient.birthday.asc(), Recipient.id.asc())
    )
    return list(db.session.execute(query).scalars())


def get_owned_recipient(user_id: int, recipient_id: int) -> Recipient | None:
    recipient = db.session.get(Recipient, recipient_id)
    if recipient is None or recipient.user_id != user_id:
        return None
    return recipient


def create_recipient(user_id: int, payload: dict[str, Any], today: date | None = None) -> Recipient:
    values = validate_payload(payload)
    if values.get("age") is None and today is not None:
        values["age"] = age_on(values["birthday"], today)
    recipient = Recipient(user_id=user_id, **values)
    db.session.add(recipient)
    db.session.commit()
    LOGGER.info("Created recipient %s for user %s", recipient.id, user_id)
    return recipient


def update_recipient(recipient: Recipient, payload: dict[str, Any]) -> Recipient:
    values = validate_payload(payload, partial=True)
    for field_name, value in values.items():
        setattr(recipient, field_name, value)
    db.session.commit()
    LOGGER.info("Updated recipient %s (%s)", recipient.id, ", ".join(sorted(values)) or "no changes")
    return recipient


def delete_recipient(recipient: Recipient) -> None:
    recipient_id = recipient.id
    db.session.delete(recipient)
    db.session.commit()
    LOGGER.info("Deleted recipient %s", recipient_id)


def upcoming_reminders(
    user_id: int,
    today: date,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
    within_days: int | None = None,
) -> list[ReminderRow]:
    rows: list[ReminderRow] = []

    for recipient in list_recipients(user_id):
        result = countdown(recipient.birthday, today, leap_day_rule)
        if within_days is not None and result.days_until > within_days:
            continue

        rows.append(
            ReminderRow(
                recipient_id=recipient.id,
                name=recipient.name,
                days_until=result.days_until,
                tier=result.tier,
                next_date=result.next_birthday,
                display_date=result.display_date,
                turning_age=turning_age(recipient.birthday, result.next_birthday),
            )
        )

    rows.sort(key=lambda item: (item.days_until, item.name.lower()))
    return rows
