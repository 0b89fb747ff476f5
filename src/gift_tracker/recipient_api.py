from __future__ import annotations

from datetime import date

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from gift_tracker.date_logic import InvalidDateError, to_utc_date
from gift_tracker.recipient_store import (
    ReminderRow,
    RecipientValidationError,
    create_recipient,
    delete_recipient,
    get_owned_recipient,
    list_recipients,
    update_recipient,
    upcoming_reminders,
)

CLOCK_EXTENSION_KEY = "gift_tracker.clock"

recipients_bp = Blueprint("recipients", __name__, url_prefix="/api")


def reference_today() -> date:
    """UTC calendar date every countdown in this request is measured from.

    Test apps may pin it with ``?today=YYYY-MM-DD``.
    """
    override = request.args.get("today")
    if override and current_app.testing:
        return to_utc_date(override)
    clock = current_app.extensions[CLOCK_EXTENSION_KEY]
    return to_utc_date(clock())


def _leap_day_rule() -> str:
    return current_app.config["LEAP_DAY_RULE"]


def _not_found():
    return jsonify({"message": "Recipient not found"}), 404


def _bad_request(exc: ValueError):
    return jsonify({"message": str(exc)}), 400


def _render_reminder(row: ReminderRow) -> dict:
    return {
        "recipientId": row.recipient_id,
        "name": row.name,
        "daysUntil": row.days_until,
        "tier": row.tier.name.lower(),
        "badge": row.tier.badge,
        "label": "Today!" if row.days_until == 0 else f"In {row.days_until}d",
        "nextBirthday": row.next_date.isoformat(),
        "displayDate": row.display_date,
        "turningAge": row.turning_age,
    }


@recipients_bp.get("/recipients")
@login_required
def list_view():
    today = reference_today()
    rule = _leap_day_rule()
    return jsonify([recipient.to_dict(today, rule) for recipient in list_recipients(current_user.id)])


@recipients_bp.post("/recipients")
@recipients_bp.post("/recipients/create")
@login_required
def create_view():
    body = request.get_json(silent=True)
    today = reference_today()
    try:
        recipient = create_recipient(current_user.id, body if body is not None else {}, today)
    except (InvalidDateError, RecipientValidationError) as exc:
        return _bad_request(exc)
    return jsonify(recipient.to_dict(today, _leap_day_rule())), 201


@recipients_bp.get("/recipients/<int:recipient_id>")
@login_required
def detail_view(recipient_id: int):
    recipient = get_owned_recipient(current_user.id, recipient_id)
    if recipient is None:
        return _not_found()
    return jsonify(recipient.to_dict(reference_today(), _leap_day_rule()))


@recipients_bp.patch("/recipients/<int:recipient_id>")
@login_required
def update_view(recipient_id: int):
    recipient = get_owned_recipient(current_user.id, recipient_id)
    if recipient is None:
        return _not_found()

    body = request.get_json(silent=True)
    try:
        update_recipient(recipient, body if body is not None else {})
    except (InvalidDateError, RecipientValidationError) as exc:
        return _bad_request(exc)
    return jsonify(recipient.to_dict(reference_today(), _leap_day_rule()))


@recipients_bp.delete("/recipients/<int:recipient_id>")
@login_required
def delete_view(recipient_id: int):
    recipient = get_owned_recipient(current_user.id, recipient_id)
    if recipient is None:
        return _not_found()
    delete_recipient(recipient)
    return "", 204


@recipients_bp.get("/reminders")
@login_required
def reminders_view():
    within_raw = request.args.get("within")
    within_days = None
    if within_raw is not None:
        if not within_raw.isdigit():
            return jsonify({"message": "within must be a non-negative integer"}), 400
        within_days = int(within_raw)

    rows = upcoming_reminders(current_user.id, reference_today(), _leap_day_rule(), within_days)
    return jsonify([_render_reminder(row) for row in rows])
