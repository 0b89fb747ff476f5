"""Persisted entities: users and the gift recipients they track."""

from __future__ import annotations

from datetime import date, datetime, timezone

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy

from gift_tracker.date_logic import DEFAULT_LEAP_DAY_RULE, countdown

db = SQLAlchemy()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    recipients = db.relationship(
        "Recipient",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def to_dict(self) -> dict:
        """Public view of the account; the password hash never leaves the server."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class Recipient(db.Model):
    __tablename__ = "recipients"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    birthday = db.Column(db.Date, nullable=False)
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(40), nullable=True)
    interests = db.Column(db.Text, nullable=True)
    likes = db.Column(db.Text, nullable=True)
    budget = db.Column(db.Float, default=0.0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = db.relationship("User", back_populates="recipients")

    def to_dict(self, today: date, leap_day_rule: str = DEFAULT_LEAP_DAY_RULE) -> dict:
        result = countdown(self.birthday, today, leap_day_rule)
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "birthday": self.birthday.isoformat(),
            "age": self.age,
            "gender": self.gender,
            "interests": self.interests or "",
            "likes": self.likes or "",
            "budget": self.budget,
            "daysUntil": result.days_until,
            "tier": result.tier.name.lower(),
            "badge": result.tier.badge,
            "nextBirthday": result.next_birthday.isoformat(),
            "displayDate": result.display_date,
        }
