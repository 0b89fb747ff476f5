"""Credential forms for the JSON auth endpoints."""

from __future__ import annotations

from typing import Any

from werkzeug.datastructures import MultiDict
from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional

MIN_PASSWORD_LENGTH = 8


class SignupForm(Form):
    name = StringField("Name", validators=[Optional(), Length(max=120, message="Name must be at most 120 characters")])
    email = StringField(
        "Email",
        validators=[
            DataRequired(message="Email and password are required"),
            Email(message="Email address is not valid"),
            Length(max=255, message="Email address is not valid"),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(message="Email and password are required"),
            Length(
                min=MIN_PASSWORD_LENGTH,
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            ),
        ],
    )


class LoginForm(Form):
    email = StringField("Email", validators=[DataRequired()])
    password = PasswordField("Password", validators=[DataRequired()])


class FormDataError(ValueError):
    pass


def form_data(body: Any, fields: tuple[str, ...]) -> MultiDict:
    """Turn a JSON body into form data, accepting only string fields."""
    if not isinstance(body, dict):
        raise FormDataError("Request body must be a JSON object")

    values: dict[str, str] = {}
    for field_name in fields:
        value = body.get(field_name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise FormDataError(f"{field_name} must be a string")
        values[field_name] = value.strip() if field_name != "password" else value
    return MultiDict(values)


def first_error(form: Form) -> str:
    for errors in form.errors.values():
        if errors:
            return str(errors[0])
    return "Invalid request"
