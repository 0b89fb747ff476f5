from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify, request, session
from flask_login import LoginManager, current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash

from gift_tracker.forms import FormDataError, LoginForm, SignupForm, first_error, form_data
from gift_tracker.models import User, db

LOGGER = logging.getLogger(__name__)

login_manager = LoginManager()

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@login_manager.user_loader
def load_user(user_id: str) -> User | None:
    if not user_id.isdigit():
        return None
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"message": "Unauthorized"}), 401


def normalize_email(raw_email: Any) -> str:
    return str(raw_email or "").strip().lower()


def find_user_by_email(email: str) -> User | None:
    query = db.select(User).where(User.email == normalize_email(email))
    return db.session.execute(query).scalar_one_or_none()


def register_user(email: str, password: str, name: str | None = None) -> User:
    user = User(
        name=name.strip() if name and name.strip() else None,
        email=normalize_email(email),
        password_hash=generate_password_hash(password),
    )
    db.session.add(user)
    db.session.commit()
    LOGGER.info("Registered user %s", user.id)
    return user


def verify_credentials(email: str, password: str) -> User | None:
    user = find_user_by_email(email)
    if user is None or not user.password_hash:
        return None
    if not check_password_hash(user.password_hash, password):
        return None
    return user


@auth_bp.post("/signup")
def signup():
    try:
        data = form_data(request.get_json(silent=True), ("name", "email", "password"))
    except FormDataError as exc:
        return jsonify({"message": str(exc)}), 400

    form = SignupForm(formdata=data)
    if not form.validate():
        return jsonify({"message": first_error(form)}), 400

    if find_user_by_email(form.email.data) is not None:
        return jsonify({"message": "User with this email already exists"}), 409

    user = register_user(form.email.data, form.password.data, form.name.data)
    return jsonify(user.to_dict()), 201


@auth_bp.post("/login")
def login():
    try:
        data = form_data(request.get_json(silent=True), ("email", "password"))
    except FormDataError as exc:
        return jsonify({"message": str(exc)}), 400

    form = LoginForm(formdata=data)
    user = verify_credentials(form.email.data, form.password.data) if form.validate() else None
    if user is None:
        LOGGER.info("Rejected login for %s", normalize_email(form.email.data) or "<blank>")
        return jsonify({"message": "Invalid email or password"}), 401

    session.permanent = True
    login_user(user)
    return jsonify(user.to_dict())


@auth_bp.post("/logout")
def logout():
    logout_user()
    session.clear()
    return jsonify({"message": "Logged out"})


@auth_bp.get("/session")
@login_required
def current_session():
    return jsonify({"user": current_user.to_dict()})
