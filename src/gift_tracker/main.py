from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from gift_tracker.auth import auth_bp, login_manager
from gift_tracker.date_logic import InvalidDateError
from gift_tracker.models import db
from gift_tracker.recipient_api import CLOCK_EXTENSION_KEY, recipients_bp
from gift_tracker.settings import Settings, load_settings, sqlite_path

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(InvalidDateError)
    def invalid_date(exc: InvalidDateError):
        return jsonify({"message": str(exc)}), 400

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        return jsonify({"message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def unexpected_error(exc: Exception):
        LOGGER.exception("Unhandled error: %s", exc)
        db.session.rollback()
        return jsonify({"message": "Internal server error"}), 500


def create_app(
    settings: Settings,
    *,
    clock: Callable[[], datetime] = utc_now,
    testing: bool = False,
) -> Flask:
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=settings.secret_key,
        SQLALCHEMY_DATABASE_URI=settings.database_url,
        PERMANENT_SESSION_LIFETIME=timedelta(days=settings.session_max_age_days),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        LEAP_DAY_RULE=settings.leap_day_rule,
        TESTING=testing,
    )
    app.extensions[CLOCK_EXTENSION_KEY] = clock

    db.init_app(app)
    login_manager.init_app(app)
    app.register_blueprint(auth_bp)
    app.register_blueprint(recipients_bp)
    _register_error_handlers(app)

    return app


def main() -> None:
    configure_logging()

    settings = load_settings()
    database_path = sqlite_path(settings.database_url)
    if database_path is not None:
        _ensure_parent(database_path)

    app = create_app(settings)
    with app.app_context():
        db.create_all()

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5000"))
    LOGGER.info("Serving gift tracker on %s:%s", host, port)
    app.run(host=host, port=port)


if __name__ == "__main__":
    main()
