from datetime import datetime, timezone

import pytest

from gift_tracker.main import create_app
from gift_tracker.models import db
from gift_tracker.settings import Settings

FIXED_NOW = datetime(2024, 3, 14, 9, 30, tzinfo=timezone.utc)


def build_app(*, testing: bool = True):
    settings = Settings(secret_key="test-secret", database_url="sqlite:///:memory:")
    app = create_app(settings, clock=lambda: FIXED_NOW, testing=testing)
    with app.app_context():
        db.create_all()
    return app


@pytest.fixture
def app():
    app = build_app()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def signup_and_login(client, email: str = "alice@example.com", password: str = "correct-horse") -> dict:
    response = client.post("/api/auth/signup", json={"name": "Alice", "email": email, "password": password})
    assert response.status_code == 201
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.get_json()


@pytest.fixture
def logged_in(client):
    return signup_and_login(client)
