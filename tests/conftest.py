"""Shared fixtures: app on in-memory SQLite, test client, captured mail."""

import pytest

from app import create_app
from config import TestConfig
from models import db as _db


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db_session(app):
    return _db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sent_mail(monkeypatch):
    """Replaces outbound confirmation mail with an in-memory outbox."""
    outbox = []

    def _capture(to_email, name, code, expires_iso):
        outbox.append({"to": to_email, "name": name, "code": code, "expires": expires_iso})

    monkeypatch.setattr("routes.auth.dispatch_confirmation_email", _capture)
    return outbox


def signup_payload(name="al", email="a@b.com", pwd="p1"):
    return {"name": name, "email": email, "pwd": pwd}
