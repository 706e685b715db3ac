"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from mailers.log_mailer import LogMailer  # noqa: E402
from models import db  # noqa: E402
from services.container import get_services  # noqa: E402

PASSWORD = "foobar123"


class _BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-with-enough-length-000"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    ACTIVATION_TOKEN_TTL_HOURS = None
    PASSWORD_RESET_TTL_HOURS = 2.0


@pytest.fixture()
def mailer() -> LogMailer:
    return LogMailer(base_url="http://testserver", keep_outbox=True)


@pytest.fixture()
def app(mailer) -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(_BaseTestConfig, mailer=mailer)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def app_ctx(app: Flask):
    """Push an application context for tests that call services directly."""

    with app.app_context():
        yield app


@pytest.fixture()
def services(app_ctx):
    return get_services()


def signup_attrs(email: str, password: str = PASSWORD, **overrides) -> dict:
    attrs = {
        "email": email,
        "first_name": "Example",
        "last_name": "User",
        "password": password,
        "password_confirmation": password,
    }
    attrs.update(overrides)
    return attrs


def last_token(mailer: LogMailer, kind: str = "activation") -> str:
    """Pull the raw token out of the most recent mailed link of ``kind``."""

    from urllib.parse import parse_qs, urlparse

    message = [m for m in mailer.outbox if m["kind"] == kind][-1]
    return parse_qs(urlparse(message["link"]).query)["token"][0]


@pytest.fixture()
def make_user(services, mailer):
    """Create users; activated unless told otherwise."""

    counter = {"n": 0}

    def _make(email: str | None = None, *, activated: bool = True, password: str = PASSWORD, **overrides):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        user = services.registry.create(signup_attrs(email, password, **overrides))
        if activated:
            services.registry.activate(user.email, last_token(mailer))
        return user

    return _make
