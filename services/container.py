"""Build the service objects for an application and look them up per request."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

from flask import Flask, current_app

from mailers.abstract_mailer import AbstractMailer
from mailers.log_mailer import LogMailer
from security.passwords import CredentialStore
from security.sessions import SessionManager
from security.tokens import TokenService

from .registry import UserRegistry
from .social_graph import SocialGraph

EXTENSION_KEY = "identity_services"


@dataclass
class Services:
    credentials: CredentialStore
    tokens: TokenService
    sessions: SessionManager
    registry: UserRegistry
    graph: SocialGraph
    mailer: AbstractMailer


def _hours(value) -> timedelta | None:
    if value is None:
        return None
    return timedelta(hours=float(value))


def build_services(config: Mapping, mailer: AbstractMailer | None = None) -> Services:
    """Wire the services from a Flask config mapping."""

    mailer = mailer or LogMailer(
        base_url=config.get("APP_BASE_URL", "http://localhost:5000"),
        sender=config.get("MAIL_DEFAULT_SENDER", "noreply@example.com"),
    )
    credentials = CredentialStore(config.get("PASSWORD_HASH_METHOD"))
    tokens = TokenService()
    return Services(
        credentials=credentials,
        tokens=tokens,
        sessions=SessionManager(credentials, tokens),
        registry=UserRegistry(
            credentials,
            tokens,
            mailer,
            password_min_length=config.get("PASSWORD_MIN_LENGTH", 6),
            activation_ttl=_hours(config.get("ACTIVATION_TOKEN_TTL_HOURS")),
            reset_ttl=_hours(config.get("PASSWORD_RESET_TTL_HOURS", 2)),
        ),
        graph=SocialGraph(),
        mailer=mailer,
    )


def init_app(app: Flask, mailer: AbstractMailer | None = None) -> Services:
    services = build_services(app.config, mailer=mailer)
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
