"""User lifecycle: sign-up, activation, profile changes, password reset, deletion."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from typing import Mapping

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from mailers.abstract_mailer import AbstractMailer
from models import db, transaction
from models.micropost import Micropost
from models.relationship import Relationship
from models.user import User
from security.passwords import CredentialStore
from security.sessions import normalize_email
from security.tokens import TokenService

from .exceptions import InvalidToken, TokenExpired, ValidationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[\w+\-.]+@[a-z\d\-]+(\.[a-z\d\-]+)*\.[a-z]+$", re.IGNORECASE)
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 50


@dataclass(frozen=True)
class SignUp:
    """Fields accepted when creating an account."""

    email: str = ""
    first_name: str = ""
    last_name: str = ""
    password: str = ""
    password_confirmation: str = ""

    @classmethod
    def from_mapping(cls, attrs: Mapping) -> "SignUp":
        return cls(**_pick(cls, attrs))


@dataclass(frozen=True)
class ProfileUpdate:
    """The only fields a user may change on their own profile.

    There is no admin or activation field, so over-posted keys have nowhere
    to go.
    """

    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = None
    password_confirmation: str | None = None

    @classmethod
    def from_mapping(cls, attrs: Mapping) -> "ProfileUpdate":
        return cls(**_pick(cls, attrs))


def _pick(schema, attrs: Mapping) -> dict:
    allowed = {f.name for f in fields(schema)}
    return {key: _clean(value) for key, value in attrs.items() if key in allowed}


def _clean(value):
    if value is None:
        return None
    return str(value)


class UserRegistry:
    """Owns every write to :class:`User` rows outside of the session layer."""

    def __init__(
        self,
        credentials: CredentialStore,
        tokens: TokenService,
        mailer: AbstractMailer,
        *,
        password_min_length: int = 6,
        activation_ttl: timedelta | None = None,
        reset_ttl: timedelta | None = timedelta(hours=2),
    ):
        self.credentials = credentials
        self.tokens = tokens
        self.mailer = mailer
        self.password_min_length = password_min_length
        self.activation_ttl = activation_ttl
        self.reset_ttl = reset_ttl

    # -- lookups ---------------------------------------------------------

    def get(self, user_id) -> User | None:
        return db.session.get(User, user_id)

    def find_by_email(self, email: str | None) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return User.query.filter_by(email=normalized).first()

    # -- validation helpers ----------------------------------------------

    def _check_email(self, email: str, errors: dict, *, current: User | None = None) -> None:
        if not email:
            errors.setdefault("email", []).append("can't be blank")
            return
        if len(email) > MAX_EMAIL_LENGTH:
            errors.setdefault("email", []).append("is too long")
        if not EMAIL_PATTERN.match(email):
            errors.setdefault("email", []).append("is invalid")
            return
        existing = self.find_by_email(email)
        if existing is not None and (current is None or existing.id != current.id):
            errors.setdefault("email", []).append("has already been taken")

    @staticmethod
    def _check_name(field: str, value: str | None, errors: dict) -> None:
        value = (value or "").strip()
        if not value:
            errors.setdefault(field, []).append("can't be blank")
        elif len(value) > MAX_NAME_LENGTH:
            errors.setdefault(field, []).append("is too long")

    def _check_password(self, password: str | None, confirmation: str | None, errors: dict) -> None:
        if not password:
            errors.setdefault("password", []).append("can't be blank")
            return
        if len(password) < self.password_min_length:
            errors.setdefault("password", []).append(
                f"is too short (minimum is {self.password_min_length} characters)"
            )
        if password != confirmation:
            errors.setdefault("password_confirmation", []).append("doesn't match password")

    @staticmethod
    def _expired(sent_at: datetime | None, ttl: timedelta | None) -> bool:
        if ttl is None:
            return False
        if sent_at is None:
            return True
        return sent_at + ttl < datetime.utcnow()

    def _commit_unique_email(self) -> None:
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError.single("email", "has already been taken")

    # -- lifecycle -------------------------------------------------------

    def create(self, attrs: Mapping) -> User:
        """Register a pending account and mail its activation link."""

        signup = SignUp.from_mapping(attrs)
        email = normalize_email(signup.email)
        errors: dict[str, list[str]] = {}
        self._check_email(email, errors)
        self._check_name("first_name", signup.first_name, errors)
        self._check_name("last_name", signup.last_name, errors)
        self._check_password(signup.password, signup.password_confirmation, errors)
        if errors:
            raise ValidationError(errors)

        issued = self.tokens.issue()
        user = User(
            email=email,
            first_name=signup.first_name.strip(),
            last_name=signup.last_name.strip(),
            password_hash=self.credentials.set_password(signup.password),
            activated=False,
            activation_digest=issued.digest,
            activation_sent_at=datetime.utcnow(),
        )
        db.session.add(user)
        self._commit_unique_email()
        logger.info("Registered user %s", user.id)

        self._deliver(self.mailer.deliver_activation, user.email, issued.raw)
        return user

    def resend_activation(self, email: str | None) -> None:
        """Rotate and resend the activation token for a pending account."""

        user = self.find_by_email(email)
        if user is None or user.activated:
            return
        issued = self.tokens.issue()
        with transaction():
            user.activation_digest = issued.digest
            user.activation_sent_at = datetime.utcnow()
        self._deliver(self.mailer.deliver_activation, user.email, issued.raw)

    def activate(self, email: str | None, raw_token: str | None) -> User:
        """Move a pending account to active; the token works only once."""

        user = self.find_by_email(email)
        if user is None or user.activated:
            raise InvalidToken()
        if not self.tokens.verify(raw_token, user.activation_digest):
            raise InvalidToken()
        if self._expired(user.activation_sent_at, self.activation_ttl):
            raise TokenExpired()

        with transaction():
            user.activated = True
            user.activated_at = datetime.utcnow()
            user.activation_digest = None
        logger.info("Activated user %s", user.id)
        return user

    def activate_without_token(self, user: User) -> User:
        """Activate directly, for seeding and operator tooling only."""

        if user.activated:
            return user
        with transaction():
            user.activated = True
            user.activated_at = datetime.utcnow()
            user.activation_digest = None
        logger.info("Activated user %s without a token", user.id)
        return user

    def update(self, user: User, attrs: Mapping | ProfileUpdate) -> User:
        """Apply a profile update; only :class:`ProfileUpdate` fields are read."""

        change = attrs if isinstance(attrs, ProfileUpdate) else ProfileUpdate.from_mapping(attrs)
        errors: dict[str, list[str]] = {}

        email = None
        if change.email is not None:
            email = normalize_email(change.email)
            if email != user.email:
                self._check_email(email, errors, current=user)
        if change.first_name is not None:
            self._check_name("first_name", change.first_name, errors)
        if change.last_name is not None:
            self._check_name("last_name", change.last_name, errors)
        if change.password:
            self._check_password(change.password, change.password_confirmation, errors)
        if errors:
            raise ValidationError(errors)

        if email is not None:
            user.email = email
        if change.first_name is not None:
            user.first_name = change.first_name.strip()
        if change.last_name is not None:
            user.last_name = change.last_name.strip()
        if change.password:
            user.password_hash = self.credentials.set_password(change.password)
        self._commit_unique_email()
        return user

    def set_admin(self, user: User, admin: bool = True) -> User:
        """Grant or revoke admin rights. Not reachable from profile updates."""

        with transaction():
            user.admin = bool(admin)
        logger.info("Admin flag for user %s set to %s", user.id, user.admin)
        return user

    def destroy(self, user: User) -> None:
        """Delete the user with its follow edges and microposts in one commit."""

        user_id = user.id
        with transaction() as session:
            edges = (
                session.query(Relationship)
                .filter(
                    or_(
                        Relationship.follower_id == user_id,
                        Relationship.followed_id == user_id,
                    )
                )
                .delete(synchronize_session=False)
            )
            posts = (
                session.query(Micropost)
                .filter(Micropost.user_id == user_id)
                .delete(synchronize_session=False)
            )
            session.delete(user)
        logger.info(
            "Destroyed user %s with %d relationships and %d microposts",
            user_id,
            edges,
            posts,
        )

    # -- password reset --------------------------------------------------

    def request_password_reset(self, email: str | None) -> None:
        """Mail a reset link to an active account; silent for unknown emails."""

        user = self.find_by_email(email)
        if user is None or not user.activated:
            logger.info("Password reset requested for unknown or inactive account")
            return
        issued = self.tokens.issue()
        with transaction():
            user.reset_digest = issued.digest
            user.reset_sent_at = datetime.utcnow()
        self._deliver(self.mailer.deliver_reset, user.email, issued.raw)

    def reset_password(
        self,
        email: str | None,
        raw_token: str | None,
        password: str | None,
        password_confirmation: str | None,
    ) -> User:
        """Set a new password using a reset token; also drops remember-me."""

        user = self.find_by_email(email)
        if user is None or not user.activated:
            raise InvalidToken()
        if not self.tokens.verify(raw_token, user.reset_digest):
            raise InvalidToken()
        if self._expired(user.reset_sent_at, self.reset_ttl):
            raise TokenExpired()

        password = _clean(password)
        errors: dict[str, list[str]] = {}
        self._check_password(password, _clean(password_confirmation), errors)
        if errors:
            raise ValidationError(errors)

        with transaction():
            user.password_hash = self.credentials.set_password(password)
            user.reset_digest = None
            user.reset_sent_at = None
            user.remember_digest = None
        logger.info("Password reset for user %s", user.id)
        return user

    # -- mail ------------------------------------------------------------

    @staticmethod
    def _deliver(send, email: str, raw_token: str) -> None:
        try:
            send(email, raw_token)
        except Exception:
            logger.exception("Mail delivery to %s failed", email)
