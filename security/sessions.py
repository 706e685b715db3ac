"""Sign-in state for a single request plus "remember me" persistence.

A :class:`SessionContext` is created per request and passed explicitly to
every :class:`SessionManager` call. It wraps two pieces of evidence:

* ``binding`` -- the short-lived, request-scoped mapping holding the signed-in
  user id (Flask's signed ``session`` in the web layer, a dict in tests);
* ``remember_credential`` -- the long-lived signed cookie value, a JWT whose
  subject is the user id and whose ``remember_token`` claim is the raw token.

The manager never touches the response; it records what the cookie should
become (``outgoing_credential`` / ``clear_remember_credential``) and the web
layer applies it.
"""

from __future__ import annotations

import logging
from typing import MutableMapping

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from models import db, transaction
from models.user import User
from services.exceptions import AccountNotActivated, AuthFailure

from .passwords import CredentialStore
from .tokens import TokenService

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
REMEMBER_CLAIM = "remember_token"
PURPOSE_CLAIM = "purpose"
REMEMBER_PURPOSE = "remember"


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case.

    Anything that is not a string normalizes to the empty string.
    """
    if not isinstance(raw_email, str):
        return ""
    return raw_email.strip().lower()


class SessionContext:
    """Authentication state for one request or actor."""

    def __init__(
        self,
        binding: MutableMapping | None = None,
        remember_credential: str | None = None,
    ):
        self.binding = {} if binding is None else binding
        self.remember_credential = remember_credential
        self.outgoing_credential: str | None = None
        self.clear_remember_credential = False
        self.user: User | None = None

    @property
    def user_id(self) -> int | None:
        return self.binding.get(SESSION_USER_KEY)

    @property
    def authenticated(self) -> bool:
        return self.user is not None

    def bind(self, user: User) -> None:
        self.binding[SESSION_USER_KEY] = user.id
        self.user = user

    def unbind(self) -> None:
        self.binding.pop(SESSION_USER_KEY, None)
        self.user = None

    def set_remember_credential(self, credential: str) -> None:
        self.outgoing_credential = credential
        self.clear_remember_credential = False

    def drop_remember_credential(self) -> None:
        self.remember_credential = None
        self.outgoing_credential = None
        self.clear_remember_credential = True


class SessionManager:
    """Compose password checks and remember tokens into a sign-in lifecycle."""

    def __init__(self, credentials: CredentialStore, tokens: TokenService):
        self.credentials = credentials
        self.tokens = tokens

    # -- credentials -----------------------------------------------------

    def authenticate_credentials(self, email: str | None, password: str | None) -> User:
        """Return the user owning ``email``/``password``.

        Raises :class:`AuthFailure` for an unknown email or a wrong password
        alike, and :class:`AccountNotActivated` when the password is right
        but the account is still pending. Nobody is signed in here.
        """
        user = User.query.filter_by(email=normalize_email(email)).first()
        if user is None:
            self.credentials.verify_placeholder(password)
            raise AuthFailure()
        if not self.credentials.verify(password, user.password_hash):
            raise AuthFailure()
        if not user.activated:
            raise AccountNotActivated()
        return user

    # -- request binding -------------------------------------------------

    def sign_in(self, ctx: SessionContext, user: User) -> None:
        ctx.bind(user)
        logger.debug("User %s signed in", user.id)

    def sign_out(self, ctx: SessionContext, *, forget: bool = False) -> None:
        """Clear the request binding, and the remember credential when asked."""
        user = ctx.user
        if forget and user is not None:
            self.forget(ctx, user)
        ctx.unbind()

    def current_user(self, ctx: SessionContext) -> User | None:
        if ctx.user is not None:
            return ctx.user
        return self.resume_session(ctx)

    # -- remember me -----------------------------------------------------

    def remember(self, ctx: SessionContext, user: User) -> str:
        """Rotate the user's remember token and hand back the raw value.

        The signed credential for the cookie is placed on ``ctx``.
        """
        issued = self.tokens.issue()
        with transaction():
            user.remember_digest = issued.digest
        ctx.set_remember_credential(
            create_access_token(
                identity=str(user.id),
                additional_claims={
                    REMEMBER_CLAIM: issued.raw,
                    PURPOSE_CLAIM: REMEMBER_PURPOSE,
                },
                expires_delta=False,
            )
        )
        return issued.raw

    def forget(self, ctx: SessionContext, user: User) -> None:
        with transaction():
            user.remember_digest = None
        ctx.drop_remember_credential()

    def resume_session(self, ctx: SessionContext) -> User | None:
        """Resolve who is signed in, preferring the live binding.

        Falls back to the remember credential; a credential that does not
        check out is scheduled for deletion and nobody is signed in.
        """
        user_id = ctx.user_id
        if user_id is not None:
            user = db.session.get(User, user_id)
            if user is not None:
                ctx.user = user
                return user
            ctx.unbind()

        if not ctx.remember_credential:
            return None

        user = self._user_from_credential(ctx.remember_credential)
        if user is None:
            ctx.drop_remember_credential()
            return None

        self.sign_in(ctx, user)
        return user

    def _user_from_credential(self, credential: str) -> User | None:
        try:
            claims = decode_token(credential)
        except (PyJWTError, JWTExtendedException) as exc:
            logger.info("Rejected remember credential: %s", exc)
            return None

        if claims.get(PURPOSE_CLAIM) != REMEMBER_PURPOSE:
            return None
        try:
            user_id = int(claims.get("sub"))
        except (TypeError, ValueError):
            return None

        user = db.session.get(User, user_id)
        if user is None:
            return None
        if not self.tokens.verify(claims.get(REMEMBER_CLAIM), user.remember_digest):
            logger.info("Remember token mismatch for user %s", user_id)
            return None
        return user
