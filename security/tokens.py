"""Opaque bearer tokens stored only as digests."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import NamedTuple

TOKEN_BYTES = 32


class IssuedToken(NamedTuple):
    raw: str
    digest: str


class TokenService:
    """Issue and check remember, activation and password-reset tokens.

    The raw token goes to the caller once (cookie or emailed link); only the
    digest is persisted. These tokens carry far more entropy than a password,
    so a fast hash is enough.
    """

    def __init__(self, nbytes: int = TOKEN_BYTES):
        if nbytes < 16:
            raise ValueError("Tokens need at least 128 bits of entropy.")
        self.nbytes = nbytes

    @staticmethod
    def digest(raw: str) -> str:
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def issue(self) -> IssuedToken:
        raw = secrets.token_urlsafe(self.nbytes)
        return IssuedToken(raw, self.digest(raw))

    def verify(self, raw: str | None, stored_digest: str | None) -> bool:
        if not isinstance(raw, str) or not isinstance(stored_digest, str):
            return False
        if not raw or not stored_digest:
            return False
        return hmac.compare_digest(self.digest(raw), stored_digest)
