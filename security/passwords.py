"""Salted, slow password hashing."""

from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

logger = logging.getLogger(__name__)


class CredentialStore:
    """Hash and verify passwords with werkzeug's adaptive hashers.

    ``method`` is passed straight to :func:`generate_password_hash`; ``None``
    selects werkzeug's current default (scrypt on recent releases).
    """

    def __init__(self, method: str | None = None):
        self.method = method
        self._placeholder: str | None = None

    def set_password(self, plain: str) -> str:
        """Return a storable digest for ``plain``."""

        if self.method:
            return generate_password_hash(plain, method=self.method)
        return generate_password_hash(plain)

    def verify(self, plain: str | None, digest: str | None) -> bool:
        """Return whether ``plain`` matches ``digest``. Never raises."""

        if not isinstance(plain, str) or not isinstance(digest, str):
            return False
        if not plain or not digest:
            return False
        try:
            return check_password_hash(digest, plain)
        except (ValueError, TypeError) as exc:
            logger.warning("Unreadable password digest: %s", exc)
            return False

    def verify_placeholder(self, plain: str | None) -> bool:
        """Spend one verification on a throwaway digest; always False.

        Keeps the unknown-account path as slow as a wrong password.
        """

        if self._placeholder is None:
            self._placeholder = self.set_password("placeholder-password")
        self.verify(plain if isinstance(plain, str) and plain else "x", self._placeholder)
        return False
