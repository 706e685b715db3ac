"""Credential, token and session primitives."""

from .passwords import CredentialStore
from .sessions import SessionContext, SessionManager
from .tokens import TokenService

__all__ = ["CredentialStore", "SessionContext", "SessionManager", "TokenService"]
