"""Account and social-graph services."""

from .exceptions import (
    AccountNotActivated,
    AuthFailure,
    InvalidToken,
    ServiceError,
    TokenExpired,
    ValidationError,
)

__all__ = [
    "AccountNotActivated",
    "AuthFailure",
    "InvalidToken",
    "ServiceError",
    "TokenExpired",
    "ValidationError",
]
