"""Service-level exceptions."""

from __future__ import annotations


class ServiceError(RuntimeError):
    """Base class for errors surfaced to callers of the services."""

    message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(ServiceError):
    """Input was malformed or collides with an existing record."""

    message = "Validation failed."

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def single(cls, field: str, problem: str) -> "ValidationError":
        return cls({field: [problem]})


class AuthFailure(ServiceError):
    """Unknown email or wrong password; deliberately indistinguishable."""

    message = "Invalid email or password."


class AccountNotActivated(ServiceError):
    """Credentials were correct but the account is still pending."""

    message = "Account not activated. Check your email for the activation link."


class InvalidToken(ServiceError):
    """Token did not match, was already used, or the account is unknown."""

    message = "Invalid or already used link."


class TokenExpired(ServiceError):
    """Token matched but its lifetime has elapsed."""

    message = "This link has expired."
