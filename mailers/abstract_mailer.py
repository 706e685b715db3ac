"""Mail delivery abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractMailer(ABC):
    """Interface for account mail backends.

    Delivery is fire-and-forget: callers log failures and never retry.
    """

    @abstractmethod
    def deliver_activation(self, email: str, raw_token: str) -> None:
        """Send the account activation link carrying ``raw_token``."""

    @abstractmethod
    def deliver_reset(self, email: str, raw_token: str) -> None:
        """Send the password reset link carrying ``raw_token``."""
