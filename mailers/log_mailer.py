"""Mailer that writes outgoing messages to the application log."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from .abstract_mailer import AbstractMailer

logger = logging.getLogger(__name__)


class LogMailer(AbstractMailer):
    """Record account mail in the log instead of sending it.

    Links carry raw tokens, so messages are only retained in ``outbox`` when
    ``keep_outbox`` is set (tests and local debugging).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        sender: str = "noreply@example.com",
        *,
        keep_outbox: bool = False,
    ):
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self.keep_outbox = keep_outbox
        self.outbox: list[dict] = []

    def _link(self, path: str, email: str, raw_token: str) -> str:
        return f"{self.base_url}{path}?{urlencode({'email': email, 'token': raw_token})}"

    def _send(self, kind: str, email: str, link: str) -> None:
        if self.keep_outbox:
            self.outbox.append({"kind": kind, "to": email, "from": self.sender, "link": link})
        logger.info("Mail %s to %s from %s", kind, email, self.sender)

    def deliver_activation(self, email: str, raw_token: str) -> None:
        self._send("activation", email, self._link("/auth/activate", email, raw_token))

    def deliver_reset(self, email: str, raw_token: str) -> None:
        self._send("password_reset", email, self._link("/auth/password-resets/confirm", email, raw_token))
