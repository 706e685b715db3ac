"""Mail delivery backends."""

from .abstract_mailer import AbstractMailer
from .log_mailer import LogMailer

__all__ = ["AbstractMailer", "LogMailer"]
