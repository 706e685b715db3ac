"""Database initialization and model exports."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import Session


db = SQLAlchemy()
logger = logging.getLogger(__name__)


@contextmanager
def transaction() -> Iterator[Session]:
    """Run a block of row changes as one commit, rolling back on any error."""
    try:
        yield db.session
        db.session.commit()
    except Exception as exc:
        logger.warning("Commit failed, rolling back: %s", exc)
        db.session.rollback()
        raise


# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .relationship import Relationship  # noqa: E402,F401
from .micropost import Micropost  # noqa: E402,F401

__all__ = [
    "db",
    "transaction",
    "User",
    "Relationship",
    "Micropost",
]
