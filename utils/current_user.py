"""Access to the signed-in user resolved for the current request."""

from __future__ import annotations

from functools import wraps

from flask import g
from werkzeug.exceptions import Forbidden, Unauthorized

from models.user import User


def get_current_user() -> User | None:
    ctx = g.get("auth")
    return ctx.user if ctx is not None else None


def require_user() -> User:
    user = get_current_user()
    if user is None:
        raise Unauthorized("Please sign in.")
    return user


def login_required(view):
    """Reject anonymous requests with 401 before calling ``view``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        require_user()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    """Allow only signed-in admins through."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not require_user().admin:
            raise Forbidden("Admin privileges required.")
        return view(*args, **kwargs)

    return wrapper
