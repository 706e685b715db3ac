"""Write the remember-me credential recorded on a session context."""

from __future__ import annotations

from flask import Response

from security.sessions import SessionContext

SECONDS_PER_DAY = 24 * 60 * 60


def apply_remember_cookie(response: Response, ctx: SessionContext | None, config) -> Response:
    """Set or delete the remember cookie according to ``ctx``."""

    if ctx is None:
        return response

    name = config.get("REMEMBER_COOKIE_NAME", "remember_token")
    secure = bool(config.get("REMEMBER_COOKIE_SECURE", False))
    if ctx.outgoing_credential:
        response.set_cookie(
            name,
            ctx.outgoing_credential,
            max_age=int(config.get("REMEMBER_COOKIE_DURATION_DAYS", 7300)) * SECONDS_PER_DAY,
            httponly=True,
            secure=secure,
            samesite="Lax",
        )
    elif ctx.clear_remember_credential:
        response.delete_cookie(name, httponly=True, secure=secure, samesite="Lax")
    return response
