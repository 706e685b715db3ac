"""Application configuration module."""

import os


def _optional_float(name: str):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Flask session cookie (short-lived sign-in binding)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Passwords
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD") or None
    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))

    # Remember-me credential
    REMEMBER_COOKIE_NAME = os.getenv("REMEMBER_COOKIE_NAME", "remember_token")
    REMEMBER_COOKIE_DURATION_DAYS = int(os.getenv("REMEMBER_COOKIE_DURATION_DAYS", "7300"))
    REMEMBER_COOKIE_SECURE = os.getenv("REMEMBER_COOKIE_SECURE", "false").lower() == "true"

    # Token lifetimes; an unset activation TTL means activation links never expire
    ACTIVATION_TOKEN_TTL_HOURS = _optional_float("ACTIVATION_TOKEN_TTL_HOURS")
    PASSWORD_RESET_TTL_HOURS = _optional_float("PASSWORD_RESET_TTL_HOURS") or 2.0

    # Mail
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@example.com")
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")
