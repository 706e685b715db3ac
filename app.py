"""Application factory."""

import json
import os
import uuid
from http import HTTPStatus

from flask import Flask, g, jsonify, request, session
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from mailers.abstract_mailer import AbstractMailer
from models import db
from routes.auth import auth_bp
from routes.microposts import microposts_bp
from routes.users import users_bp
from security.sessions import SessionContext
from services import (
    AccountNotActivated,
    AuthFailure,
    InvalidToken,
    ServiceError,
    TokenExpired,
    ValidationError,
)
from services import container
from utils.cookies import apply_remember_cookie

migrate = Migrate()
jwt = JWTManager()

SERVICE_ERROR_STATUS = {
    ValidationError: (HTTPStatus.UNPROCESSABLE_ENTITY, "Unprocessable Entity"),
    AuthFailure: (HTTPStatus.UNAUTHORIZED, "Unauthorized"),
    AccountNotActivated: (HTTPStatus.FORBIDDEN, "Forbidden"),
    InvalidToken: (HTTPStatus.BAD_REQUEST, "Bad Request"),
    TokenExpired: (HTTPStatus.BAD_REQUEST, "Bad Request"),
}


def create_app(config_class: type[Config] = Config, mailer: AbstractMailer | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    container.init_app(app, mailer=mailer)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(microposts_bp)

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    _register_session_hooks(app)

    # Errors
    _register_error_handlers(app)

    return app


def _register_session_hooks(app: Flask) -> None:
    """Resolve the signed-in user before each request; write cookies after."""

    @app.before_request
    def _resume_session():
        ctx = SessionContext(
            session,
            request.cookies.get(app.config.get("REMEMBER_COOKIE_NAME", "remember_token")),
        )
        g.auth = ctx
        container.get_services().sessions.resume_session(ctx)

    @app.after_request
    def _write_remember_cookie(response):
        return apply_remember_cookie(response, g.get("auth"), app.config)


def _error_response(status: int, error: str, detail: str, **extra):
    request_id = g.get("request_id") or str(uuid.uuid4())
    payload = {"error": error, "detail": detail, "request_id": request_id}
    payload.update(extra)
    response = jsonify(payload)
    response.status_code = status
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(ServiceError)
    def _handle_service_error(error: ServiceError):
        status, name = SERVICE_ERROR_STATUS.get(
            type(error), (HTTPStatus.BAD_REQUEST, "Bad Request")
        )
        extra = {}
        if isinstance(error, ValidationError):
            extra["fields"] = error.errors
        return _error_response(status, name, error.message, **extra)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "An unexpected error occurred.",
        )


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
