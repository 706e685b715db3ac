"""Authentication blueprint: sign-up, sign-in, sign-out, activation and resets."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, g, jsonify, request

from services.container import get_services
from utils.current_user import login_required, require_user
from utils.request_validation import parse_bool, parse_json_request

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/signup", methods=["POST"])
def signup() -> tuple:
    """Register a pending account; the activation link goes out by mail."""
    payload = parse_json_request(request)
    user = get_services().registry.create(payload)

    return (
        jsonify(
            {
                "message": "Please check your email to activate your account.",
                "user": user.to_dict(include_private=True),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Check credentials, sign in, and remember or forget this browser."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    services = get_services()

    user = services.sessions.authenticate_credentials(
        payload.get("email"), payload.get("password")
    )
    services.sessions.sign_in(g.auth, user)
    if parse_bool(payload.get("remember_me")):
        services.sessions.remember(g.auth, user)
    else:
        services.sessions.forget(g.auth, user)

    return jsonify({"user": user.to_dict(include_private=True)}), HTTPStatus.OK


@auth_bp.route("/logout", methods=["POST", "DELETE"])
def logout() -> tuple:
    """Sign out and invalidate the remember token, if signed in."""
    services = get_services()
    if g.auth.authenticated:
        services.sessions.sign_out(g.auth, forget=True)
    return jsonify({"message": "Signed out."}), HTTPStatus.OK


@auth_bp.route("/me", methods=["GET"])
@login_required
def me() -> tuple:
    return jsonify({"user": require_user().to_dict(include_private=True)}), HTTPStatus.OK


@auth_bp.route("/activate", methods=["GET", "POST"])
def activate() -> tuple:
    """Activate an account from the mailed link and sign the user in."""
    if request.method == "POST":
        payload = parse_json_request(request, required_keys=("email", "token"))
    else:
        payload = request.args
    services = get_services()

    user = services.registry.activate(payload.get("email"), payload.get("token"))
    services.sessions.sign_in(g.auth, user)
    return (
        jsonify({"message": "Account activated.", "user": user.to_dict(include_private=True)}),
        HTTPStatus.OK,
    )


@auth_bp.route("/activation/resend", methods=["POST"])
def resend_activation() -> tuple:
    payload = parse_json_request(request, required_keys=("email",))
    get_services().registry.resend_activation(payload.get("email"))
    return (
        jsonify({"message": "If the account is pending, a new link has been sent."}),
        HTTPStatus.ACCEPTED,
    )


@auth_bp.route("/password-resets", methods=["POST"])
def request_password_reset() -> tuple:
    payload = parse_json_request(request, required_keys=("email",))
    get_services().registry.request_password_reset(payload.get("email"))
    return (
        jsonify({"message": "If the account exists, password reset instructions have been sent."}),
        HTTPStatus.ACCEPTED,
    )


@auth_bp.route("/password-resets/confirm", methods=["POST"])
def confirm_password_reset() -> tuple:
    """Set a new password with a reset token, then sign in."""
    payload = parse_json_request(request, required_keys=("email", "token"))
    services = get_services()

    user = services.registry.reset_password(
        payload.get("email"),
        payload.get("token"),
        payload.get("password"),
        payload.get("password_confirmation"),
    )
    services.sessions.sign_in(g.auth, user)
    return (
        jsonify({"message": "Password has been reset.", "user": user.to_dict(include_private=True)}),
        HTTPStatus.OK,
    )
