"""Users blueprint: profiles, follow edges and account deletion."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import Forbidden, NotFound

from models.micropost import Micropost
from models.user import User
from services.container import get_services
from utils.current_user import admin_required, login_required, require_user
from utils.request_validation import page_args, parse_json_request

users_bp = Blueprint("users", __name__)


def _get_user_or_404(user_id: int) -> User:
    user = get_services().registry.get(user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def _profile(user: User, viewer: User | None) -> dict:
    graph = get_services().graph
    data = user.to_dict(include_private=viewer is not None and viewer.id == user.id)
    data["following_count"] = graph.following_count(user)
    data["follower_count"] = graph.follower_count(user)
    data["micropost_count"] = user.microposts.count()
    if viewer is not None and viewer.id != user.id:
        data["followed_by_me"] = graph.is_following(viewer, user)
    return data


def _user_page(query) -> dict:
    page, per_page = page_args(request)
    pagination = query.order_by(User.id).paginate(page=page, per_page=per_page, error_out=False)
    return {
        "users": [user.to_dict() for user in pagination.items],
        "page": page,
        "per_page": per_page,
        "total": pagination.total,
    }


@users_bp.route("", methods=["GET"])
@login_required
def list_users():
    """All users, paginated in id order."""

    return jsonify(_user_page(User.query))


@users_bp.route("/<int:user_id>", methods=["GET"])
@login_required
def show_user(user_id: int):
    user = _get_user_or_404(user_id)
    return jsonify({"user": _profile(user, require_user())})


@users_bp.route("/<int:user_id>", methods=["PATCH", "PUT"])
@login_required
def update_user(user_id: int):
    """Update the signed-in user's own profile."""

    current = require_user()
    if current.id != user_id:
        raise Forbidden("You can only edit your own profile.")

    payload = parse_json_request(request)
    user = get_services().registry.update(current, payload)
    return jsonify({"user": _profile(user, current)})


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id: int):
    """Admins delete other accounts together with their posts and edges."""

    current = require_user()
    if current.id == user_id:
        raise Forbidden("Admins cannot delete themselves.")
    user = _get_user_or_404(user_id)
    get_services().registry.destroy(user)
    return "", HTTPStatus.NO_CONTENT


@users_bp.route("/<int:user_id>/follow", methods=["POST"])
@login_required
def follow(user_id: int):
    current = require_user()
    target = _get_user_or_404(user_id)
    created = get_services().graph.follow(current, target)
    status = HTTPStatus.CREATED if created else HTTPStatus.OK
    return jsonify({"user": _profile(target, current), "created": created}), status


@users_bp.route("/<int:user_id>/follow", methods=["DELETE"])
@login_required
def unfollow(user_id: int):
    current = require_user()
    target = _get_user_or_404(user_id)
    removed = get_services().graph.unfollow(current, target)
    return jsonify({"user": _profile(target, current), "removed": removed})


@users_bp.route("/<int:user_id>/following", methods=["GET"])
@login_required
def following(user_id: int):
    user = _get_user_or_404(user_id)
    return jsonify(_user_page(get_services().graph.following(user)))


@users_bp.route("/<int:user_id>/followers", methods=["GET"])
@login_required
def followers(user_id: int):
    user = _get_user_or_404(user_id)
    return jsonify(_user_page(get_services().graph.followers(user)))


@users_bp.route("/<int:user_id>/microposts", methods=["GET"])
@login_required
def microposts(user_id: int):
    """The user's own posts, newest first."""

    user = _get_user_or_404(user_id)
    page, per_page = page_args(request)
    pagination = (
        Micropost.query.filter_by(user_id=user.id)
        .order_by(Micropost.created_at.desc(), Micropost.id.desc())
        .paginate(page=page, per_page=per_page, error_out=False)
    )
    return jsonify(
        {
            "microposts": [post.to_dict() for post in pagination.items],
            "page": page,
            "per_page": per_page,
            "total": pagination.total,
        }
    )
