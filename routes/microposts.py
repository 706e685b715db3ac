"""Microposts blueprint: posting, deleting and the timeline."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import Forbidden, NotFound

from models import db, transaction
from models.micropost import MAX_CONTENT_LENGTH, Micropost
from services.container import get_services
from services.exceptions import ValidationError
from utils.current_user import login_required, require_user
from utils.request_validation import page_args, parse_json_request

microposts_bp = Blueprint("microposts", __name__)


@microposts_bp.route("/microposts", methods=["POST"])
@login_required
def create_micropost():
    current = require_user()
    payload = parse_json_request(request)
    content = payload.get("content")
    content = content.strip() if isinstance(content, str) else ""
    if not content:
        raise ValidationError.single("content", "can't be blank")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError.single(
            "content", f"is too long (maximum is {MAX_CONTENT_LENGTH} characters)"
        )

    post = Micropost(user_id=current.id, content=content)
    with transaction() as session:
        session.add(post)
    return jsonify({"micropost": post.to_dict()}), HTTPStatus.CREATED


@microposts_bp.route("/microposts/<int:post_id>", methods=["DELETE"])
@login_required
def delete_micropost(post_id: int):
    current = require_user()
    post = db.session.get(Micropost, post_id)
    if post is None:
        raise NotFound("Micropost not found.")
    if post.user_id != current.id:
        raise Forbidden("You can only delete your own microposts.")
    with transaction() as session:
        session.delete(post)
    return "", HTTPStatus.NO_CONTENT


@microposts_bp.route("/feed", methods=["GET"])
@login_required
def feed():
    """Microposts by the signed-in user and everyone they follow."""

    page, per_page = page_args(request)
    pagination = get_services().graph.feed(require_user()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify(
        {
            "microposts": [post.to_dict() for post in pagination.items],
            "page": page,
            "per_page": per_page,
            "total": pagination.total,
        }
    )
