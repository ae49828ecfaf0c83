from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from imgram.config import COMMENT_LIMIT_BYTES
from imgram.db import db
from imgram.errors import AppError
from imgram.routes.utils import current_user_id, parse_identifier, respond_error
from imgram.schemas.response_schema import envelope
from imgram.services import comment_service
from imgram.utils.limited_reader import read_limited_text


comment_bp = Blueprint("comments", __name__)


@comment_bp.route("/posts/<post_id>/comments", methods=["POST"])
@jwt_required()
def create_comment(post_id):
    user_id = current_user_id()

    try:
        post_id = parse_identifier(post_id, "post_id")
        # Raw body, truncated at the limit.
        text = read_limited_text(request.stream, COMMENT_LIMIT_BYTES)

        comment = comment_service.add_comment(db.session, post_id, user_id, text)
    except AppError as e:
        return respond_error(e)

    return jsonify(envelope(data={"id": comment.id})), 201


@comment_bp.route("/posts/<post_id>/comments/<comment_id>", methods=["DELETE"])
@jwt_required()
def delete_comment(post_id, comment_id):
    user_id = current_user_id()

    try:
        comment_service.delete_comment(
            db.session,
            parse_identifier(post_id, "post_id"),
            parse_identifier(comment_id, "comment_id"),
            user_id,
        )
    except AppError as e:
        return respond_error(e)

    return jsonify(envelope()), 200
