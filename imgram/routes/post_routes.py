import os

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_jwt_extended import jwt_required

from imgram.db import db
from imgram.errors import AppError, NotFound, ValidationError
from imgram.extensions.media_store import get_media_store
from imgram.repositories import post_repository
from imgram.routes.utils import current_user_id, parse_identifier, respond_error
from imgram.schemas.feed_schema import FeedPostSchema
from imgram.schemas.response_schema import envelope
from imgram.services.feed_service import FeedAggregator, decode_cursor, parse_limit
from imgram.services.ingestion_service import IngestionPipeline
from imgram.utils.multipart import MultipartReader

post_bp = Blueprint("posts", __name__)


@post_bp.route("/posts", methods=["POST"])
@jwt_required()
def create_post():
    user_id = current_user_id()

    # request.form / request.files would buffer the whole body; parts are
    # streamed from request.stream instead.
    if request.mimetype != "multipart/form-data":
        return respond_error(ValidationError("Expected a multipart/form-data body"))

    try:
        parts = MultipartReader(
            request.stream,
            request.mimetype_params.get("boundary"),
            chunk_size=current_app.config["MULTIPART_CHUNK_SIZE"],
            max_parts=current_app.config["MULTIPART_MAX_PARTS"],
            header_limit=current_app.config["MULTIPART_HEADER_LIMIT"],
        )
        pipeline = IngestionPipeline(get_media_store(), db.session)
        pipeline.ingest(user_id, parts)
    except AppError as e:
        return respond_error(e)

    return jsonify(envelope()), 200


@post_bp.route("/posts", methods=["GET"])
@jwt_required()
def list_posts():
    try:
        limit = parse_limit(request.args.get("limit"))
        cursor = decode_cursor(request.args.get("cursor"))

        aggregator = FeedAggregator(
            db.session,
            max_limit=current_app.config.get("FEED_MAX_LIMIT"),
        )
        page = aggregator.list_feed(limit=limit, cursor=cursor)
    except AppError as e:
        return respond_error(e)

    data = FeedPostSchema(many=True).dump(page.posts)
    return jsonify(envelope(data=data, cursor=page.cursor)), 200


@post_bp.route("/posts/<post_id>", methods=["GET"])
@jwt_required()
def get_post_image(post_id):
    try:
        post = post_repository.get_post(db.session, parse_identifier(post_id, "post_id"))
        if post is None or not post.filepath:
            raise NotFound(f"post {post_id} has no image")

        path = get_media_store().resolve(post.filepath)
        if not os.path.isfile(path):
            raise NotFound(f"image for post {post_id} not found")
    except AppError as e:
        return respond_error(e)

    return send_file(
        path,
        mimetype="image/jpeg",
        conditional=True,
        max_age=current_app.config.get("MEDIA_CACHE_MAX_AGE_SECONDS", 0),
    )
