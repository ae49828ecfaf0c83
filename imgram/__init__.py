import logging

from flask import Flask, jsonify
from flask_jwt_extended import JWTManager

from imgram.config import Config
from imgram.db import db
from imgram.extensions.extensions import ma
from imgram.extensions.media_store import init_media_store
from imgram.routes.auth_routes import auth_bp
from imgram.routes.comment_routes import comment_bp
from imgram.routes.main_routes import main_bp
from imgram.routes.post_routes import post_bp
from imgram.schemas.response_schema import envelope


def _configure_logging(level):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify(envelope(error=reason)), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify(envelope(error=reason)), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify(envelope(error="Token has expired")), 401


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    _configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    ma.init_app(app)
    jwt = JWTManager(app)
    _register_jwt_handlers(jwt)
    init_media_store(app)

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(post_bp, url_prefix="/api")
    app.register_blueprint(comment_bp, url_prefix="/api")

    with app.app_context():
        db.create_all()

    return app
