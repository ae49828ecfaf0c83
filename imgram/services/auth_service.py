from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token, create_refresh_token

from imgram.repositories import user_repository


def _require_non_empty_string(value):
    return isinstance(value, str) and value.strip()


def register(username, password):
    if not _require_non_empty_string(username) or not _require_non_empty_string(password):
        raise ValueError("Missing fields")

    username = username.strip()
    if user_repository.get_by_username(username):
        raise ValueError("Username already exists")

    user = user_repository.create_user(
        username=username,
        password_hash=generate_password_hash(password),
    )
    return user


def login(username, password):
    if not _require_non_empty_string(username) or not _require_non_empty_string(password):
        raise ValueError("Invalid credentials")

    user = user_repository.get_by_username(username.strip())
    if not user or not check_password_hash(user.password_hash, password):
        raise ValueError("Invalid credentials")

    # Posts and comments are keyed by the numeric id.
    identity = str(user.id)
    return {
        "access_token": create_access_token(identity=identity),
        "refresh_token": create_refresh_token(identity=identity)
    }


def refresh_access_token(identity):
    return {
        "access_token": create_access_token(identity=identity)
    }
