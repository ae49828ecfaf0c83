from flask import jsonify
from flask_jwt_extended import get_jwt_identity

from imgram.errors import AppError, ValidationError
from imgram.schemas.response_schema import envelope


def respond_error(error: AppError):
    return jsonify(envelope(error=error.message)), error.status_code


def current_user_id() -> int:
    return int(get_jwt_identity())


def parse_identifier(value, name: str) -> int:
    try:
        identifier = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid {name}: {value!r}") from e
    if identifier <= 0:
        raise ValidationError(f"invalid {name}: {value!r}")
    return identifier
