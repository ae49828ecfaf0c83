from imgram.models.user_model import User
from imgram.db import db


def get_by_username(username: str):
    return User.query.filter_by(username=username).first()


def create_user(username, password_hash):
    user = User(
        username=username,
        password_hash=password_hash,
    )
    db.session.add(user)
    db.session.commit()
    return user
