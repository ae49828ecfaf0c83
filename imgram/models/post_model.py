from datetime import datetime

from imgram.db import db


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    caption = db.Column(db.Text, nullable=False, default="")
    filepath = db.Column(db.String(1024), nullable=False, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    comments = db.relationship(
        "Comment",
        backref="post",
        lazy="select",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
