import logging

from sqlalchemy.exc import SQLAlchemyError

from imgram.errors import NotFound, StorageFailure
from imgram.repositories import comment_repository


logger = logging.getLogger(__name__)


def add_comment(session, post_id, user_id, text):
    """Insert a comment while holding a shared lock on the parent post."""
    try:
        if comment_repository.lock_post(session, post_id) is None:
            session.rollback()
            raise NotFound(f"post {post_id} not found")

        comment = comment_repository.create_comment(session, post_id, user_id, text)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("error creating comment on post %s", post_id)
        raise StorageFailure("error creating comment") from e

    return comment


def delete_comment(session, post_id, comment_id, user_id):
    try:
        deleted = comment_repository.delete_comment(session, post_id, comment_id, user_id)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("error deleting comment %s", comment_id)
        raise StorageFailure("error deleting comment") from e

    if not deleted:
        raise NotFound("error deleting comment: not found")
