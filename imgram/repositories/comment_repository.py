from sqlalchemy import delete, select

from imgram.models.comment_model import Comment
from imgram.models.post_model import Post


def lock_post(session, post_id):
    # SELECT ... FOR SHARE on engines that support it; a concurrent
    # delete of the post waits until this transaction ends.
    return session.execute(
        select(Post.id)
        .where(Post.id == post_id)
        .with_for_update(read=True)
    ).first()


def create_comment(session, post_id, user_id, text):
    comment = Comment(
        post_id=post_id,
        user_id=user_id,
        text=text,
    )
    session.add(comment)
    session.flush()
    return comment


def delete_comment(session, post_id, comment_id, user_id) -> int:
    result = session.execute(
        delete(Comment).where(
            Comment.post_id == post_id,
            Comment.id == comment_id,
            Comment.user_id == user_id,
        )
    )
    return result.rowcount
