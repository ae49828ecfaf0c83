from sqlalchemy import func, select

from imgram.models.comment_model import Comment
from imgram.models.post_model import Post


def create_post(session, user_id, caption, filepath):
    post = Post(
        user_id=user_id,
        caption=caption,
        filepath=filepath,
    )
    session.add(post)
    session.flush()

    return post


def get_post(session, post_id):
    return session.get(Post, post_id)


def select_feed_rows(session, limit, cursor=None, comments_per_post=2):
    """Posts of one feed page joined with their newest comments.

    One row per (post, comment) pair, or a single row with NULL comment
    columns for a post without comments. Rows come ordered by post id
    descending, then newest comment first, so rows of one post are
    contiguous.
    """
    page = select(Post)
    if cursor:
        page = page.where(Post.id < cursor)
    page = page.order_by(Post.id.desc()).limit(limit).subquery("page")

    rank = func.row_number().over(
        partition_by=page.c.id,
        order_by=(Comment.created_at.desc(), Comment.id.desc()),
    ).label("n")

    ranked = (
        select(
            page.c.id,
            page.c.user_id,
            page.c.caption,
            page.c.filepath,
            page.c.created_at,
            Comment.id.label("comment_id"),
            Comment.user_id.label("comment_user_id"),
            Comment.text.label("comment_text"),
            Comment.created_at.label("comment_created_at"),
            rank,
        )
        .select_from(page)
        .outerjoin(Comment, Comment.post_id == page.c.id)
        .subquery("ranked")
    )

    query = (
        select(ranked)
        .where(ranked.c.n <= comments_per_post)
        .order_by(ranked.c.id.desc(), ranked.c.n.asc())
    )
    return session.execute(query).all()
