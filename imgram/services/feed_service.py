import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from imgram.errors import StorageFailure, ValidationError
from imgram.repositories import post_repository


logger = logging.getLogger(__name__)


DEFAULT_PAGE_LIMIT = 10
COMMENTS_PER_POST = 2


@dataclass
class FeedComment:
    id: int
    user_id: int
    text: str
    created_at: datetime


@dataclass
class FeedPost:
    id: int
    user_id: int
    caption: str
    filepath: str
    created_at: datetime
    comments: list[FeedComment] = field(default_factory=list)


@dataclass
class FeedPage:
    posts: list[FeedPost]
    cursor: int


# The cursor is a post id on the wire. Callers only ever pass back what
# they received, so the representation can change behind these two.
def encode_cursor(post_id) -> int:
    return int(post_id) if post_id else 0


def decode_cursor(raw) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid cursor: {raw!r}") from e
    return value if value > 0 else None


def parse_limit(raw) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid limit: {raw!r}") from e


def group_rows(rows) -> list[FeedPost]:
    """Fold joined (post, comment) rows into posts with nested comments.

    Rows of the same post must be adjacent; a post id change starts a new
    entry, so this is a single pass with no sorting.
    """
    posts: list[FeedPost] = []
    for row in rows:
        if not posts or posts[-1].id != row.id:
            posts.append(
                FeedPost(
                    id=row.id,
                    user_id=row.user_id,
                    caption=row.caption,
                    filepath=row.filepath,
                    created_at=row.created_at,
                )
            )
        if row.comment_id is not None:
            posts[-1].comments.append(
                FeedComment(
                    id=row.comment_id,
                    user_id=row.comment_user_id,
                    text=row.comment_text,
                    created_at=row.comment_created_at,
                )
            )
    return posts


class FeedAggregator:
    def __init__(self, session, max_limit: int | None = None):
        self.session = session
        self.max_limit = max_limit

    def list_feed(self, limit: int | None = None, cursor: int | None = None) -> FeedPage:
        if not limit or limit <= 0:
            limit = DEFAULT_PAGE_LIMIT
        if self.max_limit and limit > self.max_limit:
            limit = self.max_limit
        if cursor is not None and cursor <= 0:
            cursor = None

        try:
            rows = post_repository.select_feed_rows(
                self.session,
                limit,
                cursor=cursor,
                comments_per_post=COMMENTS_PER_POST,
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error listing feed (limit=%s, cursor=%s)", limit, cursor)
            raise StorageFailure("error listing posts") from e

        posts = group_rows(rows)
        next_cursor = encode_cursor(posts[-1].id if posts else None)
        return FeedPage(posts=posts, cursor=next_cursor)
