import unittest
from collections import namedtuple
from datetime import datetime
from unittest.mock import MagicMock, patch

from imgram.errors import ValidationError
from imgram.services.feed_service import (
    DEFAULT_PAGE_LIMIT,
    FeedAggregator,
    decode_cursor,
    group_rows,
    parse_limit,
)


Row = namedtuple(
    "Row",
    "id user_id caption filepath created_at "
    "comment_id comment_user_id comment_text comment_created_at n",
)

T0 = datetime(2026, 1, 1)


def post_row(post_id, comment_id=None, n=1):
    if comment_id is None:
        return Row(post_id, 1, f"post {post_id}", "", T0, None, None, None, None, n)
    return Row(post_id, 1, f"post {post_id}", "", T0, comment_id, 2, f"c{comment_id}", T0, n)


class TestGroupRows(unittest.TestCase):
    def test_groups_consecutive_rows(self):
        rows = [
            post_row(5, comment_id=9, n=1),
            post_row(5, comment_id=8, n=2),
            post_row(4),
            post_row(3, comment_id=2, n=1),
        ]

        posts = group_rows(rows)

        self.assertEqual([p.id for p in posts], [5, 4, 3])
        self.assertEqual([c.id for c in posts[0].comments], [9, 8])
        self.assertEqual(posts[1].comments, [])
        self.assertEqual([c.text for c in posts[2].comments], ["c2"])

    def test_empty(self):
        self.assertEqual(group_rows([]), [])


class TestParams(unittest.TestCase):
    def test_decode_cursor(self):
        self.assertIsNone(decode_cursor(None))
        self.assertIsNone(decode_cursor(""))
        self.assertIsNone(decode_cursor("0"))
        self.assertIsNone(decode_cursor("-3"))
        self.assertEqual(decode_cursor("17"), 17)
        with self.assertRaises(ValidationError):
            decode_cursor("abc")

    def test_parse_limit(self):
        self.assertIsNone(parse_limit(None))
        self.assertEqual(parse_limit("5"), 5)
        with self.assertRaises(ValidationError):
            parse_limit("1.5")


class TestFeedAggregator(unittest.TestCase):
    def setUp(self):
        patcher = patch("imgram.services.feed_service.post_repository")
        self.repository = patcher.start()
        self.addCleanup(patcher.stop)
        self.repository.select_feed_rows.return_value = []

    def _called_limit(self):
        return self.repository.select_feed_rows.call_args.args[1]

    def test_default_limit(self):
        aggregator = FeedAggregator(MagicMock())

        for limit in (None, 0, -1):
            aggregator.list_feed(limit=limit)
            self.assertEqual(self._called_limit(), DEFAULT_PAGE_LIMIT)

    def test_limit_is_capped(self):
        FeedAggregator(MagicMock(), max_limit=3).list_feed(limit=100)

        self.assertEqual(self._called_limit(), 3)

    def test_next_cursor_is_last_post(self):
        self.repository.select_feed_rows.return_value = [post_row(9), post_row(4)]

        page = FeedAggregator(MagicMock()).list_feed(limit=2, cursor=12)

        self.assertEqual(page.cursor, 4)
        self.assertEqual(self.repository.select_feed_rows.call_args.kwargs["cursor"], 12)
        self.assertEqual(self.repository.select_feed_rows.call_args.kwargs["comments_per_post"], 2)

    def test_empty_page_cursor(self):
        page = FeedAggregator(MagicMock()).list_feed()

        self.assertEqual(page.posts, [])
        self.assertEqual(page.cursor, 0)


if __name__ == "__main__":
    unittest.main()
