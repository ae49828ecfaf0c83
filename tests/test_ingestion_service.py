import io
import unittest
from unittest.mock import MagicMock, patch

from PIL import Image
from sqlalchemy.exc import OperationalError

from imgram.errors import DecodeFailed, UnsupportedFormat
from imgram.services.ingestion_service import IngestionPipeline


class FakePart(io.BytesIO):
    def __init__(self, name, payload=b"", filename=None):
        super().__init__(payload)
        self.name = name
        self.filename = filename


def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (3, 5)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestIngestionPipeline(unittest.TestCase):
    def setUp(self):
        self.store = MagicMock()
        self.store.store.return_value = "data/7/pic.png"
        self.session = MagicMock()
        self.pipeline = IngestionPipeline(self.store, self.session, caption_limit=10)

        patcher = patch("imgram.services.ingestion_service.post_repository")
        self.repository = patcher.start()
        self.addCleanup(patcher.stop)
        self.repository.create_post.return_value.id = 11

    def test_caption_and_file(self):
        parts = [
            FakePart("caption", b"hello"),
            FakePart("file", png_bytes(), "pic.png"),
        ]

        result = self.pipeline.ingest(7, parts)

        self.assertTrue(result.accepted)
        self.assertTrue(result.stored)
        self.assertEqual(result.post_id, 11)
        self.assertEqual(result.filepath, "data/7/pic.png")
        image_bytes, user_id, filename = self.store.store.call_args.args
        self.assertEqual((user_id, filename), (7, "pic.png"))
        self.assertEqual(Image.open(io.BytesIO(image_bytes)).size, (600, 600))
        self.repository.create_post.assert_called_once_with(
            self.session, 7, "hello", "data/7/pic.png"
        )
        self.session.commit.assert_called_once()

    def test_no_parts_creates_empty_post(self):
        self.pipeline.ingest(7, [])

        self.repository.create_post.assert_called_once_with(self.session, 7, "", "")
        self.store.store.assert_not_called()

    def test_caption_is_truncated(self):
        self.pipeline.ingest(7, [FakePart("caption", b"0123456789abcdef")])

        self.repository.create_post.assert_called_once_with(self.session, 7, "0123456789", "")

    def test_later_caption_replaces_earlier(self):
        self.pipeline.ingest(7, [FakePart("caption", b"one"), FakePart("caption", b"two")])

        self.assertEqual(self.repository.create_post.call_args.args[2], "two")

    def test_unknown_part_is_skipped(self):
        self.pipeline.ingest(7, [FakePart("tags", b"x"), FakePart("caption", b"ok")])

        self.assertEqual(self.repository.create_post.call_args.args[2], "ok")

    def test_failure_stops_reading_parts(self):
        consumed = []

        def parts():
            for part in (
                FakePart("file", b"GIF89a", "anim.gif"),
                FakePart("caption", b"never read"),
            ):
                consumed.append(part.name)
                yield part

        with self.assertRaises(UnsupportedFormat):
            self.pipeline.ingest(7, parts())

        self.assertEqual(consumed, ["file"])
        self.store.store.assert_not_called()
        self.repository.create_post.assert_not_called()

    def test_decode_failure_after_valid_file_writes_nothing(self):
        parts = [
            FakePart("file", png_bytes(), "good.png"),
            FakePart("file", b"garbage", "bad.png"),
        ]

        with self.assertRaises(DecodeFailed):
            self.pipeline.ingest(7, parts)

        self.store.store.assert_not_called()
        self.repository.create_post.assert_not_called()

    def test_insert_failure_is_not_raised(self):
        self.repository.create_post.side_effect = OperationalError(
            "insert", {}, Exception("db down")
        )

        with self.assertLogs("imgram.services.ingestion_service", level="ERROR"):
            result = self.pipeline.ingest(7, [FakePart("caption", b"hi")])

        self.assertTrue(result.accepted)
        self.assertFalse(result.stored)
        self.assertIsNone(result.post_id)
        self.session.rollback.assert_called_once()


if __name__ == "__main__":
    unittest.main()
