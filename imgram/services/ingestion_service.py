import logging
import os
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from imgram.config import CAPTION_LIMIT_BYTES, FILE_LIMIT_BYTES
from imgram.errors import AppError
from imgram.repositories import post_repository
from imgram.services.image_service import format_for_extension, normalize_image
from imgram.utils.limited_reader import read_limited_text


logger = logging.getLogger(__name__)


FORM_NAME_CAPTION = "caption"
FORM_NAME_FILE = "file"


@dataclass
class IngestionResult:
    """Outcome of one upload.

    ``accepted`` means every part was consumed and the image, if any, was
    written. ``stored`` tells whether the post row was committed; the
    insert is best effort and a failure there does not reject the upload.
    """

    accepted: bool
    stored: bool
    filepath: str = ""
    post_id: int | None = None


class IngestionPipeline:
    def __init__(
        self,
        media_store,
        session,
        caption_limit: int = CAPTION_LIMIT_BYTES,
        file_limit: int = FILE_LIMIT_BYTES,
    ):
        self.media_store = media_store
        self.session = session
        self.caption_limit = caption_limit
        self.file_limit = file_limit

    def ingest(self, user_id: int, parts) -> IngestionResult:
        caption = ""
        image = None
        filename = None

        try:
            for part in parts:
                logger.info(
                    "upload part: formname=%s, filename=%s", part.name, part.filename
                )

                if part.name == FORM_NAME_CAPTION:
                    caption = read_limited_text(part, self.caption_limit)
                elif part.name == FORM_NAME_FILE:
                    extension = os.path.splitext(part.filename or "")[1]
                    # Reject the name before any payload byte is decoded.
                    format_for_extension(extension)
                    self.media_store.path_for(user_id, part.filename)
                    image = normalize_image(part, self.file_limit, extension)
                    filename = part.filename
                else:
                    logger.info("skipping unknown upload part %r", part.name)

            filepath = ""
            if image is not None:
                filepath = self.media_store.store(image, user_id, filename)
        except AppError as e:
            logger.warning("upload aborted for user %s: %s", user_id, e.message)
            raise

        return self._persist(user_id, caption, filepath)

    def _persist(self, user_id, caption, filepath) -> IngestionResult:
        try:
            post = post_repository.create_post(self.session, user_id, caption, filepath)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("error persisting post for user %s", user_id)
            return IngestionResult(accepted=True, stored=False, filepath=filepath)

        return IngestionResult(
            accepted=True,
            stored=True,
            filepath=filepath,
            post_id=post.id,
        )
