import logging
import os
import tempfile

from flask import current_app

from imgram.errors import StorageFailure, ValidationError


logger = logging.getLogger(__name__)


class MediaStore:
    """Writes canonical images under ``{data_root}/{user_id}/{filename}``."""

    def __init__(self, data_root: str, normalize_suffix: bool = False):
        self.data_root = data_root
        self.normalize_suffix = normalize_suffix

    def path_for(self, user_id: int, filename: str) -> str:
        # Keep only the last path component; the name is otherwise stored
        # as uploaded.
        safe_name = os.path.basename(filename or "")
        if safe_name in ("", ".", "..") or any(c in safe_name for c in ("/", "\\", "\x00")):
            raise ValidationError(f"invalid filename: {filename!r}")

        if self.normalize_suffix:
            safe_name = os.path.splitext(safe_name)[0] + ".jpg"

        return os.path.join(self.data_root, str(user_id), safe_name)

    def store(self, image_bytes: bytes, user_id: int, filename: str) -> str:
        path = self.path_for(user_id, filename)
        directory = os.path.dirname(path)

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=".upload-", suffix=".tmp"
            )
        except OSError as e:
            raise StorageFailure(f"error preparing {directory}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(image_bytes)
                fh.flush()
                os.fsync(fh.fileno())
            # Concurrent writers to the same path: last replace wins.
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            raise StorageFailure(f"error writing {path}: {e}") from e

        logger.info("stored %d bytes at %s", len(image_bytes), path)
        return path

    def resolve(self, stored_path: str) -> str:
        return os.path.abspath(stored_path)


def init_media_store(app):
    app.extensions["media_store"] = MediaStore(
        app.config["DATA_DIR"],
        normalize_suffix=app.config.get("MEDIA_NORMALIZE_SUFFIX", False),
    )


def get_media_store() -> MediaStore:
    return current_app.extensions["media_store"]
