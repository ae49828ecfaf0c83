import os
from datetime import timedelta

from dotenv import load_dotenv


load_dotenv()


CAPTION_LIMIT_BYTES = 1000
COMMENT_LIMIT_BYTES = 1000
FILE_LIMIT_BYTES = 100 << 20  # 100 MiB
CANONICAL_SIZE = (600, 600)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///imgram.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_MINUTES", "15"))
    )
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=30)

    DATA_DIR = os.getenv("DATA_DIR", "data")
    # Stored files keep the uploaded filename unless this is enabled,
    # in which case the suffix is rewritten to ".jpg".
    MEDIA_NORMALIZE_SUFFIX = _env_bool("MEDIA_NORMALIZE_SUFFIX", False)
    MEDIA_CACHE_MAX_AGE_SECONDS = int(
        os.getenv("MEDIA_CACHE_MAX_AGE_SECONDS", str(7 * 24 * 60 * 60))
    )

    FEED_MAX_LIMIT = int(os.getenv("FEED_MAX_LIMIT", "50"))

    MULTIPART_CHUNK_SIZE = int(os.getenv("MULTIPART_CHUNK_SIZE", str(64 * 1024)))
    MULTIPART_MAX_PARTS = int(os.getenv("MULTIPART_MAX_PARTS", "16"))
    MULTIPART_HEADER_LIMIT = int(
        os.getenv("MULTIPART_HEADER_LIMIT", str(1024 * 1024))
    )

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
