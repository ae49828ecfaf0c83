import io

from PIL import Image

from imgram.config import CANONICAL_SIZE
from imgram.errors import DecodeFailed, UnsupportedFormat
from imgram.utils.limited_reader import read_limited


# Only these decoders are ever handed client bytes.
FORMAT_BY_EXTENSION = {
    ".jpg": "JPEG",
    ".png": "PNG",
    ".bmp": "BMP",
}

CANONICAL_FORMAT = "JPEG"


def format_for_extension(extension: str) -> str:
    image_format = FORMAT_BY_EXTENSION.get(extension or "")
    if image_format is None:
        raise UnsupportedFormat(f"invalid file format: {extension}")
    return image_format


def _flatten(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (0, 0, 0))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def normalize_image(stream, cap_bytes: int, extension: str) -> bytes:
    """Decode an uploaded image and re-encode it in the canonical format.

    The extension picks the decoder before any byte is read. The payload
    is read through a ``LimitedReader`` at ``cap_bytes``, so an oversized
    upload shows up as a truncated image and fails to decode. The result
    is always a ``CANONICAL_SIZE`` JPEG sampled with nearest neighbour,
    stretching the source to fit.
    """
    image_format = format_for_extension(extension)

    payload = read_limited(stream, cap_bytes)
    if not payload:
        raise DecodeFailed("empty image payload")

    try:
        with Image.open(io.BytesIO(payload), formats=[image_format]) as image:
            image.load()
            flat = _flatten(image)
    except Image.DecompressionBombError as e:
        raise DecodeFailed(f"image too large: {e}") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise DecodeFailed(f"error decoding {image_format} image: {e}") from e

    scaled = flat.resize(CANONICAL_SIZE, resample=Image.Resampling.NEAREST)

    output = io.BytesIO()
    scaled.save(output, format=CANONICAL_FORMAT)
    return output.getvalue()
