"""
Image and filename normalization.

Converts embedded payloads and fetched bytes into canonical data URLs that
search engines accept, and derives safe filenames for them.
"""

from __future__ import annotations

import base64
import binascii
import io
import re
import struct
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import unquote, unquote_to_bytes, urlsplit

from PIL import Image, UnidentifiedImageError

from ..logging import get_logger

logger = get_logger(__name__)

# Formats passed through unchanged, mapped to their canonical MIME type and extension
CANONICAL_FORMATS = {
    "JPEG": ("image/jpeg", "jpg"),
    "MPO": ("image/jpeg", "jpg"),
    "PNG": ("image/png", "png"),
    "GIF": ("image/gif", "gif"),
    "WEBP": ("image/webp", "webp"),
    "BMP": ("image/bmp", "bmp"),
}

EXT_ALIASES = {"jpeg": "jpg", "jpe": "jpg", "jfif": "jpg", "tif": "tiff"}

MAX_STEM_LENGTH = 200

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')

# Raised by Pillow decoders for oversized, truncated or malformed payloads
DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    EOFError,
    struct.error,
)


@dataclass(frozen=True)
class NormalizedImage:
    """A canonical data URL and the extension of its image type."""

    data: str
    ext: str


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a data URL into its MIME type and decoded payload.

    Raises:
        ValueError: If the string is not a well-formed data URL.
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("not a data URL")

    header, payload = data_url[5:].split(",", 1)
    params = header.split(";")
    mime = params[0].strip().lower() or "text/plain"

    if "base64" in (p.strip().lower() for p in params[1:]):
        try:
            return mime, base64.b64decode(unquote(payload), validate=False)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 payload: {e}") from e
    return mime, unquote_to_bytes(payload)


def make_data_url(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def open_image(data: bytes) -> Image.Image | None:
    """Decode image bytes with Pillow, None when they are not a raster image."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except DECODE_ERRORS as e:
        logger.debug("image_decode_failed", error=str(e))
        return None


def normalize_image(data_url: str | None = None, blob: bytes | None = None) -> NormalizedImage | None:
    """
    Normalize an embedded image or raw bytes to a canonical data URL.

    Canonical formats keep their bytes; other decodable rasters are
    re-encoded as PNG. Normalizing an already normalized image returns it
    unchanged.

    Args:
        data_url: Embedded data URL to normalize.
        blob: Raw image bytes to normalize.

    Returns:
        NormalizedImage, or None when the payload is not a usable image.
    """
    if blob is None:
        if data_url is None:
            return None
        try:
            _, blob = parse_data_url(data_url)
        except ValueError as e:
            logger.debug("data_url_invalid", error=str(e))
            return None

    if not blob:
        return None

    image = open_image(blob)
    if image is None:
        return None

    canonical = CANONICAL_FORMATS.get(image.format or "")
    if canonical:
        mime, ext = canonical
        return NormalizedImage(data=make_data_url(blob, mime), ext=ext)

    buffer = io.BytesIO()
    try:
        image.convert("RGBA").save(buffer, format="PNG")
    except DECODE_ERRORS as e:
        logger.debug("image_reencode_failed", format=image.format, error=str(e))
        return None
    return NormalizedImage(data=make_data_url(buffer.getvalue(), "image/png"), ext="png")


def normalize_ext(ext: str | None) -> str:
    ext = (ext or "").strip().lstrip(".").lower()
    if not ext:
        return "png"
    return EXT_ALIASES.get(ext, ext)


def normalize_filename(filename: str | None = None, ext: str | None = None) -> str:
    """
    Build a safe, extension-qualified filename.

    Args:
        filename: Raw filename hint, with or without an extension.
        ext: Extension of the image type.

    Returns:
        Sanitized ``stem.ext``; a UUID stem is used when no usable name remains.
    """
    ext = normalize_ext(ext)

    stem = ""
    if filename:
        name = _UNSAFE_FILENAME_CHARS.sub("_", unquote(filename)).strip(" .")
        stem = PurePosixPath(name).stem if PurePosixPath(name).suffix else name
        stem = stem[:MAX_STEM_LENGTH].strip(" .")

    if not stem:
        stem = uuid.uuid4().hex

    return f"{stem}.{ext}"


def filename_from_url(url: str) -> str:
    """Unquoted trailing path segment of a URL, extension included."""
    return unquote(urlsplit(url).path.rsplit("/", 1)[-1])


def filename_ext_from_url(url: str) -> tuple[str, str]:
    """Split the trailing path segment of a URL into filename and lower-case extension."""
    segment = filename_from_url(url)
    path = PurePosixPath(segment) if segment else None
    if path is None or not path.suffix:
        return segment, ""
    return path.stem, path.suffix[1:].lower()
