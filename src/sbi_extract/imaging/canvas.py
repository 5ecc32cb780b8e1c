"""
Off-screen drawing surface.

A Pillow-backed stand-in for an HTML canvas: resizing clears the surface,
drawing never raises, and exports are data URLs.
"""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from ..logging import get_logger
from .normalize import DECODE_ERRORS, make_data_url, open_image, parse_data_url

logger = get_logger(__name__)

# HTML canvas defaults
DEFAULT_WIDTH = 300
DEFAULT_HEIGHT = 150
JPEG_QUALITY = 92

EXPORT_FORMATS = {"image/png": "PNG", "image/jpeg": "JPEG"}


class OffscreenCanvas:
    """RGBA drawing surface with HTML canvas semantics."""

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        self._image = self._blank(width, height)

    @staticmethod
    def _blank(width: int, height: int) -> Image.Image:
        return Image.new("RGBA", (max(0, int(width)), max(0, int(height))), (0, 0, 0, 0))

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def image(self) -> Image.Image:
        return self._image

    def resize(self, width: int, height: int) -> None:
        """Set the surface size, clearing its content."""
        self._image = self._blank(width, height)

    def draw_image(self, image: Image.Image) -> bool:
        """Draw an image at the origin, returns False if it cannot be drawn."""
        if not self.width or not self.height:
            return False
        try:
            source = image.convert("RGBA")
            self._image.alpha_composite(source.crop((0, 0, self.width, self.height)))
            return True
        except DECODE_ERRORS as e:
            logger.debug("canvas_draw_failed", error=str(e))
            return False

    def to_data_url(self, mime: str = "image/png") -> str | None:
        """Encode the surface, None for an empty surface."""
        if not self.width or not self.height:
            return None

        fmt = EXPORT_FORMATS.get(mime, "PNG")
        buffer = io.BytesIO()
        if fmt == "JPEG":
            # Transparent pixels are exported as black
            flat = Image.new("RGB", self._image.size, (0, 0, 0))
            flat.paste(self._image, mask=self._image.getchannel("A"))
            flat.save(buffer, format="JPEG", quality=JPEG_QUALITY)
            return make_data_url(buffer.getvalue(), "image/jpeg")

        self._image.save(buffer, format="PNG")
        return make_data_url(buffer.getvalue(), "image/png")

    def is_blank(self) -> bool:
        return not np.any(np.asarray(self._image))


def blank_canvas_data_url(width: int, height: int) -> str | None:
    """Data URL of a freshly cleared canvas of the given size."""
    return OffscreenCanvas(width, height).to_data_url()


def matches_blank_canvas(data_url: str | None, width: int, height: int) -> bool:
    """
    Whether a canvas snapshot shows nothing but a freshly cleared surface.

    The pixels are compared rather than the encoded bytes, since encoders
    differ between the page and this process.
    """
    if not data_url:
        return True
    if data_url == blank_canvas_data_url(width, height):
        return True

    try:
        _, payload = parse_data_url(data_url)
    except ValueError:
        return True
    snapshot = open_image(payload)
    if snapshot is None:
        return True

    blank = OffscreenCanvas(width, height).image
    if snapshot.size != blank.size:
        return False
    return bool(np.array_equal(np.asarray(snapshot.convert("RGBA")), np.asarray(blank)))
