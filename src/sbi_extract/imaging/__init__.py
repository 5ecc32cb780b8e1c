"""Imaging utilities: canvas surface, image loading and normalization."""

from .canvas import OffscreenCanvas, blank_canvas_data_url, matches_blank_canvas
from .loader import ImageLoader
from .normalize import (
    NormalizedImage,
    filename_ext_from_url,
    filename_from_url,
    make_data_url,
    normalize_filename,
    normalize_image,
    open_image,
    parse_data_url,
)

__all__ = [
    "ImageLoader",
    "NormalizedImage",
    "OffscreenCanvas",
    "blank_canvas_data_url",
    "filename_ext_from_url",
    "filename_from_url",
    "make_data_url",
    "matches_blank_canvas",
    "normalize_filename",
    "normalize_image",
    "open_image",
    "parse_data_url",
]
