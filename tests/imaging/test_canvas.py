"""Tests for the off-screen canvas."""

from PIL import Image

from sbi_extract.imaging.canvas import OffscreenCanvas, blank_canvas_data_url, matches_blank_canvas
from tests.fixtures.dom_fixtures import data_url, decode_data_url, png_bytes


class TestOffscreenCanvas:
    """Tests for OffscreenCanvas."""

    def test_default_size(self) -> None:
        canvas = OffscreenCanvas()

        assert (canvas.width, canvas.height) == (300, 150)
        assert canvas.is_blank()

    def test_draw_and_export_png(self) -> None:
        canvas = OffscreenCanvas(4, 4)

        assert canvas.draw_image(Image.new("RGBA", (4, 4), (255, 0, 0, 255)))
        assert not canvas.is_blank()

        exported = decode_data_url(canvas.to_data_url())
        assert exported.format == "PNG"
        assert exported.convert("RGBA").getpixel((0, 0)) == (255, 0, 0, 255)

    def test_larger_images_are_cropped(self) -> None:
        canvas = OffscreenCanvas(2, 2)

        assert canvas.draw_image(Image.new("RGB", (10, 10), (0, 0, 255)))
        assert decode_data_url(canvas.to_data_url()).size == (2, 2)

    def test_resize_clears(self) -> None:
        canvas = OffscreenCanvas(4, 4)
        canvas.draw_image(Image.new("RGB", (4, 4), (0, 255, 0)))

        canvas.resize(8, 6)

        assert (canvas.width, canvas.height) == (8, 6)
        assert canvas.is_blank()

    def test_jpeg_export_flattens_on_black(self) -> None:
        canvas = OffscreenCanvas(4, 4)

        result = canvas.to_data_url("image/jpeg")

        assert result is not None
        assert result.startswith("data:image/jpeg;base64,")
        exported = decode_data_url(result)
        assert exported.format == "JPEG"
        assert max(exported.getpixel((1, 1))) < 8

    def test_unknown_mime_exports_png(self) -> None:
        result = OffscreenCanvas(2, 2).to_data_url("image/x-icon")

        assert result is not None
        assert result.startswith("data:image/png;")

    def test_empty_canvas(self) -> None:
        canvas = OffscreenCanvas(0, 0)

        assert canvas.to_data_url() is None
        assert not canvas.draw_image(Image.new("RGB", (4, 4)))


class TestMatchesBlankCanvas:
    """Tests for matches_blank_canvas."""

    def test_identical_blank_snapshot(self) -> None:
        assert matches_blank_canvas(blank_canvas_data_url(5, 5), 5, 5)

    def test_blank_pixels_from_another_encoder(self) -> None:
        snapshot = data_url(png_bytes((5, 5), (0, 0, 0, 0)))

        assert matches_blank_canvas(snapshot, 5, 5)

    def test_drawn_snapshot(self) -> None:
        assert not matches_blank_canvas(data_url(png_bytes((5, 5))), 5, 5)

    def test_size_mismatch_is_not_blank(self) -> None:
        snapshot = data_url(png_bytes((4, 4), (0, 0, 0, 0)))

        assert not matches_blank_canvas(snapshot, 5, 5)

    def test_missing_or_unreadable_snapshot_counts_as_blank(self) -> None:
        assert matches_blank_canvas(None, 5, 5)
        assert matches_blank_canvas("data:image/png;base64,Zm9v", 5, 5)
