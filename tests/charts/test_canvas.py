"""Tests for the raster canvas and colors."""

import pytest
from PIL import ImageFont

from usagemon.charts.canvas import CANVAS_HEIGHT, CANVAS_WIDTH, Canvas, font_path, load_font
from usagemon.charts.colors import (
    BAR_PALETTE,
    SERIES_PALETTE,
    WHITE,
    Color,
    palette_color,
)


class TestColor:
    """Tests for Color and palettes."""

    def test_from_hex(self):
        assert Color.from_hex("#666666") == Color(102, 102, 102)

    def test_rgba_alpha_scaled(self):
        assert Color(10, 20, 30, 0.7).rgba == (10, 20, 30, 178)

    def test_palettes_have_seven_entries(self):
        assert len(BAR_PALETTE) == 7
        assert len(SERIES_PALETTE) == 7

    def test_palette_cycles(self):
        """Index 7 reuses the first color."""
        assert palette_color(SERIES_PALETTE, 7) == palette_color(SERIES_PALETTE, 0)

    def test_fill_and_stroke(self):
        """Fill is translucent, stroke is the same base fully opaque."""
        color = palette_color(BAR_PALETTE, 0)
        assert color.fill.a == 0.7
        assert color.stroke.a == 1.0
        assert color.fill.rgb == color.stroke.rgb


class TestCanvas:
    """Tests for Canvas drawing primitives."""

    def test_default_size_and_background(self):
        canvas = Canvas()
        assert canvas.image.size == (CANVAS_WIDTH, CANVAS_HEIGHT)
        assert canvas.image.getpixel((0, 0)) == WHITE.rgb

    def test_fill_rect_covers_pixels(self):
        canvas = Canvas(50, 50)
        canvas.fill_rect(10, 10, 5, 5, Color(255, 0, 0))
        assert canvas.image.getpixel((10, 10)) == (255, 0, 0)
        assert canvas.image.getpixel((14, 14)) == (255, 0, 0)
        assert canvas.image.getpixel((15, 15)) == WHITE.rgb

    def test_empty_rect_draws_nothing(self):
        canvas = Canvas(20, 20)
        canvas.fill_rect(5, 5, 0, 10, Color(255, 0, 0))
        assert canvas.image.getpixel((5, 5)) == WHITE.rgb

    def test_alpha_blends_over_background(self):
        """A half-transparent fill mixes with the white beneath."""
        canvas = Canvas(10, 10)
        canvas.fill_rect(0, 0, 10, 10, Color(0, 0, 0, 0.5))
        r, g, b = canvas.image.getpixel((5, 5))
        assert 120 <= r <= 135
        assert r == g == b

    def test_text_draws_something(self):
        canvas = Canvas(200, 50)
        canvas.text(10, 10, "使用時間 123", size=16)
        assert canvas.image.getbbox() is not None
        colors = canvas.image.getcolors(maxcolors=100000)
        assert len(colors) > 1

    def test_rotated_text_draws_something(self):
        canvas = Canvas(100, 200)
        canvas.text(50, 100, "使用時間 (分)", size=14, rotate=90)
        assert len(canvas.image.getcolors(maxcolors=100000)) > 1

    def test_rotation_must_be_right_angle(self):
        canvas = Canvas(100, 100)
        with pytest.raises(ValueError):
            canvas.text(50, 50, "x", rotate=45)

    def test_empty_text_is_noop(self):
        canvas = Canvas(20, 20)
        canvas.text(5, 5, "")
        assert canvas.image.getcolors() == [(400, WHITE.rgb)]

    def test_png_bytes(self):
        data = Canvas(20, 20).to_png_bytes()
        assert data.startswith(b"\x89PNG\r\n\x1a\n")


class TestLoadFont:
    """Tests for font resolution."""

    def test_returns_truetype_font(self):
        assert isinstance(load_font(12), ImageFont.FreeTypeFont)

    def test_path_resolved_once(self):
        assert font_path(True) is font_path(True)

    def test_fonts_not_shared_between_canvases(self):
        """Each canvas loads its own font objects."""
        first, second = Canvas(10, 10), Canvas(10, 10)
        assert first._font(12, False) is first._font(12, False)
        assert first._font(12, False) is not second._font(12, False)
