"""Raster drawing surface for chart rendering.

A thin layer over a Pillow RGB image. Shapes drawn with a translucent
Color are alpha-blended onto what is already there; the surface itself
stays opaque so the encoded PNG never relies on transparency.
"""

import io
import math
from functools import lru_cache
from typing import Literal, Optional, Sequence

from matplotlib import font_manager
from PIL import Image, ImageDraw, ImageFont

from .colors import TEXT, WHITE, Color

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 400

# CJK-capable families first so Japanese labels render; matplotlib's
# bundled DejaVu Sans is the last resort and always resolves.
FONT_FAMILIES = (
    "Noto Sans CJK JP",
    "Noto Sans JP",
    "IPAexGothic",
    "IPAGothic",
    "TakaoGothic",
    "Hiragino Sans",
    "Yu Gothic",
    "DejaVu Sans",
)

Align = Literal["left", "center", "right"]
Baseline = Literal["top", "middle", "bottom"]
Point = tuple[float, float]

_H_ANCHOR = {"left": "l", "center": "m", "right": "r"}
_V_ANCHOR = {"top": "a", "middle": "m", "bottom": "d"}


@lru_cache(maxsize=4)
def font_path(bold: bool = False) -> str:
    """Resolve a TrueType font file through matplotlib's font manager."""
    props = font_manager.FontProperties(
        family=list(FONT_FAMILIES),
        weight="bold" if bold else "normal",
    )
    return font_manager.findfont(props, fallback_to_default=True)


def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(font_path(bold), size=size)


class Canvas:
    """Fixed-size drawing surface with an opaque background."""

    def __init__(
        self,
        width: int = CANVAS_WIDTH,
        height: int = CANVAS_HEIGHT,
        background: Color = WHITE,
    ):
        self.width = width
        self.height = height
        self.image = Image.new("RGB", (width, height), background.rgb)
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        self._fonts: dict[tuple[int, bool], ImageFont.FreeTypeFont] = {}

    # -- shapes ---------------------------------------------------------------

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        """Fill the pixels covered by [x, x+w) x [y, y+h)."""
        x0, y0 = round(x), round(y)
        x1, y1 = round(x + w) - 1, round(y + h) - 1
        if x1 < x0 or y1 < y0:
            return
        self._draw.rectangle((x0, y0, x1, y1), fill=color.rgba)

    def stroke_rect(
        self, x: float, y: float, w: float, h: float, color: Color, width: int = 1
    ) -> None:
        x0, y0 = round(x), round(y)
        x1, y1 = round(x + w) - 1, round(y + h) - 1
        if x1 < x0 or y1 < y0:
            return
        self._draw.rectangle((x0, y0, x1, y1), outline=color.rgba, width=width)

    def line(self, points: Sequence[Point], color: Color, width: int = 1) -> None:
        if len(points) < 2:
            return
        joint = "curve" if len(points) > 2 else None
        self._draw.line(list(points), fill=color.rgba, width=width, joint=joint)

    def polygon(self, points: Sequence[Point], fill: Color) -> None:
        if len(points) < 3:
            return
        self._draw.polygon(list(points), fill=fill.rgba)

    def circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        fill: Color,
        outline: Optional[Color] = None,
        outline_width: int = 1,
    ) -> None:
        box = (cx - radius, cy - radius, cx + radius, cy + radius)
        self._draw.ellipse(
            box,
            fill=fill.rgba,
            outline=outline.rgba if outline else None,
            width=outline_width,
        )

    def wedge(
        self,
        cx: float,
        cy: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        fill: Color,
        outline: Optional[Color] = None,
    ) -> None:
        """Pie slice; angles in radians, clockwise from 3 o'clock."""
        box = (cx - radius, cy - radius, cx + radius, cy + radius)
        self._draw.pieslice(
            box,
            start=math.degrees(start_angle),
            end=math.degrees(end_angle),
            fill=fill.rgba,
            outline=outline.rgba if outline else None,
            width=1,
        )

    # -- text -----------------------------------------------------------------

    def text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        size: int = 12,
        bold: bool = False,
        color: Color = TEXT,
        align: Align = "left",
        baseline: Baseline = "top",
        rotate: int = 0,
    ) -> None:
        """Draw text anchored at (x, y).

        Rotated text (multiples of 90 degrees, counter-clockwise) is always
        centered on (x, y); align and baseline apply to horizontal text.
        """
        if not text:
            return
        font = self._font(size, bold)
        if rotate % 360:
            self._rotated_text(x, y, text, font, color, rotate)
            return
        anchor = _H_ANCHOR[align] + _V_ANCHOR[baseline]
        self._draw.text((x, y), text, font=font, fill=color.rgba, anchor=anchor)

    def text_width(self, text: str, *, size: int = 12, bold: bool = False) -> float:
        return self._font(size, bold).getlength(text)

    def _font(self, size: int, bold: bool) -> ImageFont.FreeTypeFont:
        key = (size, bold)
        if key not in self._fonts:
            self._fonts[key] = load_font(size, bold)
        return self._fonts[key]

    def _rotated_text(
        self,
        x: float,
        y: float,
        text: str,
        font: ImageFont.FreeTypeFont,
        color: Color,
        rotate: int,
    ) -> None:
        if rotate % 90:
            raise ValueError("rotate must be a multiple of 90")
        left, top, right, bottom = font.getbbox(text)
        width = max(1, math.ceil(right - left))
        height = max(1, math.ceil(bottom - top))
        mask = Image.new("L", (width, height), 0)
        ImageDraw.Draw(mask).text((-left, -top), text, font=font, fill=round(255 * color.a))
        mask = mask.rotate(rotate, expand=True)
        block = Image.new("RGB", mask.size, color.rgb)
        origin = (round(x - mask.width / 2), round(y - mask.height / 2))
        self.image.paste(block, origin, mask)

    # -- output ---------------------------------------------------------------

    def to_png_bytes(self) -> bytes:
        """Encode the surface as an RGBA PNG with an opaque background."""
        buffer = io.BytesIO()
        self.image.convert("RGBA").save(buffer, format="PNG")
        return buffer.getvalue()
