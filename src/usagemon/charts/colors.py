"""Chart colors as explicit RGBA values.

Each palette entry carries a fill alpha and a stroke alpha, so the darker
outline of a bar or slice is the same base color drawn fully opaque.
"""

from dataclasses import dataclass

from matplotlib.colors import to_rgb


@dataclass(frozen=True)
class Color:
    """An RGB color with a 0-1 alpha."""

    r: int
    g: int
    b: int
    a: float = 1.0

    @classmethod
    def from_hex(cls, hex_color: str, alpha: float = 1.0) -> "Color":
        """Parse '#rrggbb' (or any matplotlib color name) into a Color."""
        r, g, b = to_rgb(hex_color)
        return cls(round(r * 255), round(g * 255), round(b * 255), alpha)

    def with_alpha(self, alpha: float) -> "Color":
        return Color(self.r, self.g, self.b, alpha)

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        """Pillow-style 0-255 RGBA tuple."""
        return (self.r, self.g, self.b, round(self.a * 255))

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class SeriesColor:
    """Fill/stroke pair derived from one base color."""

    base: Color
    fill_alpha: float = 0.7
    stroke_alpha: float = 1.0

    @property
    def fill(self) -> Color:
        return self.base.with_alpha(self.fill_alpha)

    @property
    def stroke(self) -> Color:
        return self.base.with_alpha(self.stroke_alpha)


WHITE = Color(255, 255, 255)
TEXT = Color.from_hex("#333333")
MUTED_TEXT = Color.from_hex("#666666")
AXIS = Color(0, 0, 0)
GRID = Color(0, 0, 0, 0.1)
LINE = Color(54, 162, 235)

# Bar charts start with blue; slices and stacks start with red.
BAR_PALETTE = (
    Color(54, 162, 235),
    Color(75, 192, 192),
    Color(255, 206, 86),
    Color(255, 99, 132),
    Color(153, 102, 255),
    Color(255, 159, 64),
    Color(199, 199, 199),
)

SERIES_PALETTE = (
    Color(255, 99, 132),   # red
    Color(54, 162, 235),   # blue
    Color(255, 206, 86),   # yellow
    Color(75, 192, 192),   # green
    Color(153, 102, 255),  # purple
    Color(255, 159, 64),   # orange
    Color(199, 199, 199),  # gray
)


def palette_color(palette: tuple[Color, ...], index: int) -> SeriesColor:
    """Return the palette entry for a position, cycling after the last one."""
    return SeriesColor(base=palette[index % len(palette)])
