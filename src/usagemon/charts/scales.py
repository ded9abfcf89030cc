"""Coordinate scales for chart layout.

Two scale kinds map data to pixels:

- BandScale: ordered category labels -> equal-width pixel bands with the
  same padding fraction between bands and at both ends.
- LinearScale: numeric domain [0, max] -> pixel y, growing downward, with
  "nice" rounding of the domain max and round tick values.

Scales are immutable and created per render call.
"""

import math
from dataclasses import dataclass
from typing import Protocol, Sequence

# Domain max used when every value is zero (or negative), so the axis
# still shows gridlines instead of collapsing to a single line.
EMPTY_DOMAIN_MAX = 10.0

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


class Scale(Protocol):
    """Anything that maps a domain key to a pixel coordinate."""

    def map(self, key) -> float: ...


@dataclass(frozen=True)
class BandScale:
    """Categorical scale over an ordered label sequence.

    Bands are addressed by index so duplicate labels still get their own
    band. Padding is the fraction of each step left empty; the outer
    padding equals the inner padding.
    """

    labels: tuple[str, ...]
    start: float
    stop: float
    padding: float = 0.1

    def __post_init__(self):
        if not self.labels:
            raise ValueError("BandScale requires at least one label")
        if not 0.0 <= self.padding < 1.0:
            raise ValueError(f"padding must be in [0, 1), got {self.padding}")
        object.__setattr__(self, "labels", tuple(self.labels))

    def step(self) -> float:
        """Distance between the starts of two adjacent bands."""
        n = len(self.labels)
        return (self.stop - self.start) / (n + self.padding)

    def bandwidth(self) -> float:
        return self.step() * (1.0 - self.padding)

    def position_at(self, index: int) -> float:
        """Pixel start of the band at a label index."""
        if not 0 <= index < len(self.labels):
            raise IndexError(f"band index {index} out of range")
        return self.start + self.step() * (self.padding + index)

    def center_at(self, index: int) -> float:
        return self.position_at(index) + self.bandwidth() / 2

    def map(self, key: str) -> float:
        """Pixel start of the first band carrying this label."""
        return self.position_at(self.labels.index(key))


def _tick_increment(start: float, stop: float, count: int) -> float:
    """Round step for roughly `count` intervals over [start, stop].

    Positive results are the step itself; negative results -n mean a
    step of 1/n, which keeps fractional ticks exact.
    """
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / (10 ** power)
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    if power >= 0:
        return float(factor * 10 ** power)
    return -(10 ** -power) / factor


def generate_ticks(start: float, stop: float, count: int) -> list[float]:
    """Round tick values covering [start, stop] in about `count` steps."""
    if count <= 0:
        raise ValueError("count must be > 0")
    if start == stop:
        return [float(start)]
    inc = _tick_increment(start, stop, count)
    if inc > 0:
        first = math.ceil(start / inc)
        last = math.floor(stop / inc)
        return [float((first + i) * inc) for i in range(last - first + 1)]
    inc = -inc
    first = math.ceil(start * inc)
    last = math.floor(stop * inc)
    return [(first + i) / inc for i in range(last - first + 1)]


@dataclass(frozen=True)
class LinearScale:
    """Numeric scale from [0, domain_max] to [bottom, top] pixel y."""

    domain_max: float
    bottom: float
    top: float

    def __post_init__(self):
        if not (self.domain_max > 0 and math.isfinite(self.domain_max)):
            object.__setattr__(self, "domain_max", EMPTY_DOMAIN_MAX)

    def nice(self, count: int = 10) -> "LinearScale":
        """Return a copy whose domain max is rounded up to a round number."""
        start, stop = 0.0, self.domain_max
        previous = None
        for _ in range(10):
            step = _tick_increment(start, stop, count)
            if step == previous:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            if not math.isfinite(stop):
                return self
            previous = step
        return LinearScale(stop, self.bottom, self.top)

    def map(self, value: float) -> float:
        """Pixel y for a value; larger values sit higher (smaller y)."""
        return self.bottom - (value / self.domain_max) * (self.bottom - self.top)

    def height_of(self, value: float) -> float:
        """Pixel height of a bar from the baseline up to `value`."""
        return self.bottom - self.map(value)

    def ticks(self, count: int = 5) -> list[float]:
        return generate_ticks(0.0, self.domain_max, count)


def scaled_max(values: Sequence[float], headroom: float = 1.0) -> float:
    """Largest value times a headroom factor (0 for an empty sequence)."""
    if not values:
        return 0.0
    top = max(values)
    scaled = top * headroom
    return scaled if math.isfinite(scaled) else top
