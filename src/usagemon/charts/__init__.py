"""Raster chart rendering for usage reports."""

from .engine import ChartEngine
from .stacked import NamedStack

__all__ = ["ChartEngine", "NamedStack"]
