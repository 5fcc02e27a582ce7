"""Geometry and the drawing commands overlays emit instead of painting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Color = Tuple[float, float, float, float]

WHITE: Color = (1.0, 1.0, 1.0, 1.0)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    def contains(self, x: float, y: float) -> bool:
        """True if (x, y) lies inside or on the edge of the rectangle."""
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True)
class FillRect:
    rect: Rect
    color: Color = WHITE
    opacity: float = 1.0


@dataclass(frozen=True)
class FillRoundedRect:
    rect: Rect
    radius_x: float
    radius_y: float
    color: Color = WHITE
    opacity: float = 1.0


@dataclass(frozen=True)
class FillEllipse:
    center: Point
    radius_x: float
    radius_y: float
    color: Color = WHITE
    opacity: float = 1.0


@dataclass(frozen=True)
class FillPolygon:
    points: Tuple[Point, ...]
    color: Color = WHITE
    opacity: float = 1.0


@dataclass(frozen=True)
class DrawLine:
    start: Point
    end: Point
    stroke_width: float = 1.0
    color: Color = WHITE
    opacity: float = 1.0


@dataclass(frozen=True)
class DrawText:
    """Text clipped to ``rect``; ``align`` is "leading", "center" or "trailing"."""

    text: str
    rect: Rect
    font_size: float
    align: str = "center"
    color: Color = WHITE
    opacity: float = 1.0


@dataclass(frozen=True)
class DrawBitmap:
    """A tightly packed BGRA image scaled into ``rect``."""

    rect: Rect
    pixels: bytes
    pixel_width: int
    pixel_height: int
    opacity: float = 1.0