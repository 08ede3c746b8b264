"""
Value types shared by the generator, scheduler and compositor.

Every type here is immutable: a batch built on a worker thread is handed to
the UI thread by reference and never touched again by the worker.
"""
from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Tuple

from core.constants.timing import DESATURATE_FACTOR, MAX_SIZE_DIVISOR, MIN_SIZE_RATIO
from engine.errors import ConfigurationError


class ShapeKind(Enum):
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    LINE = "line"


@dataclass(frozen=True)
class Rgba:
    """An sRGB colour with 0-255 channels and a 0.0-1.0 alpha."""
    red: int
    green: int
    blue: int
    alpha: float = 1.0

    def desaturate(self, factor: float = DESATURATE_FACTOR) -> "Rgba":
        """Return this colour with its HSV saturation scaled by ``factor``.

        Hue, value and alpha are preserved.
        """
        h, s, v = colorsys.rgb_to_hsv(self.red / 255.0, self.green / 255.0, self.blue / 255.0)
        r, g, b = colorsys.hsv_to_rgb(h, s * factor, v)
        return Rgba(round(r * 255), round(g * 255), round(b * 255), self.alpha)


@dataclass(frozen=True)
class ShapeSpec:
    """One generated shape.

    ``(x, y)`` is the top-left of the shape's bounding box. Geometry fields
    that do not apply to ``kind`` stay at zero: circles use ``radius``,
    rectangles ``width``/``height`` and lines ``dx``/``dy``, the offset of
    the second endpoint from the first.
    """
    kind: ShapeKind
    size: float
    x: float
    y: float
    fill: Rgba
    stroke: Rgba
    stroke_width: float
    radius: float = 0.0
    width: float = 0.0
    height: float = 0.0
    dx: float = 0.0
    dy: float = 0.0

    def bounding_size(self) -> Tuple[float, float]:
        """Width and height of the shape's geometry, stroke excluded."""
        return bounding_size(self.kind, self.radius, self.width, self.height, self.dx, self.dy)


def bounding_size(kind: ShapeKind, radius: float = 0.0, width: float = 0.0,
                  height: float = 0.0, dx: float = 0.0, dy: float = 0.0) -> Tuple[float, float]:
    if kind is ShapeKind.CIRCLE:
        return 2 * radius, 2 * radius
    if kind is ShapeKind.RECTANGLE:
        return width, height
    return abs(dx), abs(dy)


@dataclass(frozen=True)
class Batch:
    """The full set of shapes produced by one generation cycle."""
    shapes: Tuple[ShapeSpec, ...]
    sequence: int = 0
    generation_seconds: float = 0.0

    def __len__(self) -> int:
        return len(self.shapes)

    def __iter__(self) -> Iterator[ShapeSpec]:
        return iter(self.shapes)


@dataclass(frozen=True)
class CanvasGeometry:
    """Canvas bounds and the shape size range, fixed for the process lifetime."""
    width: float
    height: float
    min_size: float
    max_size: float

    def __post_init__(self):
        for name in ("width", "height", "min_size", "max_size"):
            _require_positive(name, getattr(self, name))
        if self.min_size >= self.max_size:
            raise ConfigurationError(
                f"min_size ({self.min_size}) must be smaller than max_size ({self.max_size})"
            )

    @classmethod
    def from_dimensions(cls, width: float, height: float) -> "CanvasGeometry":
        """Derive the size range from the background dimensions."""
        _require_positive("width", width)
        max_size = width / MAX_SIZE_DIVISOR
        return cls(width, height, max_size * MIN_SIZE_RATIO, max_size)

    @classmethod
    def from_background(cls, image: Any) -> "CanvasGeometry":
        """Derive geometry from anything exposing ``width``/``height``.

        Accepts Qt images (``width()`` methods) as well as plain attributes.
        """
        if image is None:
            raise ConfigurationError("No background image provided")
        try:
            width = image.width() if callable(image.width) else image.width
            height = image.height() if callable(image.height) else image.height
        except AttributeError as e:
            raise ConfigurationError(f"Background has no usable dimensions: {e}") from e
        return cls.from_dimensions(width, height)


def _require_positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be positive and finite, got {value!r}")
