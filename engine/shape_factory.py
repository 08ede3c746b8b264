"""
Random shape production.

Every value is drawn from an injected ``random.Random`` in a fixed order
(kind, geometry, fill, position), so a seeded source reproduces the same
shapes on every run.
"""
from __future__ import annotations

import math
import random
from typing import Tuple

from core.constants.timing import MIN_FILL_ALPHA, STROKE_WIDTH_DIVISOR
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_GEN
from engine.shapes import CanvasGeometry, Rgba, ShapeKind, ShapeSpec, bounding_size

logger = get_logger(__name__)

SHAPE_KINDS: Tuple[ShapeKind, ...] = (ShapeKind.CIRCLE, ShapeKind.RECTANGLE, ShapeKind.LINE)


def _coin(rng: random.Random) -> bool:
    return bool(rng.getrandbits(1))


def _below(value: float, ceiling: float) -> float:
    # a + r * (b - a) can round up to b for r close to 1
    return value if value < ceiling else math.nextafter(ceiling, -math.inf)


class ShapeFactory:
    """Produces one randomly parameterized shape per call.

    Holds nothing but the canvas geometry; all randomness comes from the
    ``rng`` passed to :meth:`produce`.
    """

    def __init__(self, geometry: CanvasGeometry):
        self.geometry = geometry

    def produce(self, rng: random.Random) -> ShapeSpec:
        kind = rng.choice(SHAPE_KINDS)

        radius = width = height = dx = dy = 0.0
        if kind is ShapeKind.CIRCLE:
            size = self._random_size(rng)
            radius = size / 2
        elif kind is ShapeKind.RECTANGLE:
            size = self._random_size(rng)
            width = height = size
        else:
            size, dx, dy = self._random_line(rng)

        fill = self._random_color(rng)
        extent_w, extent_h = bounding_size(kind, radius, width, height, dx, dy)
        stroke_width = max(extent_w, extent_h) / STROKE_WIDTH_DIVISOR

        max_size = self.geometry.max_size
        x = rng.random() * (self.geometry.width + max_size) - max_size / 2
        y = rng.random() * (self.geometry.height + max_size) - max_size / 2

        shape = ShapeSpec(
            kind=kind,
            size=size,
            x=x,
            y=y,
            fill=fill,
            stroke=fill.desaturate(),
            stroke_width=stroke_width,
            radius=radius,
            width=width,
            height=height,
            dx=dx,
            dy=dy,
        )
        if is_verbose_logging():
            logger.debug("%s Produced %s size=%.1f at (%.1f, %.1f)", TAG_GEN, kind.value, size, x, y)
        return shape

    def _random_size(self, rng: random.Random) -> float:
        lo, hi = self.geometry.min_size, self.geometry.max_size
        return _below(rng.random() * (hi - lo) + lo, hi)

    def _random_line(self, rng: random.Random) -> Tuple[float, float, float]:
        """Return (size, dx, dy) for an axis-aligned line.

        A non-zero x offset forces y to zero. When x is zero, y is zero only
        if its own coin says so, which leaves a zero-length dot.
        """
        x_is_zero = _coin(rng)
        y_is_zero = _coin(rng) or not x_is_zero
        x_sign = 1 if _coin(rng) else -1
        y_sign = 1 if _coin(rng) else -1
        size = self._random_size(rng)

        dx = 0.0 if x_is_zero else x_sign * size
        dy = 0.0 if y_is_zero else y_sign * size
        return size, dx, dy

    @staticmethod
    def _random_color(rng: random.Random) -> Rgba:
        red = rng.randrange(256)
        green = rng.randrange(256)
        blue = rng.randrange(256)
        alpha = _below(MIN_FILL_ALPHA + rng.random() * (1.0 - MIN_FILL_ALPHA), 1.0)
        return Rgba(red, green, blue, alpha)


def produce(geometry: CanvasGeometry, rng: random.Random) -> ShapeSpec:
    """Produce a single shape for ``geometry`` using ``rng``."""
    return ShapeFactory(geometry).produce(rng)
