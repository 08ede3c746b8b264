"""QPainter rendering of ShapeSpec values."""
from __future__ import annotations

from typing import Iterable

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QPainter, QPen

from engine.shapes import ShapeKind, ShapeSpec
from ui.color_utils import rgba_to_qcolor


def stroke_pen(shape: ShapeSpec) -> QPen:
    """Round-capped pen in the shape's stroke colour, or NoPen for zero width.

    A zero-width QPen would be a cosmetic one-pixel pen, so a degenerate
    line (dot) is not painted at all.
    """
    if shape.stroke_width <= 0:
        return QPen(Qt.PenStyle.NoPen)
    pen = QPen(rgba_to_qcolor(shape.stroke))
    pen.setWidthF(shape.stroke_width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    return pen


def line_endpoints(shape: ShapeSpec) -> tuple[QPointF, QPointF]:
    """Endpoints of a line whose bounding box has its top-left at (x, y)."""
    start = QPointF(shape.x - min(0.0, shape.dx), shape.y - min(0.0, shape.dy))
    return start, QPointF(start.x() + shape.dx, start.y() + shape.dy)


def paint_shape(painter: QPainter, shape: ShapeSpec) -> None:
    painter.setPen(stroke_pen(shape))
    if shape.kind is ShapeKind.LINE:
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawLine(*line_endpoints(shape))
        return

    painter.setBrush(QBrush(rgba_to_qcolor(shape.fill)))
    if shape.kind is ShapeKind.CIRCLE:
        diameter = 2 * shape.radius
        painter.drawEllipse(QRectF(shape.x, shape.y, diameter, diameter))
    else:
        painter.drawRect(QRectF(shape.x, shape.y, shape.width, shape.height))


def paint_shapes(painter: QPainter, shapes: Iterable[ShapeSpec]) -> int:
    """Paint shapes in order (later shapes on top); returns how many were painted."""
    painted = 0
    painter.save()
    try:
        for shape in shapes:
            paint_shape(painter, shape)
            painted += 1
    finally:
        painter.restore()
    return painted
