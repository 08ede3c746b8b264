"""Centralized Rgba -> QColor conversion.

Engine values carry colours as plain Rgba so they stay free of Qt; painting
code converts through these helpers.
"""
from __future__ import annotations

from PySide6.QtGui import QColor

from engine.shapes import Rgba


def rgba_to_qcolor(color: Rgba) -> QColor:
    """Convert an Rgba (0-255 channels, 0.0-1.0 alpha) to a QColor."""
    qcolor = QColor(color.red, color.green, color.blue)
    qcolor.setAlphaF(max(0.0, min(1.0, color.alpha)))
    return qcolor
