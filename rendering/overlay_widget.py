"""Widget that paints the background image with the compositor's layer on top."""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QRectF
from PySide6.QtGui import QImage, QPainter, QPaintEvent
from PySide6.QtWidgets import QWidget

from core.logging.logger import get_logger
from rendering.overlay_compositor import OverlayCompositor
from rendering.shape_painter import paint_shapes

logger = get_logger(__name__)


class OverlayWidget(QWidget):
    """Fixed-size canvas matching the background; shapes outside it are clipped."""

    def __init__(self, background: QImage, compositor: OverlayCompositor,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._background = background
        self._compositor = compositor
        self.setFixedSize(background.width(), background.height())

        compositor.opacity_changed.connect(self._schedule_repaint)
        compositor.layer_changed.connect(self._schedule_repaint)

    def _schedule_repaint(self, *_args) -> None:
        self.update()

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            painter.setClipRect(QRectF(0, 0, self._background.width(), self._background.height()))
            painter.drawImage(0, 0, self._background)

            batch = self._compositor.current_batch
            if batch is None:
                return
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            painter.setOpacity(self._compositor.opacity)
            paint_shapes(painter, batch)
        finally:
            painter.end()
