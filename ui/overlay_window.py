"""Top-level overlay window.

A fixed-size, non-resizable window hosting the OverlayWidget. Any key press
dismisses it.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtGui import QCloseEvent, QImage, QKeyEvent
from PySide6.QtWidgets import QVBoxLayout, QWidget

from core.logging.logger import get_logger
from rendering.overlay_compositor import OverlayCompositor
from rendering.overlay_widget import OverlayWidget
from versioning import APP_NAME

logger = get_logger(__name__)


class OverlayWindow(QWidget):
    """Window exposing a single ``exit_requested`` signal for main.py to wire."""

    exit_requested = Signal()

    def __init__(self, background: QImage, compositor: OverlayCompositor,
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(APP_NAME)

        self.canvas = OverlayWidget(background, compositor, self)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.canvas)
        self.setFixedSize(background.width(), background.height())
        self._exit_emitted = False

    def keyPressEvent(self, event: QKeyEvent) -> None:
        logger.info("Key press (key=%s), closing overlay", event.key())
        event.accept()
        self.close()

    def closeEvent(self, event: QCloseEvent) -> None:
        if not self._exit_emitted:
            self._exit_emitted = True
            self.exit_requested.emit()
        super().closeEvent(event)
