"""Rendering modules: compositor, shape painting and the overlay widget."""

from .overlay_compositor import OverlayCompositor, FadePhase
from .overlay_widget import OverlayWidget

__all__ = ['OverlayCompositor', 'FadePhase', 'OverlayWidget']
