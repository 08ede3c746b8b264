"""
Overlay compositor.

Holds the batch currently shown over the background and the opacity of that
layer. swap() replaces the batch, either immediately or through a fade cycle:
fade out to FADE_LOW_OPACITY, replace the contents, fade back in. Fades are
driven by the shared AnimationManager on the UI thread.
"""
from __future__ import annotations

from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.animation import AnimationManager, EasingCurve
from core.constants.timing import FADE_HIGH_OPACITY, FADE_LOW_OPACITY
from core.logging.logger import get_logger
from core.logging.tags import TAG_FADE
from engine.errors import ConfigurationError
from engine.shapes import Batch

logger = get_logger(__name__)


class FadePhase(Enum):
    IDLE = auto()
    FADING_OUT = auto()
    FADING_IN = auto()


class OverlayCompositor(QObject):
    """Double-buffered shape layer with an optional fade transition.

    The batch being faded to is parked in ``pending_batch`` until the
    fade-out completes, so the visible layer only ever holds one batch. A
    swap during a running cycle supersedes the parked batch and restarts the
    fade-out from the current opacity.
    """

    opacity_changed = Signal(float)
    layer_changed = Signal(object)       # Batch or None
    transition_started = Signal()
    transition_finished = Signal()

    def __init__(self, animation_manager: AnimationManager, fade_seconds: float = 0.0,
                 low_opacity: float = FADE_LOW_OPACITY, high_opacity: float = FADE_HIGH_OPACITY,
                 easing: EasingCurve = EasingCurve.LINEAR, parent: Optional[QObject] = None):
        super().__init__(parent)
        if fade_seconds < 0:
            raise ConfigurationError(f"fade_seconds must not be negative, got {fade_seconds!r}")
        if not 0.0 <= low_opacity <= high_opacity <= 1.0:
            raise ConfigurationError(
                f"Expected 0 <= low_opacity <= high_opacity <= 1, got {low_opacity}, {high_opacity}"
            )

        self._animations = animation_manager
        self._fade_seconds = float(fade_seconds)
        self._low = low_opacity
        self._high = high_opacity
        self._easing = easing

        self._current: Optional[Batch] = None
        self._pending: Optional[Batch] = None
        self._opacity = high_opacity
        self._phase = FadePhase.IDLE
        self._fade_id: Optional[str] = None
        self._fade_token = 0

    @property
    def current_batch(self) -> Optional[Batch]:
        return self._current

    @property
    def pending_batch(self) -> Optional[Batch]:
        return self._pending

    @property
    def opacity(self) -> float:
        return self._opacity

    @property
    def phase(self) -> FadePhase:
        return self._phase

    @property
    def fading_enabled(self) -> bool:
        return self._fade_seconds > 0

    def swap(self, batch: Batch) -> None:
        """Replace the visible layer with ``batch``."""
        if not self.fading_enabled:
            self._replace(batch)
            return

        starting = self._phase is FadePhase.IDLE
        self._pending = batch
        self._cancel_fade()
        if starting:
            self.transition_started.emit()
        else:
            logger.debug("%s Swap to batch #%d supersedes running fade", TAG_FADE, batch.sequence)
        self._fade(FadePhase.FADING_OUT, self._low, self._on_fade_out_complete)

    def stop(self) -> None:
        """Cancel any fade and drop the parked batch; the visible layer stays."""
        self._cancel_fade()
        self._pending = None
        was_fading = self._phase is not FadePhase.IDLE
        self._phase = FadePhase.IDLE
        self._set_opacity(self._high)
        if was_fading:
            logger.debug("%s Fade abandoned on stop", TAG_FADE)

    def clear(self) -> None:
        """Stop fading and empty the visible layer."""
        self.stop()
        self._replace(None)

    # ------------------------------------------------------------------

    def _replace(self, batch: Optional[Batch]) -> None:
        self._current = batch
        self.layer_changed.emit(batch)

    def _set_opacity(self, value: float) -> None:
        if value != self._opacity:
            self._opacity = value
            self.opacity_changed.emit(value)

    def _cancel_fade(self) -> None:
        if self._fade_id is not None:
            self._animations.cancel_animation(self._fade_id)
            self._fade_id = None

    def _fade(self, phase: FadePhase, target: float, on_done) -> None:
        self._phase = phase
        self._fade_token += 1
        token = self._fade_token
        start = self._opacity

        def _update(progress: float) -> None:
            self._set_opacity(start + (target - start) * progress)

        self._fade_id = self._animations.animate_custom(
            duration=self._fade_seconds,
            update_callback=_update,
            easing=self._easing,
            on_complete=lambda: on_done(token),
        )
        logger.debug("%s %s %.2f -> %.2f over %.2fs", TAG_FADE, phase.name, start, target, self._fade_seconds)

    def _on_fade_out_complete(self, token: int) -> None:
        if token != self._fade_token:
            return
        self._fade_id = None
        batch, self._pending = self._pending, None
        self._replace(batch)
        self._fade(FadePhase.FADING_IN, self._high, self._on_fade_in_complete)

    def _on_fade_in_complete(self, token: int) -> None:
        if token != self._fade_token:
            return
        self._fade_id = None
        self._phase = FadePhase.IDLE
        self.transition_finished.emit()
