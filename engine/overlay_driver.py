"""
Overlay driver.

Ties the generation scheduler to the compositor and mirrors the cycle onto
the EventSystem so a host UI can attach rendering and diagnostics:

    tick -> generate (worker) -> batch_ready -> compositor.swap -> re-arm
                              -> generation_failed -> report    -> re-arm
"""
from __future__ import annotations

import random
from typing import Optional

from PySide6.QtCore import QObject

from core.animation import AnimationManager
from core.events import EventSystem, EventType
from core.logging.logger import get_logger
from core.logging.tags import TAG_ENGINE
from engine.batch_generator import BatchGenerator
from engine.config import OverlayConfig
from engine.generation_scheduler import GenerationScheduler
from engine.shape_factory import ShapeFactory
from engine.shapes import Batch, CanvasGeometry
from rendering.overlay_compositor import OverlayCompositor

logger = get_logger(__name__)


class OverlayDriver(QObject):
    """Runs the perpetual generate/swap cycle until stop()."""

    def __init__(self, scheduler: GenerationScheduler, compositor: OverlayCompositor,
                 event_system: Optional[EventSystem] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.scheduler = scheduler
        self.compositor = compositor
        self.events = event_system if event_system is not None else EventSystem()
        self._started = False

        scheduler.batch_ready.connect(self._on_batch_ready)
        scheduler.generation_failed.connect(self._on_generation_failed)
        scheduler.tick_skipped.connect(self._on_tick_skipped)
        compositor.layer_changed.connect(self._on_layer_changed)
        compositor.transition_started.connect(
            lambda: self.events.publish(EventType.TRANSITION_STARTED, source=self))
        compositor.transition_finished.connect(
            lambda: self.events.publish(EventType.TRANSITION_COMPLETE, source=self))

    @classmethod
    def create(cls, config: OverlayConfig, geometry: CanvasGeometry, thread_manager,
               animation_manager: AnimationManager, event_system: Optional[EventSystem] = None,
               rng: Optional[random.Random] = None,
               parent: Optional[QObject] = None) -> "OverlayDriver":
        """Build the full component graph from configuration."""
        if rng is None:
            rng = random.Random(config.seed)
        generator = BatchGenerator(ShapeFactory(geometry), rng)
        scheduler = GenerationScheduler(generator, thread_manager, config.shape_count,
                                        config.interval_ms)
        compositor = OverlayCompositor(animation_manager, config.fade_seconds,
                                        easing=config.fade_easing)
        driver = cls(scheduler, compositor, event_system, parent)
        scheduler.setParent(driver)
        compositor.setParent(driver)
        logger.info("%s Overlay built: %d shapes every %.2fs, fade %.2fs, canvas %gx%g",
                    TAG_ENGINE, config.shape_count, config.interval_seconds,
                    config.fade_seconds, geometry.width, geometry.height)
        return driver

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self, immediate: bool = False) -> None:
        """Begin the cycle. With ``immediate`` the first batch starts now."""
        if self._started:
            return
        self._started = True
        self.events.publish(EventType.OVERLAY_STARTED, source=self)
        self.scheduler.start(immediate=immediate)

    def stop(self) -> None:
        """Tear down: no generation result or fade acts after this returns."""
        if not self._started:
            return
        self._started = False
        self.scheduler.stop()
        self.compositor.stop()
        self.events.publish(EventType.OVERLAY_STOPPED, data=self.scheduler.stats(), source=self)
        logger.info("%s Overlay stopped", TAG_ENGINE)

    # ------------------------------------------------------------------

    def _on_batch_ready(self, batch: Batch) -> None:
        if not self._started:
            return
        self.compositor.swap(batch)
        self.events.publish(EventType.BATCH_READY, data=batch, source=self)

    def _on_generation_failed(self, error: BaseException) -> None:
        self.events.publish(EventType.GENERATION_FAILED, data=error, source=self)

    def _on_tick_skipped(self, skipped: int) -> None:
        self.events.publish(EventType.TICK_SKIPPED, data=skipped, source=self)

    def _on_layer_changed(self, batch: Optional[Batch]) -> None:
        self.events.publish(EventType.LAYER_SWAPPED, data=batch, source=self)
