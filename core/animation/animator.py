"""
Centralized animation framework.

Provides the AnimationManager that drives every fade in the overlay from a
single QTimer on the UI thread. Animations are time based: each frame the
manager measures the real delta and advances every running animation by it.
"""
import time
import uuid
from typing import Callable, Dict, Optional
from PySide6.QtCore import QObject, QTimer, Signal, Qt
from core.animation.types import AnimationState, EasingCurve, CustomAnimationConfig
from core.animation.easing import ease
from core.logging.logger import get_logger

logger = get_logger(__name__)

# Largest delta applied in a single frame, to prevent teleporting after stalls.
MAX_FRAME_DELTA = 0.5


class Animation(QObject):
    """
    Base animation class.

    Handles the timing and easing logic for a single animation.
    """

    started = Signal()
    progress_changed = Signal(float)  # 0.0 to 1.0
    completed = Signal()
    cancelled = Signal()

    def __init__(self, animation_id: str, duration: float, easing: EasingCurve):
        super().__init__()

        self.animation_id = animation_id
        self.duration = duration
        self.easing = easing

        self.state = AnimationState.IDLE
        self.elapsed = 0.0

    def start(self) -> None:
        """Start the animation."""
        if self.state == AnimationState.RUNNING:
            logger.warning(f"Animation {self.animation_id} already running")
            return

        self.state = AnimationState.RUNNING
        self.elapsed = 0.0
        self.started.emit()
        logger.debug(f"Animation started: {self.animation_id} (duration={self.duration}s)")

    def cancel(self) -> None:
        """Cancel the animation."""
        if self.state == AnimationState.RUNNING:
            self.state = AnimationState.CANCELLED
            self.cancelled.emit()
            logger.debug(f"Animation cancelled: {self.animation_id}")

    def update(self, delta_time: float) -> bool:
        """
        Advance the animation by ``delta_time`` seconds.

        Returns:
            True if animation is still running, False if complete/cancelled
        """
        if self.state != AnimationState.RUNNING:
            return False

        self.elapsed += min(delta_time, MAX_FRAME_DELTA)

        progress = self.get_progress()
        self.progress_changed.emit(ease(progress, self.easing))

        # A handler may have cancelled us from inside progress_changed.
        if self.state != AnimationState.RUNNING:
            return False

        if progress >= 1.0:
            self.state = AnimationState.COMPLETE
            self.completed.emit()
            logger.debug(f"Animation completed: {self.animation_id}")
            return False

        return True

    def get_progress(self) -> float:
        """Get current linear progress (0.0 to 1.0)."""
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed / self.duration)


class CustomAnimator(Animation):
    """Custom animation with user-provided update callback."""

    def __init__(self, animation_id: str, config: CustomAnimationConfig):
        super().__init__(animation_id, config.duration, config.easing)

        if config.on_start:
            self.started.connect(config.on_start)
        if config.on_complete:
            self.completed.connect(config.on_complete)
        if config.on_cancel:
            self.cancelled.connect(config.on_cancel)

        self.progress_changed.connect(config.update_callback)


class AnimationManager(QObject):
    """
    Centralized animation manager.

    All overlay animations go through this manager. Its timer only runs while
    at least one animation is active.
    """

    animation_started = Signal(str)
    animation_completed = Signal(str)
    animation_cancelled = Signal(str)

    def __init__(self, fps: int = 60):
        """
        Initialize animation manager.

        Args:
            fps: Target frames per second for updates
        """
        super().__init__()

        self.fps = fps
        self.frame_time = 1.0 / fps

        self._animations: Dict[str, Animation] = {}
        self._last_update_time: Optional[float] = None

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(int(self.frame_time * 1000))
        self._timer.timeout.connect(self._update_all)

        logger.info(f"AnimationManager initialized (fps={fps})")

    def start(self) -> None:
        """Start the animation manager's update loop."""
        if not self._timer.isActive():
            self._last_update_time = time.monotonic()
            self._timer.start()
            logger.debug("AnimationManager started")

    def stop(self) -> None:
        """Stop the animation manager's update loop."""
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("AnimationManager stopped")

    def cleanup(self) -> None:
        """Cancel all animations and stop the timer."""
        self.cancel_all()
        self.stop()
        logger.info("AnimationManager cleanup complete")

    def animate_custom(self, duration: float, update_callback: Callable[[float], None],
                       easing: EasingCurve = EasingCurve.LINEAR,
                       on_start: Optional[Callable] = None,
                       on_complete: Optional[Callable] = None) -> str:
        """
        Create a custom animation with user-provided update callback.

        Args:
            duration: Duration in seconds
            update_callback: Called each frame with eased progress (0.0-1.0)
            easing: Easing curve
            on_start: Callback when animation starts
            on_complete: Callback when animation completes

        Returns:
            Animation ID
        """
        animation_id = str(uuid.uuid4())
        config = CustomAnimationConfig(
            duration=duration,
            easing=easing,
            on_start=on_start,
            on_complete=on_complete,
            update_callback=update_callback,
        )
        animator = CustomAnimator(animation_id, config)
        self._add_animation(animation_id, animator)
        animator.start()
        return animation_id

    def cancel_animation(self, animation_id: str) -> bool:
        """
        Cancel an animation.

        Returns:
            True if the animation was active and is now cancelled
        """
        animator = self._animations.pop(animation_id, None)
        if animator is None:
            return False
        animator.cancel()
        self.animation_cancelled.emit(animation_id)
        if not self._animations:
            self.stop()
        return True

    def is_running(self, animation_id: str) -> bool:
        """Check if an animation is currently running."""
        animator = self._animations.get(animation_id)
        return animator is not None and animator.state == AnimationState.RUNNING

    def get_progress(self, animation_id: str) -> Optional[float]:
        """Get the progress of an animation (0.0 to 1.0)."""
        animator = self._animations.get(animation_id)
        return animator.get_progress() if animator is not None else None

    def get_active_count(self) -> int:
        """Get the number of active animations."""
        return len(self._animations)

    def cancel_all(self) -> None:
        """Cancel all active animations."""
        for anim_id in list(self._animations.keys()):
            self.cancel_animation(anim_id)

    def advance(self, delta_time: float) -> None:
        """Advance every active animation by ``delta_time`` seconds.

        Called by the frame timer; also usable directly to step animations
        deterministically.
        """
        for anim_id, animator in list(self._animations.items()):
            if anim_id not in self._animations:
                continue
            animator.update(delta_time)

    def _add_animation(self, animation_id: str, animator: Animation) -> None:
        self._animations[animation_id] = animator
        # Default arg captures animation_id by value
        animator.completed.connect(lambda aid=animation_id: self._on_animation_complete(aid))
        if not self._timer.isActive():
            self.start()
        self.animation_started.emit(animation_id)

    def _on_animation_complete(self, animation_id: str) -> None:
        self._animations.pop(animation_id, None)
        self.animation_completed.emit(animation_id)
        if not self._animations:
            self.stop()

    def _update_all(self) -> None:
        """Advance all active animations by the real elapsed time (timer slot)."""
        now = time.monotonic()
        if self._last_update_time is None:
            self._last_update_time = now
            return
        delta_time = now - self._last_update_time
        self._last_update_time = now
        self.advance(delta_time)
