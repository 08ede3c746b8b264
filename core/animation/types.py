"""
Animation types, enums, and dataclasses.

Defines the core types used by the overlay fade animations.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Callable, Optional


class AnimationState(Enum):
    """State of an animation."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class EasingCurve(Enum):
    """Fade easing, selected by the ``overlay.fade_easing`` setting."""
    LINEAR = "linear"
    QUAD_IN_OUT = "quad_in_out"
    SINE_IN_OUT = "sine_in_out"


@dataclass
class AnimationConfig:
    """Configuration for an animation."""
    duration: float                                    # Duration in seconds
    easing: EasingCurve = EasingCurve.LINEAR
    on_start: Optional[Callable[[], None]] = None
    on_complete: Optional[Callable[[], None]] = None
    on_cancel: Optional[Callable[[], None]] = None


@dataclass
class CustomAnimationConfig(AnimationConfig):
    """Configuration for custom animation with update callback."""
    update_callback: Callable[[float], None] = None  # Called with eased progress 0.0-1.0

    def __post_init__(self):
        if not self.update_callback:
            raise ValueError("CustomAnimationConfig requires an update_callback")
        if self.duration < 0:
            raise ValueError("Animation duration must not be negative")


AnimationUpdateCallback = Callable[[float], None]  # progress: 0.0-1.0
AnimationCompleteCallback = Callable[[], None]
