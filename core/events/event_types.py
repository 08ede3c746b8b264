"""
Event type definitions for the shape overlay.
"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class Event:
    """Base event class."""
    event_type: str
    data: Any = None
    source: Any = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    timestamp: float = field(default_factory=time.time)


@dataclass
class Subscription:
    """Subscription to an event type."""
    callback: Callable[[Event], None]
    event_type: str
    priority: int = 0
    filter_fn: Optional[Callable[[Event], bool]] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    active: bool = True

    def __call__(self, event: Event) -> None:
        """Call the subscription callback if filter passes."""
        if self.filter_fn is None or self.filter_fn(event):
            self.callback(event)

    def __lt__(self, other: 'Subscription') -> bool:
        """Sort by priority (higher first)."""
        return self.priority > other.priority


class EventType:
    """Event type constants."""
    # Generation cycle
    BATCH_READY = "overlay.batch.ready"
    GENERATION_FAILED = "overlay.generation.failed"
    TICK_SKIPPED = "overlay.tick.skipped"

    # Compositor
    LAYER_SWAPPED = "overlay.layer.swapped"
    TRANSITION_STARTED = "overlay.transition.started"
    TRANSITION_COMPLETE = "overlay.transition.complete"

    # Lifecycle
    OVERLAY_STARTED = "overlay.started"
    OVERLAY_STOPPED = "overlay.stopped"
    EXIT_REQUEST = "exit.request"
