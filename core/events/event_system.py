"""
Event system implementation for the shape overlay.

Provides publish-subscribe pattern so a host UI layer can attach rendering
and diagnostics to the generation cycle without touching the scheduler.
"""
from typing import Any, Callable, Deque, Dict, List, Optional
import threading
from collections import defaultdict, deque
from core.logging.logger import get_logger
from core.events.event_types import Event, Subscription

logger = get_logger('EventSystem')


class EventSystem:
    """
    Centralized event system for the overlay.

    Thread-safe with priority-based subscription ordering. A failing handler
    is logged and never prevents the remaining handlers from running.
    """

    def __init__(self, max_history: int = 1000):
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)
        self._subscription_map: Dict[str, Subscription] = {}
        self._event_history: Deque[Event] = deque(maxlen=max_history)
        self._lock = threading.RLock()

        logger.info("EventSystem initialized")

    def subscribe(
        self,
        event_type: str,
        callback: Callable[[Event], None],
        priority: int = 50,
        filter_fn: Optional[Callable[[Event], bool]] = None,
    ) -> str:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of event to subscribe to
            callback: Function to call when event is published
            priority: Priority (higher = called earlier), default 50
            filter_fn: Optional filter function

        Returns:
            str: Subscription ID for unsubscribing

        Raises:
            ValueError: If callback is not callable or event_type is empty
        """
        if not callable(callback):
            raise ValueError("Callback must be callable")
        if not isinstance(event_type, str) or not event_type.strip():
            raise ValueError("event_type must be a non-empty string")

        subscription = Subscription(callback, event_type, priority, filter_fn)

        with self._lock:
            self._subscriptions[event_type].append(subscription)
            self._subscription_map[subscription.id] = subscription
            self._subscriptions[event_type].sort()

        logger.debug(f"New subscription: {subscription.id} for {event_type} (priority={priority})")
        return subscription.id

    def unsubscribe(self, subscription_id: str) -> None:
        """Unsubscribe using the ID returned from subscribe()."""
        with self._lock:
            subscription = self._subscription_map.pop(subscription_id, None)
            if subscription is None:
                logger.warning(f"Unsubscribe called with unknown id: {subscription_id}")
                return

            subscription.active = False
            remaining = [
                s for s in self._subscriptions.get(subscription.event_type, [])
                if s.id != subscription_id
            ]
            if remaining:
                self._subscriptions[subscription.event_type] = remaining
            else:
                self._subscriptions.pop(subscription.event_type, None)

        logger.debug(f"Unsubscribed: {subscription_id}")

    def publish(self, event_type: str, data: Any = None, source: Any = None) -> Event:
        """
        Publish an event to all subscribers.

        Returns:
            Event: The published event object
        """
        if not isinstance(event_type, str) or not event_type.strip():
            raise ValueError("event_type must be a non-empty string")

        event = Event(event_type, data, source)

        with self._lock:
            matching_subs = list(self._subscriptions.get(event_type, []))
            self._event_history.append(event)

        if not matching_subs:
            logger.debug(f"No subscribers for event: {event_type}")
            return event

        for subscription in matching_subs:
            if not subscription.active:
                continue
            try:
                subscription(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

        return event

    def get_event_history(self, event_type: Optional[str] = None, limit: int = 100) -> List[Event]:
        """Get recent events, optionally restricted to one type."""
        with self._lock:
            events = [e for e in self._event_history
                      if event_type is None or e.event_type == event_type]
        return events[-limit:]

    def clear(self) -> None:
        """Clear all subscriptions and history."""
        with self._lock:
            self._subscriptions.clear()
            self._subscription_map.clear()
            self._event_history.clear()

        logger.info("EventSystem cleared")

    def get_subscription_count(self) -> int:
        """Get total number of active subscriptions."""
        with self._lock:
            return len(self._subscription_map)
