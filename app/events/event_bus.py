"""Thread-safe EventBus for tracking collaborators.

The tracking context publishes typed events (sample tracked, session
finalized) and the persistence and display layers subscribe to them, so the
core never calls storage or UI code directly.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Type, TypeVar

from app.events.error_bus import ErrorCategory, ErrorSeverity, publish_error
from log_config.logger import get_logger

logger = get_logger(__name__)

EventType = TypeVar('EventType')
EventHandler = Callable[[EventType], None]


class EventBus:
    """Thread-safe event bus.

    Features:
    - Type-keyed publish/subscribe
    - Error isolation (handler errors don't reach the publisher)
    - Synchronous delivery on the publisher's thread

    Example:
        ```python
        bus = EventBus()
        bus.subscribe(SessionFinalizedEvent, store.on_session_finalized)
        context = TrackingContext(event_bus=bus)
        ```
    """

    def __init__(self):
        self._subscribers: Dict[Type, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._event_count: Dict[Type, int] = {}
        self._start_time = time.time()

        logger.debug("EventBus initialized")

    def subscribe(self, event_type: Type[EventType], handler: EventHandler) -> None:
        """Register handler for event type.

        Args:
            event_type: The event class to subscribe to (e.g., SessionFinalizedEvent)
            handler: Callback function that takes event as parameter
        """
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
                self._event_count[event_type] = 0

            self._subscribers[event_type].append(handler)
            logger.debug(f"Subscribed handler to {event_type.__name__} "
                         f"({len(self._subscribers[event_type])} total subscribers)")

    def unsubscribe(self, event_type: Type[EventType], handler: EventHandler) -> bool:
        """Unregister handler for event type.

        Returns:
            True if handler was found and removed, False otherwise
        """
        with self._lock:
            if event_type not in self._subscribers:
                return False

            try:
                self._subscribers[event_type].remove(handler)
                return True
            except ValueError:
                return False

    def publish(self, event: EventType) -> int:
        """Publish event to all subscribers.

        Handlers run synchronously on the publisher's thread. A failing
        handler is logged and reported on the error bus; the remaining
        handlers still run.

        Args:
            event: Event instance to publish

        Returns:
            Number of handlers that failed
        """
        event_type = type(event)

        with self._lock:
            handlers = self._subscribers.get(event_type, []).copy()
            self._event_count[event_type] = self._event_count.get(event_type, 0) + 1

        if not handlers:
            logger.debug(f"Published {event_type.__name__} with no subscribers")
            return 0

        failed_handlers = 0
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                failed_handlers += 1
                handler_name = getattr(handler, "__name__", repr(handler))
                logger.opt(exception=e).error(
                    f"Event handler error for {event_type.__name__}: {e.__class__.__name__}: {e}"
                )
                publish_error(
                    category=ErrorCategory.INTERNAL,
                    severity=ErrorSeverity.WARNING,
                    message=f"Event handler failed: {e}",
                    source=handler_name,
                    exception=e,
                    event=event_type.__name__,
                )

        if failed_handlers > 0:
            logger.warning(f"{failed_handlers}/{len(handlers)} handlers failed for {event_type.__name__}")
        return failed_handlers

    def get_subscriber_count(self, event_type: Type[EventType]) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, []))

    def get_stats(self) -> Dict[str, Any]:
        """Get event bus statistics.

        Returns:
            Dict with event_types, total_subscribers, event_counts, uptime_seconds
        """
        with self._lock:
            return {
                "event_types": len(self._subscribers),
                "total_subscribers": sum(len(handlers) for handlers in self._subscribers.values()),
                "event_counts": {
                    event_type.__name__: count
                    for event_type, count in self._event_count.items()
                },
                "uptime_seconds": time.time() - self._start_time,
            }

    def clear_all_subscribers(self) -> None:
        with self._lock:
            self._subscribers.clear()
            self._event_count.clear()
        logger.warning("Cleared all EventBus subscribers")

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (f"EventBus(event_types={stats['event_types']}, "
                f"subscribers={stats['total_subscribers']}, "
                f"uptime={stats['uptime_seconds']:.1f}s)")
