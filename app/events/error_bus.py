"""Error event bus for recoverable tracking faults.

Nothing in the tracking core is fatal: rejected samples, failed session
writes and source hiccups are published here so the UI layer can decide how
to surface them (status line, dialog) without the core knowing about it.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels."""

    INFO = "info"
    WARNING = "warning"  # operation skipped, tracking continues
    ERROR = "error"  # operation failed
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    DETECTION = "detection"
    TRACKING = "tracking"
    RECORDING = "recording"
    INTERNAL = "internal"


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ErrorEvent:
    """Error event with context information."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    source: str
    timestamp: float = field(default_factory=time.time)
    exception: Optional[Exception] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        exc_info = f" ({self.exception.__class__.__name__})" if self.exception else ""
        return f"[{self.severity.value.upper()}] {self.category.value}/{self.source}: {self.message}{exc_info}"


class ErrorEventBus:
    """Publish-subscribe bus for ErrorEvents with a bounded history."""

    def __init__(self, max_history: int = 100):
        self._subscribers: Dict[ErrorCategory, List[Callable[[ErrorEvent], None]]] = {}
        self._all_subscribers: List[Callable[[ErrorEvent], None]] = []
        self._lock = threading.Lock()
        self._event_history: List[ErrorEvent] = []
        self._max_history = max_history
        self._error_counts: Dict[ErrorCategory, int] = {}

    def subscribe(
        self, callback: Callable[[ErrorEvent], None], category: Optional[ErrorCategory] = None
    ) -> None:
        """Subscribe to error events.

        Args:
            callback: Function to call when error occurs
            category: Specific category to subscribe to, or None for all errors
        """
        with self._lock:
            if category is None:
                self._all_subscribers.append(callback)
            else:
                self._subscribers.setdefault(category, []).append(callback)
        logger.debug(f"Subscribed {getattr(callback, '__name__', repr(callback))} "
                     f"to {category.value if category else 'all'} errors")

    def unsubscribe(
        self, callback: Callable[[ErrorEvent], None], category: Optional[ErrorCategory] = None
    ) -> None:
        with self._lock:
            targets = self._all_subscribers if category is None else self._subscribers.get(category, [])
            if callback in targets:
                targets.remove(callback)

    def publish(self, event: ErrorEvent) -> None:
        """Record, log and deliver an error event.

        Subscriber failures are logged and never propagate to the publisher.
        """
        with self._lock:
            self._event_history.append(event)
            if len(self._event_history) > self._max_history:
                self._event_history.pop(0)
            self._error_counts[event.category] = self._error_counts.get(event.category, 0) + 1

            category_subscribers = self._subscribers.get(event.category, []).copy()
            all_subscribers = self._all_subscribers.copy()

        logger.log(_LOG_LEVELS[event.severity], str(event), exc_info=event.exception)

        # Notify outside the lock so callbacks may publish again
        for callback in category_subscribers + all_subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in error subscriber {getattr(callback, '__name__', callback)}: {e}",
                             exc_info=True)

    def get_history(
        self, category: Optional[ErrorCategory] = None, limit: int = 100
    ) -> List[ErrorEvent]:
        with self._lock:
            history = self._event_history.copy()

        if category is not None:
            history = [e for e in history if e.category == category]

        return history[-limit:]

    def get_error_counts(self) -> Dict[ErrorCategory, int]:
        with self._lock:
            return self._error_counts.copy()

    def clear_history(self) -> None:
        with self._lock:
            self._event_history.clear()
            self._error_counts.clear()


_error_bus: Optional[ErrorEventBus] = None
_bus_lock = threading.Lock()


def get_error_bus() -> ErrorEventBus:
    """Get the process-wide error event bus, creating it on first use."""
    global _error_bus
    if _error_bus is None:
        with _bus_lock:
            if _error_bus is None:
                _error_bus = ErrorEventBus()
    return _error_bus


def publish_error(
    category: ErrorCategory,
    severity: ErrorSeverity,
    message: str,
    source: str,
    exception: Optional[Exception] = None,
    bus: Optional[ErrorEventBus] = None,
    **metadata: Any,
) -> ErrorEvent:
    """Build and publish an error event.

    Args:
        category: Error category
        severity: Error severity
        message: Error message
        source: Source component
        exception: Optional exception
        bus: Bus to publish on (default: process-wide bus)
        **metadata: Additional metadata

    Returns:
        The published event
    """
    event = ErrorEvent(
        category=category,
        severity=severity,
        message=message,
        source=source,
        exception=exception,
        metadata=metadata,
    )
    (bus or get_error_bus()).publish(event)
    return event


__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorEvent",
    "ErrorEventBus",
    "get_error_bus",
    "publish_error",
]
