"""Unit tests for the error event bus."""

import unittest
from unittest.mock import Mock

from app.events import (
    ErrorCategory,
    ErrorEvent,
    ErrorEventBus,
    ErrorSeverity,
    get_error_bus,
    publish_error,
)


class TestErrorEvent(unittest.TestCase):
    """Test ErrorEvent dataclass."""

    def test_error_event_creation(self):
        event = ErrorEvent(
            category=ErrorCategory.DETECTION,
            severity=ErrorSeverity.ERROR,
            message="Test error",
            source="TestSource",
            exception=ValueError("test"),
            metadata={"key": "value"},
        )

        self.assertEqual(event.category, ErrorCategory.DETECTION)
        self.assertEqual(event.severity, ErrorSeverity.ERROR)
        self.assertEqual(event.source, "TestSource")
        self.assertIsInstance(event.exception, ValueError)
        self.assertEqual(event.metadata, {"key": "value"})
        self.assertIsInstance(event.timestamp, float)

    def test_error_event_string_representation(self):
        event = ErrorEvent(
            category=ErrorCategory.TRACKING,
            severity=ErrorSeverity.WARNING,
            message="Sample out of order",
            source="TrackingLoop",
        )

        str_repr = str(event)
        self.assertIn("WARNING", str_repr)
        self.assertIn("tracking", str_repr)
        self.assertIn("Sample out of order", str_repr)
        self.assertIn("TrackingLoop", str_repr)


class TestErrorCategory(unittest.TestCase):
    """Test the category set reported by tracking components."""

    def test_categories(self):
        self.assertEqual(
            {c.value for c in ErrorCategory},
            {"detection", "tracking", "recording", "internal"},
        )


class TestErrorEventBus(unittest.TestCase):
    """Test ErrorEventBus functionality."""

    def setUp(self):
        self.bus = ErrorEventBus()

    def _event(self, category=ErrorCategory.TRACKING, message="Test"):
        return ErrorEvent(
            category=category,
            severity=ErrorSeverity.WARNING,
            message=message,
            source="Test",
        )

    def test_subscribe_all_errors(self):
        callback = Mock()
        self.bus.subscribe(callback)

        event = self._event()
        self.bus.publish(event)

        callback.assert_called_once_with(event)

    def test_subscribe_specific_category(self):
        recording_callback = Mock()
        self.bus.subscribe(recording_callback, category=ErrorCategory.RECORDING)

        self.bus.publish(self._event(ErrorCategory.TRACKING))
        recording_callback.assert_not_called()

        recording_event = self._event(ErrorCategory.RECORDING)
        self.bus.publish(recording_event)
        recording_callback.assert_called_once_with(recording_event)

    def test_unsubscribe(self):
        callback = Mock()
        self.bus.subscribe(callback)
        self.bus.unsubscribe(callback)

        self.bus.publish(self._event())
        callback.assert_not_called()

    def test_failing_subscriber_isolated(self):
        failing = Mock(side_effect=RuntimeError("boom"))
        failing.__name__ = "failing"
        healthy = Mock()
        self.bus.subscribe(failing)
        self.bus.subscribe(healthy)

        self.bus.publish(self._event())

        healthy.assert_called_once()

    def test_history_bounded(self):
        bus = ErrorEventBus(max_history=3)
        for i in range(5):
            bus.publish(self._event(message=f"error {i}"))

        history = bus.get_history()
        self.assertEqual([e.message for e in history], ["error 2", "error 3", "error 4"])

    def test_history_by_category(self):
        self.bus.publish(self._event(ErrorCategory.TRACKING))
        self.bus.publish(self._event(ErrorCategory.RECORDING))

        history = self.bus.get_history(category=ErrorCategory.RECORDING)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].category, ErrorCategory.RECORDING)

    def test_error_counts(self):
        self.bus.publish(self._event(ErrorCategory.TRACKING))
        self.bus.publish(self._event(ErrorCategory.TRACKING))
        self.bus.publish(self._event(ErrorCategory.DETECTION))

        counts = self.bus.get_error_counts()
        self.assertEqual(counts[ErrorCategory.TRACKING], 2)
        self.assertEqual(counts[ErrorCategory.DETECTION], 1)

        self.bus.clear_history()
        self.assertEqual(self.bus.get_error_counts(), {})


class TestPublishError(unittest.TestCase):
    """Test the publish_error helper."""

    def test_publish_to_explicit_bus(self):
        bus = ErrorEventBus()
        callback = Mock()
        bus.subscribe(callback)

        event = publish_error(
            category=ErrorCategory.RECORDING,
            severity=ErrorSeverity.ERROR,
            message="Disk full",
            source="SessionStore",
            bus=bus,
            session_id="123",
        )

        callback.assert_called_once_with(event)
        self.assertEqual(event.metadata, {"session_id": "123"})

    def test_global_bus_is_singleton(self):
        self.assertIs(get_error_bus(), get_error_bus())


if __name__ == "__main__":
    unittest.main()
