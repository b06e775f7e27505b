"""Drive a detection source into a tracking context."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional

from app.events.error_bus import ErrorCategory, ErrorEventBus, ErrorSeverity, publish_error
from configs.settings import DEFAULT_DETECTION_PERIOD_MS
from detect.source import DetectionSource
from exceptions import DetectionSourceError, InvalidSampleError
from log_config.logger import get_logger, log_performance
from track.session_manager import TrackingContext

logger = get_logger(__name__)


@dataclass
class LoopStats:
    ticks: int = 0
    accepted: int = 0
    missed: int = 0
    rejected: int = 0


class TrackingLoop:
    """Single consumer pulling samples from a source into a TrackingContext.

    The loop is the only writer to the context, which keeps insertion order
    equal to production order. Ticks are paced at ``period_ms`` when running
    on a thread; a late tick is not made up, the next sample simply carries a
    larger time delta.
    """

    def __init__(
        self,
        source: DetectionSource,
        context: TrackingContext,
        period_ms: int = DEFAULT_DETECTION_PERIOD_MS,
        error_bus: Optional[ErrorEventBus] = None,
    ):
        """Initialize tracking loop.

        Args:
            source: Detection source to drain
            context: Tracking context receiving the detections
            period_ms: Tick period for threaded mode
            error_bus: Bus for rejected-sample reports (default: process-wide bus)
        """
        self._source = source
        self._context = context
        self._period_s = period_ms / 1000.0
        self._error_bus = error_bus
        self._stats = LoopStats()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def stats(self) -> LoopStats:
        return self._stats

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def step(self) -> bool:
        """Pull and ingest one sample.

        Returns:
            False once the source is exhausted, True otherwise
        """
        if self._source.exhausted:
            return False

        start = time.perf_counter()
        self._stats.ticks += 1
        try:
            raw = self._source.produce_sample()
        except DetectionSourceError as e:
            publish_error(
                category=ErrorCategory.DETECTION,
                severity=ErrorSeverity.ERROR,
                message=f"Detection source failed: {e}",
                source=type(self._source).__name__,
                exception=e,
                bus=self._error_bus,
            )
            return False

        if raw is None:
            self._stats.missed += 1
            return True

        try:
            self._context.on_detection(raw)
            self._stats.accepted += 1
        except InvalidSampleError as e:
            self._stats.rejected += 1
            publish_error(
                category=ErrorCategory.TRACKING,
                severity=ErrorSeverity.WARNING,
                message=f"Detection rejected: {e}",
                source="TrackingLoop",
                exception=e,
                bus=self._error_bus,
                timestamp_ms=e.timestamp,
            )

        log_performance("tracking tick", (time.perf_counter() - start) * 1000.0)
        return True

    def run(self, max_samples: Optional[int] = None) -> LoopStats:
        """Drain the source synchronously without pacing.

        Args:
            max_samples: Stop after this many ticks (default: until exhausted)
        """
        ticks = 0
        self._stop_event.clear()
        while not self._stop_event.is_set():
            if max_samples is not None and ticks >= max_samples:
                break
            if not self.step():
                break
            ticks += 1
        return self._stats

    def start(self) -> None:
        """Run the loop on a background thread, one tick per period."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._paced_loop, name="tracking-loop", daemon=True)
        self._thread.start()
        logger.info(f"Tracking loop started ({self._period_s * 1000:.0f}ms period)")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop ticking. A tick already in progress completes first."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Tracking loop thread did not stop cleanly")
            self._thread = None
        self._source.close()
        logger.info(
            f"Tracking loop stopped: {self._stats.accepted} accepted, "
            f"{self._stats.missed} missed, {self._stats.rejected} rejected"
        )

    def _paced_loop(self) -> None:
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            if not self.step():
                break
            next_tick += self._period_s
            delay = next_tick - time.monotonic()
            if delay < 0:
                # Behind schedule: skip the missed ticks instead of bursting
                next_tick = time.monotonic()
                delay = 0.0
            self._stop_event.wait(delay)


__all__ = ["LoopStats", "TrackingLoop"]
