"""Tracking session lifecycle: preview buffer plus recorded sessions."""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from app.events.event_bus import EventBus
from app.events.event_types import (
    SampleRejectedEvent,
    SampleTrackedEvent,
    SessionFinalizedEvent,
    TrackingStartedEvent,
)
from configs.settings import TrackingConfig
from contracts import KinematicsSummary, PositionSample, RawSample, TrackingSession
from exceptions import DoubleStartError, InvalidSampleError, NoActiveSessionError
from log_config.logger import get_logger
from metrics.kinematics import summarize
from track.buffer import TrajectoryBuffer

logger = get_logger(__name__)

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class TrackingState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class _ActiveSession:
    def __init__(self, session_id: str, start_time: int) -> None:
        self.session_id = session_id
        self.start_time = start_time
        self.positions: List[PositionSample] = []

    def finalize(self, end_time: int) -> TrackingSession:
        return TrackingSession(
            id=self.session_id,
            start_time=self.start_time,
            end_time=end_time,
            positions=tuple(self.positions),
        )


class TrackingContext:
    """Owns the trajectory buffer and the active tracking session.

    Detections always go into the bounded preview buffer. While a session is
    active they are also appended to the session's unbounded position list.
    Stopping finalizes the session into an immutable TrackingSession, keeps it
    in the completed list and publishes it for persistence.

    Thread Safety:
        start(), stop() and on_detection() are serialized with one lock, so a
        stop racing a detection tick sees the detection either fully applied
        or not at all.
    """

    def __init__(
        self,
        buffer: Optional[TrajectoryBuffer] = None,
        event_bus: Optional[EventBus] = None,
        clock: Clock = wall_clock_ms,
        summarize_on_stop: bool = True,
    ):
        """Initialize tracking context.

        Args:
            buffer: Preview buffer (default: capacity 30)
            event_bus: Bus for tracking events, or None to publish nothing
            clock: Millisecond clock used for session start/end times
            summarize_on_stop: Attach a KinematicsSummary to finalized sessions
        """
        self._buffer = buffer if buffer is not None else TrajectoryBuffer()
        self._event_bus = event_bus
        self._clock = clock
        self._summarize_on_stop = summarize_on_stop
        self._lock = threading.RLock()
        self._active: Optional[_ActiveSession] = None
        self._completed: List[TrackingSession] = []
        self._last_session_id: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        config: TrackingConfig,
        event_bus: Optional[EventBus] = None,
        clock: Clock = wall_clock_ms,
    ) -> "TrackingContext":
        return cls(
            buffer=TrajectoryBuffer(config.buffer_capacity),
            event_bus=event_bus,
            clock=clock,
            summarize_on_stop=config.summarize_on_stop,
        )

    @property
    def buffer(self) -> TrajectoryBuffer:
        return self._buffer

    @property
    def state(self) -> TrackingState:
        with self._lock:
            return TrackingState.ACTIVE if self._active is not None else TrackingState.IDLE

    @property
    def is_active(self) -> bool:
        return self.state is TrackingState.ACTIVE

    @property
    def completed_sessions(self) -> Tuple[TrackingSession, ...]:
        with self._lock:
            return tuple(self._completed)

    def current_session(self) -> Optional[TrackingSession]:
        """Snapshot of the active session (end_time unset), or None."""
        with self._lock:
            if self._active is None:
                return None
            return TrackingSession(
                id=self._active.session_id,
                start_time=self._active.start_time,
                positions=tuple(self._active.positions),
            )

    def _new_session_id(self, start_time: int) -> str:
        session_id = str(start_time)
        if session_id == self._last_session_id or any(s.id == session_id for s in self._completed):
            session_id = f"{start_time}-{len(self._completed) + 1}"
        self._last_session_id = session_id
        return session_id

    def start(self) -> TrackingSession:
        """Start a new tracking session and clear the preview buffer.

        Returns:
            Snapshot of the new (empty) session

        Raises:
            DoubleStartError: If a session is already active
        """
        with self._lock:
            if self._active is not None:
                raise DoubleStartError(
                    f"Tracking session {self._active.session_id} is already active; stop it first",
                    active_session_id=self._active.session_id,
                )
            start_time = self._clock()
            self._active = _ActiveSession(self._new_session_id(start_time), start_time)
            self._buffer.clear()
            session_id = self._active.session_id

        logger.info(f"Tracking session {session_id} started")
        self._publish(TrackingStartedEvent(session_id=session_id, start_time=start_time))
        return TrackingSession(id=session_id, start_time=start_time)

    def on_detection(self, sample: Union[RawSample, Mapping[str, Any]]) -> PositionSample:
        """Accept a detection into the buffer and the active session.

        Args:
            sample: RawSample, or a detector payload mapping

        Returns:
            The enriched sample as stored

        Raises:
            InvalidSampleError: If the sample is rejected; no state changes
        """
        try:
            raw = sample if isinstance(sample, RawSample) else RawSample.from_mapping(sample)
            raw.validate()
            with self._lock:
                if self._active is not None and self._active.positions:
                    last = self._active.positions[-1]
                    if raw.timestamp < last.timestamp:
                        raise InvalidSampleError(
                            f"Sample timestamp {raw.timestamp} is earlier than the session's last "
                            f"position {last.timestamp}",
                            timestamp=raw.timestamp,
                        )
                stored = self._buffer.insert(raw)
                session_id = None
                if self._active is not None:
                    self._active.positions.append(stored)
                    session_id = self._active.session_id
        except InvalidSampleError as e:
            logger.warning(f"Rejected detection: {e}")
            self._publish(SampleRejectedEvent(reason=str(e), timestamp=e.timestamp))
            raise

        self._publish(SampleTrackedEvent(sample=stored, session_id=session_id))
        return stored

    def stop(self) -> TrackingSession:
        """Finalize the active session.

        Returns:
            The finalized, immutable session

        Raises:
            NoActiveSessionError: If no session is active; nothing changes
        """
        with self._lock:
            if self._active is None:
                raise NoActiveSessionError("No active tracking session to stop")
            # A session always ends after it started, even within one clock tick
            end_time = max(self._clock(), self._active.start_time + 1)
            session = self._active.finalize(end_time)
            self._completed.append(session)
            self._active = None

        summary: Optional[KinematicsSummary] = summarize(session.positions) if self._summarize_on_stop else None
        logger.info(
            f"Tracking session {session.id} stopped: {len(session.positions)} positions "
            f"over {session.duration_ms}ms"
        )
        self._publish(SessionFinalizedEvent(session=session, summary=summary))
        return session

    def clear_trajectory(self) -> None:
        """Empty the preview buffer; the active session keeps its positions."""
        self._buffer.clear()

    def snapshot(self) -> Tuple[PositionSample, ...]:
        return self._buffer.snapshot()

    def summary(self) -> Optional[KinematicsSummary]:
        """Kinematics over the current preview buffer."""
        return summarize(self._buffer.snapshot())

    def _publish(self, event: Any) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)


__all__ = ["TrackingContext", "TrackingState", "wall_clock_ms"]
