"""Bounded trajectory history with velocity derivation on insert."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional, Tuple

from configs.settings import DEFAULT_BUFFER_CAPACITY
from contracts import PositionSample, RawSample, Velocity
from exceptions import InvalidSampleError
from log_config.logger import get_logger

logger = get_logger(__name__)


class TrajectoryBuffer:
    """Time-ordered, capacity-bounded history of tracked positions.

    Velocity is derived from the previous retained sample whenever the time
    delta is positive. Once the buffer is full the oldest sample is evicted.

    Thread Safety:
        insert(), clear() and snapshot() take the same lock; snapshots are
        immutable tuples so readers never see a partial insert.
    """

    def __init__(self, capacity: int = DEFAULT_BUFFER_CAPACITY):
        """Initialize buffer.

        Args:
            capacity: Maximum retained samples (must be >= 1)

        Raises:
            ValueError: If capacity is less than 1
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"Trajectory buffer capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._samples: Deque[PositionSample] = deque()
        self._lock = threading.Lock()
        self._evicted = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def evicted_count(self) -> int:
        """Samples dropped by FIFO eviction since the last clear."""
        return self._evicted

    def insert(self, raw: RawSample) -> PositionSample:
        """Validate, enrich with velocity, and append a detection.

        Args:
            raw: Detection from a detection source

        Returns:
            The enriched sample as stored

        Raises:
            InvalidSampleError: If the sample is malformed or older than the
                last stored sample. The buffer is left unchanged.
        """
        raw.validate()

        with self._lock:
            last = self._samples[-1] if self._samples else None
            velocity: Optional[Velocity] = None
            if last is not None:
                if raw.timestamp < last.timestamp:
                    raise InvalidSampleError(
                        f"Sample timestamp {raw.timestamp} is earlier than last recorded {last.timestamp}",
                        timestamp=raw.timestamp,
                    )
                delta_s = (raw.timestamp - last.timestamp) / 1000.0
                if delta_s > 0:
                    velocity = Velocity(
                        vx=(raw.x - last.x) / delta_s,
                        vy=(raw.y - last.y) / delta_s,
                    )

            sample = PositionSample(
                x=float(raw.x),
                y=float(raw.y),
                timestamp=int(raw.timestamp),
                velocity=velocity,
                radius=raw.radius,
            )
            self._samples.append(sample)
            while len(self._samples) > self._capacity:
                self._samples.popleft()
                self._evicted += 1

        return sample

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()
            self._evicted = 0
        logger.debug("Trajectory buffer cleared")

    def snapshot(self) -> Tuple[PositionSample, ...]:
        """Return an immutable, ordered copy of the retained samples."""
        with self._lock:
            return tuple(self._samples)

    def last(self) -> Optional[PositionSample]:
        with self._lock:
            return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def __repr__(self) -> str:
        return f"TrajectoryBuffer(size={len(self)}, capacity={self._capacity})"
