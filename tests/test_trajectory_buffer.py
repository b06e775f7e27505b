"""Tests for the bounded trajectory buffer."""

from __future__ import annotations

import math
import threading

import pytest

from contracts import RawSample
from exceptions import InvalidSampleError
from track.buffer import TrajectoryBuffer


def _raw(x: float, y: float, t: int, radius=None) -> RawSample:
    return RawSample(x=x, y=y, timestamp=t, radius=radius)


class TestTrajectoryBuffer:
    """Tests for TrajectoryBuffer."""

    @pytest.fixture
    def buffer(self):
        return TrajectoryBuffer(capacity=30)

    def test_default_capacity(self):
        assert TrajectoryBuffer().capacity == 30

    def test_fifo_eviction_keeps_last_capacity_samples(self, buffer):
        for i in range(45):
            buffer.insert(_raw(float(i), 0.0, i * 50))

        snapshot = buffer.snapshot()
        assert len(snapshot) == 30
        assert [s.x for s in snapshot] == [float(i) for i in range(15, 45)]
        assert snapshot[0].timestamp == 750
        assert snapshot[-1].timestamp == 2200
        assert buffer.evicted_count == 15

    def test_velocity_from_previous_sample(self, buffer):
        buffer.insert(_raw(0.0, 0.0, 0))
        second = buffer.insert(_raw(10.0, 0.0, 1000))

        assert second.velocity is not None
        assert second.velocity.vx == pytest.approx(10.0)
        assert second.velocity.vy == pytest.approx(0.0)

    def test_velocity_uses_irregular_interval(self, buffer):
        buffer.insert(_raw(100.0, 200.0, 1000))
        sample = buffer.insert(_raw(106.0, 192.0, 1075))

        assert sample.velocity.vx == pytest.approx(80.0)
        assert sample.velocity.vy == pytest.approx(-106.6666, rel=1e-4)

    def test_first_sample_has_no_velocity(self, buffer):
        buffer.insert(_raw(1.0, 1.0, 0))
        buffer.insert(_raw(2.0, 2.0, 50))
        buffer.clear()

        first = buffer.insert(_raw(5.0, 5.0, 100))
        assert first.velocity is None
        assert len(buffer) == 1

    def test_duplicate_timestamp_leaves_velocity_unset(self, buffer):
        buffer.insert(_raw(0.0, 0.0, 500))
        sample = buffer.insert(_raw(4.0, 4.0, 500))

        assert sample.velocity is None
        assert len(buffer) == 2

    def test_out_of_order_sample_rejected(self, buffer):
        buffer.insert(_raw(0.0, 0.0, 1000))

        with pytest.raises(InvalidSampleError) as excinfo:
            buffer.insert(_raw(1.0, 1.0, 900))

        assert excinfo.value.timestamp == 900
        assert len(buffer) == 1
        assert buffer.last().timestamp == 1000

    @pytest.mark.parametrize("x,y", [(math.nan, 0.0), (0.0, math.inf), (-math.inf, 1.0)])
    def test_non_finite_coordinates_rejected(self, buffer, x, y):
        with pytest.raises(InvalidSampleError):
            buffer.insert(_raw(x, y, 0))
        assert len(buffer) == 0

    def test_negative_radius_rejected(self, buffer):
        with pytest.raises(InvalidSampleError):
            buffer.insert(_raw(0.0, 0.0, 0, radius=-3.0))

    def test_radius_carried_through(self, buffer):
        sample = buffer.insert(_raw(0.0, 0.0, 0, radius=12.5))
        assert sample.radius == 12.5

    @pytest.mark.parametrize("capacity", [0, -1, 2.5, True])
    def test_invalid_capacity_rejected(self, capacity):
        with pytest.raises(ValueError):
            TrajectoryBuffer(capacity=capacity)

    def test_capacity_one_keeps_latest_only(self):
        buffer = TrajectoryBuffer(capacity=1)
        buffer.insert(_raw(0.0, 0.0, 0))
        latest = buffer.insert(_raw(5.0, 0.0, 100))

        assert buffer.snapshot() == (latest,)
        assert latest.velocity.vx == pytest.approx(50.0)

    def test_snapshot_is_immutable_copy(self, buffer):
        buffer.insert(_raw(0.0, 0.0, 0))
        snapshot = buffer.snapshot()
        buffer.insert(_raw(1.0, 1.0, 50))

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1
        assert len(buffer.snapshot()) == 2

    def test_concurrent_readers_never_exceed_capacity(self):
        buffer = TrajectoryBuffer(capacity=10)
        sizes = []
        ordered = []
        done = threading.Event()

        def reader():
            while not done.is_set():
                snapshot = buffer.snapshot()
                sizes.append(len(snapshot))
                timestamps = [s.timestamp for s in snapshot]
                ordered.append(timestamps == sorted(timestamps))

        thread = threading.Thread(target=reader)
        thread.start()
        for i in range(2000):
            buffer.insert(_raw(float(i), 0.0, i))
        done.set()
        thread.join()

        assert max(sizes, default=0) <= 10
        assert all(ordered)
        assert len(buffer) == 10
