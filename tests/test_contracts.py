from contracts import (
    KinematicsSummary,
    PositionSample,
    RawSample,
    TrackingSession,
    TrailPoint,
    Velocity,
    round_half_up,
)

import pytest

from exceptions import InvalidSampleError


def test_contracts_instantiation() -> None:
    raw = RawSample(x=100.0, y=200.0, timestamp=123, radius=9.0)
    raw.validate()
    sample = PositionSample(x=100.0, y=200.0, timestamp=123, velocity=Velocity(3.0, 4.0))
    session = TrackingSession(id="1", start_time=100, end_time=400, positions=(sample,))
    summary = KinematicsSummary(avg_speed=5.0, max_speed=5.0, duration=0.3)
    point = TrailPoint(x=1.0, y=2.0, opacity=0.5, radius=4.0, color=(255, 255, 0))

    assert sample.velocity.speed == 5.0
    assert session.is_complete
    assert session.duration_ms == 300
    assert summary.avg_speed_display == 5
    assert point.to_dict()["color"] == "rgb(255, 255, 0)"


def test_session_dict_round_trip() -> None:
    session = TrackingSession(
        id="1700000000000",
        start_time=1_700_000_000_000,
        end_time=1_700_000_002_000,
        positions=(
            PositionSample(x=10.0, y=20.0, timestamp=1_700_000_000_050, radius=8.0),
            PositionSample(x=12.0, y=18.0, timestamp=1_700_000_000_100, velocity=Velocity(40.0, -40.0)),
        ),
    )
    payload = session.to_dict()

    assert payload["positions"][1]["velocity"] == {"x": 40.0, "y": -40.0}
    assert "velocity" not in payload["positions"][0]
    assert TrackingSession.from_dict(payload) == session


def test_active_session_has_no_duration() -> None:
    session = TrackingSession(id="a", start_time=5)
    assert not session.is_complete
    assert session.duration_ms is None


@pytest.mark.parametrize(
    "payload",
    [
        {"y": 1.0, "timestamp": 0},
        {"x": "1.0", "y": 1.0, "timestamp": 0},
        {"x": 1.0, "y": None, "timestamp": 0},
        {"x": True, "y": 1.0, "timestamp": 0},
        {"x": 1.0, "y": 1.0, "timestamp": float("inf")},
    ],
)
def test_malformed_payload_rejected(payload) -> None:
    with pytest.raises(InvalidSampleError):
        RawSample.from_mapping(payload)


def test_non_mapping_payload_rejected() -> None:
    with pytest.raises(InvalidSampleError):
        RawSample.from_mapping([1.0, 2.0, 3])


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(4.49) == 4


def test_fractional_timestamp_rejected() -> None:
    with pytest.raises(InvalidSampleError) as excinfo:
        RawSample(x=0.0, y=0.0, timestamp=1.5).validate()
    assert excinfo.value.timestamp == 1.5


def test_whole_millisecond_timestamps_accepted() -> None:
    RawSample(x=0.0, y=0.0, timestamp=1500.0).validate()
    RawSample.from_mapping({"x": 0.0, "y": 0.0, "timestamp": 1_700_000_000_123})
