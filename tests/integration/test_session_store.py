"""Integration tests for session persistence."""

import json
import os
from pathlib import Path

import pytest

from app.events.error_bus import ErrorCategory, get_error_bus
from app.events.event_bus import EventBus
from app.events.event_types import SessionFinalizedEvent
from app.pipeline.recording.manifest import create_session_manifest, session_title
from app.pipeline.recording.session_store import MANIFEST_FILE, SESSION_FILE, SessionStore
from contracts import KinematicsSummary, PositionSample, TrackingSession, Velocity
from contracts.versioning import SCHEMA_VERSION
from exceptions import RecordingError, SessionNotFoundError
from track.session_manager import TrackingContext


@pytest.fixture
def session() -> TrackingSession:
    return TrackingSession(
        id="1700000000000",
        start_time=1_700_000_000_000,
        end_time=1_700_000_001_500,
        positions=(
            PositionSample(x=10.0, y=10.0, timestamp=1_700_000_000_000),
            PositionSample(x=40.0, y=50.0, timestamp=1_700_000_000_100, velocity=Velocity(300.0, 400.0)),
        ),
    )


@pytest.fixture
def summary() -> KinematicsSummary:
    return KinematicsSummary(avg_speed=500.0, max_speed=500.0, duration=0.1, sample_count=2, velocity_sample_count=1)


def test_save_and_load(tmp_path: Path, session, summary) -> None:
    store = SessionStore(tmp_path)
    session_dir = store.save(session, summary)

    assert (session_dir / SESSION_FILE).exists()
    assert (session_dir / MANIFEST_FILE).exists()

    loaded, loaded_summary = store.load(session.id)
    assert loaded == session
    assert loaded_summary == summary


def test_session_file_is_versioned(tmp_path: Path, session) -> None:
    store = SessionStore(tmp_path)
    store.save(session)

    data = json.loads((tmp_path / session.id / SESSION_FILE).read_text())
    assert data["schema_version"] == SCHEMA_VERSION
    assert data["payload"]["session"]["id"] == session.id
    assert data["payload"]["summary"] is None


def test_manifest_fields(tmp_path: Path, session, summary) -> None:
    store = SessionStore(tmp_path, game_type="volleyball")
    store.save(session, summary, video_file="rally.mp4")

    manifest = store.load_manifest(session.id)
    assert manifest["title"] == session_title(session)
    assert manifest["title"].startswith("Ball Tracking ")
    assert manifest["description"] == "Volleyball tracking session with 2 ball detections"
    assert manifest["detection_count"] == 2
    assert manifest["duration_ms"] == 1500
    assert manifest["video_file"] == "rally.mp4"
    assert manifest["summary"] == {"avg_speed": 500, "max_speed": 500, "duration": 0.1}


def test_manifest_without_summary(session) -> None:
    manifest = create_session_manifest(session)
    assert manifest["summary"] is None
    assert manifest["session_file"] == "session.json"


def test_active_session_not_stored(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    with pytest.raises(RecordingError):
        store.save(TrackingSession(id="live", start_time=0))


def test_load_missing_session(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    with pytest.raises(SessionNotFoundError) as excinfo:
        store.load("missing")
    assert excinfo.value.session_id == "missing"


def test_load_corrupt_session(tmp_path: Path) -> None:
    (tmp_path / "broken").mkdir()
    (tmp_path / "broken" / SESSION_FILE).write_text("{not json")

    with pytest.raises(RecordingError):
        SessionStore(tmp_path).load("broken")


def test_list_sessions_oldest_first(tmp_path: Path, session) -> None:
    store = SessionStore(tmp_path)
    older = TrackingSession(id="1", start_time=0, end_time=10)
    store.save(older)
    store.save(session)
    os.utime(tmp_path / "1" / SESSION_FILE, (1, 1))
    os.utime(tmp_path / "1", (1, 1))
    (tmp_path / "stray").mkdir()

    assert store.list_sessions() == ["1", session.id]


def test_list_sessions_without_root(tmp_path: Path) -> None:
    assert SessionStore(tmp_path / "none").list_sessions() == []


def test_finalized_sessions_persisted_through_bus(tmp_path: Path) -> None:
    times = iter([1000, 1500])
    bus = EventBus()
    store = SessionStore(tmp_path)
    store.attach(bus)
    context = TrackingContext(event_bus=bus, clock=lambda: next(times))

    context.start()
    context.on_detection({"x": 1.0, "y": 2.0, "timestamp": 1100})
    context.on_detection({"x": 4.0, "y": 6.0, "timestamp": 1200})
    finalized = context.stop()

    loaded, loaded_summary = store.load(finalized.id)
    assert loaded == finalized
    assert loaded_summary is not None
    assert loaded_summary.max_speed == pytest.approx(50.0)


def test_write_failure_published(tmp_path: Path, session) -> None:
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    store = SessionStore(blocker)
    error_bus = get_error_bus()
    before = error_bus.get_error_counts().get(ErrorCategory.RECORDING, 0)

    store.on_session_finalized(SessionFinalizedEvent(session=session))

    assert error_bus.get_error_counts()[ErrorCategory.RECORDING] == before + 1


def test_load_corrupt_summary(tmp_path: Path, session) -> None:
    store = SessionStore(tmp_path)
    store.save(session)
    path = tmp_path / session.id / SESSION_FILE
    data = json.loads(path.read_text())
    data["payload"]["summary"] = {"avg_speed": 1.0, "top_speed": 2.0}
    path.write_text(json.dumps(data))

    with pytest.raises(RecordingError):
        store.load(session.id)
