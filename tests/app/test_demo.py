from pathlib import Path

from app.demo import main
from app.pipeline.recording.session_store import SessionStore


def test_demo_runs_simulated_session(tmp_path: Path, capsys) -> None:
    result = main(["--samples", "21", "--output-dir", str(tmp_path)])

    assert result["positions"] == 21
    assert result["accepted"] == 21
    assert result["trail_points"] == 10
    assert result["visible_at_end"] == 3
    assert result["summary"]["duration"] == 1.0
    assert '"session_id"' in capsys.readouterr().out

    session, summary = SessionStore(tmp_path).load(result["session_id"])
    assert len(session.positions) == 21
    assert session.end_time == 1050
    assert summary is not None


def test_demo_writes_trail_snapshot(tmp_path: Path) -> None:
    snapshot = tmp_path / "trail.png"
    main(["--samples", "5", "--output-dir", str(tmp_path / "sessions"), "--snapshot", str(snapshot)])

    assert snapshot.exists()
    assert snapshot.stat().st_size > 0
