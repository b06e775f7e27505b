"""JSON persistence for finalized tracking sessions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from app.events.error_bus import ErrorCategory, ErrorSeverity, publish_error
from app.events.event_bus import EventBus
from app.events.event_types import SessionFinalizedEvent
from app.pipeline.recording.manifest import create_session_manifest
from configs.settings import RecordingConfig
from contracts import KinematicsSummary, TrackingSession
from contracts.versioning import make_envelope, open_envelope
from exceptions import FileWriteError, RecordingError, SessionNotFoundError
from log_config.logger import get_logger

logger = get_logger(__name__)

SESSION_FILE = "session.json"
MANIFEST_FILE = "manifest.json"


class SessionStore:
    """Stores each session under ``<root>/<session_id>/``.

    Layout:
        session.json  - versioned envelope with the session and its summary
        manifest.json - display metadata (title, counts, video reference)
    """

    def __init__(self, root: Path, game_type: str = "volleyball"):
        self._root = Path(root)
        self._game_type = game_type

    @classmethod
    def from_config(cls, config: RecordingConfig) -> "SessionStore":
        return cls(Path(config.output_dir), game_type=config.game_type)

    @property
    def root(self) -> Path:
        return self._root

    def save(
        self,
        session: TrackingSession,
        summary: Optional[KinematicsSummary] = None,
        video_file: Optional[str] = None,
    ) -> Path:
        """Write a finalized session and its manifest.

        Args:
            session: Finalized session (end_time set)
            summary: Kinematics to store alongside the positions
            video_file: Reference to an associated video file

        Returns:
            Directory the session was written to

        Raises:
            RecordingError: If the session is still active
            FileWriteError: If the files cannot be written
        """
        if not session.is_complete:
            raise RecordingError(f"Session {session.id} is still active and cannot be stored")

        session_dir = self._root / session.id
        payload = {
            "session": session.to_dict(),
            "summary": summary.to_dict() if summary is not None else None,
        }
        manifest = create_session_manifest(
            session,
            summary=summary,
            game_type=self._game_type,
            video_file=video_file,
            session_file=SESSION_FILE,
        )
        try:
            session_dir.mkdir(parents=True, exist_ok=True)
            (session_dir / SESSION_FILE).write_text(json.dumps(make_envelope(payload), indent=2))
            (session_dir / MANIFEST_FILE).write_text(json.dumps(manifest, indent=2))
        except OSError as e:
            logger.error(f"Failed to write session {session.id}: {e}")
            raise FileWriteError(f"Failed to write session {session.id} to {session_dir}: {e}")

        logger.info(f"Saved session {session.id} with {len(session.positions)} positions to {session_dir}")
        return session_dir

    def load(self, session_id: str) -> Tuple[TrackingSession, Optional[KinematicsSummary]]:
        """Load a stored session and its summary.

        Raises:
            SessionNotFoundError: If no session with this id is stored
            RecordingError: If the stored file is unreadable
        """
        path = self._root / session_id / SESSION_FILE
        if not path.exists():
            raise SessionNotFoundError(f"Session not found: {session_id}", session_id=session_id)
        try:
            payload = open_envelope(json.loads(path.read_text()))
            session = TrackingSession.from_dict(payload["session"])
            summary_data = payload.get("summary")
            summary = KinematicsSummary(**summary_data) if summary_data else None
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise RecordingError(f"Corrupt session file {path}: {e}")

        return session, summary

    def load_manifest(self, session_id: str) -> Dict[str, Any]:
        path = self._root / session_id / MANIFEST_FILE
        if not path.exists():
            raise SessionNotFoundError(f"Manifest not found: {session_id}", session_id=session_id)
        return json.loads(path.read_text())

    def list_sessions(self) -> List[str]:
        """Stored session ids, oldest first."""
        if not self._root.exists():
            return []
        found = [p for p in self._root.iterdir() if (p / SESSION_FILE).exists()]
        return [p.name for p in sorted(found, key=lambda p: (p.stat().st_mtime, p.name))]

    def on_session_finalized(self, event: SessionFinalizedEvent) -> None:
        """EventBus handler: persist every finalized session."""
        try:
            self.save(event.session, event.summary)
        except RecordingError as e:
            publish_error(
                category=ErrorCategory.RECORDING,
                severity=ErrorSeverity.ERROR,
                message=str(e),
                source="SessionStore",
                exception=e,
                session_id=event.session.id,
            )

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(SessionFinalizedEvent, self.on_session_finalized)


__all__ = ["SessionStore", "SESSION_FILE", "MANIFEST_FILE"]
