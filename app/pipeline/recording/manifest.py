"""Manifest creation helpers for stored tracking sessions."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Dict, Optional

from contracts import KinematicsSummary, TrackingSession
from contracts.versioning import APP_VERSION, SCHEMA_VERSION


def create_base_manifest() -> Dict[str, Any]:
    """Create base manifest with common fields.

    Returns:
        Dictionary with schema_version, app_version, created_utc
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "app_version": APP_VERSION,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    }


def session_title(session: TrackingSession) -> str:
    day = datetime.fromtimestamp(session.start_time / 1000.0).strftime("%Y-%m-%d")
    return f"Ball Tracking {day}"


def create_session_manifest(
    session: TrackingSession,
    summary: Optional[KinematicsSummary] = None,
    game_type: str = "volleyball",
    video_file: Optional[str] = None,
    session_file: str = "session.json",
) -> Dict[str, Any]:
    """Create the manifest describing one stored session.

    Args:
        session: Finalized tracking session
        summary: Kinematics for the session, if computed
        game_type: Sport label shown in the video list
        video_file: Reference to the recorded video, if one exists
        session_file: File name of the serialized session

    Returns:
        Complete session manifest dictionary
    """
    detection_count = len(session.positions)
    manifest = create_base_manifest()
    manifest.update({
        "session_id": session.id,
        "title": session_title(session),
        "description": f"{game_type.capitalize()} tracking session with {detection_count} ball detections",
        "game_type": game_type,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "duration_ms": session.duration_ms,
        "detection_count": detection_count,
        "session_file": session_file,
        "video_file": video_file,
        "summary": summary.to_display() if summary is not None else None,
    })
    return manifest
