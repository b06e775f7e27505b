"""Trajectory lookup for reviewing a stored session against video playback.

Playback times are seconds from the start of the video, and the first stored
position is taken to coincide with the start of the video.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from configs.settings import DEFAULT_PLAYBACK_WINDOW_MS, PlaybackConfig, TrailConfig
from contracts import KinematicsSummary, PositionSample, Trail, TrackingSession
from metrics.kinematics import summarize
from ui.trail import Size, TrailRenderer


def _relative_ms(positions: Sequence[PositionSample]) -> List[float]:
    if not positions:
        return []
    origin = positions[0].timestamp
    return [p.timestamp - origin for p in positions]


def positions_near(
    positions: Sequence[PositionSample],
    playback_s: float,
    window_ms: float = DEFAULT_PLAYBACK_WINDOW_MS,
) -> List[PositionSample]:
    """Positions within ``window_ms`` of the playback time."""
    playback_ms = playback_s * 1000.0
    return [
        p for p, rel in zip(positions, _relative_ms(positions))
        if abs(rel - playback_ms) <= window_ms
    ]


def path_until(positions: Sequence[PositionSample], playback_s: float) -> List[PositionSample]:
    """Positions recorded at or before the playback time."""
    playback_ms = playback_s * 1000.0
    return [p for p, rel in zip(positions, _relative_ms(positions)) if rel <= playback_ms]


class SessionPlayback:
    """Renders a stored session's trail as it looked at a playback time."""

    def __init__(
        self,
        session: TrackingSession,
        renderer: Optional[TrailRenderer] = None,
        window_ms: float = DEFAULT_PLAYBACK_WINDOW_MS,
    ):
        self._session = session
        self._renderer = renderer or TrailRenderer()
        self._window_ms = window_ms

    @classmethod
    def from_config(
        cls,
        session: TrackingSession,
        playback: PlaybackConfig,
        trail: Optional[TrailConfig] = None,
    ) -> "SessionPlayback":
        renderer = TrailRenderer.from_config(trail) if trail is not None else None
        return cls(session, renderer=renderer, window_ms=playback.time_window_ms)

    @property
    def session(self) -> TrackingSession:
        return self._session

    @property
    def duration_s(self) -> float:
        positions = self._session.positions
        if len(positions) < 2:
            return 0.0
        return (positions[-1].timestamp - positions[0].timestamp) / 1000.0

    def visible_at(self, playback_s: float) -> List[PositionSample]:
        return positions_near(self._session.positions, playback_s, self._window_ms)

    def trail_at(
        self,
        playback_s: float,
        window_size: Optional[int] = None,
        source_size: Optional[Size] = None,
        target_size: Optional[Size] = None,
    ) -> Trail:
        return self._renderer.render(
            path_until(self._session.positions, playback_s),
            window_size=window_size,
            source_size=source_size,
            target_size=target_size,
        )

    def summary(self) -> Optional[KinematicsSummary]:
        return summarize(self._session.positions)


__all__ = ["SessionPlayback", "path_until", "positions_near"]
