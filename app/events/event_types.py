"""Event types for tracking communication.

All events are immutable dataclasses that flow through the EventBus. The
tracking context publishes them; persistence and display collaborators
subscribe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from contracts import KinematicsSummary, PositionSample, TrackingSession


@dataclass(frozen=True)
class SampleTrackedEvent:
    """Published after a detection is accepted into the trajectory buffer.

    Published By: TrackingContext.on_detection
    Subscribed By: preview overlays, live stats

    Frequency: one per detection tick (typically 10-20/sec)

    Attributes:
        sample: Enriched sample as stored (velocity derived)
        session_id: Active session receiving the sample, or None in preview
    """
    sample: PositionSample
    session_id: Optional[str] = None


@dataclass(frozen=True)
class SampleRejectedEvent:
    """Published when a detection fails validation and is dropped.

    Attributes:
        reason: Validation message
        timestamp: Timestamp of the rejected sample, if parseable
    """
    reason: str
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class TrackingStartedEvent:
    """Published when a tracking session starts.

    Attributes:
        session_id: New session identifier
        start_time: Session start in epoch milliseconds
    """
    session_id: str
    start_time: int


@dataclass(frozen=True)
class SessionFinalizedEvent:
    """Published when a tracking session is stopped.

    Published By: TrackingContext.stop
    Subscribed By: SessionStore (persist), summary display

    Attributes:
        session: Finalized, immutable session
        summary: Kinematics over the full session, if requested
    """
    session: TrackingSession
    summary: Optional[KinematicsSummary] = None
