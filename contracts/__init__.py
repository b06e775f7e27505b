"""Shared data contracts for ball trajectory tracking."""

from .types import (
    Color,
    KinematicsSummary,
    PositionSample,
    RawSample,
    TrackingSession,
    Trail,
    TrailPoint,
    TrailSegment,
    Velocity,
    round_half_up,
)

__all__ = [
    "Color",
    "KinematicsSummary",
    "PositionSample",
    "RawSample",
    "TrackingSession",
    "Trail",
    "TrailPoint",
    "TrailSegment",
    "Velocity",
    "round_half_up",
]
