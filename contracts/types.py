"""Core data contracts for detection, trajectory, sessions, and trail rendering."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from exceptions import InvalidSampleError

Color = Tuple[int, int, int]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (display rounding)."""
    return int(math.floor(value + 0.5))


def _require_finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidSampleError(f"Sample field '{name}' must be a number, got {type(value).__name__}")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidSampleError(f"Sample field '{name}' is not finite: {value}")
    return number


def _require_timestamp(value: Any) -> int:
    number = _require_finite("timestamp", value)
    if not number.is_integer():
        raise InvalidSampleError(f"Sample timestamp must be whole milliseconds, got {value}", timestamp=number)
    return int(number)


@dataclass(frozen=True)
class RawSample:
    """Detection output as delivered by a detection source."""

    x: float
    y: float
    timestamp: int
    radius: Optional[float] = None

    def validate(self) -> None:
        """Raise InvalidSampleError for non-finite or malformed fields."""
        _require_finite("x", self.x)
        _require_finite("y", self.y)
        _require_timestamp(self.timestamp)
        if self.radius is not None:
            radius = _require_finite("radius", self.radius)
            if radius < 0:
                raise InvalidSampleError(f"Sample radius must be non-negative, got {radius}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RawSample":
        """Build a validated sample from a detector payload.

        Accepts ``{"x", "y", "timestamp", "radius"?}``.
        """
        try:
            x = data["x"]
            y = data["y"]
            timestamp = data["timestamp"]
        except KeyError as e:
            raise InvalidSampleError(f"Sample payload missing field: {e}")
        except TypeError:
            raise InvalidSampleError(f"Sample payload must be a mapping, got {type(data).__name__}")
        sample = cls(x=x, y=y, timestamp=timestamp, radius=data.get("radius"))
        sample.validate()
        return sample


@dataclass(frozen=True)
class Velocity:
    vx: float
    vy: float

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.vx, "y": self.vy}


@dataclass(frozen=True)
class PositionSample:
    """One tracked ball position with derived velocity (px/s)."""

    x: float
    y: float
    timestamp: int
    velocity: Optional[Velocity] = None
    radius: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"x": self.x, "y": self.y, "timestamp": self.timestamp}
        if self.velocity is not None:
            payload["velocity"] = self.velocity.to_dict()
        if self.radius is not None:
            payload["radius"] = self.radius
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PositionSample":
        velocity = data.get("velocity")
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            timestamp=int(data["timestamp"]),
            velocity=Velocity(float(velocity["x"]), float(velocity["y"])) if velocity else None,
            radius=data.get("radius"),
        )


@dataclass(frozen=True)
class TrackingSession:
    """A finalized (or snapshot of an active) tracking session."""

    id: str
    start_time: int
    end_time: Optional[int] = None
    positions: Tuple[PositionSample, ...] = ()

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "positions": [sample.to_dict() for sample in self.positions],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackingSession":
        return cls(
            id=str(data["id"]),
            start_time=int(data["start_time"]),
            end_time=data.get("end_time"),
            positions=tuple(PositionSample.from_dict(p) for p in data.get("positions", [])),
        )


@dataclass(frozen=True)
class KinematicsSummary:
    """Aggregate speed statistics in px/s and elapsed seconds."""

    avg_speed: float
    max_speed: float
    duration: float
    sample_count: int = 0
    velocity_sample_count: int = 0

    @property
    def avg_speed_display(self) -> int:
        return round_half_up(self.avg_speed)

    @property
    def max_speed_display(self) -> int:
        return round_half_up(self.max_speed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_speed": self.avg_speed,
            "max_speed": self.max_speed,
            "duration": self.duration,
            "sample_count": self.sample_count,
            "velocity_sample_count": self.velocity_sample_count,
        }

    def to_display(self) -> Dict[str, Any]:
        return {
            "avg_speed": self.avg_speed_display,
            "max_speed": self.max_speed_display,
            "duration": round(self.duration, 1),
        }


@dataclass(frozen=True)
class TrailPoint:
    x: float
    y: float
    opacity: float
    radius: float
    color: Color
    age: int = 0
    highlight: bool = False
    stroke_color: Optional[Color] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "opacity": self.opacity,
            "radius": self.radius,
            "color": "rgb({}, {}, {})".format(*self.color),
        }


@dataclass(frozen=True)
class TrailSegment:
    x1: float
    y1: float
    x2: float
    y2: float
    opacity: float
    stroke_width: float
    color: Color


@dataclass(frozen=True)
class Trail:
    """Rendered trail: markers, connecting segments, and the polyline."""

    points: Tuple[TrailPoint, ...] = ()
    segments: Tuple[TrailSegment, ...] = ()
    polyline: Tuple[Tuple[float, float], ...] = ()
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def newest(self) -> Optional[TrailPoint]:
        return self.points[-1] if self.points else None

    def __len__(self) -> int:
        return len(self.points)
