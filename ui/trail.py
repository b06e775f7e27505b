"""Fading trail rendering for ball trajectories.

Rendering is a pure function of the samples and the style: the newest
sample gets full opacity and the largest marker, and each step back in age
fades and shrinks linearly down to a floor. The newest point also carries a
highlight ring that hosts draw on top of everything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from configs.settings import DEFAULT_TRAIL_WINDOW, TrailConfig
from contracts import Color, PositionSample, Trail, TrailPoint, TrailSegment

Size = Tuple[float, float]


@dataclass(frozen=True)
class TrailStyle:
    base_opacity: float = 1.0
    min_opacity: float = 0.1
    fade_step: float = 0.1
    base_radius: float = 8.0
    min_radius: float = 2.0
    radius_step: float = 0.8
    recent_color: Color = (255, 255, 0)
    old_color: Color = (0, 150, 255)
    highlight_color: Color = (255, 0, 0)
    highlight_radius_boost: float = 2.0

    @classmethod
    def from_config(cls, config: TrailConfig) -> "TrailStyle":
        return cls(
            base_opacity=config.base_opacity,
            min_opacity=config.min_opacity,
            fade_step=config.fade_step,
            base_radius=config.base_radius,
            min_radius=config.min_radius,
            radius_step=config.radius_step,
            recent_color=tuple(config.recent_color),
            old_color=tuple(config.old_color),
            highlight_color=tuple(config.highlight_color),
            highlight_radius_boost=config.highlight_radius_boost,
        )

    def opacity_for_age(self, age: int) -> float:
        opacity = self.base_opacity - age * self.fade_step
        return min(self.base_opacity, max(self.min_opacity, opacity))

    def radius_for_age(self, age: int) -> float:
        return max(self.min_radius, self.base_radius - age * self.radius_step)

    def color_for_age(self, age: int, window: int) -> Color:
        # 0.0 = newest, 1.0 = oldest in the window
        t = age / (window - 1) if window > 1 else 0.0
        return tuple(
            int(round(recent + (old - recent) * t))
            for recent, old in zip(self.recent_color, self.old_color)
        )


def scale_factors(source_size: Optional[Size], target_size: Optional[Size]) -> Tuple[float, float]:
    """Scale from video coordinates to overlay coordinates."""
    if source_size is None or target_size is None:
        return 1.0, 1.0
    src_w, src_h = source_size
    dst_w, dst_h = target_size
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"Source size must be positive, got {source_size}")
    return dst_w / src_w, dst_h / src_h


def build_segments(points: Sequence[TrailPoint]) -> List[TrailSegment]:
    segments = []
    for current, nxt in zip(points, points[1:]):
        segments.append(
            TrailSegment(
                x1=current.x,
                y1=current.y,
                x2=nxt.x,
                y2=nxt.y,
                opacity=min(current.opacity, nxt.opacity),
                stroke_width=max(1.0, current.radius / 2.0),
                color=current.color,
            )
        )
    return segments


class TrailRenderer:
    """Maps a trajectory to trail points, segments and a polyline."""

    def __init__(self, style: Optional[TrailStyle] = None, window_size: int = DEFAULT_TRAIL_WINDOW):
        if window_size < 1:
            raise ValueError(f"Trail window size must be >= 1, got {window_size}")
        self._style = style or TrailStyle()
        self._window_size = window_size

    @classmethod
    def from_config(cls, config: TrailConfig) -> "TrailRenderer":
        return cls(style=TrailStyle.from_config(config), window_size=config.window_size)

    @property
    def style(self) -> TrailStyle:
        return self._style

    @property
    def window_size(self) -> int:
        return self._window_size

    def render(
        self,
        samples: Sequence[PositionSample],
        window_size: Optional[int] = None,
        source_size: Optional[Size] = None,
        target_size: Optional[Size] = None,
    ) -> Trail:
        """Render the most recent samples as a fading trail.

        Args:
            samples: Time-ordered samples, oldest first
            window_size: Number of most recent samples to draw (default: renderer window)
            source_size: (width, height) of the coordinate space of the samples
            target_size: (width, height) of the overlay being drawn on

        Returns:
            Trail with points ordered oldest to newest
        """
        window = self._window_size if window_size is None else window_size
        if window < 1:
            raise ValueError(f"Trail window size must be >= 1, got {window}")

        visible = list(samples)[-window:]
        n = len(visible)
        if n == 0:
            return Trail(diagnostics={"window_size": window, "rendered": 0, "input": 0})

        sx, sy = scale_factors(source_size, target_size)
        style = self._style
        points: List[TrailPoint] = []
        for i, sample in enumerate(visible):
            age = n - 1 - i
            points.append(
                TrailPoint(
                    x=sample.x * sx,
                    y=sample.y * sy,
                    opacity=style.opacity_for_age(age),
                    radius=style.radius_for_age(age),
                    color=style.color_for_age(age, n),
                    age=age,
                )
            )

        newest = points[-1]
        points[-1] = TrailPoint(
            x=newest.x,
            y=newest.y,
            opacity=newest.opacity,
            radius=newest.radius + style.highlight_radius_boost,
            color=newest.color,
            age=0,
            highlight=True,
            stroke_color=style.highlight_color,
        )

        return Trail(
            points=tuple(points),
            segments=tuple(build_segments(points)),
            polyline=tuple((p.x, p.y) for p in points),
            diagnostics={"window_size": window, "rendered": n, "input": len(samples)},
        )


__all__ = ["TrailRenderer", "TrailStyle", "build_segments", "scale_factors"]
