"""Drawing rendered trails onto video frames with OpenCV."""

from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np

from contracts import Color, Trail, TrailPoint, TrailSegment

MARKER_STROKE = (255, 255, 255)  # white outline, RGB


def _bgr(color: Color) -> Tuple[int, int, int]:
    r, g, b = color
    return int(b), int(g), int(r)


def _blend(frame: np.ndarray, overlay: np.ndarray, opacity: float) -> None:
    opacity = float(np.clip(opacity, 0.0, 1.0))
    cv2.addWeighted(overlay, opacity, frame, 1.0 - opacity, 0, dst=frame)


def _point(x: float, y: float) -> Tuple[int, int]:
    return int(round(x)), int(round(y))


def draw_segment(frame: np.ndarray, segment: TrailSegment) -> None:
    overlay = frame.copy()
    cv2.line(
        overlay,
        _point(segment.x1, segment.y1),
        _point(segment.x2, segment.y2),
        _bgr(segment.color),
        max(1, int(round(segment.stroke_width))),
        cv2.LINE_AA,
    )
    _blend(frame, overlay, segment.opacity)


def draw_marker(frame: np.ndarray, point: TrailPoint) -> None:
    overlay = frame.copy()
    center = _point(point.x, point.y)
    radius = max(1, int(round(point.radius)))
    cv2.circle(overlay, center, radius, _bgr(point.color), -1, cv2.LINE_AA)
    cv2.circle(overlay, center, radius, _bgr(MARKER_STROKE), 1, cv2.LINE_AA)
    _blend(frame, overlay, point.opacity)


def draw_highlight(frame: np.ndarray, point: TrailPoint, opacity: float = 0.8) -> None:
    overlay = frame.copy()
    cv2.circle(
        overlay,
        _point(point.x, point.y),
        max(1, int(round(point.radius))),
        _bgr(point.stroke_color or (255, 0, 0)),
        2,
        cv2.LINE_AA,
    )
    _blend(frame, overlay, opacity)


def draw_trail(frame: np.ndarray, trail: Optional[Trail]) -> np.ndarray:
    """Draw a rendered trail onto a frame.

    Segments go first (background), then markers oldest to newest, then the
    highlight ring of the newest point.

    Args:
        frame: Grayscale or BGR image, drawn on in place when already BGR
        trail: Output of TrailRenderer.render

    Returns:
        BGR frame with the trail drawn
    """
    if frame.ndim == 2:
        frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)

    if not trail:
        return frame

    for segment in trail.segments:
        draw_segment(frame, segment)
    for point in trail.points:
        draw_marker(frame, point)
    newest = trail.newest
    if newest is not None and newest.highlight:
        draw_highlight(frame, newest)

    return frame


__all__ = [
    "draw_highlight",
    "draw_marker",
    "draw_segment",
    "draw_trail",
]
