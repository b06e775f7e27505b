"""Speed and duration statistics over a tracked trajectory."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from contracts import KinematicsSummary, PositionSample


def summarize(samples: Sequence[PositionSample]) -> Optional[KinematicsSummary]:
    """Summarize average speed, peak speed and elapsed duration.

    Speeds come only from samples carrying a velocity; if none do, both
    speeds are 0. Duration always spans the first and last sample of the
    full list, regardless of which samples have a velocity.

    Args:
        samples: Time-ordered samples (buffer snapshot or session positions)

    Returns:
        KinematicsSummary, or None when fewer than 2 samples are given
    """
    sample_list = list(samples)
    if len(sample_list) < 2:
        return None

    velocities = np.array(
        [(s.velocity.vx, s.velocity.vy) for s in sample_list if s.velocity is not None],
        dtype=float,
    ).reshape(-1, 2)

    if len(velocities):
        speeds = np.hypot(velocities[:, 0], velocities[:, 1])
        avg_speed = float(np.mean(speeds))
        max_speed = float(np.max(speeds))
    else:
        avg_speed = 0.0
        max_speed = 0.0

    duration = (sample_list[-1].timestamp - sample_list[0].timestamp) / 1000.0

    return KinematicsSummary(
        avg_speed=avg_speed,
        max_speed=max_speed,
        duration=duration,
        sample_count=len(sample_list),
        velocity_sample_count=len(velocities),
    )


__all__ = ["summarize"]
