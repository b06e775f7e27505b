"""Synthetic rally detector used when no camera detector is available."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from configs.settings import DEFAULT_DETECTION_PERIOD_MS, DetectionConfig
from contracts import RawSample
from detect.source import DetectionSource

EDGE_MARGIN_PX = 30.0
BOTTOM_MARGIN_PX = 100.0
GRAVITY = 0.5


@dataclass(frozen=True)
class SimConfig:
    frame_width: int = 390
    frame_height: int = 844
    period_ms: int = DEFAULT_DETECTION_PERIOD_MS
    cycle_ms: int = 3000
    noise_px: float = 20.0
    miss_probability: float = 0.0
    seed: Optional[int] = 7
    start_ms: int = 0
    max_samples: Optional[int] = None

    @classmethod
    def from_detection_config(cls, config: DetectionConfig, **overrides) -> "SimConfig":
        values = dict(
            frame_width=config.frame_width,
            frame_height=config.frame_height,
            period_ms=config.period_ms,
            cycle_ms=config.cycle_ms,
            noise_px=config.noise_px,
            miss_probability=config.miss_probability,
            seed=config.seed,
        )
        values.update(overrides)
        return cls(**values)


def rally_position(phase: float, width: float, height: float) -> Tuple[float, float]:
    """Noise-free ball position for a phase in [0, 1) of one rally cycle.

    The first half rises from the lower left across the court, the second
    half drops back from the upper right.
    """
    if phase < 0.5:
        t = phase * 2
        x = width * 0.2 + width * 0.6 * t
        y = height * 0.8 - height * 0.4 * t + GRAVITY * t * t * height * 0.2
    else:
        t = (phase - 0.5) * 2
        x = width * 0.8 - width * 0.6 * t
        y = height * 0.4 + GRAVITY * t * t * height * 0.4
    return x, y


class SimulatedRallySource(DetectionSource):
    """Parabolic volleyball motion with uniform detection noise.

    Without a clock, timestamps advance by exactly ``period_ms`` per call,
    which keeps runs reproducible. With a clock, the ball position follows
    the clock, so irregular tick spacing shows up in the samples.
    """

    def __init__(self, config: Optional[SimConfig] = None, clock: Optional[Callable[[], int]] = None):
        self._config = config or SimConfig()
        self._clock = clock
        self._rng = np.random.default_rng(self._config.seed)
        self._tick = 0

    @property
    def config(self) -> SimConfig:
        return self._config

    @property
    def exhausted(self) -> bool:
        limit = self._config.max_samples
        return limit is not None and self._tick >= limit

    def now_ms(self) -> int:
        """Current time on the source timeline (the next sample's timestamp)."""
        return self._next_timestamp()

    def _next_timestamp(self) -> int:
        if self._clock is not None:
            return int(self._clock())
        return self._config.start_ms + self._tick * self._config.period_ms

    def produce_sample(self) -> Optional[RawSample]:
        cfg = self._config
        timestamp = self._next_timestamp()
        self._tick += 1

        if cfg.miss_probability > 0 and self._rng.random() < cfg.miss_probability:
            return None

        phase = (timestamp % cfg.cycle_ms) / cfg.cycle_ms
        x, y = rally_position(phase, cfg.frame_width, cfg.frame_height)
        x += (self._rng.random() - 0.5) * cfg.noise_px
        y += (self._rng.random() - 0.5) * cfg.noise_px

        x = float(np.clip(x, EDGE_MARGIN_PX, cfg.frame_width - EDGE_MARGIN_PX))
        y = float(np.clip(y, EDGE_MARGIN_PX, cfg.frame_height - BOTTOM_MARGIN_PX))
        return RawSample(x=x, y=y, timestamp=timestamp)


__all__ = ["SimConfig", "SimulatedRallySource", "rally_position"]
