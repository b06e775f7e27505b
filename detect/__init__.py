"""Detection sources feeding the tracking core."""

from .simulated import SimConfig, SimulatedRallySource
from .source import DetectionSource, ReplaySource

__all__ = [
    "DetectionSource",
    "ReplaySource",
    "SimConfig",
    "SimulatedRallySource",
]
