"""Detection source interface and a replay implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Union

from contracts import PositionSample, RawSample
from exceptions import DetectionSourceError

SampleLike = Union[RawSample, PositionSample, Mapping[str, Any]]


class DetectionSource(ABC):
    """Producer of raw ball positions.

    A source is pulled one sample at a time. ``produce_sample()`` returns
    None for a tick with no detection (ball occluded, detector miss).
    Finite sources report their end through ``exhausted``.
    """

    @abstractmethod
    def produce_sample(self) -> Optional[RawSample]:
        """Produce the next detection, or None if nothing was detected this tick."""

    @property
    def exhausted(self) -> bool:
        return False

    def close(self) -> None:
        return None

    def __iter__(self) -> Iterator[Optional[RawSample]]:
        while not self.exhausted:
            yield self.produce_sample()


def _to_raw(item: SampleLike) -> RawSample:
    if isinstance(item, RawSample):
        return item
    if isinstance(item, PositionSample):
        return RawSample(x=item.x, y=item.y, timestamp=item.timestamp, radius=item.radius)
    return RawSample(
        x=item.get("x"),
        y=item.get("y"),
        timestamp=item.get("timestamp"),
        radius=item.get("radius"),
    )


class ReplaySource(DetectionSource):
    """Replays recorded detections (offline detector output, stored sessions).

    Items are converted but not validated here; validation happens when the
    tracking context ingests them so bad records are reported per sample.
    """

    def __init__(self, samples: Iterable[Optional[SampleLike]]):
        try:
            self._samples: List[Optional[RawSample]] = [
                None if item is None else _to_raw(item) for item in samples
            ]
        except AttributeError as e:
            raise DetectionSourceError(f"Unsupported replay record: {e}")
        self._index = 0

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._samples)

    @property
    def remaining(self) -> int:
        return len(self._samples) - self._index

    def produce_sample(self) -> Optional[RawSample]:
        if self.exhausted:
            raise DetectionSourceError("Replay source is exhausted")
        sample = self._samples[self._index]
        self._index += 1
        return sample

    def __len__(self) -> int:
        return len(self._samples)


__all__ = ["DetectionSource", "ReplaySource", "SampleLike"]
