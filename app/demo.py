"""Simulated tracking session demo."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np

from app.events.event_bus import EventBus
from app.pipeline.recording.session_store import SessionStore
from app.pipeline.tracking_loop import TrackingLoop
from app.review import SessionPlayback
from configs.settings import DEFAULT_CONFIG_PATH, load_config
from detect import SimConfig, SimulatedRallySource
from log_config.logger import get_logger
from track.session_manager import TrackingContext
from ui.drawing import draw_trail
from ui.trail import TrailRenderer

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a simulated ball tracking session.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--samples", type=int, default=60)
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument("--snapshot", type=Path, default=None, help="Write the final trail as an image")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> dict:
    args = parse_args(argv)
    config = load_config(args.config)

    bus = EventBus()
    store = SessionStore(args.output_dir or Path(config.recording.output_dir), config.recording.game_type)
    store.attach(bus)

    source = SimulatedRallySource(
        SimConfig.from_detection_config(config.detection, max_samples=args.samples)
    )
    # Session times follow the simulated timeline
    context = TrackingContext.from_config(
        config.tracking,
        event_bus=bus,
        clock=source.now_ms,
    )
    loop = TrackingLoop(source, context, period_ms=config.detection.period_ms)

    context.start()
    stats = loop.run()
    session = context.stop()

    trail = TrailRenderer.from_config(config.trail).render(context.snapshot())
    if args.snapshot is not None:
        frame = np.zeros((config.detection.frame_height, config.detection.frame_width, 3), dtype=np.uint8)
        if not cv2.imwrite(str(args.snapshot), draw_trail(frame, trail)):
            logger.warning(f"Could not write trail snapshot to {args.snapshot}")

    playback = SessionPlayback.from_config(session, config.playback, config.trail)
    summary = context.summary()
    result = {
        "session_id": session.id,
        "positions": len(session.positions),
        "accepted": stats.accepted,
        "missed": stats.missed,
        "rejected": stats.rejected,
        "trail_points": len(trail),
        "visible_at_end": len(playback.visible_at(playback.duration_s)),
        "summary": summary.to_display() if summary else None,
        "stored": str(store.root / session.id),
    }
    print(json.dumps(result, indent=2))
    return result


if __name__ == "__main__":
    main()
