"""Configuration loading for volleytrack."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from configs.validator import validate_config
from exceptions import ConfigError, ConfigValidationError, InvalidConfigError
from log_config.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")

DEFAULT_BUFFER_CAPACITY = 30
DEFAULT_TRAIL_WINDOW = 10
DEFAULT_DETECTION_PERIOD_MS = 50
DEFAULT_PLAYBACK_WINDOW_MS = 100


@dataclass(frozen=True)
class TrackingConfig:
    buffer_capacity: int = DEFAULT_BUFFER_CAPACITY
    summarize_on_stop: bool = True


@dataclass(frozen=True)
class TrailConfig:
    window_size: int = DEFAULT_TRAIL_WINDOW
    base_opacity: float = 1.0
    min_opacity: float = 0.1
    fade_step: float = 0.1
    base_radius: float = 8.0
    min_radius: float = 2.0
    radius_step: float = 0.8
    recent_color: Tuple[int, int, int] = (255, 255, 0)  # yellow
    old_color: Tuple[int, int, int] = (0, 150, 255)  # blue
    highlight_color: Tuple[int, int, int] = (255, 0, 0)
    highlight_radius_boost: float = 2.0


@dataclass(frozen=True)
class DetectionConfig:
    period_ms: int = DEFAULT_DETECTION_PERIOD_MS
    frame_width: int = 390
    frame_height: int = 844
    cycle_ms: int = 3000
    noise_px: float = 20.0
    miss_probability: float = 0.0
    seed: Optional[int] = 7


@dataclass(frozen=True)
class RecordingConfig:
    output_dir: str = "recordings"
    game_type: str = "volleyball"


@dataclass(frozen=True)
class PlaybackConfig:
    time_window_ms: float = DEFAULT_PLAYBACK_WINDOW_MS


@dataclass(frozen=True)
class AppConfig:
    tracking: TrackingConfig
    trail: TrailConfig
    detection: DetectionConfig
    recording: RecordingConfig
    playback: PlaybackConfig


def default_config() -> AppConfig:
    """Build an AppConfig from the built-in defaults without touching disk."""
    return AppConfig(
        tracking=TrackingConfig(),
        trail=TrailConfig(),
        detection=DetectionConfig(),
        recording=RecordingConfig(),
        playback=PlaybackConfig(),
    )


def _check_ranges(trail: TrailConfig) -> None:
    errors = []
    if trail.min_opacity > trail.base_opacity:
        errors.append(f"trail -> min_opacity: {trail.min_opacity} exceeds base_opacity {trail.base_opacity}")
    if trail.min_radius > trail.base_radius:
        errors.append(f"trail -> min_radius: {trail.min_radius} exceeds base_radius {trail.base_radius}")
    if errors:
        for msg in errors:
            logger.error(f"  - {msg}")
        raise ConfigValidationError(
            f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
            validation_errors=errors,
        )


def config_from_dict(data: Dict[str, Any]) -> AppConfig:
    """Validate a raw mapping and build the typed configuration.

    Missing sections and keys fall back to the schema defaults.

    Raises:
        ConfigValidationError: If the mapping fails schema or range checks
        InvalidConfigError: If the typed objects cannot be constructed
    """
    validate_config(data)

    try:
        trail_data = dict(data["trail"])
        for key in ("recent_color", "old_color", "highlight_color"):
            trail_data[key] = tuple(trail_data[key])
        trail = TrailConfig(**trail_data)
        config = AppConfig(
            tracking=TrackingConfig(**data["tracking"]),
            trail=trail,
            detection=DetectionConfig(**data["detection"]),
            recording=RecordingConfig(**data["recording"]),
            playback=PlaybackConfig(**data["playback"]),
        )
    except (KeyError, TypeError) as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")

    _check_ranges(config.trail)
    return config


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    logger.info(f"Loading configuration from {path}")
    if not path.exists():
        raise InvalidConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Configuration root must be a mapping, got {type(data).__name__}")

    config = config_from_dict(data)
    logger.info(
        f"Configuration loaded successfully: buffer={config.tracking.buffer_capacity}, "
        f"trail window={config.trail.window_size}, detection "
        f"@{config.detection.period_ms}ms"
    )
    return config


__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_BUFFER_CAPACITY",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DETECTION_PERIOD_MS",
    "DEFAULT_PLAYBACK_WINDOW_MS",
    "DEFAULT_TRAIL_WINDOW",
    "DetectionConfig",
    "PlaybackConfig",
    "RecordingConfig",
    "TrackingConfig",
    "TrailConfig",
    "config_from_dict",
    "default_config",
    "load_config",
]
