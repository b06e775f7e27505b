"""Configuration validation using JSON Schema."""

from __future__ import annotations

import copy
from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

_RGB = {
    "type": "array",
    "items": {"type": "integer", "minimum": 0, "maximum": 255},
    "minItems": 3,
    "maxItems": 3,
}

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "tracking": {
            "type": "object",
            "default": {},
            "properties": {
                "buffer_capacity": {"type": "integer", "minimum": 1, "maximum": 10000, "default": 30},
                "summarize_on_stop": {"type": "boolean", "default": True},
            },
        },
        "trail": {
            "type": "object",
            "default": {},
            "properties": {
                "window_size": {"type": "integer", "minimum": 1, "maximum": 1000, "default": 10},
                "base_opacity": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 1.0},
                "min_opacity": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.1},
                "fade_step": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.1},
                "base_radius": {"type": "number", "exclusiveMinimum": 0, "maximum": 200, "default": 8.0},
                "min_radius": {"type": "number", "minimum": 0, "maximum": 200, "default": 2.0},
                "radius_step": {"type": "number", "minimum": 0, "maximum": 200, "default": 0.8},
                "recent_color": dict(_RGB, default=[255, 255, 0]),
                "old_color": dict(_RGB, default=[0, 150, 255]),
                "highlight_color": dict(_RGB, default=[255, 0, 0]),
                "highlight_radius_boost": {"type": "number", "minimum": 0, "maximum": 50, "default": 2.0},
            },
        },
        "detection": {
            "type": "object",
            "default": {},
            "properties": {
                "period_ms": {"type": "integer", "minimum": 1, "maximum": 1000, "default": 50},
                "frame_width": {"type": "integer", "minimum": 100, "maximum": 8192, "default": 390},
                "frame_height": {"type": "integer", "minimum": 200, "maximum": 8192, "default": 844},
                "cycle_ms": {"type": "integer", "minimum": 100, "maximum": 60000, "default": 3000},
                "noise_px": {"type": "number", "minimum": 0, "maximum": 500, "default": 20.0},
                "miss_probability": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.0},
                "seed": {"type": ["integer", "null"], "default": 7},
            },
        },
        "recording": {
            "type": "object",
            "default": {},
            "properties": {
                "output_dir": {"type": "string", "minLength": 1, "default": "recordings"},
                "game_type": {"type": "string", "default": "volleyball"},
            },
        },
        "playback": {
            "type": "object",
            "default": {},
            "properties": {
                "time_window_ms": {"type": "number", "minimum": 0, "maximum": 10000, "default": 100},
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    instance.setdefault(prop, copy.deepcopy(subschema["default"]))

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (mutated with defaults)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.debug("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


def validate_config_file(config_path: str) -> None:
    """Validate a YAML configuration file.

    Args:
        config_path: Path to configuration file

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    import yaml
    from pathlib import Path

    path = Path(config_path)
    if not path.exists():
        raise ConfigValidationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ConfigValidationError(f"Failed to parse configuration file: {e}")

    validate_config(config or {})


__all__ = ["validate_config", "validate_config_file", "CONFIG_SCHEMA"]
