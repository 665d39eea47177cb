"""Engine configuration and YAML mapping files.

File format:

    debounce:
      default: 0.5
      device_tap: 0.2
      flip_over: 1.0
    sample_interval: 0.05
    mappings:
      - gesture: {type: shake, threshold: 1.8}
        effect: {type: tap, intensity: 0.8, sharpness: 0.6}
      - gesture: {type: flip_over}
        effect: {type: buzz, duration: 0.3}
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from motion_synth.debounce import (
    DEFAULT_COOLDOWN,
    FLIP_COOLDOWN,
    TAP_COOLDOWN,
    DebounceScheduler,
)
from motion_synth.engine import Mapping
from motion_synth.errors import ConfigurationError
from motion_synth.gestures import Axis, DeviceTap, FlipOver, Shake, Twist, gesture_from_dict
from motion_synth.haptics import Buzz, Tap, effect_from_dict
from motion_synth.sensors import DEFAULT_INTERVAL

logger = logging.getLogger("motion_synth.config")


@dataclass
class EngineConfig:
    default_cooldown: float = DEFAULT_COOLDOWN
    tap_cooldown: float = TAP_COOLDOWN
    flip_cooldown: float = FLIP_COOLDOWN
    sample_interval: float = DEFAULT_INTERVAL
    mappings: list[Mapping] = field(default_factory=list)

    def make_debounce(self) -> DebounceScheduler:
        return DebounceScheduler(
            default_cooldown=self.default_cooldown,
            tap_cooldown=self.tap_cooldown,
            flip_cooldown=self.flip_cooldown,
        )

    def validate(self) -> EngineConfig:
        self.make_debounce()
        interval = self.sample_interval
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) \
                or not math.isfinite(interval) or interval <= 0:
            raise ConfigurationError(f"sample_interval must be positive, got {interval!r}")
        for i, mapping in enumerate(self.mappings):
            try:
                mapping.validate()
            except ConfigurationError as e:
                raise ConfigurationError(f"mappings[{i}]: {e}") from e
        return self

    def to_dict(self) -> dict:
        return {
            "debounce": {
                "default": self.default_cooldown,
                "device_tap": self.tap_cooldown,
                "flip_over": self.flip_cooldown,
            },
            "sample_interval": self.sample_interval,
            "mappings": [m.to_dict() for m in self.mappings],
        }

    @classmethod
    def with_defaults(cls) -> EngineConfig:
        """Demo mapping set: one effect per gesture kind."""
        return cls(mappings=[
            Mapping(Shake(threshold=1.8), Tap(intensity=0.8, sharpness=0.6)),
            Mapping(Twist(axis=Axis.Z, rate_threshold=2.5), Buzz(intensity=0.5, sharpness=0.3, duration=0.2)),
            Mapping(FlipOver(), Buzz(intensity=1.0, sharpness=0.8, duration=0.3)),
            Mapping(DeviceTap(threshold=2.5), Tap(intensity=1.0, sharpness=1.0)),
        ])


def parse_config(data: dict | None) -> EngineConfig:
    """Build an EngineConfig from the parsed YAML document."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config root must be a mapping")

    debounce = data.get("debounce") or {}
    if not isinstance(debounce, dict):
        raise ConfigurationError("'debounce' must be a mapping")

    mappings = []
    for i, entry in enumerate(data.get("mappings") or []):
        if not isinstance(entry, dict) or "gesture" not in entry or "effect" not in entry:
            raise ConfigurationError(f"mappings[{i}]: needs 'gesture' and 'effect'")
        try:
            mappings.append(Mapping(
                gesture=gesture_from_dict(entry["gesture"]),
                effect=effect_from_dict(entry["effect"]),
            ))
        except ConfigurationError as e:
            raise ConfigurationError(f"mappings[{i}]: {e}") from e

    config = EngineConfig(
        default_cooldown=debounce.get("default", DEFAULT_COOLDOWN),
        tap_cooldown=debounce.get("device_tap", TAP_COOLDOWN),
        flip_cooldown=debounce.get("flip_over", FLIP_COOLDOWN),
        sample_interval=data.get("sample_interval", DEFAULT_INTERVAL),
        mappings=mappings,
    )
    return config.validate()


def load_config(path: str | Path) -> EngineConfig:
    """Load a mapping file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: invalid YAML: {e}") from e

    config = parse_config(data)
    logger.info("Loaded %d mappings from %s", len(config.mappings), path)
    return config


def save_config(config: EngineConfig, path: str | Path):
    """Write a mapping file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
