"""Gesture definitions: the closed set of recognizable motion patterns."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from motion_synth.errors import ConfigurationError


class Axis(Enum):
    """Device axis used to select a rotation-rate component."""
    X = "x"
    Y = "y"
    Z = "z"

    @property
    def index(self) -> int:
        return "xyz".index(self.value)


def _check_threshold(value: float, name: str, gesture: str):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{gesture}: {name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(
            f"{gesture}: {name} must be finite and non-negative, got {value!r}"
        )


@dataclass(frozen=True)
class Shake:
    """Acceleration magnitude above `threshold` (g)."""
    threshold: float = 1.8

    kind: ClassVar[str] = "shake"

    def validate(self):
        _check_threshold(self.threshold, "threshold", self.kind)

    def to_dict(self) -> dict:
        return {"type": self.kind, "threshold": self.threshold}


@dataclass(frozen=True)
class Twist:
    """Angular rate around `axis` above `rate_threshold` (rad/s), either direction."""
    axis: Axis = Axis.Z
    rate_threshold: float = 2.5

    kind: ClassVar[str] = "twist"

    def validate(self):
        if not isinstance(self.axis, Axis):
            raise ConfigurationError(f"twist: axis must be an Axis, got {self.axis!r}")
        _check_threshold(self.rate_threshold, "rate_threshold", self.kind)

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "axis": self.axis.value,
            "rate_threshold": self.rate_threshold,
        }


@dataclass(frozen=True)
class DeviceTap:
    """A sharp knock on the device body.

    Detection currently uses the same magnitude test as Shake, so the two
    cannot be told apart by signal shape. A proper tap detector would need
    to look at the rise/fall of the acceleration spike over several samples.
    """
    threshold: float = 2.5

    kind: ClassVar[str] = "device_tap"

    def validate(self):
        _check_threshold(self.threshold, "threshold", self.kind)

    def to_dict(self) -> dict:
        return {"type": self.kind, "threshold": self.threshold}


@dataclass(frozen=True)
class FlipOver:
    """Device turned from face up to face down, or back."""

    kind: ClassVar[str] = "flip_over"

    def validate(self):
        pass

    def to_dict(self) -> dict:
        return {"type": self.kind}


GestureSpec = Union[Shake, Twist, DeviceTap, FlipOver]

GESTURE_TYPES: dict[str, type] = {
    cls.kind: cls for cls in (Shake, Twist, DeviceTap, FlipOver)
}


def validate_gesture(gesture: GestureSpec) -> GestureSpec:
    """Raise ConfigurationError unless `gesture` is a well-formed GestureSpec."""
    if not isinstance(gesture, tuple(GESTURE_TYPES.values())):
        raise ConfigurationError(f"Unknown gesture: {gesture!r}")
    gesture.validate()
    return gesture


def gesture_from_dict(data: dict) -> GestureSpec:
    """Build a gesture from its config-file form, e.g. ``{"type": "shake", "threshold": 2.0}``."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Gesture entry must be a mapping, got {data!r}")

    kind = data.get("type")
    if kind not in GESTURE_TYPES:
        raise ConfigurationError(
            f"Unknown gesture type {kind!r} (expected one of {sorted(GESTURE_TYPES)})"
        )

    if kind == Shake.kind:
        gesture = Shake(threshold=data.get("threshold", 1.8))
    elif kind == Twist.kind:
        axis = str(data.get("axis", "z")).lower()
        try:
            gesture = Twist(axis=Axis(axis), rate_threshold=data.get("rate_threshold", 2.5))
        except ValueError:
            raise ConfigurationError(f"twist: unknown axis {axis!r}") from None
    elif kind == DeviceTap.kind:
        gesture = DeviceTap(threshold=data.get("threshold", 2.5))
    else:
        gesture = FlipOver()

    return validate_gesture(gesture)


def describe(gesture: GestureSpec) -> str:
    """Short human-readable label, e.g. ``shake(1.8g)``."""
    if isinstance(gesture, Shake):
        return f"shake({gesture.threshold}g)"
    if isinstance(gesture, Twist):
        return f"twist({gesture.axis.value}, {gesture.rate_threshold}rad/s)"
    if isinstance(gesture, DeviceTap):
        return f"device_tap({gesture.threshold}g)"
    return "flip_over"
