"""Per-gesture cooldowns."""

from __future__ import annotations

import math
from typing import Optional

from motion_synth.errors import ConfigurationError
from motion_synth.gestures import DeviceTap, FlipOver, GestureSpec

DEFAULT_COOLDOWN = 0.5
TAP_COOLDOWN = 0.2
FLIP_COOLDOWN = 1.0


def _check_cooldown(value: float, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} cooldown must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"{name} cooldown must be finite and non-negative, got {value!r}")
    return float(value)


class DebounceScheduler:
    """Suppresses re-firing of a gesture inside its cooldown window.

    Keys are whole GestureSpec values, so two Shake gestures with different
    thresholds cool down independently.
    """

    def __init__(
        self,
        default_cooldown: float = DEFAULT_COOLDOWN,
        tap_cooldown: float = TAP_COOLDOWN,
        flip_cooldown: float = FLIP_COOLDOWN,
    ):
        self.default_cooldown = _check_cooldown(default_cooldown, "default")
        self.tap_cooldown = _check_cooldown(tap_cooldown, "device_tap")
        self.flip_cooldown = _check_cooldown(flip_cooldown, "flip_over")
        self._last_fired: dict[GestureSpec, float] = {}

    def cooldown(self, gesture: GestureSpec) -> float:
        if isinstance(gesture, DeviceTap):
            return self.tap_cooldown
        if isinstance(gesture, FlipOver):
            return self.flip_cooldown
        return self.default_cooldown

    def allow(self, gesture: GestureSpec, now: float) -> bool:
        last = self._last_fired.get(gesture)
        if last is None:
            return True
        return now - last >= self.cooldown(gesture)

    def record(self, gesture: GestureSpec, now: float):
        self._last_fired[gesture] = now

    def last_fired(self, gesture: GestureSpec) -> Optional[float]:
        return self._last_fired.get(gesture)

    def reset(self):
        self._last_fired.clear()

    def __len__(self) -> int:
        return len(self._last_fired)
