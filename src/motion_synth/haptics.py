"""Haptic effects and the haptic player port.

The engine never renders haptics itself. It hands an effect to a
``HapticPlayer`` and observes whether the submit succeeded. Playback is
fire-and-observe-failure: ``play`` returns as soon as the effect is queued
and never waits for the effect's duration.
"""

from __future__ import annotations

import logging
import math
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from motion_synth.errors import ConfigurationError, EngineUnavailable, PlaybackFailure

logger = logging.getLogger("motion_synth.haptics")

TAP_DURATION = 0.05


def _check_unit(value: float, name: str, effect: str):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{effect}: {name} must be a number, got {value!r}")
    if not (0.0 <= value <= 1.0):
        raise ConfigurationError(f"{effect}: {name} must be in [0, 1], got {value!r}")


@dataclass(frozen=True)
class Tap:
    """A single brief transient pulse."""
    intensity: float = 0.7
    sharpness: float = 0.7

    kind: ClassVar[str] = "tap"
    event_type: ClassVar[str] = "transient"

    @property
    def duration(self) -> float:
        return TAP_DURATION

    def validate(self):
        _check_unit(self.intensity, "intensity", self.kind)
        _check_unit(self.sharpness, "sharpness", self.kind)

    def to_dict(self) -> dict:
        return {"type": self.kind, "intensity": self.intensity, "sharpness": self.sharpness}


@dataclass(frozen=True)
class Buzz:
    """A continuous vibration lasting `duration` seconds."""
    intensity: float = 0.7
    sharpness: float = 0.7
    duration: float = 0.1

    kind: ClassVar[str] = "buzz"
    event_type: ClassVar[str] = "continuous"

    def validate(self):
        _check_unit(self.intensity, "intensity", self.kind)
        _check_unit(self.sharpness, "sharpness", self.kind)
        d = self.duration
        if isinstance(d, bool) or not isinstance(d, (int, float)) or not math.isfinite(d) or d <= 0:
            raise ConfigurationError(f"buzz: duration must be finite and positive, got {d!r}")

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "intensity": self.intensity,
            "sharpness": self.sharpness,
            "duration": self.duration,
        }


HapticSpec = Union[Tap, Buzz]


def validate_effect(effect: HapticSpec) -> HapticSpec:
    """Raise ConfigurationError unless `effect` is a well-formed HapticSpec."""
    if not isinstance(effect, (Tap, Buzz)):
        raise ConfigurationError(f"Unknown haptic effect: {effect!r}")
    effect.validate()
    return effect


def effect_from_dict(data: dict) -> HapticSpec:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Effect entry must be a mapping, got {data!r}")

    kind = data.get("type")
    if kind == Tap.kind:
        effect = Tap(
            intensity=data.get("intensity", 0.7),
            sharpness=data.get("sharpness", 0.7),
        )
    elif kind == Buzz.kind:
        effect = Buzz(
            intensity=data.get("intensity", 0.7),
            sharpness=data.get("sharpness", 0.7),
            duration=data.get("duration", 0.1),
        )
    else:
        raise ConfigurationError(f"Unknown effect type {kind!r} (expected 'tap' or 'buzz')")

    return validate_effect(effect)


class HandleState(Enum):
    ABSENT = "absent"
    READY = "ready"


class HapticHandle:
    """Two-state handle to an underlying haptic device.

    ABSENT until ``acquire`` succeeds, READY until ``release``. Players use
    it instead of a nullable device reference so "not prepared" is a state
    that can be checked and reported.
    """

    def __init__(self):
        self._state = HandleState.ABSENT
        self._device: object = None

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is HandleState.READY

    @property
    def device(self) -> object:
        if not self.ready:
            raise PlaybackFailure("Haptic engine has not been prepared or has been stopped")
        return self._device

    def acquire(self, device: object):
        self._device = device
        self._state = HandleState.READY

    def release(self) -> object:
        device, self._device = self._device, None
        self._state = HandleState.ABSENT
        return device


class HapticPlayer(ABC):
    """Port for the haptic collaborator."""

    @abstractmethod
    def prepare(self):
        """Make the device ready. Raise EngineUnavailable on failure."""

    @abstractmethod
    def play(self, effect: HapticSpec):
        """Submit an effect for playback. Raise PlaybackFailure on failure."""

    @abstractmethod
    def shutdown(self):
        """Release the device. Safe to call when not prepared."""


class LoggingHapticPlayer(HapticPlayer):
    """Player with no physical output; logs and remembers every effect.

    Useful for replaying recordings and for headless runs.
    """

    def __init__(self, supported: bool = True):
        self.supported = supported
        self.handle = HapticHandle()
        self.played: list[HapticSpec] = []

    def prepare(self):
        if not self.supported:
            raise EngineUnavailable("Haptics are not supported on this device")
        if not self.handle.ready:
            self.handle.acquire(self)
            logger.debug("Logging haptic player ready")

    def play(self, effect: HapticSpec):
        if not self.handle.ready:
            raise PlaybackFailure("Haptic engine has not been prepared", effect=effect)
        self.played.append(effect)
        logger.info(
            "Haptic %s: intensity=%.2f sharpness=%.2f duration=%.3fs",
            effect.kind, effect.intensity, effect.sharpness, effect.duration,
        )

    def shutdown(self):
        if self.handle.ready:
            self.handle.release()
            logger.debug("Logging haptic player released")


class QueuedHapticPlayer(HapticPlayer):
    """Player that hands effects to another thread or event loop via a queue.

    The server drains it after each sample and forwards the effects to the
    remote device that produced the sample.
    """

    def __init__(self, maxsize: int = 64):
        self.handle = HapticHandle()
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()

    def prepare(self):
        with self._lock:
            if not self.handle.ready:
                self.handle.acquire(self._queue)

    def play(self, effect: HapticSpec):
        with self._lock:
            if not self.handle.ready:
                raise PlaybackFailure("Haptic engine has not been prepared", effect=effect)
            try:
                self.handle.device.put_nowait(effect)
            except queue.Full as e:
                raise PlaybackFailure("Haptic queue is full", effect=effect, cause=e) from e

    def drain(self) -> list[HapticSpec]:
        """Pop every queued effect."""
        effects = []
        while True:
            try:
                effects.append(self._queue.get_nowait())
            except queue.Empty:
                return effects

    def shutdown(self):
        with self._lock:
            if self.handle.ready:
                self.handle.release()
        self.drain()

    @property
    def pending(self) -> int:
        return self._queue.qsize()


def describe_effect(effect: Optional[HapticSpec]) -> str:
    if effect is None:
        return "none"
    if isinstance(effect, Buzz):
        return f"buzz({effect.intensity}, {effect.sharpness}, {effect.duration}s)"
    return f"tap({effect.intensity}, {effect.sharpness})"
