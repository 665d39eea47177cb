"""Motion samples delivered by a sensor source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

Vector3 = tuple[float, float, float]


def _vector(values: Sequence[float], name: str) -> Vector3:
    if len(values) != 3:
        raise ValueError(f"{name} needs 3 components, got {len(values)}")
    x, y, z = (float(v) for v in values)
    return (x, y, z)


@dataclass(frozen=True)
class Attitude:
    """Device orientation in radians."""
    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0

    def to_dict(self) -> dict:
        return {"pitch": self.pitch, "roll": self.roll, "yaw": self.yaw}

    @classmethod
    def from_dict(cls, data: dict) -> Attitude:
        return cls(
            pitch=float(data.get("pitch", 0.0)),
            roll=float(data.get("roll", 0.0)),
            yaw=float(data.get("yaw", 0.0)),
        )


@dataclass(frozen=True)
class MotionSample:
    """Snapshot of device motion at one sensor tick.

    Acceleration is gravity-compensated and expressed in g, rotation rate in
    rad/s. The timestamp is only meaningful inside recordings; the engine
    keeps its own clock.
    """

    acceleration: Vector3 = (0.0, 0.0, 0.0)
    rotation_rate: Vector3 = (0.0, 0.0, 0.0)
    attitude: Attitude = field(default_factory=Attitude)
    timestamp: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "acceleration", _vector(self.acceleration, "acceleration"))
        object.__setattr__(self, "rotation_rate", _vector(self.rotation_rate, "rotation_rate"))

    @property
    def pitch(self) -> float:
        return self.attitude.pitch

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (acceleration, rotation_rate, attitude) as float64 vectors."""
        return (
            np.asarray(self.acceleration, dtype=np.float64),
            np.asarray(self.rotation_rate, dtype=np.float64),
            np.array(
                [self.attitude.pitch, self.attitude.roll, self.attitude.yaw],
                dtype=np.float64,
            ),
        )

    @classmethod
    def from_arrays(
        cls,
        acceleration: np.ndarray,
        rotation_rate: np.ndarray,
        attitude: np.ndarray,
        timestamp: Optional[float] = None,
    ) -> MotionSample:
        pitch, roll, yaw = (float(v) for v in attitude)
        return cls(
            acceleration=tuple(acceleration.tolist()),
            rotation_rate=tuple(rotation_rate.tolist()),
            attitude=Attitude(pitch, roll, yaw),
            timestamp=timestamp,
        )

    def to_dict(self) -> dict:
        data = {
            "acceleration": list(self.acceleration),
            "rotation_rate": list(self.rotation_rate),
            "attitude": self.attitude.to_dict(),
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: dict) -> MotionSample:
        return cls(
            acceleration=data.get("acceleration", (0.0, 0.0, 0.0)),
            rotation_rate=data.get("rotation_rate", (0.0, 0.0, 0.0)),
            attitude=Attitude.from_dict(data.get("attitude", {})),
            timestamp=data.get("timestamp"),
        )
