"""Motion recording and replay: capture sample streams to disk.

Record real sessions for:
- Reproducible testing without a device
- Tuning thresholds offline against the same motion
- Demo recordings that play back deterministically
"""

from __future__ import annotations

import json
import math
import time
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from motion_synth.motion import Attitude, MotionSample
from motion_synth.sensors import DEFAULT_INTERVAL

FORMAT_VERSION = 1


class MotionRecorder:
    """Records motion samples to a file.

    Usage:
        recorder = MotionRecorder()
        recorder.start()
        source.subscribe(recorder.add_sample)
        # ...
        recorder.stop()
        recorder.save("session.json")
    """

    def __init__(self, clock=time.monotonic):
        self._samples: list[MotionSample] = []
        self._start_time: Optional[float] = None
        self._recording = False
        self._clock = clock

    def start(self):
        """Begin a new recording session."""
        self._samples = []
        self._start_time = self._clock()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of samples captured."""
        self._recording = False
        return len(self._samples)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def duration(self) -> float:
        if not self._samples:
            return 0.0
        return self._samples[-1].timestamp or 0.0

    def add_sample(self, sample: MotionSample):
        """Append a sample, stamped with the time since `start`."""
        if not self._recording:
            return

        timestamp = self._clock() - self._start_time
        self._samples.append(MotionSample(
            acceleration=sample.acceleration,
            rotation_rate=sample.rotation_rate,
            attitude=sample.attitude,
            timestamp=timestamp,
        ))

    def save(self, path: str | Path):
        """Save recording to JSON."""
        save_session(self._samples, path)

    def save_compact(self, path: str | Path) -> Path:
        """Save in compressed numpy format. Returns the .npz path."""
        return save_session_compact(self._samples, path)


def save_session(samples: list[MotionSample], path: str | Path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    duration = samples[-1].timestamp if samples and samples[-1].timestamp else 0.0
    data = {
        "version": FORMAT_VERSION,
        "sample_count": len(samples),
        "duration": duration,
        "samples": [s.to_dict() for s in samples],
    }

    with open(path, "w") as f:
        json.dump(data, f)


def save_session_compact(samples: list[MotionSample], path: str | Path) -> Path:
    path = Path(path).with_suffix(".npz")
    path.parent.mkdir(parents=True, exist_ok=True)

    n = len(samples)
    timestamps = np.array(
        [s.timestamp if s.timestamp is not None else i * DEFAULT_INTERVAL for i, s in enumerate(samples)],
        dtype=np.float64,
    )
    # Columns: ax ay az | rx ry rz | pitch roll yaw
    values = np.zeros((n, 9), dtype=np.float64)
    for i, s in enumerate(samples):
        accel, rate, att = s.as_arrays()
        values[i] = np.concatenate([accel, rate, att])

    np.savez_compressed(
        path,
        version=np.array([FORMAT_VERSION]),
        timestamps=timestamps,
        values=values,
    )
    return path


class MotionPlayer:
    """Replays a recorded session.

    Usage:
        player = MotionPlayer.load("session.json")
        for sample in player.play():
            engine.on_sample(sample)

        # Or feed a ReplaySource:
        source = ReplaySource(player.samples())
    """

    def __init__(self, samples: list[MotionSample]):
        self._samples = samples

    @classmethod
    def load(cls, path: str | Path) -> MotionPlayer:
        """Load a recording from JSON or .npz."""
        path = Path(path)

        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        return cls([MotionSample.from_dict(s) for s in data["samples"]])

    @classmethod
    def _load_compact(cls, path: Path) -> MotionPlayer:
        data = np.load(path, allow_pickle=False)
        timestamps = data["timestamps"]
        values = data["values"]

        samples = []
        for t, row in zip(timestamps, values):
            samples.append(MotionSample.from_arrays(
                row[0:3], row[3:6], row[6:9], timestamp=float(t),
            ))
        return cls(samples)

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def duration(self) -> float:
        if not self._samples:
            return 0.0
        return self._samples[-1].timestamp or 0.0

    def samples(self) -> list[MotionSample]:
        return list(self._samples)

    def play(self) -> Iterator[MotionSample]:
        """Iterate through all samples instantly (no timing)."""
        yield from self._samples

    def play_realtime(self, speed: float = 1.0) -> Iterator[MotionSample]:
        """Replay at original timing (or scaled by speed factor)."""
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        if not self._samples:
            return

        start = time.monotonic()
        for sample in self._samples:
            target_time = (sample.timestamp or 0.0) / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield sample


def synthesize_session(
    duration: float = 10.0,
    interval: float = DEFAULT_INTERVAL,
    seed: int = 0,
) -> list[MotionSample]:
    """Generate a synthetic session with one of each gesture.

    Timeline (fractions of `duration`): a shake burst at 0.2, a z-axis twist
    at 0.4, a knock at 0.55, a flip to face down at 0.7 and back at 0.85.
    Everything else is low-level sensor noise with the device lying flat.
    """
    rng = np.random.default_rng(seed)
    n = max(1, int(round(duration / interval)))

    accel = rng.normal(0.0, 0.03, size=(n, 3))
    rate = rng.normal(0.0, 0.05, size=(n, 3))
    pitch = rng.normal(0.0, 0.02, size=n)

    def span(start: float, length: float) -> slice:
        i = int(start * n)
        return slice(i, min(n, i + max(1, int(length / interval))))

    shake = span(0.2, 0.4)
    k = shake.stop - shake.start
    accel[shake, 0] += 2.4 * np.sin(np.linspace(0, 4 * math.pi, k))
    accel[shake, 1] += rng.normal(0.0, 0.5, size=k)

    twist = span(0.4, 0.25)
    rate[twist, 2] += np.linspace(3.5, 3.0, twist.stop - twist.start)

    knock = span(0.55, interval)
    accel[knock, 2] += 3.2

    # A gradual turn leaves the face-up band before passing 135° and is not
    # reported, so the flip lands within a single tick.
    pitch[int(0.7 * n):int(0.85 * n)] = math.pi * 0.95

    return [
        MotionSample(
            acceleration=tuple(accel[i].tolist()),
            rotation_rate=tuple(rate[i].tolist()),
            attitude=Attitude(pitch=float(pitch[i])),
            timestamp=i * interval,
        )
        for i in range(n)
    ]
