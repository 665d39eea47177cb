"""Shared fakes for engine tests."""

import math

import pytest

from motion_synth.errors import EngineUnavailable, PlaybackFailure
from motion_synth.haptics import HapticPlayer
from motion_synth.motion import Attitude, MotionSample


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeHaptics(HapticPlayer):
    """Records every call; can be told to fail prepare, play or shutdown."""

    def __init__(self, fail_prepare=False, fail_play=False, play_error=None, fail_shutdown=False):
        self.fail_prepare = fail_prepare
        self.fail_play = fail_play
        self.play_error = play_error
        self.fail_shutdown = fail_shutdown
        self.prepare_calls = 0
        self.shutdown_calls = 0
        self.played = []
        self.attempts = []

    def prepare(self):
        self.prepare_calls += 1
        if self.fail_prepare:
            raise EngineUnavailable("Haptics are not supported on this device")

    def play(self, effect):
        self.attempts.append(effect)
        if self.play_error is not None:
            raise self.play_error
        if self.fail_play:
            raise PlaybackFailure("player refused", effect=effect)
        self.played.append(effect)

    def shutdown(self):
        self.shutdown_calls += 1
        if self.fail_shutdown:
            raise RuntimeError("haptic engine stuck")


def sample(accel=(0.0, 0.0, 0.0), rate=(0.0, 0.0, 0.0), pitch=0.0):
    return MotionSample(acceleration=accel, rotation_rate=rate, attitude=Attitude(pitch=pitch))


FACE_DOWN = math.pi


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def haptics():
    return FakeHaptics()
