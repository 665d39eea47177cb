"""Stateless threshold classification of motion samples."""

from __future__ import annotations

import math

import numpy as np

from motion_synth.gestures import DeviceTap, FlipOver, GestureSpec, Shake, Twist
from motion_synth.motion import MotionSample


def magnitude_squared(sample: MotionSample) -> float:
    """Squared magnitude of the sample's acceleration, in g²."""
    accel = np.asarray(sample.acceleration, dtype=np.float64)
    return float(np.dot(accel, accel))


def _exceeds_magnitude(sample: MotionSample, threshold: float) -> bool:
    # Compare squares to skip the sqrt. inf² would beat any threshold,
    # so non-finite vectors are rejected up front.
    if not all(math.isfinite(v) for v in sample.acceleration):
        return False
    return magnitude_squared(sample) > threshold * threshold


def matches(gesture: GestureSpec, sample: MotionSample) -> bool:
    """Return True if `sample` satisfies the stateless gesture `gesture`.

    FlipOver depends on previous samples and is handled by FlipStateTracker.
    """
    if isinstance(gesture, (Shake, DeviceTap)):
        return _exceeds_magnitude(sample, gesture.threshold)

    if isinstance(gesture, Twist):
        rate = sample.rotation_rate[gesture.axis.index]
        if not math.isfinite(rate):
            return False
        return abs(rate) > gesture.rate_threshold

    if isinstance(gesture, FlipOver):
        raise TypeError("FlipOver is stateful; use FlipStateTracker")

    return False


class GestureClassifier:
    """Matches motion samples against stateless gestures.

    Shake and DeviceTap apply the same squared-magnitude test over the same
    acceleration vector, so a DeviceTap mapping fires on shakes too and vice
    versa. Register the stricter threshold first if both are mapped.
    """

    def matches(self, gesture: GestureSpec, sample: MotionSample) -> bool:
        return matches(gesture, sample)

    @staticmethod
    def magnitude(sample: MotionSample) -> float:
        return math.sqrt(magnitude_squared(sample))

    @staticmethod
    def is_stateless(gesture: GestureSpec) -> bool:
        return not isinstance(gesture, FlipOver)
