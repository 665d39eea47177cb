"""Tests for gesture and effect definitions."""

import math

import pytest

from motion_synth.errors import ConfigurationError
from motion_synth.gestures import (
    Axis,
    DeviceTap,
    FlipOver,
    Shake,
    Twist,
    describe,
    gesture_from_dict,
    validate_gesture,
)
from motion_synth.haptics import Buzz, Tap, effect_from_dict, validate_effect


class TestGestureSpec:
    def test_defaults(self):
        assert Shake().threshold == 1.8
        assert Twist(Axis.X).rate_threshold == 2.5
        assert DeviceTap().threshold == 2.5

    def test_value_equality_and_hashing(self):
        assert Shake(1.8) == Shake(1.8)
        assert Shake(1.8) != Shake(2.0)
        assert Shake(2.0) != DeviceTap(2.0)
        assert FlipOver() == FlipOver()
        assert len({Shake(1.8), Shake(1.8), Twist(Axis.Z, 1.0), FlipOver(), FlipOver()}) == 3

    @pytest.mark.parametrize("bad", [-0.1, math.nan, math.inf, "high", None, True])
    def test_invalid_thresholds(self, bad):
        with pytest.raises(ConfigurationError):
            validate_gesture(Shake(threshold=bad))
        with pytest.raises(ConfigurationError):
            validate_gesture(Twist(Axis.Z, rate_threshold=bad))

    def test_twist_axis_must_be_enum(self):
        with pytest.raises(ConfigurationError):
            validate_gesture(Twist(axis="z"))

    def test_unknown_gesture(self):
        with pytest.raises(ConfigurationError):
            validate_gesture("shake")

    def test_zero_threshold_allowed(self):
        assert validate_gesture(Shake(0.0)) == Shake(0.0)

    def test_axis_index(self):
        assert [a.index for a in Axis] == [0, 1, 2]

    def test_describe(self):
        assert describe(Shake(1.8)) == "shake(1.8g)"
        assert describe(FlipOver()) == "flip_over"
        assert "z" in describe(Twist(Axis.Z, 2.0))


class TestGestureFromDict:
    def test_each_kind(self):
        assert gesture_from_dict({"type": "shake", "threshold": 2.0}) == Shake(2.0)
        assert gesture_from_dict({"type": "twist", "axis": "X", "rate_threshold": 3.0}) == Twist(Axis.X, 3.0)
        assert gesture_from_dict({"type": "device_tap"}) == DeviceTap()
        assert gesture_from_dict({"type": "flip_over"}) == FlipOver()

    def test_to_dict_roundtrip(self):
        for g in (Shake(1.2), Twist(Axis.Y, 0.5), DeviceTap(3.0), FlipOver()):
            assert gesture_from_dict(g.to_dict()) == g

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            gesture_from_dict({"type": "wave"})

    def test_unknown_axis(self):
        with pytest.raises(ConfigurationError):
            gesture_from_dict({"type": "twist", "axis": "w"})

    def test_negative_threshold(self):
        with pytest.raises(ConfigurationError):
            gesture_from_dict({"type": "shake", "threshold": -1})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            gesture_from_dict("shake")


class TestHapticSpec:
    def test_tap_duration(self):
        assert Tap().duration == 0.05
        assert Tap.event_type == "transient"

    def test_buzz_duration(self):
        assert Buzz(duration=0.4).duration == 0.4
        assert Buzz.event_type == "continuous"

    @pytest.mark.parametrize("bad", [-0.01, 1.01, math.nan])
    def test_intensity_range(self, bad):
        with pytest.raises(ConfigurationError):
            validate_effect(Tap(intensity=bad))
        with pytest.raises(ConfigurationError):
            validate_effect(Buzz(sharpness=bad))

    @pytest.mark.parametrize("bad", [0.0, -1.0, math.inf, math.nan])
    def test_buzz_duration_positive(self, bad):
        with pytest.raises(ConfigurationError):
            validate_effect(Buzz(duration=bad))

    def test_bounds_inclusive(self):
        validate_effect(Tap(intensity=0.0, sharpness=1.0))

    def test_from_dict(self):
        assert effect_from_dict({"type": "tap", "intensity": 0.2}) == Tap(intensity=0.2)
        assert effect_from_dict({"type": "buzz", "duration": 0.3}) == Buzz(duration=0.3)

    def test_from_dict_unknown(self):
        with pytest.raises(ConfigurationError):
            effect_from_dict({"type": "rumble"})

    def test_from_dict_invalid(self):
        with pytest.raises(ConfigurationError):
            effect_from_dict({"type": "buzz", "duration": -1})
