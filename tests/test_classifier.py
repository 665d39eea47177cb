"""Tests for stateless gesture classification."""

import math

import pytest

from motion_synth.classifier import GestureClassifier, magnitude_squared, matches
from motion_synth.gestures import Axis, DeviceTap, FlipOver, Shake, Twist

from conftest import sample


class TestShake:
    def test_above_threshold_matches(self):
        assert matches(Shake(threshold=1.8), sample(accel=(2.0, 0.0, 0.0)))

    def test_equal_threshold_does_not_match(self):
        assert not matches(Shake(threshold=1.8), sample(accel=(1.8, 0.0, 0.0)))

    def test_negative_component_uses_magnitude(self):
        assert matches(Shake(threshold=1.8), sample(accel=(-2.0, 0.0, 0.0)))

    def test_combined_axes(self):
        # |(1.2, 1.2, 1.2)| ≈ 2.08
        assert matches(Shake(threshold=2.0), sample(accel=(1.2, 1.2, 1.2)))
        assert not matches(Shake(threshold=2.1), sample(accel=(1.2, 1.2, 1.2)))

    @pytest.mark.parametrize("a", [0.0, 0.5, 1.0, 1.5, 1.99, 2.0])
    def test_single_axis_boundary(self, a):
        assert matches(Shake(threshold=1.5), sample(accel=(a, 0.0, 0.0))) == (abs(a) > 1.5)

    def test_zero_threshold_matches_any_motion(self):
        assert matches(Shake(threshold=0.0), sample(accel=(0.001, 0.0, 0.0)))
        assert not matches(Shake(threshold=0.0), sample())


class TestTwist:
    def test_positive_rate(self):
        assert matches(Twist(Axis.Z, 2.5), sample(rate=(0.0, 0.0, 2.5 + 1e-9)))

    def test_boundary_does_not_match(self):
        assert not matches(Twist(Axis.Z, 2.5), sample(rate=(0.0, 0.0, 2.5)))

    def test_negative_rate_matches(self):
        assert matches(Twist(Axis.Z, 2.5), sample(rate=(0.0, 0.0, -2.6)))

    def test_only_selected_axis_counts(self):
        s = sample(rate=(5.0, 5.0, 0.0))
        assert not matches(Twist(Axis.Z, 2.5), s)
        assert matches(Twist(Axis.X, 2.5), s)
        assert matches(Twist(Axis.Y, 2.5), s)


class TestDeviceTap:
    def test_same_test_as_shake(self):
        s = sample(accel=(0.0, 0.0, 3.0))
        assert matches(DeviceTap(threshold=2.5), s)
        assert matches(Shake(threshold=2.5), s)

    def test_below_threshold(self):
        assert not matches(DeviceTap(threshold=2.5), sample(accel=(0.0, 0.0, 2.5)))


class TestNonFinite:
    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_acceleration_never_matches(self, bad):
        assert not matches(Shake(threshold=1.0), sample(accel=(bad, 0.0, 0.0)))
        assert not matches(DeviceTap(threshold=1.0), sample(accel=(0.0, bad, 0.0)))

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_rotation_never_matches(self, bad):
        assert not matches(Twist(Axis.Z, 1.0), sample(rate=(0.0, 0.0, bad)))

    def test_bad_other_axis_does_not_block_twist(self):
        assert matches(Twist(Axis.Z, 1.0), sample(rate=(math.nan, 0.0, 2.0)))


class TestGestureClassifier:
    def test_flip_over_is_rejected(self):
        with pytest.raises(TypeError):
            matches(FlipOver(), sample())

    def test_magnitude(self):
        s = sample(accel=(3.0, 4.0, 0.0))
        assert magnitude_squared(s) == pytest.approx(25.0)
        assert GestureClassifier.magnitude(s) == pytest.approx(5.0)

    def test_is_stateless(self):
        assert GestureClassifier.is_stateless(Shake())
        assert not GestureClassifier.is_stateless(FlipOver())

    def test_wraps_matches(self):
        clf = GestureClassifier()
        assert clf.matches(Shake(1.0), sample(accel=(1.5, 0.0, 0.0)))
