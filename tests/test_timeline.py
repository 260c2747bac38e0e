"""
Gravity Lens -- Easing & Phase Timeline Tests
Bezier easing, legacy global cycle, staggered per-source cycle and the
interference pulse.

Run with: pytest tests/test_timeline.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gravity.easing import cubic_bezier, cubic_bezier_ease
from gravity.timeline import (
    compute_activation_delay,
    fold_time,
    get_anomaly_brightness_progress,
    get_anomaly_warp_progress,
    get_brightness_progress,
    get_interference_progress,
    get_warp_progress,
)

DURATION = 14.0


# ---------------------------------------------------------------------------
# Easing
# ---------------------------------------------------------------------------

class TestCubicBezierEase:

    def test_endpoints(self):
        assert cubic_bezier_ease(0) == 0.0
        assert cubic_bezier_ease(1) == 1.0

    def test_saturates_outside_unit_interval(self):
        assert cubic_bezier_ease(-0.5) == 0.0
        assert cubic_bezier_ease(1.5) == 1.0

    def test_non_decreasing(self):
        prev = 0.0
        for i in range(1, 201):
            value = cubic_bezier_ease(i / 200)
            assert value >= prev - 1e-12
            prev = value

    def test_midpoint_strictly_inside(self):
        assert 0.0 < cubic_bezier_ease(0.5) < 1.0

    def test_linear_control_points_are_identity(self):
        for t in (0.1, 0.3, 0.5, 0.77):
            assert cubic_bezier(t, (0.0, 0.0), (1.0, 1.0)) == pytest.approx(t, abs=1e-6)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestFoldTime:

    def test_in_range_unchanged(self):
        assert fold_time(3.5, DURATION) == 3.5

    def test_negative_wraps(self):
        assert fold_time(-1.0, DURATION) == pytest.approx(13.0)

    def test_overflow_wraps(self):
        assert fold_time(15.0, DURATION) == pytest.approx(1.0)

    def test_degenerate_duration(self):
        assert fold_time(5.0, 0) == 0.0
        assert fold_time(5.0, -3) == 0.0


class TestActivationDelay:

    def test_first_column(self):
        assert compute_activation_delay(0, 51) == 0

    def test_last_column(self):
        assert compute_activation_delay(51, 51) == pytest.approx(6.0)

    def test_proportional(self):
        assert compute_activation_delay(25, 50) == pytest.approx(3.0)

    def test_zero_max_col(self):
        assert compute_activation_delay(0, 0) == 0

    def test_custom_max_delay(self):
        assert compute_activation_delay(10, 20, 10) == pytest.approx(5.0)


# ---------------------------------------------------------------------------
# Legacy global cycle
# ---------------------------------------------------------------------------

class TestGlobalTimeline:

    def test_rest_phase(self):
        assert get_warp_progress(0.1 * DURATION, DURATION) == 0.0
        assert get_brightness_progress(0.1 * DURATION, DURATION) == 0.0

    def test_brighten_before_warp(self):
        t = 0.30 * DURATION
        assert get_warp_progress(t, DURATION) == 0.0
        assert 0.0 < get_brightness_progress(t, DURATION) < 1.0

    def test_hold_phase(self):
        t = 0.7 * DURATION
        assert get_warp_progress(t, DURATION) == 1.0
        assert get_brightness_progress(t, DURATION) == 1.0

    def test_restore_phase(self):
        t = 0.9 * DURATION
        assert 0.0 < get_warp_progress(t, DURATION) < 1.0
        assert get_warp_progress(t, DURATION) == get_brightness_progress(t, DURATION)

    def test_zero_duration(self):
        assert get_warp_progress(1.0, 0) == 0.0
        assert get_brightness_progress(1.0, 0) == 0.0


# ---------------------------------------------------------------------------
# Staggered per-source cycle
# ---------------------------------------------------------------------------

class TestAnomalyWarpProgress:

    def test_idle_before_fire(self):
        for t in (0.0, 1.0, 1.99):
            assert get_anomaly_warp_progress(t, DURATION, 0) == 0.0

    def test_lag_after_fire(self):
        assert get_anomaly_warp_progress(2.0, DURATION, 0) == 0.0
        assert get_anomaly_warp_progress(2.4, DURATION, 0) == 0.0

    def test_ramp(self):
        assert get_anomaly_warp_progress(2.5, DURATION, 0) == pytest.approx(0.0, abs=0.05)
        assert 0.0 < get_anomaly_warp_progress(3.5, DURATION, 0) < 1.0
        assert get_anomaly_warp_progress(4.49, DURATION, 0) == pytest.approx(1.0, abs=0.05)

    def test_hold(self):
        for t in (4.5, 7.0, 10.9):
            assert get_anomaly_warp_progress(t, DURATION, 0) == 1.0

    def test_restore(self):
        start = get_anomaly_warp_progress(11.1, DURATION, 0)
        mid = get_anomaly_warp_progress(12.5, DURATION, 0)
        end = get_anomaly_warp_progress(13.99, DURATION, 0)
        assert 0.0 < end < mid < start < 1.0
        assert end == pytest.approx(0.0, abs=0.01)

    def test_delayed_source(self):
        assert get_anomaly_warp_progress(5.4, DURATION, 3) == 0.0
        assert get_anomaly_warp_progress(10.0, DURATION, 3) == 1.0
        assert get_anomaly_warp_progress(11.0, DURATION, 6) == pytest.approx(1.0, abs=0.01)

    def test_late_source_restores_from_partial_peak(self):
        # delay 8.5: warp starts at 11, so it never lights up
        assert get_anomaly_warp_progress(12.0, DURATION, 8.5) == 0.0
        # delay 7: ramp is half way at 11 and fades from there
        at_restore = get_anomaly_warp_progress(11.0, DURATION, 7)
        after = get_anomaly_warp_progress(12.0, DURATION, 7)
        assert 0.0 < after < at_restore < 1.0

    def test_zero_duration(self):
        assert get_anomaly_warp_progress(3.0, 0, 0) == 0.0


class TestAnomalyBrightnessProgress:

    def test_leads_warp(self):
        t = 2.6
        assert get_anomaly_brightness_progress(t, DURATION, 0) > get_anomaly_warp_progress(t, DURATION, 0)

    def test_full_after_ramp(self):
        assert get_anomaly_brightness_progress(3.2, DURATION, 0) == 1.0
        assert get_anomaly_brightness_progress(10.0, DURATION, 2) == 1.0

    def test_idle_before_fire(self):
        assert get_anomaly_brightness_progress(4.9, DURATION, 3) == 0.0


class TestInterferenceProgress:

    def test_peak_at_midpoint(self):
        assert get_interference_progress(9.5, DURATION) == pytest.approx(1.0)
        assert get_interference_progress(9.5, DURATION) > 0.9

    def test_zero_outside_window(self):
        for t in (0.0, 4.0, 7.99, 11.0, 12.5, 13.99):
            assert get_interference_progress(t, DURATION) == 0.0

    def test_positive_inside_window(self):
        for t in (8.1, 9.0, 10.9):
            assert get_interference_progress(t, DURATION) > 0.0


# ---------------------------------------------------------------------------
# Cross-timeline properties
# ---------------------------------------------------------------------------

TIMELINES = [
    ("warp", lambda t: get_warp_progress(t, DURATION)),
    ("brightness", lambda t: get_brightness_progress(t, DURATION)),
    ("anomaly_warp", lambda t: get_anomaly_warp_progress(t, DURATION, 1.5)),
    ("anomaly_brightness", lambda t: get_anomaly_brightness_progress(t, DURATION, 1.5)),
    ("interference", lambda t: get_interference_progress(t, DURATION)),
]


@pytest.mark.parametrize("name,fn", TIMELINES)
def test_periodic(name, fn):
    # quarter-second steps are exact in binary floating point
    for k in range(56):
        t = k * 0.25
        assert fn(t) == fn(t + DURATION)
        assert fn(t) == fn(t - DURATION)


@pytest.mark.parametrize("name,fn", TIMELINES)
def test_values_in_unit_interval(name, fn):
    for k in range(280):
        value = fn(k * 0.05)
        assert 0.0 <= value <= 1.0


@pytest.mark.parametrize("name,fn", TIMELINES)
def test_continuous_at_phase_boundaries(name, fn):
    boundaries = [
        0.25 * DURATION, 0.325 * DURATION, 0.625 * DURATION, 0.8 * DURATION,
        3.5, 4.0, 4.7, 6.0, 8.0, 11.0, DURATION,
    ]
    for b in boundaries:
        assert abs(fn(b + 0.001) - fn(b - 0.001)) < 0.05, f"{name} jumps at {b}"
