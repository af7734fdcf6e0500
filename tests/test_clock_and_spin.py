"""Tests for the simulation clock and spin state."""
import math

import pytest

from orrery.core.errors import ConfigurationError
from orrery.core.spin import SpinState
from orrery.core.timekeeping import FrameTimer, SimulationClock


def test_clock_advances_by_scaled_delta():
    clock = SimulationClock(time_scale=1000.0)
    assert clock.advance(0.5) == pytest.approx(500.0)
    assert clock.advance(0.25, time_scale=10.0) == pytest.approx(502.5)
    assert clock.time_scale == 1000.0


def test_clock_is_monotonic():
    clock = SimulationClock(time=10.0, time_scale=2.0)
    for delta in (0.1, -5.0, float("nan"), 0.0, float("inf"), 0.2):
        previous = clock.time
        clock.advance(delta)
        assert clock.time >= previous
    assert clock.time == pytest.approx(10.6)


def test_time_scale_change_applies_to_next_advance_only():
    clock = SimulationClock(time_scale=100.0)
    clock.advance(1.0)
    clock.time_scale = 1.0
    assert clock.time == pytest.approx(100.0)
    clock.advance(1.0)
    assert clock.time == pytest.approx(101.0)


@pytest.mark.parametrize("value", [-1.0, float("nan"), float("inf")])
def test_invalid_time_scale(value):
    clock = SimulationClock()
    with pytest.raises(ConfigurationError):
        clock.time_scale = value
    with pytest.raises(ConfigurationError):
        SimulationClock(time_scale=value)


def test_zero_time_scale_pauses():
    clock = SimulationClock(time=5.0, time_scale=0.0)
    clock.advance(3.0)
    assert clock.time == 5.0


def test_clock_days_and_reset():
    clock = SimulationClock(time=86400.0 * 3)
    assert clock.days == pytest.approx(3.0)
    clock.reset()
    assert clock.time == 0.0


def test_frame_timer_is_non_negative():
    timer = FrameTimer()
    assert timer.tick() >= 0.0


def test_spin_full_day_returns_to_start():
    spin = SpinState(period_hours=24.0, speed_multiplier=1.0, phase_deg=37.0)
    spin.advance(24 * 3600.0, 1.0)
    assert spin.phase_deg == pytest.approx(37.0, abs=1e-9)


def test_spin_one_hour_in_steps():
    spin = SpinState(period_hours=24.0)
    for _ in range(60):
        spin.advance(1.0, 60.0)
    assert spin.phase_deg == pytest.approx(15.0)


def test_spin_retrograde_runs_backwards():
    spin = SpinState(period_hours=24.0, retrograde=True)
    spin.advance(3600.0, 1.0)
    assert spin.phase_deg == pytest.approx(345.0)
    assert 0.0 <= spin.phase_deg < 360.0


def test_spin_speed_multiplier():
    spin = SpinState(period_hours=10.0, speed_multiplier=2.0)
    spin.advance(3600.0, 1.0)
    assert spin.phase_deg == pytest.approx(72.0)


@pytest.mark.parametrize("period", [0.0, -5.0])
def test_disabled_spin_keeps_phase(period):
    spin = SpinState(period_hours=period, phase_deg=42.0)
    assert not spin.enabled
    assert spin.advance(1000.0, 1000.0) == 42.0


def test_spin_phase_stays_in_range_over_many_steps():
    spin = SpinState(period_hours=0.37, speed_multiplier=3.3)
    for _ in range(500):
        phase = spin.advance(0.016, 12345.0)
        assert 0.0 <= phase < 360.0


def test_spin_axis_follows_obliquity():
    spin = SpinState(period_hours=24.0, obliquity_deg=90.0)
    axis = spin.axis
    assert axis[2] == pytest.approx(0.0, abs=1e-12)
    assert math.hypot(*axis) == pytest.approx(1.0)
    assert SpinState(period_hours=1.0).axis.tolist() == [0.0, -0.0, 1.0]


def test_spin_reset():
    spin = SpinState(period_hours=5.0, phase_deg=100.0)
    spin.reset(370.0)
    assert spin.phase_deg == pytest.approx(10.0)
    assert spin.phase_rad == pytest.approx(math.radians(10.0))


@pytest.mark.parametrize("delta", [float("inf"), float("nan"), -1.0])
def test_spin_ignores_unusable_real_delta(delta):
    spin = SpinState(period_hours=24.0, phase_deg=30.0)
    assert spin.advance(delta, 1000.0) == 30.0


@pytest.mark.parametrize("time_scale", [-1.0, float("nan"), float("inf")])
def test_spin_rejects_bad_time_scale(time_scale):
    spin = SpinState(period_hours=24.0, phase_deg=30.0)
    with pytest.raises(ConfigurationError):
        spin.advance(1.0, time_scale)
    assert spin.phase_deg == 30.0


@pytest.mark.parametrize(
    "field", ["period_hours", "speed_multiplier", "obliquity_deg", "phase_deg"]
)
@pytest.mark.parametrize("value", [float("nan"), float("inf"), "fast"])
def test_spin_rejects_non_finite_fields(field, value):
    with pytest.raises(ConfigurationError) as info:
        SpinState(**{"period_hours": 24.0, field: value})
    assert info.value.field == field


def test_spin_initial_phase_is_wrapped():
    assert SpinState(period_hours=24.0, phase_deg=370.0).phase_deg == pytest.approx(10.0)
    assert SpinState(period_hours=24.0, phase_deg=-1e-20).phase_deg == 0.0
