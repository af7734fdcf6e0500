"""Tests for the per-frame simulation driver and run recording."""
import csv
import json

import numpy as np
import pytest

from orrery.core.config import DEFAULT_CONFIG
from orrery.core.driver import APOAPSIS, PERIAPSIS, SimulationDriver, apsis_crossings
from orrery.core.errors import ConfigurationError, InvalidMassError
from orrery.core.kepler import orbital_period, solve
from orrery.core.logging_utils import RunLogger, new_run_dir, resolve_run_dir
from orrery.core.model import Body, CentralBody, OrbitalElements
from orrery.core.scale import ScaleTransform
from orrery.core.spin import SpinState
from orrery.data.presets import solar_system


@pytest.fixture
def driver():
    central, planets = solar_system()
    return SimulationDriver(central, planets[:4])


def test_frame_uses_one_time_for_all_bodies(driver):
    frame = driver.step(0.5)
    assert frame.time == pytest.approx(0.5 * DEFAULT_CONFIG.sim.time_scale)
    for entry in frame.bodies:
        body = driver.body(entry.name)
        expected = solve(body.elements, driver.central, frame.time).position
        np.testing.assert_allclose(entry.position, expected, rtol=1e-12)
        np.testing.assert_allclose(entry.display_position, driver.scale.position_to_display(expected), rtol=1e-12)


def test_frame_at_does_not_touch_clock(driver):
    frame = driver.frame_at(1.0e7)
    assert frame.time == 1.0e7
    assert driver.time == 0.0
    assert [entry.name for entry in frame.bodies] == driver.body_names


def test_spins_advance_with_the_clock(driver):
    driver.set_time_scale(3600.0)
    frame = driver.step(1.0)
    earth = frame.body("Earth")
    assert earth.spin_phase_deg == pytest.approx(360.0 / 23.9345 % 360.0)
    venus = frame.body("Venus")
    assert venus.spin_phase_deg > 359.0


def test_live_body_sits_on_its_orbit_line(driver):
    path = driver.orbit_path("Mars")
    frame = driver.frame_at(float(path.times[7]))
    np.testing.assert_allclose(frame.body("Mars").display_position, path.points[7], rtol=1e-12)


def test_central_mass_change_recomputes_paths(driver):
    before = driver.orbit_path("Earth").times.copy()
    driver.set_central_mass(driver.central.mass * 4.0)
    after = driver.orbit_path("Earth").times
    assert after[-1] - after[0] == pytest.approx((before[-1] - before[0]) / 2.0)
    with pytest.raises(InvalidMassError):
        driver.set_central_mass(-1.0)


def test_set_elements_and_scale(driver):
    new = driver.body("Earth").elements.with_changes(e=0.5)
    driver.set_elements("Earth", new)
    assert driver.orbit_path("Earth").elements is new
    scale = ScaleTransform(k=20.0, alpha=1e-9, beta=0.002, gamma=0.5)
    driver.set_scale(scale)
    assert all(path.scale is scale for path in driver.orbit_paths().values())


def test_segment_count_validated_before_use(driver):
    with pytest.raises(ConfigurationError):
        driver.set_segment_count(2)
    assert driver.segment_count == DEFAULT_CONFIG.sim.segment_count
    driver.set_segment_count(60)
    assert len(driver.orbit_path("Venus")) == 61


def test_duplicate_and_remove(driver):
    with pytest.raises(ConfigurationError):
        driver.add_body(driver.body("Earth"))
    removed = driver.remove_body("Earth")
    assert removed.name == "Earth"
    assert "Earth" not in driver.body_names


def test_info_snapshot(driver):
    driver.step(0.0)
    info = driver.info("Earth")
    assert info.distance_au == pytest.approx(0.983, abs=0.02)
    assert info.distance_km == pytest.approx(info.distance_au * 1.495978707e8)
    assert info.orbital_period_days == pytest.approx(365.25, rel=1e-3)
    assert info.diameter_km == pytest.approx(12742.0)


def test_apsis_crossings():
    mu = 1.32712440018e20
    elements = OrbitalElements(a=1.0e11, e=0.2)
    period = orbital_period(elements.a, mu)
    crossings = apsis_crossings(elements, mu, 0.0, 1.6 * period)
    kinds = [kind for _, kind in crossings]
    assert kinds == [APOAPSIS, PERIAPSIS, APOAPSIS]
    np.testing.assert_allclose([t for t, _ in crossings], [0.5 * period, period, 1.5 * period], rtol=1e-12)
    assert apsis_crossings(elements, mu, 0.0, 0.0) == []


def test_step_reports_events():
    central = CentralBody("Star", 1.98847e30)
    body = Body("Fast", 1.0e20, 1.0e6, OrbitalElements(a=1.0e10, e=0.3), SpinState(period_hours=1.0))
    driver = SimulationDriver(central, [body])
    period = orbital_period(body.elements.a, central)
    driver.set_time_scale(period)
    frame = driver.step(0.75)
    assert [event.kind for event in frame.events] == [APOAPSIS]
    assert frame.events[0].distance == pytest.approx(body.elements.apoapsis)
    frame = driver.step(1.0)
    assert [event.kind for event in frame.events] == [PERIAPSIS, APOAPSIS]


def test_non_finite_delta_leaves_time_and_spin(driver):
    before = {name: driver.body(name).spin.phase_deg for name in driver.body_names}
    frame = driver.step(float("inf"))
    assert frame.time == 0.0
    for name in driver.body_names:
        assert driver.body(name).spin.phase_deg == before[name]
    frame = driver.step(0.5)
    for entry in frame.bodies:
        assert 0.0 <= entry.spin_phase_deg < 360.0


def test_reset(driver):
    driver.step(1.0)
    driver.reset()
    assert driver.time == 0.0
    assert driver.last_frame is None
    assert all(body.spin.phase_deg == 0.0 for body in driver.bodies)


def test_driver_requires_central_body():
    with pytest.raises(ConfigurationError):
        SimulationDriver(None)


def test_run_logger_records_frames_and_events(tmp_path):
    central = CentralBody("Star", 1.98847e30)
    body = Body("Fast", 1.0e20, 1.0e6, OrbitalElements(a=1.0e10, e=0.3))
    driver = SimulationDriver(central, [body])
    driver.set_time_scale(orbital_period(body.elements.a, central) / 10.0)

    with RunLogger(tmp_path, "test_run", timeseries_flush_threshold=3) as run_logger:
        run_logger.write_meta(driver.meta())
        driver.run_logger = run_logger
        for _ in range(41):
            driver.step(1.0)

    run_dir = resolve_run_dir(None, tmp_path)
    assert run_dir == tmp_path / "test_run"
    with (run_dir / "timeseries.csv").open(newline="") as fh:
        rows = list(csv.DictReader(fh))
    assert len(rows) == 41 // DEFAULT_CONFIG.sim.log_every_frames
    assert rows[0]["body"] == "Fast"
    with (run_dir / "events.csv").open(newline="") as fh:
        events = list(csv.DictReader(fh))
    assert sum(1 for event in events if event["type"] == PERIAPSIS) == 4
    assert sum(1 for event in events if event["type"] == APOAPSIS) == 4
    meta = json.loads((run_dir / "meta.json").read_text())
    assert meta["bodies"]["Fast"]["period"] == pytest.approx(orbital_period(1.0e10, central))


def test_run_logger_unique_ids(tmp_path):
    first = RunLogger(tmp_path, "same")
    second = RunLogger(tmp_path, "same")
    first.close()
    second.close()
    second.close()
    assert first.run_dir != second.run_dir
    assert second.run_id == "same_1"


def test_new_run_dir_appends_suffixes(tmp_path):
    names = [new_run_dir(tmp_path, "trial").name for _ in range(3)]
    assert names == ["trial", "trial_1", "trial_2"]
    generated = new_run_dir(tmp_path)
    assert generated.name.endswith("_run")
    assert generated.is_dir()


def test_run_logger_quotes_text_cells(tmp_path):
    with RunLogger(tmp_path, "quoted") as run_logger:
        run_logger.log_event([1.5, "periapsis", "Comet, \"Halley\"", 2.0e11, "note"])
    with (tmp_path / "quoted" / "events.csv").open(newline="") as fh:
        (row,) = list(csv.DictReader(fh))
    assert row["body"] == 'Comet, "Halley"'
    assert float(row["t"]) == 1.5


def test_resolve_run_dir_without_marker(tmp_path):
    with pytest.raises(FileNotFoundError):
        resolve_run_dir(None, tmp_path)
    assert resolve_run_dir("abc", tmp_path) == tmp_path / "abc"


def test_body_frame_speed(driver):
    frame = driver.step(0.1)
    earth = frame.body("Earth")
    assert earth.speed == pytest.approx(29_780.0, rel=0.03)
    assert earth.distance == pytest.approx(np.linalg.norm(earth.position))
