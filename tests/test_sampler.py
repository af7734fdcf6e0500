"""Tests for the orbit path sampler."""
import numpy as np
import pytest

from orrery.core.errors import ConfigurationError
from orrery.core.kepler import orbital_period, solve
from orrery.core.model import OrbitalElements
from orrery.core.sampler import OrbitPath, sample, sample_physical, sample_times
from orrery.core.scale import DEFAULT_SCALE, ScaleTransform

MU_SUN = 1.32712440018e20


@pytest.fixture
def elements():
    return OrbitalElements(a=2.279e11, e=0.0934, i=1.85, raan=49.56, argp=286.5, m0=19.4, epoch=1.0e5)


def test_path_is_closed(elements):
    points = sample(elements, MU_SUN, 90)
    assert points.shape == (91, 3)
    np.testing.assert_array_equal(points[0], points[-1])


def test_vertices_reproduce_solver(elements):
    segments = 36
    points = sample(elements, MU_SUN, segments)
    times = sample_times(elements, MU_SUN, segments)
    for t, vertex in zip(times[:-1], points[:-1]):
        expected = DEFAULT_SCALE.position_to_display(solve(elements, MU_SUN, float(t)).position)
        np.testing.assert_allclose(vertex, expected, rtol=1e-12)


def test_times_span_one_period(elements):
    times = sample_times(elements, MU_SUN, 12)
    assert times[0] == pytest.approx(elements.epoch)
    assert times[-1] - times[0] == pytest.approx(orbital_period(elements.a, MU_SUN))
    np.testing.assert_allclose(np.diff(times), np.diff(times)[0])


def test_physical_radii_within_apsides(elements):
    radii = np.linalg.norm(sample_physical(elements, MU_SUN, 180), axis=1)
    assert radii.min() >= elements.periapsis * (1 - 1e-12)
    assert radii.max() <= elements.apoapsis * (1 + 1e-12)


@pytest.mark.parametrize("segments", [0, 2, -5, 3.5])
def test_too_few_segments(elements, segments):
    with pytest.raises(ConfigurationError):
        sample(elements, MU_SUN, segments)


def test_orbit_path_recomputes_on_update(elements):
    path = OrbitPath(elements, MU_SUN, 24)
    assert len(path) == 25
    before = path.points.copy()

    path.update(segment_count=48)
    assert len(path) == 49
    assert path.segment_count == 48

    path.update(segment_count=24, elements=elements.with_changes(e=0.3))
    assert not np.allclose(path.points, before)

    coarse = ScaleTransform(k=10.0, alpha=1e-9, beta=0.1, gamma=0.5)
    path.update(scale=coarse)
    assert path.scale is coarse
    assert np.linalg.norm(path.points, axis=1).max() < np.linalg.norm(before, axis=1).max()


def test_orbit_path_to_2d(elements):
    path = OrbitPath(elements, MU_SUN, 8)
    flat = path.to_2d()
    assert len(flat) == 9
    assert flat[0] == (path.points[0, 0], path.points[0, 1])
