"""Tests for the distance and radius display mappings."""
import math

import numpy as np
import pytest

from orrery.core.config import ASTRONOMICAL_UNIT
from orrery.core.errors import ConfigurationError, ScaleDomainError
from orrery.core.scale import DEFAULT_SCALE, ScaleTransform


DISTANCES = np.logspace(0, 13, 131)


def test_distance_map_is_strictly_increasing():
    display = DEFAULT_SCALE.distance_to_display(DISTANCES)
    assert np.all(np.diff(display) > 0.0)
    assert DEFAULT_SCALE.distance_to_display(0.0) == 0.0


def test_distance_map_round_trip():
    display = DEFAULT_SCALE.distance_to_display(DISTANCES)
    recovered = DEFAULT_SCALE.display_to_distance(display)
    np.testing.assert_allclose(recovered, DISTANCES, rtol=1e-9)


def test_radius_map_round_trip_and_monotonic():
    radii = np.logspace(0, 10, 41)
    display = DEFAULT_SCALE.radius_to_display(radii)
    assert np.all(np.diff(display) > 0.0)
    np.testing.assert_allclose(DEFAULT_SCALE.display_to_radius(display), radii, rtol=1e-9)


def test_distance_formula_matches_log1p():
    scale = ScaleTransform(k=40.0, alpha=1e-9, beta=0.1, gamma=0.5)
    expected = 40.0 * math.log1p(1e-9 * ASTRONOMICAL_UNIT)
    assert scale.distance_to_display(ASTRONOMICAL_UNIT) == pytest.approx(expected)
    assert scale.radius_to_display(6.371e6) == pytest.approx(0.1 * math.sqrt(6.371e6))


def test_scalar_in_scalar_out():
    assert isinstance(DEFAULT_SCALE.distance_to_display(1.0e9), float)
    assert isinstance(DEFAULT_SCALE.distance_to_display(np.array([1.0e9])), np.ndarray)


@pytest.mark.parametrize(
    "method, value",
    [
        ("distance_to_display", -1.0),
        ("distance_to_display", float("nan")),
        ("display_to_distance", -0.5),
        ("radius_to_display", 0.0),
        ("radius_to_display", -10.0),
        ("display_to_radius", 0.0),
    ],
)
def test_out_of_domain_inputs_are_rejected(method, value):
    with pytest.raises(ScaleDomainError):
        getattr(DEFAULT_SCALE, method)(value)


def test_array_with_one_bad_entry_is_rejected():
    with pytest.raises(ScaleDomainError):
        DEFAULT_SCALE.distance_to_display(np.array([1.0, 2.0, -3.0]))


@pytest.mark.parametrize("field, kwargs", [
    ("k", dict(k=0.0, alpha=1e-9, beta=0.1, gamma=0.5)),
    ("alpha", dict(k=40.0, alpha=-1.0, beta=0.1, gamma=0.5)),
    ("beta", dict(k=40.0, alpha=1e-9, beta=0.0, gamma=0.5)),
    ("gamma", dict(k=40.0, alpha=1e-9, beta=0.1, gamma=1.5)),
])
def test_invalid_parameters(field, kwargs):
    with pytest.raises(ConfigurationError) as excinfo:
        ScaleTransform(**kwargs)
    assert excinfo.value.field == field


def test_position_keeps_direction():
    position = np.array([3.0e11, -4.0e11, 1.0e10])
    display = DEFAULT_SCALE.position_to_display(position)
    unit = position / np.linalg.norm(position)
    np.testing.assert_allclose(display / np.linalg.norm(display), unit, rtol=1e-12)
    assert np.linalg.norm(display) == pytest.approx(DEFAULT_SCALE.distance_to_display(np.linalg.norm(position)))
    np.testing.assert_allclose(DEFAULT_SCALE.display_to_position(display), position, rtol=1e-9)


def test_position_stack_and_origin():
    positions = np.array([[0.0, 0.0, 0.0], [1.0e11, 0.0, 0.0]])
    display = DEFAULT_SCALE.position_to_display(positions)
    assert display.shape == (2, 3)
    np.testing.assert_array_equal(display[0], np.zeros(3))
    assert display[1, 0] == pytest.approx(DEFAULT_SCALE.distance_to_display(1.0e11))
