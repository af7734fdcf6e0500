"""Closed display-space polylines for full orbits.

Vertices are spaced uniformly in mean anomaly, i.e. uniformly in time, and
each one is produced by the same solver and scale transform that place the
live body, so the drawn ellipse and the body never drift apart.
"""
from __future__ import annotations

import math

import numpy as np

from .config import KEPLER_CFG, SIM_CFG, KeplerCfg
from .errors import ConfigurationError
from .kepler import MuLike, mean_motion, resolve_mu, solve
from .model import OrbitalElements
from .scale import DEFAULT_SCALE, ScaleTransform

MIN_SEGMENTS = 3


def check_segment_count(segment_count: int) -> int:
    if int(segment_count) != segment_count or segment_count < MIN_SEGMENTS:
        raise ConfigurationError(
            "segment_count", segment_count, f"must be an integer >= {MIN_SEGMENTS}"
        )
    return int(segment_count)


def sample_times(elements: OrbitalElements, mu: MuLike, segment_count: int) -> np.ndarray:
    """Simulated times of the ``segment_count + 1`` vertices."""

    segment_count = check_segment_count(segment_count)
    n = mean_motion(elements.a, mu)
    anomalies = 2.0 * math.pi * np.arange(segment_count + 1) / segment_count
    return elements.epoch + anomalies / n


def sample_physical(
    elements: OrbitalElements,
    mu: MuLike,
    segment_count: int,
    *,
    cfg: KeplerCfg = KEPLER_CFG,
) -> np.ndarray:
    """``(segment_count + 1, 3)`` positions in metres; last row equals the first."""

    mu_value = resolve_mu(mu)
    times = sample_times(elements, mu_value, segment_count)
    points = np.empty((times.size, 3), dtype=float)
    for idx, t in enumerate(times[:-1]):
        points[idx] = solve(elements, mu_value, float(t), cfg=cfg).position
    points[-1] = points[0]
    return points


def sample(
    elements: OrbitalElements,
    mu: MuLike,
    segment_count: int = SIM_CFG.segment_count,
    scale: ScaleTransform = DEFAULT_SCALE,
    *,
    cfg: KeplerCfg = KEPLER_CFG,
) -> np.ndarray:
    """``(segment_count + 1, 3)`` display-space polyline of the whole orbit."""

    points = scale.position_to_display(sample_physical(elements, mu, segment_count, cfg=cfg))
    points[-1] = points[0]
    return points


class OrbitPath:
    """Cached polyline for one orbit.

    The cache is only rebuilt by :meth:`recompute`; callers invoke it when
    the elements, the central mass, the scale or the segment count change.
    """

    def __init__(
        self,
        elements: OrbitalElements,
        mu: MuLike,
        segment_count: int = SIM_CFG.segment_count,
        scale: ScaleTransform = DEFAULT_SCALE,
        *,
        cfg: KeplerCfg = KEPLER_CFG,
    ) -> None:
        self._elements = elements
        self._mu = resolve_mu(mu)
        self._segment_count = check_segment_count(segment_count)
        self._scale = scale
        self._cfg = cfg
        self._times = np.empty(0)
        self._points = np.empty((0, 3))
        self.recompute()

    @property
    def elements(self) -> OrbitalElements:
        return self._elements

    @property
    def segment_count(self) -> int:
        return self._segment_count

    @property
    def scale(self) -> ScaleTransform:
        return self._scale

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def times(self) -> np.ndarray:
        return self._times

    def update(
        self,
        *,
        elements: OrbitalElements | None = None,
        mu: MuLike = None,
        segment_count: int | None = None,
        scale: ScaleTransform | None = None,
    ) -> None:
        """Replace any of the inputs and rebuild the polyline once."""

        if elements is not None:
            self._elements = elements
        if mu is not None:
            self._mu = resolve_mu(mu)
        if segment_count is not None:
            self._segment_count = check_segment_count(segment_count)
        if scale is not None:
            self._scale = scale
        self.recompute()

    def recompute(self) -> np.ndarray:
        self._times = sample_times(self._elements, self._mu, self._segment_count)
        self._points = sample(
            self._elements, self._mu, self._segment_count, self._scale, cfg=self._cfg
        )
        return self._points

    def to_2d(self) -> list[tuple[float, float]]:
        """Top-down projection onto the reference plane."""

        return [(float(x), float(y)) for x, y, _ in self._points]

    def __len__(self) -> int:
        return len(self._points)


__all__ = ["MIN_SEGMENTS", "OrbitPath", "check_segment_count", "sample", "sample_physical", "sample_times"]
