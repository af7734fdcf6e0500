"""Closed-form two-body propagation from classical orbital elements.

The solver is a pure function of an element set, a gravitational parameter
and a simulated time. It keeps no state between calls.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .config import KEPLER_CFG, KeplerCfg
from .errors import MissingCentralBodyError
from .model import CentralBody, OrbitalElements

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

MuLike = Union[float, CentralBody, None]


@dataclass(frozen=True)
class KeplerSolution:
    eccentric_anomaly: float
    iterations: int
    converged: bool
    residual: float


@dataclass(frozen=True)
class OrbitalState:
    """Position (and optional velocity) of a body in the central frame."""

    time: float
    position: np.ndarray
    velocity: np.ndarray | None
    mean_anomaly: float
    eccentric_anomaly: float
    true_anomaly: float
    radius: float
    converged: bool

    @property
    def speed(self) -> float | None:
        if self.velocity is None:
            return None
        return float(np.linalg.norm(self.velocity))


def resolve_mu(mu: MuLike) -> float:
    """Return a usable gravitational parameter or raise immediately."""

    if isinstance(mu, CentralBody):
        return mu.mu
    if mu is None:
        raise MissingCentralBodyError("mu", mu, "no central body configured")
    try:
        value = float(mu)
    except (TypeError, ValueError):
        raise MissingCentralBodyError("mu", mu, "gravitational parameter must be a number") from None
    if not math.isfinite(value) or value <= 0.0:
        raise MissingCentralBodyError("mu", mu, "gravitational parameter must be finite and > 0")
    return value


def normalize_angle(angle: float) -> float:
    """Wrap ``angle`` (radians) into ``[-pi, pi)``."""

    wrapped = math.fmod(angle, TWO_PI)
    if wrapped < -math.pi:
        wrapped += TWO_PI
    if wrapped >= math.pi:
        wrapped -= TWO_PI
    return wrapped


def mean_motion(a: float, mu: MuLike) -> float:
    """Mean motion in rad/s."""

    return math.sqrt(resolve_mu(mu) / (a * a * a))


def orbital_period(a: float, mu: MuLike) -> float:
    """Orbital period in seconds, ``2 * pi * sqrt(a**3 / mu)``."""

    return TWO_PI / mean_motion(a, mu)


def kepler_residual(eccentric_anomaly: float, e: float, mean_anomaly: float) -> float:
    """``E - e sin E - M`` wrapped into ``[-pi, pi)``."""

    return normalize_angle(eccentric_anomaly - e * math.sin(eccentric_anomaly) - mean_anomaly)


def solve_kepler(
    mean_anomaly: float,
    e: float,
    *,
    tol: float = KEPLER_CFG.tolerance,
    max_iter: int = KEPLER_CFG.max_iterations,
) -> KeplerSolution:
    """Solve ``M = E - e sin E`` for the eccentric anomaly with Newton-Raphson.

    The mean anomaly is first wrapped into ``[-pi, pi)``. The starting guess
    is ``M`` for ``e < 0.8`` and ``pi`` with the sign of ``M`` otherwise, which
    keeps Newton on the convex side of ``E - e sin E``. Hitting ``max_iter``
    without meeting ``tol`` is not an error: the last iterate is returned
    with ``converged=False``.
    """

    m = normalize_angle(mean_anomaly)
    ecc_anomaly = m if e < 0.8 else math.copysign(math.pi, m)
    converged = False
    iterations = 0
    for iterations in range(1, max_iter + 1):
        f = ecc_anomaly - e * math.sin(ecc_anomaly) - m
        fp = 1.0 - e * math.cos(ecc_anomaly)
        step = f / fp
        ecc_anomaly -= step
        if abs(step) < tol:
            converged = True
            break

    residual = kepler_residual(ecc_anomaly, e, m)
    if not converged:
        logger.debug(
            "Kepler solve hit iteration cap (M=%.6g, e=%.6g, residual=%.3e)",
            m,
            e,
            residual,
        )
    return KeplerSolution(ecc_anomaly, iterations, converged, residual)


def eccentric_anomaly(
    mean_anomaly: float,
    e: float,
    *,
    tol: float = KEPLER_CFG.tolerance,
    max_iter: int = KEPLER_CFG.max_iterations,
) -> float:
    return solve_kepler(mean_anomaly, e, tol=tol, max_iter=max_iter).eccentric_anomaly


def true_anomaly_from_eccentric(ecc_anomaly: float, e: float) -> float:
    return math.atan2(math.sqrt(1.0 - e * e) * math.sin(ecc_anomaly), math.cos(ecc_anomaly) - e)


def perifocal_to_reference(raan: float, inc: float, argp: float) -> np.ndarray:
    """Rotation ``Rz(raan) @ Rx(inc) @ Rz(argp)``; all angles in radians."""

    cos_o, sin_o = math.cos(raan), math.sin(raan)
    cos_i, sin_i = math.cos(inc), math.sin(inc)
    cos_w, sin_w = math.cos(argp), math.sin(argp)
    return np.array(
        [
            [cos_o * cos_w - sin_o * cos_i * sin_w, -cos_o * sin_w - sin_o * cos_i * cos_w, sin_o * sin_i],
            [sin_o * cos_w + cos_o * cos_i * sin_w, -sin_o * sin_w + cos_o * cos_i * cos_w, -cos_o * sin_i],
            [sin_i * sin_w, sin_i * cos_w, cos_i],
        ],
        dtype=float,
    )


def mean_anomaly_at(elements: OrbitalElements, mu: MuLike, t: float) -> float:
    """Unwrapped mean anomaly (radians) at simulated time ``t``."""

    return elements.m0_rad + mean_motion(elements.a, mu) * (t - elements.epoch)


def solve(
    elements: OrbitalElements,
    mu: MuLike,
    t: float,
    *,
    with_velocity: bool = False,
    cfg: KeplerCfg = KEPLER_CFG,
) -> OrbitalState:
    """State of a body at simulated time ``t`` in the central body's frame.

    Positions are metres, velocities metres per second. ``e = 0`` needs no
    special case: the eccentric, mean and true anomalies coincide.
    """

    mu_value = resolve_mu(mu)
    a, e = elements.a, elements.e

    n = math.sqrt(mu_value / (a * a * a))
    m = normalize_angle(elements.m0_rad + n * (t - elements.epoch))
    solution = solve_kepler(m, e, tol=cfg.tolerance, max_iter=cfg.max_iterations)
    ecc_anomaly = solution.eccentric_anomaly

    nu = true_anomaly_from_eccentric(ecc_anomaly, e)
    r = a * (1.0 - e * math.cos(ecc_anomaly))
    cos_nu, sin_nu = math.cos(nu), math.sin(nu)

    rotation = perifocal_to_reference(elements.raan_rad, elements.i_rad, elements.argp_rad)
    position = rotation @ np.array([r * cos_nu, r * sin_nu, 0.0])

    velocity = None
    if with_velocity:
        # r(nu) = p / (1 + e cos nu), dnu/dt = h / r**2 with h = sqrt(mu p)
        p = a * (1.0 - e * e)
        scale = math.sqrt(mu_value / p)
        v_radial = scale * e * sin_nu
        v_transverse = scale * (1.0 + e * cos_nu)
        velocity = rotation @ np.array(
            [
                v_radial * cos_nu - v_transverse * sin_nu,
                v_radial * sin_nu + v_transverse * cos_nu,
                0.0,
            ]
        )

    return OrbitalState(
        time=t,
        position=position,
        velocity=velocity,
        mean_anomaly=m,
        eccentric_anomaly=ecc_anomaly,
        true_anomaly=nu,
        radius=r,
        converged=solution.converged,
    )


def position_at(
    elements: OrbitalElements,
    mu: MuLike,
    t: float,
    *,
    cfg: KeplerCfg = KEPLER_CFG,
) -> np.ndarray:
    return solve(elements, mu, t, cfg=cfg).position


def apsis_positions(elements: OrbitalElements) -> tuple[np.ndarray, np.ndarray]:
    """Reference-frame periapsis and apoapsis vectors (true anomaly 0 and pi)."""

    rotation = perifocal_to_reference(elements.raan_rad, elements.i_rad, elements.argp_rad)
    periapsis = rotation @ np.array([elements.periapsis, 0.0, 0.0])
    apoapsis = rotation @ np.array([-elements.apoapsis, 0.0, 0.0])
    return periapsis, apoapsis


def specific_energy(elements: OrbitalElements, mu: MuLike) -> float:
    return -resolve_mu(mu) / (2.0 * elements.a)


__all__ = [
    "KeplerSolution",
    "OrbitalState",
    "apsis_positions",
    "eccentric_anomaly",
    "kepler_residual",
    "mean_anomaly_at",
    "mean_motion",
    "normalize_angle",
    "orbital_period",
    "perifocal_to_reference",
    "position_at",
    "resolve_mu",
    "solve",
    "solve_kepler",
    "specific_energy",
    "true_anomaly_from_eccentric",
]
