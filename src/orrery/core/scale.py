"""Mappings between physical units and bounded display units.

Distances use a logarithmic map so that planetary radii and outer-system
distances fit in one view without losing their order:

    f(d) = k * ln(1 + alpha * d)          f^-1(s) = (exp(s / k) - 1) / alpha

Body radii use a power law:

    g(r) = beta * r ** gamma              g^-1(s) = (s / beta) ** (1 / gamma)

Both maps reject inputs outside their domain (``d < 0``, ``r <= 0``) with
:class:`ScaleDomainError` instead of clamping. Every consumer in a scene must
share one :class:`ScaleTransform` so bodies and orbit lines line up.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .config import SCALE_CFG, ScaleCfg
from .errors import ConfigurationError, ScaleDomainError

ArrayLike = Union[float, np.ndarray]


def _as_array(value: ArrayLike) -> tuple[np.ndarray, bool]:
    arr = np.asarray(value, dtype=float)
    return arr, arr.ndim == 0


def _result(arr: np.ndarray, scalar: bool) -> ArrayLike:
    return float(arr) if scalar else arr


@dataclass(frozen=True)
class ScaleTransform:
    k: float
    alpha: float
    beta: float
    gamma: float

    def __post_init__(self) -> None:
        for name in ("k", "alpha", "beta"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ConfigurationError(name, value, "scale parameter must be > 0")
        if not math.isfinite(self.gamma) or not 0.0 < self.gamma <= 1.0:
            raise ConfigurationError("gamma", self.gamma, "radius exponent must satisfy 0 < gamma <= 1")

    @classmethod
    def from_cfg(cls, cfg: ScaleCfg = SCALE_CFG) -> "ScaleTransform":
        return cls(k=cfg.k, alpha=cfg.alpha, beta=cfg.beta, gamma=cfg.gamma)

    def distance_to_display(self, d: ArrayLike) -> ArrayLike:
        arr, scalar = _as_array(d)
        if np.any(arr < 0.0) or not np.all(np.isfinite(arr)):
            raise ScaleDomainError(f"distance must be finite and >= 0, got {d!r}")
        return _result(self.k * np.log1p(self.alpha * arr), scalar)

    def display_to_distance(self, s: ArrayLike) -> ArrayLike:
        arr, scalar = _as_array(s)
        if np.any(arr < 0.0) or not np.all(np.isfinite(arr)):
            raise ScaleDomainError(f"display distance must be finite and >= 0, got {s!r}")
        return _result(np.expm1(arr / self.k) / self.alpha, scalar)

    def radius_to_display(self, r: ArrayLike) -> ArrayLike:
        arr, scalar = _as_array(r)
        if np.any(arr <= 0.0) or not np.all(np.isfinite(arr)):
            raise ScaleDomainError(f"radius must be finite and > 0, got {r!r}")
        return _result(self.beta * np.power(arr, self.gamma), scalar)

    def display_to_radius(self, s: ArrayLike) -> ArrayLike:
        arr, scalar = _as_array(s)
        if np.any(arr <= 0.0) or not np.all(np.isfinite(arr)):
            raise ScaleDomainError(f"display radius must be finite and > 0, got {s!r}")
        return _result(np.power(arr / self.beta, 1.0 / self.gamma), scalar)

    def position_to_display(self, position: np.ndarray) -> np.ndarray:
        """Keep the direction of ``position`` and rescale its length.

        Accepts one vector or an ``(N, 3)`` stack. The origin stays at the
        origin.
        """

        pos = np.asarray(position, dtype=float)
        norms = np.linalg.norm(pos, axis=-1, keepdims=True)
        scaled = self.distance_to_display(norms)
        with np.errstate(invalid="ignore", divide="ignore"):
            factor = np.where(norms > 0.0, scaled / norms, 0.0)
        return pos * factor

    def display_to_position(self, display: np.ndarray) -> np.ndarray:
        disp = np.asarray(display, dtype=float)
        norms = np.linalg.norm(disp, axis=-1, keepdims=True)
        physical = self.display_to_distance(norms)
        with np.errstate(invalid="ignore", divide="ignore"):
            factor = np.where(norms > 0.0, physical / norms, 0.0)
        return disp * factor


DEFAULT_SCALE = ScaleTransform.from_cfg(SCALE_CFG)


__all__ = ["DEFAULT_SCALE", "ScaleTransform"]
