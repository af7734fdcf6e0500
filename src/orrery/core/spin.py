"""Axial rotation of a body, independent of its orbital position."""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .config import SECONDS_PER_HOUR
from .errors import ConfigurationError


@dataclass
class SpinState:
    """Accumulated rotation phase of one body.

    A period of zero or less disables spin and freezes the phase.
    """

    period_hours: float = 0.0
    speed_multiplier: float = 1.0
    obliquity_deg: float = 0.0
    retrograde: bool = False
    phase_deg: float = 0.0

    def __post_init__(self) -> None:
        for name in ("period_hours", "speed_multiplier", "obliquity_deg", "phase_deg"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ConfigurationError(name, value, "must be a number") from None
            if not math.isfinite(value):
                raise ConfigurationError(name, value, "must be finite")
            setattr(self, name, value)
        self.reset(self.phase_deg)

    @property
    def enabled(self) -> bool:
        return self.period_hours > 0.0

    @property
    def rate_deg_per_second(self) -> float:
        if not self.enabled:
            return 0.0
        rate = 360.0 / (self.period_hours * SECONDS_PER_HOUR) * self.speed_multiplier
        return -rate if self.retrograde else rate

    @property
    def phase_rad(self) -> float:
        return math.radians(self.phase_deg)

    @property
    def axis(self) -> np.ndarray:
        tilt = math.radians(self.obliquity_deg)
        return np.array([0.0, -math.sin(tilt), math.cos(tilt)], dtype=float)

    def advance(self, real_delta_seconds: float, time_scale: float) -> float:
        if not math.isfinite(time_scale) or time_scale < 0.0:
            raise ConfigurationError("time_scale", time_scale, "time scale must be finite and >= 0")
        if self.enabled and math.isfinite(real_delta_seconds) and real_delta_seconds > 0.0:
            delta = self.rate_deg_per_second * real_delta_seconds * time_scale
            self.phase_deg = (self.phase_deg + delta) % 360.0
            # -0.0 % 360 and tiny negatives can land exactly on 360.0
            if self.phase_deg >= 360.0:
                self.phase_deg = 0.0
        return self.phase_deg

    def reset(self, phase_deg: float = 0.0) -> None:
        self.phase_deg = phase_deg % 360.0
        if self.phase_deg >= 360.0:
            self.phase_deg = 0.0


__all__ = ["SpinState"]
