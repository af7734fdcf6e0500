"""Simulated time and wall-clock frame deltas."""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field

from .config import SECONDS_PER_DAY, SIM_CFG
from .errors import ConfigurationError


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    last_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        return dt


def _validate_time_scale(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0.0:
        raise ConfigurationError("time_scale", value, "time scale must be finite and >= 0")
    return value


class SimulationClock:
    """Monotonic simulated-time accumulator.

    ``advance`` multiplies a real (wall-clock) delta by the time scale. A new
    time scale only affects later advances; time that already elapsed is
    never rewritten.
    """

    def __init__(self, time: float = 0.0, time_scale: float = SIM_CFG.time_scale) -> None:
        self._time = float(time)
        self._time_scale = _validate_time_scale(time_scale)

    @property
    def time(self) -> float:
        return self._time

    @property
    def days(self) -> float:
        return self._time / SECONDS_PER_DAY

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        self._time_scale = _validate_time_scale(value)

    def advance(self, real_delta_seconds: float, time_scale: float | None = None) -> float:
        scale = self._time_scale if time_scale is None else _validate_time_scale(time_scale)
        if math.isfinite(real_delta_seconds) and real_delta_seconds > 0.0:
            self._time += real_delta_seconds * scale
        return self._time

    def reset(self, time: float = 0.0) -> None:
        self._time = float(time)


__all__ = ["FrameTimer", "SimulationClock"]
