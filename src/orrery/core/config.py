"""Configuration dataclasses for the orrery."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

GRAVITATIONAL_CONSTANT = 6.67430e-11
ASTRONOMICAL_UNIT = 1.495978707e11
SUN_MASS = 1.98847e30
SUN_DIAMETER = 1.3927e9
SECONDS_PER_DAY = 86_400.0
SECONDS_PER_HOUR = 3_600.0
SECONDS_PER_YEAR = 3.15576e7


@dataclass(frozen=True)
class ScaleCfg:
    # distance: k * ln(1 + alpha * d)
    k: float = 40.0
    alpha: float = 1e-9
    # radius: beta * r ** gamma
    beta: float = 0.002
    gamma: float = 0.5


@dataclass(frozen=True)
class KeplerCfg:
    tolerance: float = 1e-12
    max_iterations: int = 60

    def __post_init__(self) -> None:
        if not math.isfinite(self.tolerance) or self.tolerance <= 0.0:
            raise ConfigurationError("kepler.tolerance", self.tolerance, "must be finite and > 0")
        if self.max_iterations < 1:
            raise ConfigurationError("kepler.max_iterations", self.max_iterations, "must be >= 1")


@dataclass(frozen=True)
class SimCfg:
    time_scale: float = 100_000.0
    min_time_scale: float = 0.0
    max_time_scale: float = 1e9
    time_scale_step: float = 2.0
    segment_count: int = 360
    log_every_frames: int = 10
    runs_dir: str = "data/runs"

    def __post_init__(self) -> None:
        for name in ("time_scale", "min_time_scale", "max_time_scale"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise ConfigurationError(f"sim.{name}", value, "must be finite and >= 0")
        if not self.min_time_scale <= self.max_time_scale:
            raise ConfigurationError("sim.max_time_scale", self.max_time_scale, "must be >= min_time_scale")
        if not math.isfinite(self.time_scale_step) or self.time_scale_step <= 1.0:
            raise ConfigurationError("sim.time_scale_step", self.time_scale_step, "must be finite and > 1")
        if self.segment_count < 3:
            raise ConfigurationError("sim.segment_count", self.segment_count, "must be >= 3")
        if self.log_every_frames < 1:
            raise ConfigurationError("sim.log_every_frames", self.log_every_frames, "must be >= 1")


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1200
    height: int = 800
    fps: int = 60
    background_color: tuple[int, int, int] = (4, 10, 28)
    central_body_color: tuple[int, int, int] = (255, 206, 84)
    body_colors: tuple[tuple[int, int, int], ...] = (
        (176, 176, 176),
        (230, 190, 120),
        (90, 150, 255),
        (220, 110, 70),
        (214, 170, 120),
        (232, 210, 150),
        (150, 220, 230),
        (90, 120, 240),
    )
    orbit_color: tuple[int, int, int, int] = (220, 236, 255, 120)
    orbit_selected_color: tuple[int, int, int, int] = (255, 255, 255, 220)
    orbit_line_width: int = 1
    max_rendered_orbit_points: int = 720
    body_min_pixel_radius: int = 2
    spin_marker_color: tuple[int, int, int] = (255, 255, 255)
    hud_text_color: tuple[int, int, int] = (234, 241, 255)
    panel_background_color: tuple[int, int, int, int] = (12, 18, 30, 170)
    label_text_color: tuple[int, int, int] = (200, 214, 236)
    font_names: tuple[str, ...] = ("Inter", "Segoe UI", "Helvetica", "Arial")
    font_size: int = 16
    pixels_per_unit: float = 1.1
    min_pixels_per_unit: float = 0.05
    max_pixels_per_unit: float = 200.0
    zoom_step: float = 1.15
    camera_smoothing: float = 0.15


@dataclass(frozen=True)
class Config:
    scale: ScaleCfg = field(default_factory=ScaleCfg)
    kepler: KeplerCfg = field(default_factory=KeplerCfg)
    sim: SimCfg = field(default_factory=SimCfg)
    render: RenderCfg = field(default_factory=RenderCfg)


SCALE_CFG = ScaleCfg()
KEPLER_CFG = KeplerCfg()
SIM_CFG = SimCfg()
RENDER_CFG = RenderCfg()
DEFAULT_CONFIG = Config(scale=SCALE_CFG, kepler=KEPLER_CFG, sim=SIM_CFG, render=RENDER_CFG)


def _coerce(name: str, current: Any, value: Any) -> Any:
    """Convert a JSON value to the type of the default it replaces."""

    if isinstance(current, tuple):
        if not isinstance(value, list):
            raise ConfigurationError(name, value, "expected a list")
        if not current:
            return tuple(value)
        if not isinstance(current[0], (tuple, str)) and len(value) != len(current):
            raise ConfigurationError(name, value, f"expected {len(current)} values")
        return tuple(_coerce(name, current[0], item) for item in value)
    if isinstance(value, bool):
        raise ConfigurationError(name, value, f"expected {type(current).__name__}")
    if isinstance(current, int):
        if not isinstance(value, int):
            raise ConfigurationError(name, value, "expected an integer")
        return value
    if isinstance(current, float):
        if not isinstance(value, (int, float)):
            raise ConfigurationError(name, value, "expected a number")
        if not math.isfinite(value):
            raise ConfigurationError(name, value, "must be finite")
        return float(value)
    if isinstance(current, str) and not isinstance(value, str):
        raise ConfigurationError(name, value, "expected a string")
    return value


def _override(section: str, base: Any, values: Any) -> Any:
    if not isinstance(values, dict):
        raise ConfigurationError(section, values, "section must be a JSON object")
    known = {f.name for f in fields(base)}
    changes: dict[str, Any] = {}
    for key, value in values.items():
        name = f"{section}.{key}"
        if key not in known:
            raise ConfigurationError(name, value, "unknown setting")
        changes[key] = _coerce(name, getattr(base, key), value)
    return replace(base, **changes)


def load_config(path: str | Path, base: Config = DEFAULT_CONFIG) -> Config:
    """Read a JSON file and overlay it on ``base``.

    The file may contain ``scale``, ``kepler``, ``sim`` and ``render``
    objects; keys left out keep their default values.
    """

    with Path(path).open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ConfigurationError("config", data, "top level must be a JSON object")

    sections = {f.name for f in fields(base)}
    changes: dict[str, Any] = {}
    for name, values in data.items():
        if name not in sections:
            raise ConfigurationError(name, values, "unknown configuration section")
        changes[name] = _override(name, getattr(base, name), values)
    return replace(base, **changes)


__all__ = [
    "ASTRONOMICAL_UNIT",
    "Config",
    "DEFAULT_CONFIG",
    "GRAVITATIONAL_CONSTANT",
    "KEPLER_CFG",
    "KeplerCfg",
    "RENDER_CFG",
    "RenderCfg",
    "SCALE_CFG",
    "SECONDS_PER_DAY",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_YEAR",
    "SIM_CFG",
    "SUN_DIAMETER",
    "SUN_MASS",
    "ScaleCfg",
    "SimCfg",
    "load_config",
]
