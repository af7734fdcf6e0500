"""Data models for the orbiting bodies and the central mass."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from .config import GRAVITATIONAL_CONSTANT
from .errors import ConfigurationError, InvalidElementsError, InvalidMassError
from .spin import SpinState


def _require_finite(name: str, value: float, error: type[ConfigurationError]) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise error(name, value, "must be a number") from None
    if not math.isfinite(value):
        raise error(name, value, "must be finite")
    return value


@dataclass(frozen=True)
class OrbitalElements:
    """Classical elements of one elliptical orbit.

    Distances are metres, angles degrees and the epoch is simulated seconds.
    Construction validates ``a > 0`` and ``0 <= e < 1``; an element set is
    never changed in place, use :meth:`with_changes` to get a new one.
    """

    a: float
    e: float
    i: float = 0.0
    raan: float = 0.0
    argp: float = 0.0
    m0: float = 0.0
    epoch: float = 0.0

    def __post_init__(self) -> None:
        for name in ("a", "e", "i", "raan", "argp", "m0", "epoch"):
            object.__setattr__(
                self, name, _require_finite(name, getattr(self, name), InvalidElementsError)
            )
        if self.a <= 0.0:
            raise InvalidElementsError("a", self.a, "semi-major axis must be > 0")
        if not 0.0 <= self.e < 1.0:
            raise InvalidElementsError(
                "e", self.e, "eccentricity must satisfy 0 <= e < 1 (closed orbits only)"
            )

    @property
    def i_rad(self) -> float:
        return math.radians(self.i)

    @property
    def raan_rad(self) -> float:
        return math.radians(self.raan)

    @property
    def argp_rad(self) -> float:
        return math.radians(self.argp)

    @property
    def m0_rad(self) -> float:
        return math.radians(self.m0)

    @property
    def periapsis(self) -> float:
        return self.a * (1.0 - self.e)

    @property
    def apoapsis(self) -> float:
        return self.a * (1.0 + self.e)

    @property
    def semi_minor_axis(self) -> float:
        return self.a * math.sqrt(1.0 - self.e * self.e)

    def with_changes(self, **changes: float) -> "OrbitalElements":
        return replace(self, **changes)


class CentralBody:
    """The body being orbited. ``mu`` is always derived from the current mass."""

    def __init__(self, name: str, mass: float, diameter: float | None = None) -> None:
        self.name = name
        self._mass = self._validate_mass(mass)
        self.diameter = self._validate_diameter(diameter)

    @staticmethod
    def _validate_mass(mass: float) -> float:
        mass = _require_finite("mass", mass, InvalidMassError)
        if mass <= 0.0:
            raise InvalidMassError("mass", mass, "central mass must be > 0")
        return mass

    @staticmethod
    def _validate_diameter(diameter: float | None) -> float | None:
        if diameter is None:
            return None
        diameter = _require_finite("diameter", diameter, ConfigurationError)
        if diameter <= 0.0:
            raise ConfigurationError("diameter", diameter, "diameter must be > 0")
        return diameter

    @property
    def mass(self) -> float:
        return self._mass

    def set_mass(self, mass: float) -> None:
        self._mass = self._validate_mass(mass)

    @property
    def mu(self) -> float:
        return GRAVITATIONAL_CONSTANT * self._mass

    @property
    def radius(self) -> float | None:
        if self.diameter is None:
            return None
        return 0.5 * self.diameter

    def __repr__(self) -> str:
        return f"CentralBody(name={self.name!r}, mass={self._mass!r}, diameter={self.diameter!r})"


@dataclass
class Body:
    """One orbiting body with its element set and its own spin state."""

    name: str
    mass: float
    diameter: float
    elements: OrbitalElements
    spin: SpinState = field(default_factory=SpinState)

    def __post_init__(self) -> None:
        self.mass = _require_finite("mass", self.mass, InvalidMassError)
        if self.mass <= 0.0:
            raise InvalidMassError("mass", self.mass, "body mass must be > 0")
        self.diameter = _require_finite("diameter", self.diameter, ConfigurationError)
        if self.diameter <= 0.0:
            raise ConfigurationError("diameter", self.diameter, "diameter must be > 0")
        if not isinstance(self.elements, OrbitalElements):
            raise ConfigurationError("elements", self.elements, "expected OrbitalElements")

    @property
    def radius(self) -> float:
        return 0.5 * self.diameter

    def set_elements(self, elements: OrbitalElements) -> None:
        if not isinstance(elements, OrbitalElements):
            raise ConfigurationError("elements", elements, "expected OrbitalElements")
        self.elements = elements


__all__ = ["Body", "CentralBody", "OrbitalElements"]
