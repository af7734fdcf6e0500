"""Preset bodies: the Sun and the eight planets at J2000."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from orrery.core.config import ASTRONOMICAL_UNIT, SUN_DIAMETER, SUN_MASS
from orrery.core.model import Body, CentralBody, OrbitalElements
from orrery.core.spin import SpinState

BUNDLED_CSV = Path(__file__).resolve().with_name("planets.csv")


@dataclass(frozen=True)
class PlanetPreset:
    """Mean elements in the form published by Standish (1992).

    ``mean_longitude`` and ``longitude_of_perihelion`` are converted to the
    argument of periapsis and mean anomaly the solver uses.
    """

    name: str
    mass: float
    diameter: float
    a_au: float
    e: float
    i: float
    mean_longitude: float
    longitude_of_perihelion: float
    raan: float
    rotation_period_h: float
    obliquity_deg: float
    retrograde: bool = False

    def elements(self) -> OrbitalElements:
        return OrbitalElements(
            a=self.a_au * ASTRONOMICAL_UNIT,
            e=self.e,
            i=self.i,
            raan=self.raan,
            argp=self.longitude_of_perihelion - self.raan,
            m0=self.mean_longitude - self.longitude_of_perihelion,
            epoch=0.0,
        )

    def body(self) -> Body:
        return Body(
            name=self.name,
            mass=self.mass,
            diameter=self.diameter,
            elements=self.elements(),
            spin=SpinState(
                period_hours=self.rotation_period_h,
                obliquity_deg=self.obliquity_deg,
                retrograde=self.retrograde,
            ),
        )


PLANET_PRESETS: tuple[PlanetPreset, ...] = (
    PlanetPreset("Mercury", 3.3011e23, 4.8794e6, 0.38709927, 0.20563593, 7.00497902,
                 252.25032350, 77.45779628, 48.33076593, 1407.6, 0.034),
    PlanetPreset("Venus", 4.8675e24, 1.21036e7, 0.72333566, 0.00677672, 3.39467605,
                 181.97909950, 131.60246718, 76.67984255, 5832.5, 2.64, retrograde=True),
    PlanetPreset("Earth", 5.9722e24, 1.2742e7, 1.00000261, 0.01671123, -0.00001531,
                 100.46457166, 102.93768193, 0.0, 23.9345, 23.44),
    PlanetPreset("Mars", 6.4171e23, 6.7792e6, 1.52371034, 0.09339410, 1.84969142,
                 -4.55343205, -23.94362959, 49.55953891, 24.6229, 25.19),
    PlanetPreset("Jupiter", 1.8982e27, 1.39820e8, 5.20288700, 0.04838624, 1.30439695,
                 34.39644051, 14.72847983, 100.47390909, 9.925, 3.13),
    PlanetPreset("Saturn", 5.6834e26, 1.16460e8, 9.53667594, 0.05386179, 2.48599187,
                 49.95424423, 92.59887831, 113.66242448, 10.656, 26.73),
    PlanetPreset("Uranus", 8.6810e25, 5.0724e7, 19.18916464, 0.04725744, 0.77263783,
                 313.23810451, 170.95427630, 74.01692503, 17.24, 82.23, retrograde=True),
    PlanetPreset("Neptune", 1.02413e26, 4.9244e7, 30.06992276, 0.00859048, 1.77004347,
                 -55.12002969, 44.96476227, 131.78422574, 16.11, 28.32),
)

PRESETS: dict[str, PlanetPreset] = {preset.name.lower(): preset for preset in PLANET_PRESETS}
PRESET_DISPLAY_ORDER: list[str] = [preset.name for preset in PLANET_PRESETS]


def sun() -> CentralBody:
    return CentralBody("Sun", SUN_MASS, SUN_DIAMETER)


def get_preset(name: str) -> Body:
    """Fresh :class:`Body` for a preset planet (case-insensitive name).

    Raises
    ------
    KeyError
        If the name is not a known preset.
    """

    key = name.lower()
    if key not in PRESETS:
        available = ", ".join(PRESET_DISPLAY_ORDER)
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    return PRESETS[key].body()


def solar_system() -> tuple[CentralBody, list[Body]]:
    return sun(), [preset.body() for preset in PLANET_PRESETS]


__all__ = [
    "BUNDLED_CSV",
    "PLANET_PRESETS",
    "PRESETS",
    "PRESET_DISPLAY_ORDER",
    "PlanetPreset",
    "get_preset",
    "solar_system",
    "sun",
]
