"""Per-frame driver tying the clock, solver, sampler and spin states together."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

import numpy as np

from .config import ASTRONOMICAL_UNIT, DEFAULT_CONFIG, SECONDS_PER_DAY, Config
from .errors import ConfigurationError
from .kepler import mean_motion, orbital_period, solve
from .model import Body, CentralBody, OrbitalElements
from .sampler import OrbitPath, check_segment_count
from .scale import ScaleTransform
from .timekeeping import SimulationClock

if TYPE_CHECKING:  # pragma: no cover
    from .logging_utils import RunLogger

logger = logging.getLogger(__name__)

PERIAPSIS = "periapsis"
APOAPSIS = "apoapsis"


@dataclass(frozen=True)
class BodyFrame:
    name: str
    position: np.ndarray
    velocity: np.ndarray
    true_anomaly: float
    display_position: np.ndarray
    display_radius: float
    spin_phase_deg: float

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


@dataclass(frozen=True)
class ApsisEvent:
    time: float
    body: str
    kind: str
    distance: float


@dataclass(frozen=True)
class Frame:
    """Every body evaluated at one simulated time."""

    time: float
    bodies: tuple[BodyFrame, ...]
    events: tuple[ApsisEvent, ...] = ()

    def body(self, name: str) -> BodyFrame:
        for entry in self.bodies:
            if entry.name == name:
                return entry
        raise KeyError(name)


@dataclass(frozen=True)
class BodyInfo:
    """Read-only figures for an info panel."""

    name: str
    mass: float
    distance_km: float
    distance_au: float
    diameter_km: float
    orbital_period_days: float
    eccentricity: float


def apsis_crossings(
    elements: OrbitalElements, mu: float, t_start: float, t_end: float
) -> list[tuple[float, str]]:
    """Periapsis/apoapsis passages in ``(t_start, t_end]``.

    Passages happen where the unwrapped mean anomaly is a multiple of pi:
    even multiples are periapsis, odd ones apoapsis.
    """

    if t_end <= t_start:
        return []
    n = mean_motion(elements.a, mu)
    m_start = elements.m0_rad + n * (t_start - elements.epoch)
    m_end = elements.m0_rad + n * (t_end - elements.epoch)
    first = math.floor(m_start / math.pi) + 1
    last = math.floor(m_end / math.pi)
    crossings = []
    for j in range(first, last + 1):
        t = elements.epoch + (j * math.pi - elements.m0_rad) / n
        crossings.append((t, PERIAPSIS if j % 2 == 0 else APOAPSIS))
    return crossings


class SimulationDriver:
    """Owns the simulation clock and evaluates every body once per frame.

    The driver is the single writer of the clock and of each body's spin
    state. All bodies in a frame are evaluated at the same snapshot of the
    simulated time.
    """

    def __init__(
        self,
        central: CentralBody,
        bodies: Iterable[Body] = (),
        *,
        scale: ScaleTransform | None = None,
        clock: SimulationClock | None = None,
        config: Config = DEFAULT_CONFIG,
        run_logger: "RunLogger | None" = None,
    ) -> None:
        if not isinstance(central, CentralBody):
            raise ConfigurationError("central", central, "a CentralBody is required")
        self._config = config
        self._central = central
        self._scale = scale or ScaleTransform.from_cfg(config.scale)
        self._clock = clock or SimulationClock(time_scale=config.sim.time_scale)
        self._segment_count = config.sim.segment_count
        self._bodies: dict[str, Body] = {}
        self._paths: dict[str, OrbitPath] = {}
        self._last_frame: Frame | None = None
        self._frame_count = 0
        self.run_logger = run_logger
        for body in bodies:
            self.add_body(body)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def clock(self) -> SimulationClock:
        return self._clock

    @property
    def time(self) -> float:
        return self._clock.time

    @property
    def central(self) -> CentralBody:
        return self._central

    @property
    def scale(self) -> ScaleTransform:
        return self._scale

    @property
    def segment_count(self) -> int:
        return self._segment_count

    @property
    def bodies(self) -> list[Body]:
        return list(self._bodies.values())

    @property
    def body_names(self) -> list[str]:
        return list(self._bodies)

    @property
    def last_frame(self) -> Frame | None:
        return self._last_frame

    def body(self, name: str) -> Body:
        return self._bodies[name]

    def orbit_path(self, name: str) -> OrbitPath:
        return self._paths[name]

    def orbit_paths(self) -> dict[str, OrbitPath]:
        return dict(self._paths)

    # ------------------------------------------------------------------
    # Mutation (each change re-validates and rebuilds only what it affects)
    # ------------------------------------------------------------------
    def add_body(self, body: Body) -> None:
        if body.name in self._bodies:
            raise ConfigurationError("name", body.name, "duplicate body name")
        self._bodies[body.name] = body
        self._paths[body.name] = OrbitPath(
            body.elements,
            self._central,
            self._segment_count,
            self._scale,
            cfg=self._config.kepler,
        )
        logger.debug("Added body %s (a=%.4g m, e=%.4g)", body.name, body.elements.a, body.elements.e)

    def remove_body(self, name: str) -> Body:
        self._paths.pop(name)
        return self._bodies.pop(name)

    def set_elements(self, name: str, elements: OrbitalElements) -> None:
        body = self._bodies[name]
        body.set_elements(elements)
        self._paths[name].update(elements=elements)

    def set_central_mass(self, mass: float) -> None:
        self._central.set_mass(mass)
        for path in self._paths.values():
            path.update(mu=self._central.mu)

    def set_scale(self, scale: ScaleTransform) -> None:
        self._scale = scale
        for path in self._paths.values():
            path.update(scale=scale)

    def set_segment_count(self, segment_count: int) -> None:
        self._segment_count = check_segment_count(segment_count)
        for path in self._paths.values():
            path.update(segment_count=self._segment_count)

    def set_time_scale(self, time_scale: float) -> None:
        self._clock.time_scale = time_scale

    def reset(self, time: float = 0.0) -> None:
        self._clock.reset(time)
        for body in self._bodies.values():
            body.spin.reset()
        self._last_frame = None
        self._frame_count = 0

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def _body_frame(self, body: Body, t: float) -> BodyFrame:
        state = solve(body.elements, self._central, t, with_velocity=True, cfg=self._config.kepler)
        return BodyFrame(
            name=body.name,
            position=state.position,
            velocity=state.velocity,
            true_anomaly=state.true_anomaly,
            display_position=self._scale.position_to_display(state.position),
            display_radius=self._scale.radius_to_display(body.radius),
            spin_phase_deg=body.spin.phase_deg,
        )

    def frame_at(self, t: float) -> Frame:
        """Evaluate every body at ``t`` without touching the clock or spins."""

        return Frame(time=t, bodies=tuple(self._body_frame(b, t) for b in self._bodies.values()))

    def step(self, real_delta_seconds: float) -> Frame:
        """Advance the clock and spins once, then evaluate the frame."""

        t_prev = self._clock.time
        time_scale = self._clock.time_scale
        t = self._clock.advance(real_delta_seconds)
        for body in self._bodies.values():
            body.spin.advance(real_delta_seconds, time_scale)

        mu = self._central.mu
        events: list[ApsisEvent] = []
        for body in self._bodies.values():
            for t_event, kind in apsis_crossings(body.elements, mu, t_prev, t):
                distance = body.elements.periapsis if kind == PERIAPSIS else body.elements.apoapsis
                events.append(ApsisEvent(t_event, body.name, kind, distance))
        events.sort(key=lambda event: event.time)

        frame = Frame(
            time=t,
            bodies=tuple(self._body_frame(b, t) for b in self._bodies.values()),
            events=tuple(events),
        )
        self._last_frame = frame
        self._frame_count += 1
        if self.run_logger is not None:
            self._record(frame, self.run_logger)
        return frame

    def _record(self, frame: Frame, run_logger: "RunLogger") -> None:
        if self._frame_count % max(1, self._config.sim.log_every_frames) == 0:
            for entry in frame.bodies:
                x, y, z = entry.position
                run_logger.log_ts(
                    [frame.time, entry.name, x, y, z, entry.distance, entry.speed,
                     entry.true_anomaly, entry.spin_phase_deg]
                )
        for event in frame.events:
            run_logger.log_event([event.time, event.kind, event.body, event.distance, ""])

    def info(self, name: str) -> BodyInfo:
        body = self._bodies[name]
        frame = self._last_frame
        if frame is None or frame.time != self._clock.time:
            position = solve(body.elements, self._central, self._clock.time).position
        else:
            position = frame.body(name).position
        distance = float(np.linalg.norm(position))
        return BodyInfo(
            name=body.name,
            mass=body.mass,
            distance_km=distance / 1000.0,
            distance_au=distance / ASTRONOMICAL_UNIT,
            diameter_km=body.diameter / 1000.0,
            orbital_period_days=orbital_period(body.elements.a, self._central) / SECONDS_PER_DAY,
            eccentricity=body.elements.e,
        )

    def meta(self) -> dict:
        """Run description written next to recorded timeseries."""

        return {
            "central": {
                "name": self._central.name,
                "mass": self._central.mass,
                "mu": self._central.mu,
            },
            "scale": {
                "k": self._scale.k,
                "alpha": self._scale.alpha,
                "beta": self._scale.beta,
                "gamma": self._scale.gamma,
            },
            "time_scale": self._clock.time_scale,
            "segment_count": self._segment_count,
            "bodies": {
                body.name: {
                    "a": body.elements.a,
                    "e": body.elements.e,
                    "i": body.elements.i,
                    "raan": body.elements.raan,
                    "argp": body.elements.argp,
                    "m0": body.elements.m0,
                    "epoch": body.elements.epoch,
                    "period": orbital_period(body.elements.a, self._central),
                }
                for body in self._bodies.values()
            },
        }


__all__ = [
    "APOAPSIS",
    "ApsisEvent",
    "BodyFrame",
    "BodyInfo",
    "Frame",
    "PERIAPSIS",
    "SimulationDriver",
    "apsis_crossings",
]
