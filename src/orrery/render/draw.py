from __future__ import annotations

import math
import random
from typing import Iterable, Sequence, TYPE_CHECKING

import pygame

from .assets import Color, get_text_surface

if TYPE_CHECKING:  # pragma: no cover
    from orrery.core.config import RenderCfg
    from orrery.core.spin import SpinState


def draw_central_body(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    *,
    color: tuple[int, int, int],
) -> None:
    if radius <= 0:
        return
    glow_radius = int(radius * 1.6)
    glow = pygame.Surface((glow_radius * 2, glow_radius * 2), pygame.SRCALPHA)
    pygame.draw.circle(glow, (*color, 40), (glow_radius, glow_radius), glow_radius)
    pygame.draw.circle(glow, (*color, 70), (glow_radius, glow_radius), int(glow_radius * 0.8))
    surface.blit(glow, glow.get_rect(center=position))
    pygame.draw.circle(surface, color, position, radius)


def spin_marker_offset(spin: "SpinState", radius: float) -> tuple[float, float]:
    """Screen offset of the surface marker for a top-down view.

    The marker sits on the equator; its sweep is foreshortened by the
    obliquity so strongly tilted bodies show a flattened track.
    """

    phase = spin.phase_rad
    tilt = math.cos(math.radians(spin.obliquity_deg))
    return radius * math.cos(phase), -radius * math.sin(phase) * tilt


def draw_body(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    *,
    color: tuple[int, int, int],
    spin: "SpinState | None" = None,
    marker_color: tuple[int, int, int] = (255, 255, 255),
) -> None:
    if radius <= 0:
        return
    pygame.draw.circle(surface, color, position, radius)
    if spin is None or not spin.enabled or radius < 3:
        return
    dx, dy = spin_marker_offset(spin, radius)
    end = (int(round(position[0] + dx)), int(round(position[1] + dy)))
    pygame.draw.line(surface, marker_color, position, end, 1)


def draw_selection_ring(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    *,
    color: Color,
) -> None:
    ring = max(radius + 4, 6)
    pygame.draw.circle(surface, color, position, ring, 1)


def draw_apsis_marker(
    surface: pygame.Surface,
    position: tuple[int, int],
    *,
    color: tuple[int, int, int],
    kind: str,
    size: int = 5,
) -> None:
    """Small triangle pointing down for periapsis and up for apoapsis."""

    x, y = position
    if kind == "periapsis":
        points = [(x - size, y - size), (x + size, y - size), (x, y)]
    else:
        points = [(x - size, y + size), (x + size, y + size), (x, y)]
    pygame.draw.polygon(surface, color, points, 1)


def draw_label(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    position: tuple[int, int],
    *,
    color: tuple[int, int, int],
    offset: tuple[int, int] = (8, -8),
) -> None:
    label = get_text_surface(font, text, color)
    rect = label.get_rect()
    rect.bottomleft = (position[0] + offset[0], position[1] + offset[1])
    surface.blit(label, rect)


def generate_starfield(
    num_stars: int,
    *,
    size: tuple[int, int],
    rng: random.Random | None = None,
) -> list[dict[str, object]]:
    rng = rng or random.Random()
    width, height = size
    stars: list[dict[str, object]] = []
    for _ in range(num_stars):
        x = rng.uniform(0, width)
        y = rng.uniform(0, height)
        radius = rng.choice([1, 1, 1, 2])
        alpha = rng.randint(60, 140)
        base = rng.randint(200, 240)
        color = (
            max(0, base - rng.randint(10, 25)),
            max(0, base - rng.randint(5, 15)),
            base,
        )
        star_surface = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(star_surface, (*color, alpha), (radius, radius), radius)
        stars.append({"pos": (x, y), "surface": star_surface, "radius": radius})
    return stars


def draw_starfield(
    surface: pygame.Surface,
    starfield: Iterable[dict[str, object]],
    camera_center: Sequence[float],
    ppu: float,
    *,
    parallax: float = 0.05,
) -> None:
    width, height = surface.get_size()
    offset_x = camera_center[0] * ppu * parallax
    offset_y = camera_center[1] * ppu * parallax
    for star in starfield:
        base_x, base_y = star["pos"]  # type: ignore[index]
        star_surface = star["surface"]  # type: ignore[index]
        radius = star["radius"]  # type: ignore[index]
        sx = int((base_x - offset_x) % width)
        sy = int((base_y + offset_y) % height)
        surface.blit(star_surface, (sx - radius, sy - radius))


def draw_orbit_line(
    surface: pygame.Surface,
    color: Color,
    points: Sequence[tuple[int, int]],
    width: int,
) -> None:
    """Draw a polyline; translucent colors need an ``SRCALPHA`` target layer."""

    if len(points) < 2:
        return
    if width <= 1:
        pygame.draw.aalines(surface, color, False, points)
    else:
        pygame.draw.lines(surface, color, False, points, width)
        pygame.draw.aalines(surface, color, False, points)


def downsample_points(
    points: Sequence[tuple[float, float]], max_points: int
) -> list[tuple[float, float]]:
    """Keep roughly ``max_points`` evenly strided points, always including the last.

    The last point closes a sampled orbit, so it survives any stride.
    """

    if max_points < 2:
        raise ValueError("max_points must be at least 2")
    if len(points) <= max_points:
        return list(points)
    step = max(1, math.ceil(len(points) / max_points))
    sampled = list(points[::step])
    if sampled[-1] != points[-1]:
        sampled.append(points[-1])
    return sampled


def body_color(index: int, render_cfg: "RenderCfg") -> tuple[int, int, int]:
    colors = render_cfg.body_colors
    return colors[index % len(colors)]


__all__ = [
    "body_color",
    "downsample_points",
    "draw_apsis_marker",
    "draw_body",
    "draw_central_body",
    "draw_label",
    "draw_orbit_line",
    "draw_selection_ring",
    "draw_starfield",
    "generate_starfield",
    "spin_marker_offset",
]
