from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

import pygame

from .assets import Color, get_text_surface

if TYPE_CHECKING:  # pragma: no cover
    from orrery.core.driver import BodyInfo


def format_time_scale(time_scale: float) -> str:
    if time_scale == 0.0:
        return "paused"
    if time_scale >= 1e6:
        return f"{time_scale:.2e}x"
    return f"{time_scale:,.0f}x"


def info_lines(info: "BodyInfo") -> list[str]:
    """Text rows shown in the info panel for the selected body."""

    return [
        info.name,
        f"Mass: {info.mass:.4e} kg",
        f"Distance: {info.distance_km:,.0f} km ({info.distance_au:.4f} AU)",
        f"Diameter: {info.diameter_km:,.0f} km",
        f"Orbital period: {info.orbital_period_days:,.2f} days",
        f"Eccentricity: {info.eccentricity:.5f}",
    ]


def hud_lines(days: float, time_scale: float, selected: str | None) -> list[str]:
    return [
        f"Day {days:,.1f}",
        f"Time scale: {format_time_scale(time_scale)}",
        f"Follow: {selected or 'none'}",
        "[ / ] time scale   space pause   tab select   +/- zoom   r reset",
    ]


def build_text_panel(
    font: pygame.font.Font,
    lines: Sequence[tuple[str, tuple[int, int, int]]],
    *,
    background_color: Color,
    padding: tuple[int, int] = (14, 14),
) -> pygame.Surface:
    if not lines:
        raise ValueError("lines must not be empty")
    padding_x, padding_y = padding
    line_height = font.get_linesize()
    width = max(font.size(text)[0] for text, _ in lines) + padding_x * 2
    height = line_height * len(lines) + padding_y * 2
    panel_surface = pygame.Surface((width, height), pygame.SRCALPHA)
    pygame.draw.rect(
        panel_surface,
        background_color,
        panel_surface.get_rect(),
        border_radius=12,
    )
    for idx, (text, color) in enumerate(lines):
        if not text:
            continue
        text_surf = get_text_surface(font, text, color)
        panel_surface.blit(text_surf, (padding_x, padding_y + idx * line_height))
    return panel_surface


__all__ = ["build_text_panel", "format_time_scale", "hud_lines", "info_lines"]
