"""Interactive pygame viewer pulling one frame per tick from the driver."""
from __future__ import annotations

import logging
import math
import random
from typing import Sequence

import pygame

from orrery.core.config import RenderCfg, SimCfg
from orrery.core.driver import Frame, SimulationDriver
from orrery.core.kepler import apsis_positions
from orrery.core.timekeeping import FrameTimer

from .assets import load_font
from .camera import Camera
from .draw import (
    body_color,
    downsample_points,
    draw_apsis_marker,
    draw_body,
    draw_central_body,
    draw_label,
    draw_orbit_line,
    draw_selection_ring,
    draw_starfield,
    generate_starfield,
)
from .ui import build_text_panel, hud_lines, info_lines

logger = logging.getLogger(__name__)

PICK_TOLERANCE_PX = 12


def pick_nearest(
    screen_points: Sequence[tuple[str, tuple[int, int]]],
    position: tuple[int, int],
    tolerance: float = PICK_TOLERANCE_PX,
) -> str | None:
    """Name of the body drawn closest to ``position`` within ``tolerance`` pixels."""

    best_name = None
    best_distance = tolerance
    for name, (sx, sy) in screen_points:
        distance = math.hypot(sx - position[0], sy - position[1])
        if distance <= best_distance:
            best_name = name
            best_distance = distance
    return best_name


def step_time_scale(current: float, direction: int, sim_cfg: SimCfg) -> float:
    """Multiply or divide the time scale by the configured step, clamped."""

    if current <= 0.0:
        return sim_cfg.time_scale if direction > 0 else 0.0
    factor = sim_cfg.time_scale_step if direction > 0 else 1.0 / sim_cfg.time_scale_step
    return max(sim_cfg.min_time_scale, min(sim_cfg.max_time_scale, current * factor))


class OrreryViewer:
    """Top-down view of a :class:`SimulationDriver` scene.

    Keys: ``[``/``]`` change the time scale, space pauses, tab cycles the
    followed body, ``+``/``-`` and the wheel zoom, ``r`` resets the clock,
    escape quits. Left click selects a body, dragging pans.
    """

    def __init__(
        self,
        driver: SimulationDriver,
        *,
        render_cfg: RenderCfg,
        sim_cfg: SimCfg,
    ) -> None:
        self.driver = driver
        self.render_cfg = render_cfg
        self.sim_cfg = sim_cfg
        self.camera = Camera(
            (render_cfg.width, render_cfg.height),
            render_cfg.pixels_per_unit,
            min_ppu=render_cfg.min_pixels_per_unit,
            max_ppu=render_cfg.max_pixels_per_unit,
        )
        self.selected: str | None = None
        self._paused_time_scale: float | None = None
        self._running = False
        self._dragging = False
        self._drag_moved = False
        self._screen_points: list[tuple[str, tuple[int, int]]] = []

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------
    def toggle_pause(self) -> None:
        if self._paused_time_scale is None:
            self._paused_time_scale = self.driver.clock.time_scale
            self.driver.set_time_scale(0.0)
        else:
            self.driver.set_time_scale(self._paused_time_scale)
            self._paused_time_scale = None

    def change_time_scale(self, direction: int) -> None:
        if self._paused_time_scale is not None:
            self._paused_time_scale = step_time_scale(self._paused_time_scale, direction, self.sim_cfg)
            return
        self.driver.set_time_scale(step_time_scale(self.driver.clock.time_scale, direction, self.sim_cfg))
        logger.debug("Time scale %.4g", self.driver.clock.time_scale)

    def cycle_selection(self) -> None:
        names: list[str | None] = [None, *self.driver.body_names]
        index = names.index(self.selected) if self.selected in names else 0
        self.select(names[(index + 1) % len(names)])

    def select(self, name: str | None) -> None:
        self.selected = name
        if name is None:
            self.camera.set_target((0.0, 0.0))

    def reset(self) -> None:
        self.driver.reset()
        self.select(None)

    def _handle_event(self, event: pygame.event.Event) -> None:
        cfg = self.render_cfg
        if event.type == pygame.QUIT:
            self._running = False
        elif event.type == pygame.VIDEORESIZE:
            self.camera.update_size((event.w, event.h))
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._running = False
            elif event.key == pygame.K_SPACE:
                self.toggle_pause()
            elif event.key == pygame.K_RIGHTBRACKET:
                self.change_time_scale(+1)
            elif event.key == pygame.K_LEFTBRACKET:
                self.change_time_scale(-1)
            elif event.key == pygame.K_TAB:
                self.cycle_selection()
            elif event.key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
                self.camera.zoom_by_factor(cfg.zoom_step)
            elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                self.camera.zoom_by_factor(1.0 / cfg.zoom_step)
            elif event.key == pygame.K_r:
                self.reset()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._dragging = True
            self._drag_moved = False
            self.camera.begin_pan(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self._dragging = False
            self.camera.end_pan()
            if not self._drag_moved:
                self.select(pick_nearest(self._screen_points, event.pos))
        elif event.type == pygame.MOUSEMOTION and self._dragging:
            self._drag_moved = True
            self.selected = None
            self.camera.pan(event.pos)
        elif event.type == pygame.MOUSEWHEEL and event.y != 0:
            self.camera.zoom_by_factor(cfg.zoom_step ** event.y)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def _draw_scene(
        self,
        screen: pygame.Surface,
        orbit_layer: pygame.Surface,
        frame: Frame,
        font: pygame.font.Font,
    ) -> None:
        cfg = self.render_cfg
        camera = self.camera
        driver = self.driver

        orbit_layer.fill((0, 0, 0, 0))
        for name, path in driver.orbit_paths().items():
            points = downsample_points(camera.project(path.points), cfg.max_rendered_orbit_points)
            color = cfg.orbit_selected_color if name == self.selected else cfg.orbit_color
            draw_orbit_line(orbit_layer, color, points, cfg.orbit_line_width)
        screen.blit(orbit_layer, (0, 0))

        center = camera.world_to_screen(0.0, 0.0)
        central_radius = driver.central.radius
        if central_radius is not None:
            central_px = int(driver.scale.radius_to_display(central_radius) * camera.ppu)
        else:
            central_px = cfg.body_min_pixel_radius * 3
        draw_central_body(screen, center, max(cfg.body_min_pixel_radius, central_px), color=cfg.central_body_color)

        self._screen_points = []
        for index, entry in enumerate(frame.bodies):
            position = camera.world_to_screen(entry.display_position[0], entry.display_position[1])
            radius = max(cfg.body_min_pixel_radius, int(entry.display_radius * camera.ppu))
            draw_body(
                screen,
                position,
                radius,
                color=body_color(index, cfg),
                spin=driver.body(entry.name).spin,
                marker_color=cfg.spin_marker_color,
            )
            if entry.name == self.selected:
                draw_selection_ring(screen, position, radius, color=cfg.orbit_selected_color)
            draw_label(screen, font, entry.name, position, color=cfg.label_text_color)
            self._screen_points.append((entry.name, position))

        if self.selected is not None:
            periapsis, apoapsis = apsis_positions(driver.body(self.selected).elements)
            for kind, vector in (("periapsis", periapsis), ("apoapsis", apoapsis)):
                point = driver.scale.position_to_display(vector)
                draw_apsis_marker(
                    screen,
                    camera.world_to_screen(point[0], point[1]),
                    color=cfg.spin_marker_color,
                    kind=kind,
                )

    def _draw_overlay(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        cfg = self.render_cfg
        clock = self.driver.clock
        hud = build_text_panel(
            font,
            [(text, cfg.hud_text_color) for text in hud_lines(clock.days, clock.time_scale, self.selected)],
            background_color=cfg.panel_background_color,
        )
        screen.blit(hud, (12, 12))
        if self.selected is None:
            return
        info = self.driver.info(self.selected)
        panel = build_text_panel(
            font,
            [(text, cfg.hud_text_color) for text in info_lines(info)],
            background_color=cfg.panel_background_color,
        )
        width, height = screen.get_size()
        screen.blit(panel, (width - panel.get_width() - 12, height - panel.get_height() - 12))

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self, max_frames: int | None = None) -> None:
        cfg = self.render_cfg
        pygame.init()
        try:
            screen = pygame.display.set_mode((cfg.width, cfg.height), pygame.RESIZABLE)
            pygame.display.set_caption("Orrery")
            font = load_font(cfg.font_names, cfg.font_size)
            starfield = generate_starfield(240, size=(cfg.width, cfg.height), rng=random.Random(42))
            orbit_layer = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            fps_clock = pygame.time.Clock()
            timer = FrameTimer()
            self._running = True
            frames = 0
            logger.info("Viewer started with %d bodies", len(self.driver.body_names))

            while self._running:
                for event in pygame.event.get():
                    self._handle_event(event)
                if not self._running:
                    break

                frame = self.driver.step(timer.tick())
                if self.selected is not None:
                    self.camera.set_target(frame.body(self.selected).display_position)
                self.camera.update(cfg.camera_smoothing)

                if orbit_layer.get_size() != screen.get_size():
                    orbit_layer = pygame.Surface(screen.get_size(), pygame.SRCALPHA)

                screen.fill(cfg.background_color)
                draw_starfield(screen, starfield, self.camera.center, self.camera.ppu)
                self._draw_scene(screen, orbit_layer, frame, font)
                self._draw_overlay(screen, font)
                pygame.display.flip()
                fps_clock.tick(cfg.fps)

                frames += 1
                if max_frames is not None and frames >= max_frames:
                    break
        finally:
            logger.info("Viewer closed at t=%.6g s", self.driver.time)
            pygame.quit()


__all__ = ["OrreryViewer", "pick_nearest", "step_time_scale"]
