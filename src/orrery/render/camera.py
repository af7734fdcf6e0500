from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


@dataclass
class CameraState:
    center: np.ndarray = field(default_factory=lambda: np.zeros(2))
    target: np.ndarray = field(default_factory=lambda: np.zeros(2))
    ppu: float = 1.0
    ppu_target: float = 1.0


class Camera:
    """Top-down camera over display space.

    Display-space points are 3-D; the camera looks down the reference
    ``+z`` axis, so only ``x`` and ``y`` reach the screen. ``ppu`` is the
    number of pixels per display unit and always stays inside the zoom
    limits given at construction.
    """

    def __init__(
        self,
        size: tuple[int, int],
        ppu: float,
        *,
        min_ppu: float,
        max_ppu: float,
    ) -> None:
        self._size = size
        self._limits = (min_ppu, max_ppu)
        self._state = CameraState()
        self.set_zoom(ppu)
        self._pan_anchor: tuple[int, int] | None = None

    def _clamp_ppu(self, ppu: float) -> float:
        low, high = self._limits
        return min(high, max(low, ppu))

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def update_size(self, size: tuple[int, int]) -> None:
        self._size = size

    @property
    def ppu(self) -> float:
        return self._state.ppu

    @property
    def ppu_target(self) -> float:
        return self._state.ppu_target

    @property
    def center(self) -> np.ndarray:
        return self._state.center

    def set_center(self, position: Sequence[float]) -> None:
        self._state.center = np.array(position[:2], dtype=float)
        self._state.target = self._state.center.copy()

    def set_target(self, position: Sequence[float]) -> None:
        self._state.target = np.array(position[:2], dtype=float)

    def set_zoom(self, ppu: float) -> None:
        self._state.ppu = self._state.ppu_target = self._clamp_ppu(ppu)

    def zoom_by_factor(self, factor: float) -> None:
        self._state.ppu_target = self._clamp_ppu(self._state.ppu_target * factor)

    def update(self, smoothing: float = 0.1) -> None:
        """Ease the zoom and the center a fraction ``smoothing`` towards their targets."""

        state = self._state
        state.ppu = self._clamp_ppu(state.ppu + (state.ppu_target - state.ppu) * smoothing)
        state.center = state.center + (state.target - state.center) * smoothing

    # Dragging moves the scene with the pointer, so the center moves against it.
    def begin_pan(self, position: tuple[int, int]) -> None:
        self._pan_anchor = position

    def pan(self, position: tuple[int, int]) -> None:
        if self._pan_anchor is None or position == self._pan_anchor:
            return
        delta = np.subtract(position, self._pan_anchor) / self._state.ppu
        self.set_center(self._state.center - delta * (1.0, -1.0))
        self._pan_anchor = position

    def end_pan(self) -> None:
        self._pan_anchor = None

    def project(self, points: np.ndarray) -> list[tuple[int, int]]:
        """Screen coordinates for an ``(N, 3)`` or ``(N, 2)`` array of display points."""

        pts = np.atleast_2d(np.asarray(points, dtype=float))[:, :2]
        offset = np.rint((pts - self._state.center) * self._state.ppu) * (1.0, -1.0)
        half = np.array(self._size) // 2
        return [(int(x), int(y)) for x, y in half + offset]

    def world_to_screen(self, x: float, y: float) -> tuple[int, int]:
        return self.project(np.array([x, y]))[0]

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        half = np.array(self._size) / 2.0
        x, y = (np.array([sx, sy], dtype=float) - half) * (1.0, -1.0) / self._state.ppu + self._state.center
        return float(x), float(y)
