"""Rendering helpers for the orrery viewer."""

from .camera import Camera
from .assets import (
    clear_text_cache,
    get_text_surface,
    load_font,
)
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
    spin_marker_offset,
)
from .ui import (
    build_text_panel,
    format_time_scale,
    hud_lines,
    info_lines,
)
from .viewer import OrreryViewer, pick_nearest, step_time_scale

__all__ = [
    "Camera",
    "OrreryViewer",
    "body_color",
    "build_text_panel",
    "clear_text_cache",
    "downsample_points",
    "draw_apsis_marker",
    "draw_body",
    "draw_central_body",
    "draw_label",
    "draw_orbit_line",
    "draw_selection_ring",
    "draw_starfield",
    "format_time_scale",
    "generate_starfield",
    "get_text_surface",
    "hud_lines",
    "info_lines",
    "load_font",
    "pick_nearest",
    "spin_marker_offset",
    "step_time_scale",
]
