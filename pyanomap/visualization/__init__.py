"""Heatmap styling and canvas compositing."""

from __future__ import annotations

from .canvas import canvas_from_image, check_canvas, new_canvas, save_canvas
from .heatmap import (
    alpha_over,
    centering_offset,
    colorize,
    draw_heatmap,
    draw_heatmaps,
    draw_result,
    gradient_colors,
)
from .style import (
    BUILTIN_HEATMAP_STYLE,
    DEFAULT_FILL_ALPHA,
    DrawContext,
    Style,
    colormap_lut,
    resolve_style,
)

__all__ = [
    "BUILTIN_HEATMAP_STYLE",
    "DEFAULT_FILL_ALPHA",
    "DrawContext",
    "Style",
    "alpha_over",
    "canvas_from_image",
    "centering_offset",
    "check_canvas",
    "colorize",
    "colormap_lut",
    "draw_heatmap",
    "draw_heatmaps",
    "draw_result",
    "gradient_colors",
    "new_canvas",
    "resolve_style",
    "save_canvas",
]
