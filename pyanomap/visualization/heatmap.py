"""Composite :class:`~pyanomap.results.Heatmap` rasters onto an RGBA canvas.

The canvas is a caller-owned ``(H, W, 4)`` uint8 array and is modified in
place. Concurrent draws onto one canvas must be serialized by the caller;
draws onto different canvases are independent.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import numpy as np

from pyanomap.results import Heatmap, ResultItem
from pyanomap.visualization.canvas import check_canvas
from pyanomap.visualization.style import (
    BUILTIN_HEATMAP_STYLE,
    DEFAULT_FILL_ALPHA,
    DrawContext,
    Style,
    resolve_style,
)

logger = logging.getLogger(__name__)


def gradient_colors(raster: np.ndarray) -> np.ndarray:
    """Green (low) → yellow → red (high) colors for a uint8 raster, as ``(H, W, 3)``."""

    n = np.asarray(raster, dtype=np.float32) / np.float32(255.0)
    low = n < np.float32(0.5)
    one = np.float32(1.0)
    r = np.where(low, np.float32(2.0) * n, one)
    g = np.where(low, one, np.float32(2.0) * (one - n))
    b = np.zeros_like(n)
    rgb = np.stack([r, g, b], axis=-1) * np.float32(255.0)
    return rgb.astype(np.uint8)


def colorize(raster: np.ndarray, style: Style) -> np.ndarray:
    """Map a uint8 raster to ``(H, W, 4)`` RGBA using the style's LUT or the gradient."""

    values = np.asarray(raster, dtype=np.uint8)
    if values.ndim != 2:
        raise ValueError(f"Expected 2D raster, got shape {values.shape}")

    if style.colormap256 is not None:
        rgb = style.colormap256[values]
    else:
        rgb = gradient_colors(values)

    alpha = DEFAULT_FILL_ALPHA if style.color_fill_alpha is None else int(style.color_fill_alpha)
    out = np.empty(values.shape + (4,), dtype=np.uint8)
    out[..., :3] = rgb
    out[..., 3] = alpha
    return out


def centering_offset(canvas_hw: Tuple[int, int], raster_hw: Tuple[int, int]) -> Tuple[int, int]:
    """``(y, x)`` offset centering a raster on a canvas, clamped at 0."""

    y = max(0, (int(canvas_hw[0]) - int(raster_hw[0])) // 2)
    x = max(0, (int(canvas_hw[1]) - int(raster_hw[1])) // 2)
    return y, x


def alpha_over(canvas: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Composite ``overlay`` over ``canvas`` in place (straight alpha).

    Overlay pixels with alpha 0 leave the canvas untouched and fully opaque
    ones replace it. Blended channels are truncated to uint8.
    """

    check_canvas(canvas)
    if overlay.shape != canvas.shape:
        raise ValueError(f"Overlay shape {overlay.shape} does not match canvas {canvas.shape}")

    opaque = overlay[..., 3] == 255
    canvas[opaque] = overlay[opaque]

    partial = (overlay[..., 3] > 0) & ~opaque
    if not bool(partial.any()):
        return canvas

    fg = overlay[partial].astype(np.float32) / np.float32(255.0)
    bg = canvas[partial].astype(np.float32) / np.float32(255.0)
    fa = fg[:, 3:4]
    ba = bg[:, 3:4]

    out_a = ba + fa - ba * fa
    out_rgb = (fg[:, :3] * fa + bg[:, :3] * ba * (np.float32(1.0) - fa)) / out_a

    blended = np.concatenate([out_rgb, out_a], axis=1) * np.float32(255.0)
    canvas[partial] = np.clip(blended, 0.0, 255.0).astype(np.uint8)
    return canvas


def draw_heatmap(heatmap: Heatmap, ctx: Optional[DrawContext], canvas: np.ndarray) -> None:
    """Resolve the heatmap's style and composite it at the canvas center.

    Raster pixels that would land outside the canvas are skipped.
    """

    check_canvas(canvas)
    context = ctx if ctx is not None else DrawContext()
    style = resolve_style(heatmap.style, context.heatmap_style, BUILTIN_HEATMAP_STYLE)

    h, w = int(canvas.shape[0]), int(canvas.shape[1])
    mh, mw = heatmap.height, heatmap.width
    y0, x0 = centering_offset((h, w), (mh, mw))
    vis_h = max(0, min(mh, h - y0))
    vis_w = max(0, min(mw, w - x0))
    if vis_h == 0 or vis_w == 0:
        return

    colored = colorize(heatmap.map[:vis_h, :vis_w], style)
    overlay = np.zeros_like(canvas)
    overlay[y0 : y0 + vis_h, x0 : x0 + vis_w] = colored
    alpha_over(canvas, overlay)
    logger.debug(
        "Drew heatmap uid=%s (%dx%d) at offset (x=%d, y=%d)", heatmap.uid, mw, mh, x0, y0
    )


def draw_heatmaps(heatmaps: Iterable[Heatmap], ctx: Optional[DrawContext], canvas: np.ndarray) -> None:
    """Draw heatmaps in order; later heatmaps are painted over earlier ones."""

    for heatmap in heatmaps:
        draw_heatmap(heatmap, ctx, canvas)


def draw_result(result: ResultItem, ctx: Optional[DrawContext], canvas: np.ndarray) -> None:
    if result.heatmaps:
        draw_heatmaps(result.heatmaps, ctx, canvas)
