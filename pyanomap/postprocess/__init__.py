"""Output-tensor postprocessing (raw maps/scores → result items)."""

from __future__ import annotations

from .maps import (
    apply_edge_ignore,
    clamp_unit,
    mean_score,
    peak_score,
    quantize_u8,
    resize_raster,
    squeeze_channel,
)
from .strategy import (
    MEAN_SCORE_NAME,
    PEAK_SCORE_NAME,
    PostprocessConfig,
    ResizeSpec,
    postprocess,
)

__all__ = [
    "MEAN_SCORE_NAME",
    "PEAK_SCORE_NAME",
    "PostprocessConfig",
    "ResizeSpec",
    "apply_edge_ignore",
    "clamp_unit",
    "mean_score",
    "peak_score",
    "postprocess",
    "quantize_u8",
    "resize_raster",
    "squeeze_channel",
]
