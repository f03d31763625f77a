"""Array helpers shared by the postprocess strategies.

All helpers work on 2D ``(H, W)`` float maps unless stated otherwise.
Quantization truncates toward zero (``floor(v * 255)`` on clamped values); it
never rounds to nearest.
"""

from __future__ import annotations

from typing import Literal, Tuple

import numpy as np
from PIL import Image

from pyanomap.errors import ShapeMismatchError

ResizeFilter = Literal["nearest", "triangle", "box", "cubic", "lanczos"]

_RESAMPLING = {
    "nearest": Image.Resampling.NEAREST,
    "triangle": Image.Resampling.BILINEAR,
    "box": Image.Resampling.BOX,
    "cubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}

# Aliases used by model configs for the input resize filter.
_FILTER_ALIASES = {
    "bilinear": "triangle",
    "linear": "triangle",
    "catmullrom": "cubic",
    "bicubic": "cubic",
    "lanczos3": "lanczos",
}


def parse_resize_filter(raw: str) -> ResizeFilter:
    key = str(raw).strip().lower()
    key = _FILTER_ALIASES.get(key, key)
    if key not in _RESAMPLING:
        choices = ", ".join(sorted(_RESAMPLING))
        raise ValueError(f"Unknown resize filter: {raw!r}. Choose from: {choices}.")
    return key  # type: ignore[return-value]


def pil_resampling(name: str) -> Image.Resampling:
    return _RESAMPLING[parse_resize_filter(name)]


def clamp_unit(values: np.ndarray) -> np.ndarray:
    """Clip to ``[0, 1]`` as float32; NaN becomes 0."""

    arr = np.asarray(values, dtype=np.float32)
    arr = np.where(np.isnan(arr), np.float32(0.0), arr)
    return np.clip(arr, np.float32(0.0), np.float32(1.0)).astype(np.float32, copy=False)


def quantize_u8(values: np.ndarray) -> np.ndarray:
    """Map values to uint8 bytes via ``floor(clamp(v, 0, 1) * 255)``."""

    scaled = clamp_unit(values) * np.float32(255.0)
    return scaled.astype(np.uint8)


def squeeze_channel(item: np.ndarray, *, index: int = 0) -> np.ndarray:
    """Turn a per-item slice of shape ``(H, W)`` or ``(1, H, W)`` into ``(H, W)``."""

    arr = np.asarray(item)
    if arr.ndim == 2:
        return arr
    if arr.ndim == 3:
        if arr.shape[0] != 1:
            raise ShapeMismatchError(
                f"Item {index}: expected a single-channel map (1,H,W), got shape {arr.shape}"
            )
        return arr[0]
    raise ShapeMismatchError(
        f"Item {index}: expected map shape (H,W) or (1,H,W), got shape {arr.shape}"
    )


def apply_edge_ignore(anomaly_map: np.ndarray, edge_ignore_px: int) -> np.ndarray:
    """Zero the left and right column bands of width ``edge_ignore_px``.

    Pixels with column index ``x < e`` or ``x >= W - e`` are set to 0. ``e <= 0``
    returns an unchanged copy; a band covering the whole width zeroes the map.
    """

    m = np.array(anomaly_map, dtype=np.float32, copy=True)
    n = int(edge_ignore_px)
    if n <= 0 or m.ndim < 1:
        return m

    w = int(m.shape[-1])
    if n * 2 >= w:
        m[...] = 0.0
        return m

    m[..., :n] = 0.0
    m[..., w - n :] = 0.0
    return m


def peak_score(values: np.ndarray) -> float:
    """Maximum value, folding from ``0.0`` so an empty or all-zero map yields 0."""

    arr = np.asarray(values, dtype=np.float32)
    if arr.size == 0:
        return 0.0
    return float(max(0.0, float(np.max(arr))))


def mean_score(values: np.ndarray) -> float:
    arr = np.asarray(values, dtype=np.float32)
    if arr.size == 0:
        return 0.0
    return float(np.sum(arr, dtype=np.float32) / np.float32(arr.size))


def resize_raster(
    raster: np.ndarray,
    size_wh: Tuple[int, int],
    *,
    filter: str = "triangle",  # noqa: A002 - matches config field
) -> np.ndarray:
    """Resize a uint8 raster to ``(width, height)`` with a Pillow filter.

    Pillow widens the filter support when downsampling, so ``triangle`` and
    ``box`` average over the source area instead of point sampling.
    """

    arr = np.asarray(raster, dtype=np.uint8)
    if arr.ndim != 2:
        raise ValueError(f"Expected 2D raster, got shape {arr.shape}")
    w, h = int(size_wh[0]), int(size_wh[1])
    if w <= 0 or h <= 0:
        raise ValueError(f"Resize target must be positive, got {w}x{h}")
    if arr.shape == (h, w):
        return arr.copy()

    resized = Image.fromarray(np.ascontiguousarray(arr)).resize((w, h), resample=pil_resampling(filter))
    return np.asarray(resized, dtype=np.uint8)
