"""Rendering styles and their three-tier resolution.

A drawable instance may carry its own :class:`Style`; otherwise the caller's
per-category default from the :class:`DrawContext` applies; otherwise the
built-in default. Resolution is an explicit function of those three values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

import cv2
import numpy as np

from pyanomap.errors import StyleError

DEFAULT_FILL_ALPHA = 120


def _validate_alpha(alpha: Optional[int]) -> Optional[int]:
    if alpha is None:
        return None
    if isinstance(alpha, bool) or not isinstance(alpha, (int, np.integer)):
        raise StyleError(f"color_fill_alpha must be an int in [0, 255], got {alpha!r}")
    if not 0 <= int(alpha) <= 255:
        raise StyleError(f"color_fill_alpha must be in [0, 255], got {alpha}")
    return int(alpha)


def _validate_colormap(colormap: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if colormap is None:
        return None
    arr = np.asarray(colormap)
    if arr.shape != (256, 3):
        raise StyleError(f"colormap256 must have shape (256, 3), got {arr.shape}")
    if arr.size and (float(arr.min()) < 0 or float(arr.max()) > 255):
        raise StyleError("colormap256 entries must be RGB bytes in [0, 255]")
    out = np.array(arr, dtype=np.uint8, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class Style:
    color_fill_alpha: Optional[int] = None
    colormap256: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "color_fill_alpha", _validate_alpha(self.color_fill_alpha))
        object.__setattr__(self, "colormap256", _validate_colormap(self.colormap256))

    @classmethod
    def from_colormap_name(cls, name: str, *, alpha: Optional[int] = None) -> "Style":
        """Build a style whose lookup table is an OpenCV colormap (``"jet"``, ``"turbo"``, ...)."""

        return cls(color_fill_alpha=alpha, colormap256=colormap_lut(name))

    def with_alpha(self, alpha: Optional[int]) -> "Style":
        return replace(self, color_fill_alpha=alpha)

    def with_colormap(self, colormap: Optional[np.ndarray]) -> "Style":
        return replace(self, colormap256=colormap)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Style):
            return NotImplemented
        if self.color_fill_alpha != other.color_fill_alpha:
            return False
        if self.colormap256 is None or other.colormap256 is None:
            return self.colormap256 is None and other.colormap256 is None
        return bool(np.array_equal(self.colormap256, other.colormap256))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        cmap = "None" if self.colormap256 is None else "<256 colors>"
        return f"Style(color_fill_alpha={self.color_fill_alpha}, colormap256={cmap})"


BUILTIN_HEATMAP_STYLE = Style(color_fill_alpha=DEFAULT_FILL_ALPHA)


def colormap_lut(name: str) -> np.ndarray:
    """Return a ``(256, 3)`` RGB lookup table for an OpenCV colormap name."""

    attr = f"COLORMAP_{str(name).strip().upper()}"
    code = getattr(cv2, attr, None)
    if code is None:
        raise StyleError(f"Unknown OpenCV colormap: {name!r}")
    ramp = np.arange(256, dtype=np.uint8).reshape(256, 1)
    bgr = cv2.applyColorMap(ramp, int(code)).reshape(256, 3)
    return np.ascontiguousarray(bgr[:, ::-1])


@dataclass(frozen=True)
class DrawContext:
    """Caller-supplied per-category default styles for one draw call."""

    heatmap_style: Optional[Style] = None
    mask_style: Optional[Style] = None


def resolve_style(
    local: Optional[Style],
    global_default: Optional[Style],
    builtin: Style = BUILTIN_HEATMAP_STYLE,
) -> Style:
    """Pick the first style set among ``local``, ``global_default``, ``builtin``.

    Fields left as ``None`` in the chosen style are taken from ``builtin``.
    """

    chosen = local if local is not None else global_default
    if chosen is None:
        return builtin

    alpha = chosen.color_fill_alpha
    if alpha is None:
        alpha = builtin.color_fill_alpha
    colormap = chosen.colormap256
    if colormap is None:
        colormap = builtin.colormap256
    return Style(color_fill_alpha=alpha, colormap256=colormap)
