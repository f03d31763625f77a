from __future__ import annotations

from pathlib import Path
from typing import Sequence, Union

import numpy as np
from PIL import Image

CanvasSource = Union[str, Path, np.ndarray]


def check_canvas(canvas: np.ndarray) -> None:
    if not isinstance(canvas, np.ndarray):
        raise TypeError(f"Canvas must be a numpy array, got {type(canvas).__name__}")
    if canvas.ndim != 3 or canvas.shape[2] != 4:
        raise ValueError(f"Canvas must have shape (H,W,4), got {canvas.shape}")
    if canvas.dtype != np.uint8:
        raise ValueError(f"Canvas must be uint8, got {canvas.dtype}")
    if not canvas.flags.writeable:
        raise ValueError("Canvas must be writeable")


def new_canvas(width: int, height: int, color: Sequence[int] = (0, 0, 0, 0)) -> np.ndarray:
    """Create an RGBA canvas filled with ``color``."""

    w, h = int(width), int(height)
    if w <= 0 or h <= 0:
        raise ValueError(f"Canvas size must be positive, got {w}x{h}")
    rgba = tuple(int(c) for c in color)
    if len(rgba) == 3:
        rgba = rgba + (255,)
    if len(rgba) != 4:
        raise ValueError(f"color must have 3 or 4 components, got {color!r}")
    canvas = np.empty((h, w, 4), dtype=np.uint8)
    canvas[...] = np.asarray(rgba, dtype=np.uint8)
    return canvas


def canvas_from_image(source: CanvasSource) -> np.ndarray:
    """Load an image path or RGB/RGBA/gray uint8 array as a fresh RGBA canvas."""

    if isinstance(source, (str, Path)):
        with Image.open(str(source)) as im:
            return np.array(im.convert("RGBA"), dtype=np.uint8)

    arr = np.asarray(source)
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected dtype=uint8 image, got {arr.dtype}")
    if arr.ndim == 2:
        arr = np.repeat(arr[..., None], 3, axis=2)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected image shape (H,W), (H,W,3) or (H,W,4), got {arr.shape}")
    if arr.shape[2] == 4:
        return np.array(arr, dtype=np.uint8, copy=True)

    out = np.empty(arr.shape[:2] + (4,), dtype=np.uint8)
    out[..., :3] = arr
    out[..., 3] = 255
    return out


def save_canvas(canvas: np.ndarray, path: str | Path) -> Path:
    check_canvas(canvas)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(canvas)).save(out)
    return out
