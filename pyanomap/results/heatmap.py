"""Single-channel 8-bit rasters produced by postprocessing.

A :class:`Heatmap` owns its raster: the array is copied on construction and
marked read-only, so the width and height never change after the value is
built. Metadata and style are attached through ``with_*`` calls, each
returning a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np

from pyanomap.errors import BufferConstructionError
from pyanomap.results.meta import InstanceMeta

if TYPE_CHECKING:  # pragma: no cover
    from pyanomap.visualization.style import Style

_R = TypeVar("_R", bound="RasterInstance")


def _freeze_raster(raster: np.ndarray) -> np.ndarray:
    arr = np.asarray(raster)
    if arr.ndim != 2:
        raise BufferConstructionError(f"Expected a 2D raster, got shape {arr.shape}")
    if arr.dtype != np.uint8:
        raise BufferConstructionError(f"Expected dtype=uint8 raster, got {arr.dtype}")
    out = np.array(arr, dtype=np.uint8, copy=True, order="C")
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class RasterInstance:
    map: np.ndarray
    meta: InstanceMeta = field(default_factory=InstanceMeta)
    style: Optional["Style"] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "map", _freeze_raster(self.map))

    @classmethod
    def from_array(cls: type[_R], raster: np.ndarray) -> _R:
        return cls(map=raster)

    @classmethod
    def from_buffer(
        cls: type[_R],
        data: Union[bytes, bytearray, Sequence[int], np.ndarray],
        width: int,
        height: int,
    ) -> _R:
        """Build a raster from a flat row-major buffer of ``width * height`` bytes."""

        w, h = int(width), int(height)
        if w < 0 or h < 0:
            raise BufferConstructionError(f"Invalid raster size: width={w}, height={h}")

        if isinstance(data, (bytes, bytearray)):
            flat = np.frombuffer(bytes(data), dtype=np.uint8)
        else:
            flat = np.asarray(data)
            if flat.ndim != 1:
                flat = flat.reshape(-1)
            if flat.size and (flat.min() < 0 or flat.max() > 255):
                raise BufferConstructionError("Buffer values must fit in uint8 (0..255).")
            flat = flat.astype(np.uint8)

        if flat.size != w * h:
            raise BufferConstructionError(
                f"Buffer holds {flat.size} values but {w}x{h} requires {w * h}."
            )
        return cls(map=flat.reshape(h, w))

    @property
    def width(self) -> int:
        return int(self.map.shape[1])

    @property
    def height(self) -> int:
        return int(self.map.shape[0])

    @property
    def dimensions(self) -> Tuple[int, int]:
        """``(width, height)``."""
        return self.width, self.height

    @property
    def uid(self) -> Optional[int]:
        return self.meta.uid

    @property
    def id(self) -> Optional[int]:
        return self.meta.id

    @property
    def name(self) -> Optional[str]:
        return self.meta.name

    @property
    def confidence(self) -> Optional[float]:
        return self.meta.confidence

    def to_bytes(self) -> bytes:
        return self.map.tobytes()

    def with_uid(self: _R, uid: int) -> _R:
        return replace(self, meta=self.meta.with_uid(uid))

    def with_id(self: _R, id: int) -> _R:  # noqa: A002 - mirrors field name
        return replace(self, meta=self.meta.with_id(id))

    def with_name(self: _R, name: str) -> _R:
        return replace(self, meta=self.meta.with_name(name))

    def with_confidence(self: _R, confidence: float) -> _R:
        return replace(self, meta=self.meta.with_confidence(confidence))

    def with_style(self: _R, style: Optional["Style"]) -> _R:
        return replace(self, style=style)

    def __eq__(self, other: object) -> bool:
        # Identity and style are presentation details; two rasters with the
        # same pixels compare equal.
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.map.shape == other.map.shape and bool(np.array_equal(self.map, other.map))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dimensions={self.dimensions}, uid={self.uid}, "
            f"id={self.id}, name={self.name!r}, confidence={self.confidence})"
        )


class Heatmap(RasterInstance):
    """Anomaly heatmap: 0 is normal, 255 is maximally anomalous."""


class Mask(RasterInstance):
    """Binary (0/255) segmentation mask."""
