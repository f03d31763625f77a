"""Exception types raised by pyanomap.

All of them subclass :class:`ValueError` so callers that already guard
array/shape validation with ``except ValueError`` keep working. Errors coming
from an inference engine are never wrapped: they propagate unchanged.
"""

from __future__ import annotations


class ShapeMismatchError(ValueError):
    """Output tensors do not match the layout a postprocess config expects."""


class BufferConstructionError(ValueError):
    """A raw pixel buffer cannot be turned into a raster of the declared size."""


class StyleError(ValueError):
    """A rendering style carries values that cannot be drawn."""


__all__ = ["BufferConstructionError", "ShapeMismatchError", "StyleError"]
