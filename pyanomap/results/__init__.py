"""Value types produced by postprocessing."""

from __future__ import annotations

from .heatmap import Heatmap, Mask, RasterInstance
from .item import ResultItem, result_to_jsonable, results_to_jsonable
from .meta import InstanceMeta, clamp_confidence
from .prob import Prob, Text

__all__ = [
    "Heatmap",
    "InstanceMeta",
    "Mask",
    "Prob",
    "RasterInstance",
    "ResultItem",
    "Text",
    "clamp_confidence",
    "result_to_jsonable",
    "results_to_jsonable",
]
