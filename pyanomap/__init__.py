"""pyanomap - anomaly-map postprocessing and heatmap rendering.

Keep top-level imports lightweight: submodules pull in numpy, OpenCV, Pillow
and joblib. Exports are lazy-loaded on demand.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    # Modules
    "config",
    "models",
    "postprocess",
    "results",
    "visualization",
    # Errors
    "BufferConstructionError",
    "ShapeMismatchError",
    "StyleError",
    # Core API
    "AnomalyModel",
    "DrawContext",
    "Heatmap",
    "PostprocessConfig",
    "ResultItem",
    "StageTimer",
    "Style",
    "create_model",
    "draw_heatmaps",
]


_LAZY_SUBMODULES = {
    "config",
    "models",
    "postprocess",
    "results",
    "visualization",
}

_LAZY_EXPORTS = {
    "BufferConstructionError": ("errors", "BufferConstructionError"),
    "ShapeMismatchError": ("errors", "ShapeMismatchError"),
    "StyleError": ("errors", "StyleError"),
    "AnomalyModel": ("models", "AnomalyModel"),
    "create_model": ("models", "create_model"),
    "Heatmap": ("results", "Heatmap"),
    "ResultItem": ("results", "ResultItem"),
    "PostprocessConfig": ("postprocess", "PostprocessConfig"),
    "StageTimer": ("reporting.timing", "StageTimer"),
    "DrawContext": ("visualization", "DrawContext"),
    "Style": ("visualization", "Style"),
    "draw_heatmaps": ("visualization", "draw_heatmaps"),
}


def __getattr__(name: str) -> Any:  # pragma: no cover - thin delegation
    if name in _LAZY_SUBMODULES:
        module = import_module(f"{__name__}.{name}")
        globals()[name] = module
        return module

    target = _LAZY_EXPORTS.get(name)
    if target is not None:
        module_name, attr = target
        module = import_module(f"{__name__}.{module_name}")
        value = getattr(module, attr)
        globals()[name] = value
        return value

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover - tooling convenience
    return sorted(set(globals()) | set(__all__))
