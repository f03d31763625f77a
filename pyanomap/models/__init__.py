"""Model presets and the end-to-end inference wrapper."""

from __future__ import annotations

from .config import IMAGENET_MEAN, IMAGENET_STD, ModelConfig
from .pipeline import AnomalyModel, Engine, create_model
from .preprocessing import ImagePreprocessor, load_image
from .registry import PRESET_REGISTRY, get_preset, list_presets, preset_info, register_preset

# Import for side effects: registers the built-in presets.
from . import presets  # noqa: F401,E402

__all__ = [
    "AnomalyModel",
    "Engine",
    "IMAGENET_MEAN",
    "IMAGENET_STD",
    "ImagePreprocessor",
    "ModelConfig",
    "PRESET_REGISTRY",
    "create_model",
    "get_preset",
    "list_presets",
    "load_image",
    "preset_info",
    "register_preset",
]
