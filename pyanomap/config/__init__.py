"""Config file loading."""

from __future__ import annotations

from .io import load_config, load_postprocess_config

__all__ = ["load_config", "load_postprocess_config"]
