"""
Preset registry for model configurations.

Presets are plain functions returning a :class:`ModelConfig`; registering
them by name lets CLIs and config files refer to a model family by string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from pyanomap.models.config import ModelConfig


@dataclass
class PresetEntry:
    name: str
    constructor: Callable[[], ModelConfig]
    tags: tuple[str, ...]
    metadata: Dict[str, Any]


class PresetRegistry:
    """Registry for storing model-config constructors with metadata."""

    def __init__(self) -> None:
        self._registry: Dict[str, PresetEntry] = {}

    # ------------------------------------------------------------------
    def register(
        self,
        name: str,
        constructor: Callable[[], ModelConfig],
        *,
        tags: Optional[Iterable[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        overwrite: bool = False,
    ) -> None:
        if not overwrite and name in self._registry:
            raise KeyError(
                f"Preset {name!r} already exists. Set overwrite=True to replace it."
            )
        self._registry[name] = PresetEntry(
            name=name,
            constructor=constructor,
            tags=tuple(tags or ()),
            metadata=metadata or {},
        )

    def get(self, name: str) -> ModelConfig:
        try:
            entry = self._registry[name]
        except KeyError as exc:
            available = ", ".join(sorted(self._registry)) or "<empty>"
            raise KeyError(f"Preset {name!r} not found. Available presets: {available}") from exc
        return entry.constructor()

    def available(self, *, tags: Optional[Iterable[str]] = None) -> List[str]:
        if tags is None:
            return sorted(self._registry)
        tag_set = set(tags)
        return sorted(
            entry.name for entry in self._registry.values() if tag_set.issubset(entry.tags)
        )

    def info(self, name: str) -> PresetEntry:
        if name not in self._registry:
            raise KeyError(f"Preset {name!r} not found in registry")
        return self._registry[name]

    def preset_info(self, name: str) -> Dict[str, Any]:
        entry = self.info(name)
        return {
            "name": entry.name,
            "tags": list(entry.tags),
            "metadata": dict(entry.metadata),
            "postprocess": entry.constructor().postprocess.to_dict(),
        }


PRESET_REGISTRY = PresetRegistry()


def register_preset(
    name: str,
    *,
    tags: Optional[Iterable[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    overwrite: bool = False,
) -> Callable[[Callable[[], ModelConfig]], Callable[[], ModelConfig]]:
    """
    Decorator registering a model-config preset at import time.

    Examples
    --------
    >>> @register_preset("my_model", tags=["dual"])
    ... def my_model() -> ModelConfig:
    ...     return ModelConfig(name="my_model")
    """

    def decorator(constructor: Callable[[], ModelConfig]) -> Callable[[], ModelConfig]:
        PRESET_REGISTRY.register(
            name,
            constructor,
            tags=tags,
            metadata=metadata,
            overwrite=overwrite,
        )
        return constructor

    return decorator


def get_preset(name: str) -> ModelConfig:
    """Return a fresh :class:`ModelConfig` for a registered preset name."""

    return PRESET_REGISTRY.get(name)


def list_presets(*, tags: Optional[Iterable[str]] = None) -> List[str]:
    return PRESET_REGISTRY.available(tags=tags)


def preset_info(name: str) -> Dict[str, Any]:
    """Return name, tags, metadata and postprocess settings of a preset."""

    return PRESET_REGISTRY.preset_info(name)
