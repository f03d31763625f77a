from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Union

from pyanomap.postprocess.strategy import PostprocessConfig


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a config file into a Python dict.

    Supported formats:
    - JSON (.json) always
    - YAML (.yml/.yaml) only when PyYAML is installed
    """

    config_path = Path(path)
    suffix = str(config_path.suffix).lower()

    if suffix == ".json":
        with config_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    elif suffix in (".yml", ".yaml"):
        try:
            import yaml  # type: ignore[import-not-found]
        except Exception as exc:  # noqa: BLE001 - dependency boundary
            raise ImportError(
                "YAML config files require PyYAML.\n"
                "Install it via:\n"
                "  pip install 'pyanomap[yaml]'"
            ) from exc

        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    else:
        raise ValueError(
            f"Unsupported config extension: {suffix!r} for {str(config_path)!r}. "
            "Supported: .json, .yml, .yaml."
        )

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ValueError(
            "Config must be an object/dict at the top level, "
            f"got {type(data).__name__} from {str(config_path)!r}."
        )

    return dict(data)


def load_postprocess_config(source: Union[str, Path, Mapping[str, Any]]) -> PostprocessConfig:
    """Build a :class:`PostprocessConfig` from a file or mapping.

    A ``"preset"`` key starts from that preset's postprocess config; the
    remaining keys override its fields. A nested ``"postprocess"`` mapping is
    accepted as well, so a full model config file can be passed directly.
    """

    payload: dict[str, Any]
    if isinstance(source, Mapping):
        payload = dict(source)
    else:
        payload = load_config(source)

    preset = payload.pop("preset", None)
    nested = payload.pop("postprocess", None)
    if nested is not None:
        if not isinstance(nested, Mapping):
            raise ValueError(f"'postprocess' must be an object/dict, got {type(nested).__name__}")
        payload = {**payload, **dict(nested)}

    if preset is None:
        return PostprocessConfig.from_dict(payload)

    from pyanomap.models import get_preset

    base = get_preset(str(preset)).postprocess
    known = set(base.to_dict())
    unknown = set(payload) - known
    if unknown:
        raise ValueError(f"Unknown postprocess config keys: {sorted(unknown)}")
    return base.with_(**payload)
