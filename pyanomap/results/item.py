"""Per-image result container.

Every field is optional and independent: a postprocess step fills only what
its model produces, and ``None`` means "not applicable", never an error.
Heatmaps, masks and images are render-time artifacts and are left out of the
JSON payloads built here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Sequence, Tuple

import numpy as np

from pyanomap.results.heatmap import Heatmap, Mask
from pyanomap.results.prob import Prob, Text


def _as_tuple(items: Optional[Iterable[Any]]) -> Optional[tuple]:
    if items is None:
        return None
    return tuple(items)


@dataclass(frozen=True, eq=False)
class ResultItem:
    heatmaps: Optional[Tuple[Heatmap, ...]] = None
    probs: Optional[Tuple[Prob, ...]] = None
    masks: Optional[Tuple[Mask, ...]] = None
    images: Optional[Tuple[np.ndarray, ...]] = None
    texts: Optional[Tuple[Text, ...]] = None

    def __post_init__(self) -> None:
        for name in ("heatmaps", "probs", "masks", "images", "texts"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

    def with_heatmaps(self, heatmaps: Iterable[Heatmap]) -> "ResultItem":
        return replace(self, heatmaps=tuple(heatmaps))

    def with_probs(self, probs: Iterable[Prob]) -> "ResultItem":
        return replace(self, probs=tuple(probs))

    def with_masks(self, masks: Iterable[Mask]) -> "ResultItem":
        return replace(self, masks=tuple(masks))

    def with_images(self, images: Iterable[np.ndarray]) -> "ResultItem":
        return replace(self, images=tuple(images))

    def with_texts(self, texts: Iterable[Text]) -> "ResultItem":
        return replace(self, texts=tuple(texts))

    def prob(self, name: str) -> Optional[Prob]:
        """Return the first probability named ``name``, if any."""

        for p in self.probs or ():
            if p.name == name:
                return p
        return None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.probs:
            payload["probs"] = [p.to_dict() for p in self.probs]
        if self.texts:
            payload["texts"] = [t.to_dict() for t in self.texts]
        return payload

    def __repr__(self) -> str:
        parts = []
        for name in ("texts", "probs", "heatmaps", "masks"):
            value = getattr(self, name)
            if value:
                parts.append(f"{name}={list(value)!r}")
        if self.images:
            parts.append(f"images=[{len(self.images)} image(s)]")
        return f"ResultItem({', '.join(parts)})"


def result_to_jsonable(result: ResultItem) -> dict[str, Any]:
    return result.to_dict()


def results_to_jsonable(results: Sequence[ResultItem]) -> list[dict[str, Any]]:
    return [result_to_jsonable(r) for r in results]
