"""Turn raw engine output tensors into per-image :class:`ResultItem` values.

Two tensor layouts are supported through :class:`PostprocessConfig`:

- ``"dual"``: ``outputs[score_index]`` holds one global score per item
  (shape ``(B,)`` or ``(B, 1)``) and ``outputs[map_index]`` holds the spatial
  map (``(B, H, W)`` or ``(B, 1, H, W)``). The global score is the heatmap
  confidence; it is never recomputed from the map.
- ``"single"``: ``outputs[map_index]`` alone holds the map and the confidence
  is the peak of the clamped, edge-suppressed map.

Postprocessing is a pure function of its inputs: the only side channel is an
optional, explicitly passed :class:`~pyanomap.reporting.timing.StageTimer`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Literal, Mapping, Optional, Sequence

import numpy as np
from joblib import Parallel, delayed

from pyanomap.errors import ShapeMismatchError
from pyanomap.postprocess.maps import (
    ResizeFilter,
    apply_edge_ignore,
    clamp_unit,
    mean_score,
    parse_resize_filter,
    peak_score,
    quantize_u8,
    resize_raster,
    squeeze_channel,
)
from pyanomap.reporting.timing import StageTimer
from pyanomap.results import Heatmap, InstanceMeta, Mask, Prob, ResultItem, clamp_confidence
from pyanomap.utils.param_check import check_int, check_parameter

logger = logging.getLogger(__name__)

Layout = Literal["dual", "single"]

PEAK_SCORE_NAME = "peak_anomaly_score"
MEAN_SCORE_NAME = "mean_anomaly_score"


@dataclass(frozen=True)
class ResizeSpec:
    """Fixed output size for heatmap/mask rasters."""

    width: int
    height: int
    filter: ResizeFilter = "triangle"

    def __post_init__(self) -> None:
        check_int(self.width, 1, param_name="resize.width")
        check_int(self.height, 1, param_name="resize.height")
        object.__setattr__(self, "filter", parse_resize_filter(self.filter))

    def to_dict(self) -> dict[str, Any]:
        return {"width": int(self.width), "height": int(self.height), "filter": str(self.filter)}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ResizeSpec":
        unknown = set(payload) - {"width", "height", "filter"}
        if unknown:
            raise ValueError(f"Unknown resize keys: {sorted(unknown)}")
        return cls(
            width=int(payload["width"]),
            height=int(payload["height"]),
            filter=str(payload.get("filter", "triangle")),  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class PostprocessConfig:
    """Per-model description of output tensor roles and raster policy.

    ``map_index`` defaults to 2 for the dual layout and 0 for the single
    layout; ``min_outputs`` defaults to the smallest count that makes the
    configured indices valid.
    """

    layout: Layout = "dual"
    score_index: int = 0
    map_index: Optional[int] = None
    min_outputs: Optional[int] = None
    edge_ignore_px: int = 0
    resize: Optional[ResizeSpec] = None
    heatmap_name: Optional[str] = None
    emit_probs: bool = False
    mask_threshold: Optional[float] = None

    def __post_init__(self) -> None:
        if self.layout not in ("dual", "single"):
            raise ValueError(f"layout must be 'dual' or 'single', got {self.layout!r}")

        check_int(self.score_index, 0, param_name="score_index")
        map_index = self.map_index
        if map_index is None:
            map_index = 2 if self.layout == "dual" else 0
            object.__setattr__(self, "map_index", map_index)
        check_int(map_index, 0, param_name="map_index")

        if self.layout == "dual" and map_index == self.score_index:
            raise ValueError("score_index and map_index must differ for the dual layout")

        required = map_index + 1
        if self.layout == "dual":
            required = max(required, self.score_index + 1)
        if self.min_outputs is None:
            object.__setattr__(self, "min_outputs", required)
        else:
            check_int(self.min_outputs, required, param_name="min_outputs")

        check_int(self.edge_ignore_px, 0, param_name="edge_ignore_px")

        if isinstance(self.resize, Mapping):
            object.__setattr__(self, "resize", ResizeSpec.from_dict(self.resize))
        elif self.resize is not None and not isinstance(self.resize, ResizeSpec):
            raise TypeError(f"resize must be a ResizeSpec or None, got {type(self.resize).__name__}")

        if self.mask_threshold is not None:
            check_parameter(float(self.mask_threshold), 0.0, 1.0, param_name="mask_threshold")

    def with_(self, **changes: Any) -> "PostprocessConfig":
        """Return a copy with ``changes`` applied (re-validated).

        Changing the layout or a tensor index re-derives ``map_index`` and
        ``min_outputs`` unless they are passed explicitly.
        """

        if "layout" in changes and "map_index" not in changes:
            changes["map_index"] = None
        if {"layout", "score_index", "map_index"} & set(changes) and "min_outputs" not in changes:
            changes["min_outputs"] = None
        return replace(self, **changes)

    def with_edge_ignore(self, edge_ignore_px: int) -> "PostprocessConfig":
        return replace(self, edge_ignore_px=edge_ignore_px)

    def with_resize(
        self,
        width: int,
        height: int,
        filter: str = "triangle",  # noqa: A002 - matches ResizeSpec field
    ) -> "PostprocessConfig":
        return replace(self, resize=ResizeSpec(width, height, filter))  # type: ignore[arg-type]

    def without_resize(self) -> "PostprocessConfig":
        return replace(self, resize=None)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ResizeSpec):
                value = value.to_dict()
            payload[f.name] = value
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PostprocessConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise ValueError(f"Unknown postprocess config keys: {sorted(unknown)}")
        kwargs = dict(payload)
        resize = kwargs.get("resize", None)
        if isinstance(resize, Mapping):
            kwargs["resize"] = ResizeSpec.from_dict(resize)
        return cls(**kwargs)


def postprocess(
    outputs: Sequence[Any],
    config: PostprocessConfig,
    *,
    timing: StageTimer | None = None,
    n_jobs: int | None = None,
) -> list[ResultItem]:
    """Build exactly one :class:`ResultItem` per batch index, in batch order.

    Raises :class:`ShapeMismatchError` when fewer than ``config.min_outputs``
    tensors are given or when a tensor's rank does not fit the layout. Errors
    are raised before any item is returned; there are no partial results.

    ``n_jobs`` other than ``None``/``1`` processes items on a joblib thread
    pool. Items only read their own slices, so the output is identical.
    """

    if timing is None:
        return _postprocess(outputs, config, n_jobs=n_jobs)
    with timing.stage("postprocess"):
        return _postprocess(outputs, config, n_jobs=n_jobs)


def _postprocess(
    outputs: Sequence[Any],
    config: PostprocessConfig,
    *,
    n_jobs: int | None,
) -> list[ResultItem]:
    tensors = list(outputs)
    required = int(config.min_outputs)  # type: ignore[arg-type]
    if len(tensors) < required:
        raise ShapeMismatchError(f"Expected at least {required} output tensors, got {len(tensors)}")

    map_index = int(config.map_index)  # type: ignore[arg-type]
    maps = np.asarray(tensors[map_index], dtype=np.float32)
    logger.debug("Map tensor %d shape: %s", map_index, maps.shape)
    if maps.ndim not in (3, 4):
        raise ShapeMismatchError(
            f"Output tensor {map_index}: expected shape (B,H,W) or (B,1,H,W), got {maps.shape}"
        )
    if maps.ndim == 4 and maps.shape[1] != 1:
        raise ShapeMismatchError(
            f"Output tensor {map_index}: expected a singleton channel axis, got {maps.shape}"
        )
    batch = int(maps.shape[0])

    scores: np.ndarray | None = None
    if config.layout == "dual":
        scores = _read_scores(tensors, config.score_index, batch=batch)

    def _one(i: int) -> ResultItem:
        if scores is not None:
            return _dual_item(maps[i], scores, i, config)
        return _single_item(maps[i], i, config)

    if n_jobs is not None and int(n_jobs) != 1 and batch > 1:
        results = list(Parallel(n_jobs=int(n_jobs), prefer="threads")(delayed(_one)(i) for i in range(batch)))
    else:
        results = [_one(i) for i in range(batch)]

    logger.debug("Postprocessed %d item(s) with layout=%s", len(results), config.layout)
    return results


def _read_scores(tensors: Sequence[Any], score_index: int, *, batch: int) -> np.ndarray:
    scores = np.asarray(tensors[score_index], dtype=np.float32)
    logger.debug("Score tensor %d shape: %s", score_index, scores.shape)
    if scores.ndim not in (1, 2):
        raise ShapeMismatchError(
            f"Output tensor {score_index}: expected score shape (B,) or (B,1), got {scores.shape}"
        )
    if scores.ndim == 2 and scores.shape[1] < 1:
        raise ShapeMismatchError(f"Output tensor {score_index}: empty score axis in {scores.shape}")
    if scores.shape[0] < batch:
        raise ShapeMismatchError(
            f"Output tensor {score_index}: {scores.shape[0]} score(s) for a batch of {batch}"
        )
    return scores


def _item_score(scores: np.ndarray, i: int) -> float:
    if scores.ndim == 1:
        return float(scores[i])
    return float(scores[i, 0])


def _dual_item(item: np.ndarray, scores: np.ndarray, i: int, config: PostprocessConfig) -> ResultItem:
    clamped = clamp_unit(squeeze_channel(item, index=i))
    if config.edge_ignore_px:
        clamped = apply_edge_ignore(clamped, config.edge_ignore_px)

    confidence = clamp_confidence(_item_score(scores, i))
    heatmap = _build_heatmap(quantize_u8(clamped), i, confidence, config)
    logger.debug("Processed item %d with confidence=%.4f", i, confidence)

    out = ResultItem(heatmaps=(heatmap,))
    if config.mask_threshold is not None:
        out = out.with_masks([_build_mask(clamped, i, config)])
    return out


def _single_item(item: np.ndarray, i: int, config: PostprocessConfig) -> ResultItem:
    clamped = clamp_unit(squeeze_channel(item, index=i))
    clamped = apply_edge_ignore(clamped, config.edge_ignore_px)

    peak = peak_score(clamped)
    heatmap = _build_heatmap(quantize_u8(clamped), i, peak, config)
    logger.debug("Item %d: map %dx%d, peak anomaly score %.4f", i, clamped.shape[1], clamped.shape[0], peak)

    out = ResultItem(heatmaps=(heatmap,))
    if config.emit_probs:
        out = out.with_probs(
            [
                Prob(confidence=peak, name=PEAK_SCORE_NAME, id=0),
                Prob(confidence=mean_score(clamped), name=MEAN_SCORE_NAME, id=1),
            ]
        )
    if config.mask_threshold is not None:
        out = out.with_masks([_build_mask(clamped, i, config)])
    return out


def _build_heatmap(raster: np.ndarray, i: int, confidence: float, config: PostprocessConfig) -> Heatmap:
    if config.resize is not None:
        raster = resize_raster(
            raster, (config.resize.width, config.resize.height), filter=config.resize.filter
        )
    meta = InstanceMeta(uid=i, name=config.heatmap_name, confidence=confidence)
    return Heatmap(map=raster, meta=meta)


def _build_mask(clamped: np.ndarray, i: int, config: PostprocessConfig) -> Mask:
    threshold = np.float32(config.mask_threshold)
    binary = np.where(clamped >= threshold, 255, 0).astype(np.uint8)
    if config.resize is not None:
        binary = resize_raster(binary, (config.resize.width, config.resize.height), filter="nearest")
    return Mask(map=binary, meta=InstanceMeta(uid=i, name=config.heatmap_name))
