"""Built-in presets for the supported anomaly model families."""

from __future__ import annotations

from pyanomap.models.config import IMAGENET_MEAN, IMAGENET_STD, ModelConfig
from pyanomap.models.registry import register_preset
from pyanomap.postprocess.strategy import PostprocessConfig, ResizeSpec


@register_preset(
    "dinomaly",
    tags=["dual"],
    metadata={"outputs": "pred_score, _, anomaly_map, _"},
)
def dinomaly() -> ModelConfig:
    return ModelConfig(
        name="dinomaly",
        postprocess=PostprocessConfig(layout="dual", score_index=0, map_index=2, min_outputs=4),
        batch=2,
        channels=3,
        height=392,
        width=392,
        default_height=384,
        default_width=384,
        resize_filter="lanczos",
        normalize=True,
        image_mean=IMAGENET_MEAN,
        image_std=IMAGENET_STD,
    )


@register_preset(
    "uninet",
    tags=["dual"],
    metadata={"outputs": "pred_score, _, anomaly_map"},
)
def uninet() -> ModelConfig:
    return ModelConfig(
        name="uninet",
        postprocess=PostprocessConfig(layout="dual", score_index=0, map_index=2),
        default_height=392,
        default_width=392,
        resize_filter="triangle",
        normalize=True,
        image_mean=IMAGENET_MEAN,
        image_std=IMAGENET_STD,
    )


@register_preset(
    "glass",
    tags=["single"],
    metadata={"outputs": "anomaly_map"},
)
def glass() -> ModelConfig:
    return ModelConfig(
        name="glass",
        postprocess=PostprocessConfig(
            layout="single",
            map_index=0,
            resize=ResizeSpec(width=900, height=900, filter="triangle"),
            heatmap_name="anomaly",
            emit_probs=True,
        ),
        batch=1,
        channels=3,
        height=384,
        width=384,
        default_height=288,
        default_width=288,
        resize_filter="cubic",
        normalize=True,
        image_mean=IMAGENET_MEAN,
        image_std=IMAGENET_STD,
    )
