from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

from pyanomap.postprocess.maps import parse_resize_filter
from pyanomap.postprocess.strategy import PostprocessConfig
from pyanomap.utils.param_check import check_int

IMAGENET_MEAN: Tuple[float, float, float] = (0.485, 0.456, 0.406)
IMAGENET_STD: Tuple[float, float, float] = (0.229, 0.224, 0.225)


@dataclass(frozen=True)
class ModelConfig:
    """Static, read-only description of one anomaly model.

    ``height`` / ``width`` / ``batch`` are the declared input dims; ``None``
    means "dynamic". The engine's own declaration wins when it has one, and
    ``default_height`` / ``default_width`` apply when neither side declares a
    size.
    """

    name: str
    postprocess: PostprocessConfig = field(default_factory=PostprocessConfig)
    batch: Optional[int] = None
    channels: int = 3
    height: Optional[int] = None
    width: Optional[int] = None
    default_height: int = 384
    default_width: int = 384
    resize_filter: str = "triangle"
    normalize: bool = True
    image_mean: Optional[Tuple[float, ...]] = IMAGENET_MEAN
    image_std: Optional[Tuple[float, ...]] = IMAGENET_STD

    def __post_init__(self) -> None:
        for name in ("batch", "height", "width"):
            value = getattr(self, name)
            if value is not None:
                check_int(value, 1, param_name=name)
        check_int(self.channels, 1, param_name="channels")
        check_int(self.default_height, 1, param_name="default_height")
        check_int(self.default_width, 1, param_name="default_width")
        object.__setattr__(self, "resize_filter", parse_resize_filter(self.resize_filter))

        if (self.image_mean is None) != (self.image_std is None):
            raise ValueError("image_mean and image_std must be given together")
        if self.image_mean is not None and self.image_std is not None:
            mean = tuple(float(v) for v in self.image_mean)
            std = tuple(float(v) for v in self.image_std)
            if len(mean) != self.channels or len(std) != self.channels:
                raise ValueError(
                    f"image_mean/image_std must have {self.channels} values, "
                    f"got {len(mean)}/{len(std)}"
                )
            if any(s == 0.0 for s in std):
                raise ValueError("image_std values must be non-zero")
            object.__setattr__(self, "image_mean", mean)
            object.__setattr__(self, "image_std", std)

    def with_(self, **changes: Any) -> "ModelConfig":
        return replace(self, **changes)

    def with_postprocess(self, postprocess: PostprocessConfig) -> "ModelConfig":
        return replace(self, postprocess=postprocess)
