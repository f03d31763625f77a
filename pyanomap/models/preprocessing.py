"""Image → input-tensor preprocessing for engine calls."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from PIL import Image

from pyanomap.models.config import ModelConfig
from pyanomap.postprocess.maps import pil_resampling

ImageInput = Union[str, Path, np.ndarray, Image.Image]


def load_image(image: ImageInput) -> Image.Image:
    """Return an RGB PIL image from a path, a PIL image or an RGB/gray uint8 array."""

    if isinstance(image, (str, Path)):
        with Image.open(str(image)) as im:
            return im.convert("RGB")
    if isinstance(image, Image.Image):
        return image.convert("RGB")
    if isinstance(image, np.ndarray):
        if image.dtype != np.uint8:
            raise ValueError(f"Expected dtype=uint8 image array, got {image.dtype}")
        if image.ndim == 2:
            return Image.fromarray(image).convert("RGB")
        if image.ndim == 3 and image.shape[2] in (3, 4):
            return Image.fromarray(np.ascontiguousarray(image)).convert("RGB")
        raise ValueError(f"Expected image shape (H,W), (H,W,3) or (H,W,4), got {image.shape}")
    raise TypeError(f"Unsupported image type: {type(image)}. Expected str|Path|np.ndarray|PIL.Image.")


class ImagePreprocessor:
    """Resize images to the engine input size and stack them as ``NCHW`` float32."""

    def __init__(
        self,
        *,
        width: int,
        height: int,
        resize_filter: str = "triangle",
        normalize: bool = True,
        image_mean: Optional[Sequence[float]] = None,
        image_std: Optional[Sequence[float]] = None,
    ) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"Preprocess size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.resize_filter = resize_filter
        self.resample = pil_resampling(resize_filter)
        self.normalize = bool(normalize)
        self.image_mean = None if image_mean is None else np.asarray(image_mean, dtype=np.float32)
        self.image_std = None if image_std is None else np.asarray(image_std, dtype=np.float32)

    @classmethod
    def from_config(cls, config: ModelConfig, *, width: int, height: int) -> "ImagePreprocessor":
        return cls(
            width=width,
            height=height,
            resize_filter=config.resize_filter,
            normalize=config.normalize,
            image_mean=config.image_mean,
            image_std=config.image_std,
        )

    def process(self, image: ImageInput) -> np.ndarray:
        """Return one ``(3, H, W)`` float32 array."""

        pil = load_image(image)
        if pil.size != (self.width, self.height):
            pil = pil.resize((self.width, self.height), resample=self.resample)
        array = np.asarray(pil, dtype=np.float32)
        if self.normalize:
            array = array / np.float32(255.0)
        if self.image_mean is not None and self.image_std is not None:
            array = (array - self.image_mean) / self.image_std
        return np.ascontiguousarray(np.transpose(array, (2, 0, 1)), dtype=np.float32)

    def process_images(self, images: Iterable[ImageInput]) -> np.ndarray:
        arrays = [self.process(image) for image in images]
        if not arrays:
            return np.zeros((0, 3, self.height, self.width), dtype=np.float32)
        return np.stack(arrays, axis=0)
