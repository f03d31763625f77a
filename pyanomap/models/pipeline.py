"""End-to-end model wrapper: preprocess → engine → postprocess."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, ContextManager, Iterable, Optional, Protocol, Sequence

import numpy as np

from pyanomap.errors import ShapeMismatchError
from pyanomap.models.config import ModelConfig
from pyanomap.models.preprocessing import ImageInput, ImagePreprocessor
from pyanomap.models.registry import get_preset
from pyanomap.postprocess.strategy import postprocess
from pyanomap.reporting.timing import StageTimer
from pyanomap.results import ResultItem

logger = logging.getLogger(__name__)


class Engine(Protocol):
    """Inference engine contract.

    Engines may also expose ``input_height()``, ``input_width()`` and
    ``input_batch()`` returning an int, ``None`` or a ``(min, opt, max)``
    range; the optimum of a range is used.
    """

    def run(self, x: np.ndarray) -> Sequence[Any]:
        ...


def _dim_value(value: Any) -> Optional[int]:
    if value is None:
        return None
    opt = getattr(value, "opt", None)
    if opt is not None:
        value = opt() if callable(opt) else opt
    elif isinstance(value, (tuple, list)):
        if len(value) != 3:
            raise ValueError(f"Dimension range must be (min, opt, max), got {value!r}")
        value = value[1]
    return int(value)


def _engine_dim(engine: Any, accessor: str) -> Optional[int]:
    fn = getattr(engine, accessor, None)
    if fn is None:
        return None
    return _dim_value(fn() if callable(fn) else fn)


def _stage(timing: StageTimer | None, name: str) -> ContextManager[None]:
    if timing is None:
        return nullcontext()
    return timing.stage(name)


class AnomalyModel:
    """One anomaly model bound to an engine and its static configuration."""

    def __init__(
        self,
        engine: Engine,
        config: ModelConfig,
        *,
        preprocessor: ImagePreprocessor | None = None,
        n_jobs: int | None = None,
    ) -> None:
        self.engine = engine
        self.config = config
        self.n_jobs = n_jobs

        height = _engine_dim(engine, "input_height") or config.height or config.default_height
        width = _engine_dim(engine, "input_width") or config.width or config.default_width
        self.height = int(height)
        self.width = int(width)
        self.batch = _engine_dim(engine, "input_batch") or config.batch

        if preprocessor is None:
            preprocessor = ImagePreprocessor.from_config(config, width=self.width, height=self.height)
        self.preprocessor = preprocessor

    def __repr__(self) -> str:
        return (
            f"AnomalyModel(name={self.config.name!r}, input={self.width}x{self.height}, "
            f"layout={self.config.postprocess.layout!r})"
        )

    def preprocess(self, images: Sequence[ImageInput]) -> np.ndarray:
        return self.preprocessor.process_images(images)

    def inference(self, x: np.ndarray) -> list[Any]:
        outputs = list(self.engine.run(x))
        logger.debug("Inference output length: %d", len(outputs))
        if not outputs:
            logger.warning("%s: inference returned no output tensors", self.config.name)
        for i, tensor in enumerate(outputs):
            logger.debug("Output tensor %d: shape %s", i, np.shape(tensor))
        return outputs

    def postprocess(self, outputs: Sequence[Any]) -> list[ResultItem]:
        return postprocess(outputs, self.config.postprocess, n_jobs=self.n_jobs)

    def forward(
        self,
        images: Iterable[ImageInput],
        *,
        timing: StageTimer | None = None,
    ) -> list[ResultItem]:
        """Return one :class:`ResultItem` per input image, in input order.

        Engine exceptions propagate unchanged. Any failure means no results
        are returned for the call.
        """

        items = list(images)
        if not items:
            return []

        with _stage(timing, "preprocess"):
            x = self.preprocess(items)
        with _stage(timing, "inference"):
            outputs = self.inference(x)
        with _stage(timing, "postprocess"):
            results = self.postprocess(outputs)

        if len(results) < len(items):
            raise ShapeMismatchError(
                f"{self.config.name}: engine returned {len(results)} item(s) for {len(items)} input(s)"
            )
        if len(results) > len(items):
            # Fixed-batch engines may pad the batch axis.
            logger.debug("Dropping %d padded batch item(s)", len(results) - len(items))
            results = results[: len(items)]
        return results

    __call__ = forward


def create_model(name: str, engine: Engine, **kwargs: Any) -> AnomalyModel:
    """Build an :class:`AnomalyModel` from a registered preset name.

    Keyword arguments ``preprocessor`` and ``n_jobs`` go to the model; any
    other keyword overrides a :class:`ModelConfig` field.

    Examples
    --------
    >>> model = create_model("glass", engine)
    >>> results = model.forward(["part.png"])
    """

    preprocessor = kwargs.pop("preprocessor", None)
    n_jobs = kwargs.pop("n_jobs", None)
    config = get_preset(name)
    if kwargs:
        config = config.with_(**kwargs)
    return AnomalyModel(engine, config, preprocessor=preprocessor, n_jobs=n_jobs)
