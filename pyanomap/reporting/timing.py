from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, List

logger = logging.getLogger(__name__)


class StageTimer:
    """Collect wall-clock durations per named stage.

    The timer is passed explicitly into ``forward`` / ``postprocess`` calls;
    nothing records into a global. Repeated stages accumulate, so one timer can
    span several forward calls.
    """

    def __init__(self, label: str = "") -> None:
        self.label = str(label)
        self._totals: Dict[str, float] = {}
        self._counts: Dict[str, int] = {}
        self._order: List[str] = []

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.add(name, time.perf_counter() - start)

    def add(self, name: str, seconds: float) -> None:
        key = str(name)
        if key not in self._totals:
            self._order.append(key)
            self._totals[key] = 0.0
            self._counts[key] = 0
        self._totals[key] += float(seconds)
        self._counts[key] += 1

    def total(self, name: str) -> float:
        return float(self._totals.get(str(name), 0.0))

    def count(self, name: str) -> int:
        return int(self._counts.get(str(name), 0))

    def as_dict(self) -> Dict[str, float]:
        """JSON-friendly ``{"<stage>_s": seconds}`` mapping in first-seen order."""

        return {f"{name}_s": float(self._totals[name]) for name in self._order}

    def summary(self) -> None:
        prefix = f"[{self.label}] " if self.label else ""
        for name in self._order:
            n = self._counts[name]
            total = self._totals[name]
            logger.info(
                "%s%s: %d call(s), total %.3f ms, mean %.3f ms",
                prefix,
                name,
                n,
                total * 1e3,
                (total / n) * 1e3 if n else 0.0,
            )
