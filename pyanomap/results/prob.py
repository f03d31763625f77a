from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from pyanomap.results.meta import clamp_confidence


@dataclass(frozen=True)
class Prob:
    """Named scalar score, always kept within ``[0, 1]``."""

    confidence: float = 0.0
    name: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def with_confidence(self, confidence: float) -> "Prob":
        return replace(self, confidence=confidence)

    def with_name(self, name: str) -> "Prob":
        return replace(self, name=str(name))

    def with_id(self, id: int) -> "Prob":  # noqa: A002 - mirrors field name
        return replace(self, id=int(id))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"confidence": float(self.confidence)}
        if self.name is not None:
            payload["name"] = str(self.name)
        if self.id is not None:
            payload["id"] = int(self.id)
        return payload


@dataclass(frozen=True)
class Text:
    """Free-form textual annotation attached to a result."""

    text: str
    confidence: Optional[float] = None

    def __post_init__(self) -> None:
        if self.confidence is not None:
            object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": str(self.text)}
        if self.confidence is not None:
            payload["confidence"] = float(self.confidence)
        return payload
