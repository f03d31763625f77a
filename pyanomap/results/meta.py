from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional


def clamp_confidence(value: float) -> float:
    """Clamp a score into ``[0, 1]``; NaN becomes ``0.0``."""

    v = float(value)
    if math.isnan(v):
        return 0.0
    return min(max(v, 0.0), 1.0)


@dataclass(frozen=True)
class InstanceMeta:
    """Identity and confidence shared by drawable instances."""

    uid: Optional[int] = None
    id: Optional[int] = None
    name: Optional[str] = None
    confidence: Optional[float] = None

    def __post_init__(self) -> None:
        if self.confidence is not None:
            object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def with_uid(self, uid: int) -> "InstanceMeta":
        return replace(self, uid=int(uid))

    def with_id(self, id: int) -> "InstanceMeta":  # noqa: A002 - mirrors field name
        return replace(self, id=int(id))

    def with_name(self, name: str) -> "InstanceMeta":
        return replace(self, name=str(name))

    def with_confidence(self, confidence: float) -> "InstanceMeta":
        return replace(self, confidence=clamp_confidence(confidence))

    def to_dict(self) -> dict:
        payload: dict = {}
        if self.uid is not None:
            payload["uid"] = int(self.uid)
        if self.id is not None:
            payload["id"] = int(self.id)
        if self.name is not None:
            payload["name"] = str(self.name)
        if self.confidence is not None:
            payload["confidence"] = float(self.confidence)
        return payload
