"""Value types returned by the heart-rate estimator."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HeartRateEstimate:
    """
    Outcome of one estimation call.

    ``bpm == 0`` together with ``valid == False`` means "no usable
    estimate yet"; an invalid estimate never carries a positive BPM.
    """

    bpm: int
    confidence: Confidence
    valid: bool

    def __post_init__(self) -> None:
        if not self.valid and self.bpm != 0:
            raise ValueError("An invalid estimate must report bpm == 0")

    @classmethod
    def invalid(cls) -> "HeartRateEstimate":
        return cls(bpm=0, confidence=Confidence.LOW, valid=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"bpm": self.bpm, "confidence": self.confidence.value, "valid": self.valid}


def round_bpm(value: float) -> int:
    """Round half up, so 72.5 becomes 73 rather than banker's 72."""
    return int(math.floor(value + 0.5))
