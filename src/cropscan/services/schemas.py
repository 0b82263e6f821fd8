"""Value types shared by the inference tiers."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class DiseaseClass(str, Enum):
    HEALTHY = "healthy"
    EARLY_BLIGHT = "early_blight"
    LATE_BLIGHT = "late_blight"
    POWDERY_MILDEW = "powdery_mildew"
    BACTERIAL_SPOT = "bacterial_spot"
    LEAF_CURL = "leaf_curl"
    UNKNOWN = "unknown"


class Source(str, Enum):
    OFFLINE = "offline"
    ONLINE = "online"
    MOCK = "mock"


@dataclass(frozen=True, slots=True)
class ClassScore:
    label: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {"class": self.label, "confidence": self.confidence}


@dataclass(slots=True)
class RawResult:
    """Backend output before canonicalization.

    ``confidence`` and the prediction confidences are percentages;
    ``raw_top_score`` keeps the unscaled top score the backend reported.
    """

    detected: bool
    label: str
    confidence: float
    predictions: List[ClassScore] = field(default_factory=list)
    raw_top_score: float = 0.0


@dataclass(frozen=True, slots=True)
class PredictionRecord:
    detected: bool
    disease_class: DiseaseClass
    confidence_percent: float
    top_predictions: Tuple[ClassScore, ...]
    source: Source

    @property
    def disease_id(self) -> str:
        return self.disease_class.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected": self.detected,
            "diseaseClass": self.disease_class.value,
            "diseaseId": self.disease_id,
            "confidencePercent": self.confidence_percent,
            "topPredictions": [score.to_dict() for score in self.top_predictions],
            "source": self.source.value,
        }


__all__ = ["DiseaseClass", "Source", "ClassScore", "RawResult", "PredictionRecord"]
