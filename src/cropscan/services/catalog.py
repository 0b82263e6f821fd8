"""Static, language-independent disease catalog used by the mock tier."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .schemas import ClassScore, DiseaseClass, PredictionRecord, Source


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    disease: DiseaseClass
    status: str
    severity: str
    reference_confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.disease.value,
            "status": self.status,
            "severity": self.severity,
            "confidence": self.reference_confidence,
        }


DISEASE_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(DiseaseClass.HEALTHY, "healthy", "low", 98.5),
    CatalogEntry(DiseaseClass.EARLY_BLIGHT, "disease", "medium", 89.2),
    CatalogEntry(DiseaseClass.POWDERY_MILDEW, "disease", "medium", 92.1),
    CatalogEntry(DiseaseClass.LATE_BLIGHT, "critical", "critical", 85.7),
    CatalogEntry(DiseaseClass.BACTERIAL_SPOT, "disease", "medium", 87.3),
    CatalogEntry(DiseaseClass.LEAF_CURL, "disease", "medium", 90.8),
)


def find_entry(disease_id: str) -> Optional[CatalogEntry]:
    for entry in DISEASE_CATALOG:
        if entry.disease.value == disease_id:
            return entry
    return None


def mock_record(
    rng: random.Random,
    catalog: Sequence[CatalogEntry] = DISEASE_CATALOG,
) -> PredictionRecord:
    """Pick a catalog entry and present it as a prediction. Never fails."""
    entry = rng.choice(catalog) if catalog else DISEASE_CATALOG[0]
    return PredictionRecord(
        detected=entry.disease is not DiseaseClass.HEALTHY,
        disease_class=entry.disease,
        confidence_percent=entry.reference_confidence,
        top_predictions=(
            ClassScore(label=entry.disease.value, confidence=entry.reference_confidence),
        ),
        source=Source.MOCK,
    )


__all__ = ["CatalogEntry", "DISEASE_CATALOG", "find_entry", "mock_record"]
