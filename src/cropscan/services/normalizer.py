"""Score post-processing, label canonicalization and record construction."""
from __future__ import annotations

import math
from typing import Dict, Sequence

import numpy as np

from .schemas import ClassScore, DiseaseClass, PredictionRecord, RawResult, Source

DETECTION_FLOOR = 0.1
CONFIDENCE_FLOOR = 0.3

DEFAULT_CLASS_LABELS = [
    DiseaseClass.HEALTHY.value,
    DiseaseClass.EARLY_BLIGHT.value,
    DiseaseClass.LATE_BLIGHT.value,
    DiseaseClass.POWDERY_MILDEW.value,
    DiseaseClass.BACTERIAL_SPOT.value,
    DiseaseClass.LEAF_CURL.value,
]


def _build_synonyms() -> Dict[str, DiseaseClass]:
    table: Dict[str, DiseaseClass] = {}
    for label in DEFAULT_CLASS_LABELS:
        disease = DiseaseClass(label)
        table[label] = disease
        table[label.replace("_", " ")] = disease
    return table


SYNONYMS: Dict[str, DiseaseClass] = _build_synonyms()


def canonicalize(raw_class_name: str | None) -> DiseaseClass:
    """Map any backend label onto the closed disease set.

    Labels missing from the synonym table resolve to ``healthy`` so callers
    always receive a known disease id.
    """
    if not raw_class_name:
        return DiseaseClass.HEALTHY
    key = str(raw_class_name).strip().lower()
    return SYNONYMS.get(key, DiseaseClass.HEALTHY)


def label_for(index: int, labels: Sequence[str]) -> str:
    return labels[index] if index < len(labels) else f"class_{index}"


def format_scores(scores: np.ndarray | Sequence[float], labels: Sequence[str]) -> RawResult:
    """Turn a per-class score vector into a raw result.

    The top class is the primary prediction; every class scoring at least
    ``DETECTION_FLOOR`` is listed by descending score. A top score at or below
    zero counts as no signal at all.
    """
    values = np.asarray(scores, dtype=np.float64).reshape(-1)
    if values.size == 0:
        return RawResult(detected=False, label=label_for(0, labels), confidence=0.0)

    top_index = int(np.argmax(values))
    top_score = float(values[top_index])
    if top_score <= 0.0:
        top_index, top_score = 0, 0.0

    ranked = np.argsort(-values, kind="stable")
    predictions = [
        ClassScore(label=label_for(int(idx), labels), confidence=float(values[idx]) * 100)
        for idx in ranked
        if values[idx] >= DETECTION_FLOOR
    ]
    return RawResult(
        detected=top_score > CONFIDENCE_FLOOR,
        label=label_for(top_index, labels),
        confidence=top_score * 100,
        predictions=predictions,
        raw_top_score=top_score,
    )


def _percent(value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        return 0.0
    return round(min(max(value, 0.0), 100.0), 2)


def to_record(raw: RawResult, source: Source) -> PredictionRecord:
    """Convert a backend result into a tier-agnostic prediction record."""
    top_predictions = tuple(
        ClassScore(label=canonicalize(score.label).value, confidence=_percent(score.confidence))
        for score in raw.predictions
    )
    return PredictionRecord(
        detected=raw.detected,
        disease_class=canonicalize(raw.label),
        confidence_percent=_percent(raw.confidence),
        top_predictions=top_predictions,
        source=source,
    )


__all__ = [
    "CONFIDENCE_FLOOR",
    "DEFAULT_CLASS_LABELS",
    "DETECTION_FLOOR",
    "SYNONYMS",
    "DiseaseClass",
    "canonicalize",
    "format_scores",
    "label_for",
    "to_record",
]
