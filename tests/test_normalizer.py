"""Tests for label canonicalization and score post-processing."""
from __future__ import annotations

import numpy as np
import pytest

from cropscan.services import normalizer
from cropscan.services.schemas import ClassScore, DiseaseClass, RawResult, Source


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("early_blight", DiseaseClass.EARLY_BLIGHT),
        ("Early Blight", DiseaseClass.EARLY_BLIGHT),
        ("  EARLY_BLIGHT  ", DiseaseClass.EARLY_BLIGHT),
        ("late blight", DiseaseClass.LATE_BLIGHT),
        ("Powdery Mildew", DiseaseClass.POWDERY_MILDEW),
        ("bacterial_spot", DiseaseClass.BACTERIAL_SPOT),
        ("Leaf Curl\n", DiseaseClass.LEAF_CURL),
        ("HEALTHY", DiseaseClass.HEALTHY),
    ],
)
def test_canonicalize_known_labels(raw, expected):
    assert normalizer.canonicalize(raw) is expected


@pytest.mark.parametrize("raw", ["rust", "class_7", "early-blight", "", None, "unknown"])
def test_canonicalize_unknown_labels_default_to_healthy(raw):
    assert normalizer.canonicalize(raw) is DiseaseClass.HEALTHY


def test_canonicalize_covers_every_synonym():
    for synonym, disease in normalizer.SYNONYMS.items():
        assert normalizer.canonicalize(synonym.upper()) is disease
        assert normalizer.canonicalize(f" {synonym} ") is disease


def test_canonicalize_is_idempotent():
    for raw in ["Late Blight", "mosaic virus", "leaf_curl"]:
        first = normalizer.canonicalize(raw)
        assert normalizer.canonicalize(raw) is first
        assert normalizer.canonicalize(first.value) is first


def test_format_scores_ranks_predictions_above_floor():
    raw = normalizer.format_scores([0.1, 0.7, 0.2, 0.0, 0.05, 0.0], normalizer.DEFAULT_CLASS_LABELS)
    assert raw.detected is True
    assert raw.label == "early_blight"
    assert raw.confidence == pytest.approx(70.0)
    assert [score.label for score in raw.predictions] == ["early_blight", "late_blight", "healthy"]


def test_format_scores_low_confidence_is_not_detected():
    scores = np.full(6, 0.05, dtype=np.float32)
    raw = normalizer.format_scores(scores, normalizer.DEFAULT_CLASS_LABELS)
    assert raw.detected is False
    assert raw.confidence == pytest.approx(5.0, abs=1e-4)
    assert raw.raw_top_score > 0
    assert raw.predictions == []


def test_format_scores_detection_requires_exceeding_floor():
    raw = normalizer.format_scores([0.3, 0.2], ["healthy", "early_blight"])
    assert raw.detected is False


def test_format_scores_all_zero_is_a_non_result():
    raw = normalizer.format_scores(np.zeros((1, 6)), normalizer.DEFAULT_CLASS_LABELS)
    assert raw.detected is False
    assert raw.confidence == 0.0
    assert raw.raw_top_score == 0.0
    assert raw.label == "healthy"


def test_format_scores_names_positions_beyond_label_list():
    scores = [0.0] * 7 + [0.9]
    raw = normalizer.format_scores(scores, normalizer.DEFAULT_CLASS_LABELS)
    assert raw.label == "class_7"
    assert raw.predictions[0].label == "class_7"


def test_to_record_canonicalizes_and_rounds():
    raw = RawResult(
        detected=True,
        label="Early Blight",
        confidence=0.91 * 100,
        predictions=[ClassScore("Early Blight", 0.91 * 100), ClassScore("mystery", 12.3456)],
    )
    record = normalizer.to_record(raw, Source.ONLINE)
    assert record.disease_class is DiseaseClass.EARLY_BLIGHT
    assert record.confidence_percent == 91.0
    assert [score.label for score in record.top_predictions] == ["early_blight", "healthy"]
    assert record.top_predictions[1].confidence == 12.35
    assert record.to_dict()["diseaseId"] == "early_blight"
    assert record.to_dict()["source"] == "online"


def test_to_record_clamps_confidence():
    raw = RawResult(detected=True, label="leaf_curl", confidence=140.0)
    assert normalizer.to_record(raw, Source.OFFLINE).confidence_percent == 100.0


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_to_record_maps_non_finite_confidence_to_zero(value):
    raw = RawResult(detected=True, label="leaf_curl", confidence=value, predictions=[ClassScore("leaf_curl", value)])
    record = normalizer.to_record(raw, Source.ONLINE)
    assert record.confidence_percent == 0.0
    assert record.top_predictions[0].confidence == 0.0
