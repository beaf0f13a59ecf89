# ============================================
# Unit Tests for the Inference Facade
# ============================================
"""
Tests for risk assessment and image classification entry points.
"""

import numpy as np
import pytest

from healthrisk.exceptions import MalformedInputError
from healthrisk.schemas import PatientRecord, ProgressionLikelihood, RiskLevel
from healthrisk.services.assessment import (
    assess_patient,
    assessment_from_probability,
    classify_image,
    confidence_from_probability,
    finding_from_probabilities,
    progression_likelihood,
    risk_level,
)


class StubImageModel:
    def __init__(self, proba):
        self.proba = np.asarray(proba, dtype=float)

    def predict_proba(self, image):
        return self.proba


class TestThresholds:
    """Tests for score -> label mapping."""

    @pytest.mark.parametrize("p,level,likelihood", [
        (0.75, RiskLevel.HIGH, ProgressionLikelihood.LIKELY),
        (0.65, RiskLevel.MEDIUM, ProgressionLikelihood.LIKELY),
        (0.5, RiskLevel.MEDIUM, ProgressionLikelihood.UNLIKELY),
        (0.3, RiskLevel.LOW, ProgressionLikelihood.UNLIKELY),
    ])
    def test_levels(self, p, level, likelihood):
        result = assessment_from_probability(p)
        assert result.risk_level == level
        assert result.progression_likelihood == likelihood

    def test_boundaries_are_exclusive(self):
        assert risk_level(70.0) == RiskLevel.MEDIUM
        assert risk_level(40.0) == RiskLevel.LOW
        assert progression_likelihood(60.0) == ProgressionLikelihood.UNLIKELY

    def test_score_is_clipped(self):
        assert assessment_from_probability(1.2).risk_score == 100.0
        assert assessment_from_probability(-0.1).risk_score == 0.0

    @pytest.mark.parametrize("p,confidence", [(0.5, 70.0), (0.75, 82.5), (0.25, 82.5), (1.0, 95.0), (0.0, 95.0)])
    def test_confidence_tracks_certainty(self, p, confidence):
        assert confidence_from_probability(p) == pytest.approx(confidence)


class TestAssessPatient:
    """Tests for ``assess_patient`` with an injected model."""

    def test_high_risk(self, sample_patient, fixed_model):
        result = assess_patient(sample_patient, model=fixed_model(0.75))
        assert result.risk_score == pytest.approx(75.0)
        assert result.risk_level == RiskLevel.HIGH
        assert result.progression_likelihood == ProgressionLikelihood.LIKELY
        assert result.confidence == pytest.approx(82.5)

    def test_model_receives_encoded_vector(self, sample_patient, fixed_model):
        model = fixed_model(0.3)
        assess_patient(sample_patient, model=model)
        assert len(model.calls) == 1
        assert model.calls[0].shape == (8,)
        assert model.calls[0][0] == pytest.approx(0.45)

    def test_accepts_patient_record(self, sample_patient, fixed_model):
        record = PatientRecord(**sample_patient)
        model = fixed_model(0.5)
        result = assess_patient(record, model=model)
        assert result.risk_level == RiskLevel.MEDIUM
        assert model.calls[0][0] == pytest.approx(0.45)

    def test_serializes_with_camel_case(self, sample_patient, fixed_model):
        payload = assess_patient(sample_patient, model=fixed_model(0.3)).model_dump(by_alias=True)
        assert set(payload) == {"riskScore", "riskLevel", "progressionLikelihood", "confidence"}

    def test_malformed_input_never_reaches_model(self, sample_patient, fixed_model):
        sample_patient["age"] = "abc"
        model = fixed_model(0.9)
        with pytest.raises(MalformedInputError):
            assess_patient(sample_patient, model=model)
        assert model.calls == []


class TestImageFindings:
    """Tests for image class selection."""

    def test_argmax_class(self):
        finding = classify_image(np.zeros((4, 4)), model=StubImageModel([0.1, 0.7, 0.1, 0.1]))
        assert finding.condition == "Pneumonia"
        assert finding.severity == "high"
        assert finding.confidence == pytest.approx(70.0)
        assert "lung" in finding.description

    def test_confidence_floor(self):
        finding = finding_from_probabilities([0.3, 0.2, 0.25, 0.25])
        assert finding.condition == "Normal"
        assert finding.confidence == 60.0
