"""
Inference façade.

Entry points for callers outside the pipeline (the HTTP API, the UI):

- ``assess_patient``: raw patient fields -> ``RiskAssessment``.
- ``classify_image``: image array -> ``ImageFinding``.

Both ensure the corresponding model is trained (first call trains it) and
derive their labels deterministically from the model output.
"""

import logging
from typing import Any, Mapping, Optional, Union

import numpy as np

from ..features import encode_vitals, parse_patient_record
from ..schemas import ImageFinding, PatientRecord, ProgressionLikelihood, RiskAssessment, RiskLevel
from ..synthetic import PatientVitals
from .artifacts import get_image_model, get_risk_model
from .imaging import CLASSES, DESCRIPTIONS, MIN_CONFIDENCE, SEVERITY

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 70.0
MEDIUM_RISK_THRESHOLD = 40.0
PROGRESSION_THRESHOLD = 60.0

CONFIDENCE_FLOOR = 70.0
CONFIDENCE_CAP = 95.0


def risk_level(score: float) -> RiskLevel:
    if score > HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score > MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def progression_likelihood(score: float) -> ProgressionLikelihood:
    return ProgressionLikelihood.LIKELY if score > PROGRESSION_THRESHOLD else ProgressionLikelihood.UNLIKELY


def confidence_from_probability(p: float) -> float:
    """Map distance from the decision boundary to a 70-95% confidence."""
    return min(CONFIDENCE_CAP, CONFIDENCE_FLOOR + 50.0 * abs(p - 0.5))


def assessment_from_probability(p: float) -> RiskAssessment:
    """Build the full assessment from a raw sigmoid output in [0, 1]."""
    score = float(np.clip(p, 0.0, 1.0)) * 100.0
    return RiskAssessment(
        risk_score=score,
        risk_level=risk_level(score),
        progression_likelihood=progression_likelihood(score),
        confidence=confidence_from_probability(p),
    )


def assess_patient(raw: Union[Mapping[str, Any], PatientRecord], model=None) -> RiskAssessment:
    """Estimate disease-progression risk for one patient.

    Args:
        raw: Patient fields (camelCase keys, numbers or numeric strings) or a
            validated ``PatientRecord``.
        model: Object exposing ``predict(vector) -> float``. Defaults to the
            process-wide risk model, trained on first use.

    Returns:
        RiskAssessment derived from the model probability.

    Raises:
        MalformedInputError: If a mandatory field is missing or not numeric.
        ModelTrainingError: If the model cannot be trained.
    """
    if isinstance(raw, PatientRecord):
        raw = raw.to_raw()
    return assess_vitals(parse_patient_record(raw), model)


def assess_vitals(vitals: PatientVitals, model=None) -> RiskAssessment:
    """Assess already parsed vitals (see ``assess_patient``)."""
    features = encode_vitals(vitals)
    if model is None:
        model = get_risk_model()
    p = model.predict(features)
    assessment = assessment_from_probability(p)
    logger.debug("Assessed patient: p=%.4f level=%s", p, assessment.risk_level.value)
    return assessment


def finding_from_probabilities(proba) -> ImageFinding:
    """Pick the most likely class and attach its description and severity."""
    proba = np.asarray(proba, dtype=float).ravel()
    idx = int(np.argmax(proba))
    condition = CLASSES[idx]
    return ImageFinding(
        condition=condition,
        confidence=max(MIN_CONFIDENCE, float(proba[idx]) * 100.0),
        description=DESCRIPTIONS.get(condition, "Medical condition detected"),
        severity=SEVERITY[condition],
    )


def classify_image(image, model: Optional[Any] = None) -> ImageFinding:
    """Classify one medical image (``(H, W)`` or ``(H, W, C)`` array)."""
    if model is None:
        model = get_image_model()
    return finding_from_probabilities(model.predict_proba(image))
