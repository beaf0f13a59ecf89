"""
Input and output schemas for the health-risk pipeline.

This module defines the Pydantic models exchanged with callers of the
inference façade and the HTTP API. Wire names are camelCase (as sent by the
presentation layer); Python attributes are snake_case.

Notes
-----
- Units:
    * blood_pressure_systolic / diastolic: mm Hg
    * heart_rate: bpm
    * cholesterol, blood_sugar: mg/dL
    * bmi: kg/m^2
- Numeric patient fields may arrive as strings; they are parsed by
  ``healthrisk.features.parse_patient_record``.
- Optional fields fall back to defaults: cholesterol 200, blood sugar 100,
  BMI 25, smoking status "never".
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Numeric = Union[float, str]


class RiskLevel(str, Enum):
    """Coarse risk bucket derived from the risk score."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ProgressionLikelihood(str, Enum):
    """Whether disease progression is expected."""
    LIKELY = "Likely"
    UNLIKELY = "Unlikely"


class PatientRecord(BaseModel):
    """Single patient as submitted by the presentation layer.

    Attributes
    ----------
    age : float | str
        Age in years.
    gender : str
        Free-text gender; informational, not a model input.
    blood_pressure_systolic : float | str
        Systolic blood pressure (mm Hg).
    blood_pressure_diastolic : float | str
        Diastolic blood pressure (mm Hg).
    heart_rate : float | str
        Resting heart rate (bpm).
    cholesterol : float | str, optional
        Total cholesterol (mg/dL).
    blood_sugar : float | str, optional
        Blood glucose (mg/dL).
    bmi : float | str, optional
        Body-mass index.
    smoking_status : str, optional
        "current", "former" or "never".
    """
    model_config = ConfigDict(populate_by_name=True)

    age: Numeric
    gender: Optional[str] = None
    blood_pressure_systolic: Numeric = Field(alias="bloodPressureSystolic")
    blood_pressure_diastolic: Numeric = Field(alias="bloodPressureDiastolic")
    heart_rate: Numeric = Field(alias="heartRate")
    cholesterol: Optional[Numeric] = None
    blood_sugar: Optional[Numeric] = Field(default=None, alias="bloodSugar")
    bmi: Optional[Numeric] = None
    smoking_status: Optional[str] = Field(default=None, alias="smokingStatus")

    def to_raw(self) -> Dict[str, Any]:
        """Return the camelCase mapping understood by the feature parser."""
        return self.model_dump(by_alias=True)


class RiskAssessment(BaseModel):
    """Risk estimate returned for one patient.

    Attributes
    ----------
    risk_score : float
        Model probability scaled to [0, 100].
    risk_level : RiskLevel
        High above 70, Medium above 40, otherwise Low.
    progression_likelihood : ProgressionLikelihood
        Likely above 60, otherwise Unlikely.
    confidence : float
        Model certainty in percent, 70 at p=0.5 rising to 95.
    """
    model_config = ConfigDict(populate_by_name=True)

    risk_score: float = Field(alias="riskScore", ge=0.0, le=100.0)
    risk_level: RiskLevel = Field(alias="riskLevel")
    progression_likelihood: ProgressionLikelihood = Field(alias="progressionLikelihood")
    confidence: float


class ImageFinding(BaseModel):
    """Classification of one medical image."""
    condition: str
    confidence: float
    description: str
    severity: str


class MetricsRequest(BaseModel):
    """Paired binary labels and predictions."""
    y_true: List[int] = Field(min_length=1)
    y_pred: List[int] = Field(min_length=1)


class MetricsResponse(BaseModel):
    """Confusion counts and derived metrics."""
    tp: int
    fp: int
    tn: int
    fn: int
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    confusion_matrix: List[List[int]]
