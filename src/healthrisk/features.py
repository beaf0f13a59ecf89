"""
Feature contract shared by training and inference.

One ordered mapping from vitals to the eight normalized model inputs. Both
the synthetic training set and every live patient record go through the same
divisors, so the network never sees two different encodings of one field.

Encodings
---------
- age / 100, systolic / 200, diastolic / 120, heart_rate / 150,
  cholesterol / 400, blood_sugar / 300, bmi / 50
- smoking: current = 1.0, former = 0.5, never / unspecified = 0.0

Raw patient input is loosely typed (numbers may arrive as strings). Mandatory
fields must parse; optional fields fall back to documented defaults.
"""

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .exceptions import MalformedInputError
from .synthetic import PatientVitals, records_to_frame

# (feature name, vitals attribute, divisor) in model input order
FEATURE_SPEC = (
    ("age", "age", 100.0),
    ("systolic", "systolic", 200.0),
    ("diastolic", "diastolic", 120.0),
    ("heart_rate", "heart_rate", 150.0),
    ("cholesterol", "cholesterol", 400.0),
    ("blood_sugar", "blood_sugar", 300.0),
    ("bmi", "bmi", 50.0),
    ("smoking", "smoking_status", None),
)
FEATURE_NAMES: List[str] = [name for name, _, _ in FEATURE_SPEC]
N_FEATURES = len(FEATURE_SPEC)

SMOKING_CODES: Dict[str, float] = {"current": 1.0, "former": 0.5, "never": 0.0}

# raw input key -> vitals attribute
MANDATORY_FIELDS = {
    "age": "age",
    "bloodPressureSystolic": "systolic",
    "bloodPressureDiastolic": "diastolic",
    "heartRate": "heart_rate",
}
OPTIONAL_DEFAULTS = {
    "cholesterol": ("cholesterol", 200.0),
    "bloodSugar": ("blood_sugar", 100.0),
    "bmi": ("bmi", 25.0),
}


def smoking_code(status: Optional[str]) -> float:
    """Encode a smoking status; anything unrecognized counts as never."""
    if status is None:
        return 0.0
    return SMOKING_CODES.get(str(status).strip().lower(), 0.0)


def _to_number(value: Any) -> Optional[float]:
    """Parse ints, floats and numeric strings; None when not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_patient_record(raw: Mapping[str, Any]) -> PatientVitals:
    """Turn a loosely typed patient mapping into typed vitals.

    Args:
        raw: Mapping with keys ``age, gender, bloodPressureSystolic,
            bloodPressureDiastolic, heartRate`` and optionally
            ``cholesterol, bloodSugar, bmi, smokingStatus``.

    Returns:
        PatientVitals with defaults applied to missing optional fields
        (cholesterol 200, blood sugar 100, BMI 25, smoking never).

    Raises:
        MalformedInputError: If a mandatory field is missing or not numeric.
    """
    values: Dict[str, Any] = {}
    for key, attr in MANDATORY_FIELDS.items():
        number = _to_number(raw.get(key))
        if number is None:
            raise MalformedInputError(key, raw.get(key))
        values[attr] = number

    for key, (attr, default) in OPTIONAL_DEFAULTS.items():
        number = _to_number(raw.get(key))
        values[attr] = default if number is None else number

    status = raw.get("smokingStatus")
    values["smoking_status"] = str(status).strip().lower() if status else "never"
    values["gender"] = str(raw.get("gender") or "unspecified")
    return PatientVitals(**values)


def encode_vitals(vitals: PatientVitals) -> np.ndarray:
    """Encode one patient into the 8-dimensional feature vector."""
    row = []
    for _, attr, divisor in FEATURE_SPEC:
        value = getattr(vitals, attr)
        row.append(smoking_code(value) if divisor is None else value / divisor)
    return np.asarray(row, dtype=float)


def encode_frame(df: pd.DataFrame) -> np.ndarray:
    """Vectorized ``encode_vitals`` over a DataFrame of vitals columns."""
    if df.empty:
        return np.empty((0, N_FEATURES))
    columns = []
    for _, attr, divisor in FEATURE_SPEC:
        if divisor is None:
            columns.append(df[attr].map(smoking_code).astype(float))
        else:
            columns.append(df[attr].astype(float) / divisor)
    return np.column_stack(columns)


def feature_map() -> List[Dict[str, Any]]:
    """Describe the feature contract (name, source field, scaling)."""
    return [
        {"feature": name, "source": attr, "divisor": divisor,
         "encoding": "smoking code" if divisor is None else "divide"}
        for name, attr, divisor in FEATURE_SPEC
    ]


def encode_records(records: Sequence[PatientVitals]) -> np.ndarray:
    """Encode a list of vitals into an ``(N, 8)`` matrix."""
    return encode_frame(records_to_frame(list(records)))
