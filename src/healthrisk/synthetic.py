# ============================================
# Synthetic Data Generation Module
# ============================================
"""
Generate synthetic medical records for training and development.

Every record schema is a frozen dataclass paired with a *field plan*: a
mapping from field name to a declared distribution. Each field is sampled
independently, so every value lies in its declared range or categorical
domain by construction.

Schemas
-------
- ``HeartDiseaseRecord``: UCI Heart Disease shape.
- ``DiabetesRecord``: CDC Diabetes Health Indicators shape.
- ``ChestXRayRecord``: chest X-ray image metadata shape.
- ``PatientVitals``: the eight vitals used by the risk model, plus a
  rule-based high-risk label.

IMPORTANT: This data is synthetic and should NOT be used for clinical
decisions. The distributions give plausible-shaped data, not faithful
epidemiology.
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Sequence, Type

import numpy as np
import pandas as pd


# ---------------------------
# Field distributions
# ---------------------------

@dataclass(frozen=True)
class Uniform:
    """Continuous uniform over [low, high), optionally rounded."""
    low: float
    high: float
    decimals: Optional[int] = None

    def sample(self, rng) -> float:
        value = self.low + rng.random() * (self.high - self.low)
        if self.decimals is not None:
            value = round(value, self.decimals)
        return float(value)

    def contains(self, value) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class UniformInt:
    """Discrete uniform over the inclusive range [low, high]."""
    low: int
    high: int

    def sample(self, rng) -> int:
        return self.low + int(math.floor(rng.random() * (self.high - self.low + 1)))

    def contains(self, value) -> bool:
        return isinstance(value, int) and self.low <= value <= self.high


@dataclass(frozen=True)
class Bernoulli:
    """Binary field: ``on`` with probability ``p``, otherwise ``off``."""
    p: float
    on: Any = 1
    off: Any = 0

    def sample(self, rng) -> Any:
        return self.on if rng.random() < self.p else self.off

    def contains(self, value) -> bool:
        return value in (self.on, self.off)


@dataclass(frozen=True)
class Categorical:
    """Finite domain with per-choice weights (uniform when omitted)."""
    choices: tuple
    weights: Optional[tuple] = None

    def sample(self, rng) -> Any:
        weights = self.weights or (1.0,) * len(self.choices)
        u = rng.random() * sum(weights)
        acc = 0.0
        for choice, w in zip(self.choices, weights):
            acc += w
            if u < acc:
                return choice
        return self.choices[-1]

    def contains(self, value) -> bool:
        return value in self.choices


# ---------------------------
# Record schemas
# ---------------------------

@dataclass(frozen=True)
class HeartDiseaseRecord:
    """UCI Heart Disease record (see ``HEART_DISEASE_FIELDS`` for domains)."""
    age: int
    sex: str
    cp: int
    trestbps: int
    chol: int
    fbs: int
    restecg: int
    thalach: int
    exang: int
    oldpeak: float
    slope: int
    ca: int
    thal: int
    target: int


@dataclass(frozen=True)
class DiabetesRecord:
    """CDC BRFSS diabetes health-indicator record."""
    high_bp: int
    high_chol: int
    chol_check: int
    bmi: float
    smoker: int
    stroke: int
    heart_disease_or_attack: int
    phys_activity: int
    fruits: int
    veggies: int
    hvy_alcohol_consump: int
    any_healthcare: int
    no_docbc_cost: int
    gen_hlth: int
    ment_hlth: int
    phys_hlth: int
    diff_walk: int
    sex: int
    age: int
    education: int
    income: int
    diabetes: int


@dataclass(frozen=True)
class ChestXRayRecord:
    """Metadata for one synthetic chest X-ray."""
    image_id: str
    diagnosis: str
    patient_age: int
    patient_sex: str
    view_position: str
    confidence: float


@dataclass(frozen=True)
class PatientVitals:
    """Vitals consumed by the risk model.

    ``smoking_status`` is one of ``"never"``, ``"former"``, ``"current"``;
    ``high_risk`` is filled in by :func:`risk_factor_label`.
    """
    age: float
    gender: str
    systolic: float
    diastolic: float
    heart_rate: float
    cholesterol: float
    blood_sugar: float
    bmi: float
    smoking_status: str
    high_risk: int = 0


# Based on UCI Heart Disease dataset statistics
HEART_DISEASE_FIELDS: Dict[str, Any] = {
    "age": UniformInt(29, 78),
    "sex": Bernoulli(0.68, on="M", off="F"),  # ~68% male
    "cp": UniformInt(0, 3),
    "trestbps": UniformInt(94, 200),
    "chol": UniformInt(126, 564),
    "fbs": Bernoulli(0.15),  # fasting blood sugar > 120 mg/dL
    "restecg": UniformInt(0, 2),
    "thalach": UniformInt(71, 202),
    "exang": Bernoulli(0.33),
    "oldpeak": Uniform(0.0, 6.2, decimals=1),
    "slope": UniformInt(0, 2),
    "ca": UniformInt(0, 3),
    "thal": UniformInt(1, 3),
    "target": Bernoulli(0.46),
}

# Based on Diabetes Health Indicators dataset distributions
DIABETES_FIELDS: Dict[str, Any] = {
    "high_bp": Bernoulli(0.4),
    "high_chol": Bernoulli(0.4),
    "chol_check": Bernoulli(0.95),
    "bmi": Uniform(15.0, 55.0, decimals=2),
    "smoker": Bernoulli(0.2),
    "stroke": Bernoulli(0.05),
    "heart_disease_or_attack": Bernoulli(0.1),
    "phys_activity": Bernoulli(0.75),
    "fruits": Bernoulli(0.6),
    "veggies": Bernoulli(0.8),
    "hvy_alcohol_consump": Bernoulli(0.05),
    "any_healthcare": Bernoulli(0.95),
    "no_docbc_cost": Bernoulli(0.15),
    "gen_hlth": UniformInt(1, 5),
    "ment_hlth": UniformInt(0, 30),
    "phys_hlth": UniformInt(0, 30),
    "diff_walk": Bernoulli(0.2),
    "sex": Bernoulli(0.5),
    "age": UniformInt(1, 13),  # BRFSS age bucket
    "education": UniformInt(1, 6),
    "income": UniformInt(1, 8),
    # 0 = none, 1 = prediabetes, 2 = diabetes
    "diabetes": Categorical((0, 1, 2), (0.85, 0.075, 0.075)),
}

CHEST_XRAY_FIELDS: Dict[str, Any] = {
    "diagnosis": Bernoulli(0.25, on="PNEUMONIA", off="NORMAL"),
    "patient_age": UniformInt(1, 80),
    "patient_sex": Bernoulli(0.5, on="M", off="F"),
    "view_position": Bernoulli(0.3, on="AP", off="PA"),
    "confidence": Uniform(0.7, 1.0),
}

PATIENT_VITALS_FIELDS: Dict[str, Any] = {
    "age": Uniform(20.0, 100.0),
    "gender": Bernoulli(0.5, on="male", off="female"),
    "systolic": Uniform(90.0, 170.0),
    "diastolic": Uniform(60.0, 100.0),
    "heart_rate": Uniform(60.0, 120.0),
    "cholesterol": Uniform(150.0, 350.0),
    "blood_sugar": Uniform(70.0, 220.0),
    "bmi": Uniform(18.0, 38.0),
    "smoking_status": Categorical(("never", "former", "current"), (0.5, 0.25, 0.25)),
}

# (weight, predicate) pairs of the simplified cardiovascular risk rule
RISK_FACTORS = (
    (0.30, lambda v: v.age > 60),
    (0.25, lambda v: v.systolic > 140),
    (0.20, lambda v: v.diastolic > 90),
    (0.15, lambda v: v.heart_rate > 100),
    (0.20, lambda v: v.cholesterol > 240),
    (0.25, lambda v: v.blood_sugar > 140),
    (0.20, lambda v: v.bmi > 30),
    (0.30, lambda v: v.smoking_status == "current"),
)
RISK_FACTOR_CUTOFF = 0.6


# ---------------------------
# Generation
# ---------------------------

def _resolve_rng(rng=None, seed: Optional[int] = None):
    """Return the injected RNG, or a fresh NumPy generator (seeded if given)."""
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def generate(
    schema: Type,
    field_plan: Dict[str, Any],
    count: int,
    rng=None,
    seed: Optional[int] = None,
) -> List[Any]:
    """Sample ``count`` independent records of ``schema`` from ``field_plan``.

    Args:
        schema: Frozen dataclass type to instantiate.
        field_plan: Mapping ``field -> distribution``; fields of ``schema``
            absent from the plan keep their dataclass default.
        count: Number of records to produce.
        rng: Optional random source exposing ``random() -> float in [0, 1)``.
        seed: Seed for a fresh NumPy generator when ``rng`` is not given.

    Returns:
        List of exactly ``count`` records.

    Raises:
        ValueError: If ``count`` is negative.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    rng = _resolve_rng(rng, seed)
    return [
        schema(**{name: dist.sample(rng) for name, dist in field_plan.items()})
        for _ in range(count)
    ]


def generate_heart_disease_data(count: int, rng=None, seed: Optional[int] = None) -> List[HeartDiseaseRecord]:
    """Generate UCI-shaped heart disease records."""
    return generate(HeartDiseaseRecord, HEART_DISEASE_FIELDS, count, rng=rng, seed=seed)


def generate_diabetes_data(count: int, rng=None, seed: Optional[int] = None) -> List[DiabetesRecord]:
    """Generate BRFSS-shaped diabetes indicator records."""
    return generate(DiabetesRecord, DIABETES_FIELDS, count, rng=rng, seed=seed)


def generate_chest_xray_data(count: int, rng=None, seed: Optional[int] = None) -> List[ChestXRayRecord]:
    """Generate chest X-ray metadata with sequential image ids."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    rng = _resolve_rng(rng, seed)
    records = []
    for i in range(count):
        values = {name: dist.sample(rng) for name, dist in CHEST_XRAY_FIELDS.items()}
        records.append(ChestXRayRecord(image_id=f"chest_xray_{i:05d}", **values))
    return records


def risk_factor_score(vitals: PatientVitals) -> float:
    """Sum the weights of every risk factor present in ``vitals``."""
    return sum(weight for weight, present in RISK_FACTORS if present(vitals))


def risk_factor_label(vitals: PatientVitals) -> int:
    """Return 1 when the risk-factor score exceeds the cutoff, else 0."""
    return int(risk_factor_score(vitals) > RISK_FACTOR_CUTOFF)


def generate_patient_vitals(count: int, rng=None, seed: Optional[int] = None) -> List[PatientVitals]:
    """Generate labelled patient vitals for training the risk model."""
    unlabelled = generate(PatientVitals, PATIENT_VITALS_FIELDS, count, rng=rng, seed=seed)
    return [
        PatientVitals(**{**asdict(v), "high_risk": risk_factor_label(v)})
        for v in unlabelled
    ]


def records_to_frame(records: Sequence[Any]) -> pd.DataFrame:
    """Convert a list of record dataclasses into a DataFrame (one row each)."""
    if not records:
        return pd.DataFrame()
    columns = [f.name for f in fields(records[0])]
    return pd.DataFrame([asdict(r) for r in records], columns=columns)


# ---------------------------
# Dataset metadata
# ---------------------------

@dataclass(frozen=True)
class DatasetInfo:
    """Descriptive metadata for a public dataset a generator imitates."""
    name: str
    url: str
    description: str
    citation: str
    features: Optional[int] = None
    samples: Optional[int] = None
    target: Optional[str] = None
    classes: Optional[tuple] = None
    image_size: Optional[str] = None


DATASET_METADATA: Dict[str, DatasetInfo] = {
    "heart_disease": DatasetInfo(
        name="Heart Disease UCI",
        url="https://www.kaggle.com/datasets/ronitf/heart-disease-uci",
        description="Heart disease dataset for binary classification",
        citation="Dua, D. and Graff, C. (2019). UCI Machine Learning Repository",
        features=13,
        samples=303,
        target="Heart disease presence (0/1)",
    ),
    "chest_xray": DatasetInfo(
        name="Chest X-Ray Images (Pneumonia)",
        url="https://www.kaggle.com/datasets/paultimothymooney/chest-xray-pneumonia",
        description="Chest X-ray images for pneumonia detection",
        citation="Kermany, Daniel; Zhang, Kang; Goldbaum, Michael (2018)",
        samples=5863,
        classes=("NORMAL", "PNEUMONIA"),
        image_size="224x224 pixels",
    ),
    "diabetes": DatasetInfo(
        name="Diabetes Health Indicators Dataset",
        url="https://www.kaggle.com/datasets/alexteboul/diabetes-health-indicators-dataset",
        description="CDC survey data for diabetes prediction",
        citation="CDC Behavioral Risk Factor Surveillance System (BRFSS)",
        features=21,
        samples=253680,
        classes=("No diabetes", "Prediabetes", "Diabetes"),
    ),
}
