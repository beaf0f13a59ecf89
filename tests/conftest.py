# ============================================
# Pytest Configuration and Fixtures
# ============================================
"""
Shared fixtures and configuration for all tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from healthrisk.config import ImageSettings, TrainingSettings  # noqa: E402
from healthrisk.services.artifacts import IMAGE_MODEL, RISK_MODEL  # noqa: E402


class FixedModel:
    """Stand-in risk model that always returns the same probability."""
    def __init__(self, p: float) -> None:
        self.p = p
        self.calls = []

    def predict(self, features) -> float:
        self.calls.append(np.asarray(features, dtype=float))
        return self.p


@pytest.fixture
def fixed_model():
    """Factory for ``FixedModel`` instances."""
    return FixedModel


@pytest.fixture
def sample_patient():
    """A loosely typed patient record as sent by the presentation layer."""
    return {
        "age": "45",
        "gender": "female",
        "bloodPressureSystolic": "120",
        "bloodPressureDiastolic": 80,
        "heartRate": 72,
        "cholesterol": "180",
        "bloodSugar": 95,
        "bmi": "24.5",
        "smokingStatus": "never",
    }


@pytest.fixture
def fast_settings():
    """Small training recipe so model tests run in well under a second."""
    return TrainingSettings(n_samples=200, epochs=5, batch_size=32, seed=3)


@pytest.fixture
def fast_image_settings():
    return ImageSettings(n_samples=24, image_size=8, epochs=2, batch_size=8, seed=1)


@pytest.fixture(autouse=True)
def reset_model_slots():
    """Every test starts with uninitialized process-wide model slots."""
    RISK_MODEL.reset()
    IMAGE_MODEL.reset()
    yield
    RISK_MODEL.reset()
    IMAGE_MODEL.reset()
