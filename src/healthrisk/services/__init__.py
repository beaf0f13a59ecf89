"""
Service layer: metrics, models, model slots and the inference façade.
"""

from .artifacts import IMAGE_MODEL, RISK_MODEL, ModelSlot, ModelState, get_image_model, get_risk_model
from .assessment import assess_patient, classify_image
from .metrics import calculate_metrics
from .risk_model import RiskModel

__all__ = [
    "IMAGE_MODEL",
    "RISK_MODEL",
    "ModelSlot",
    "ModelState",
    "RiskModel",
    "assess_patient",
    "calculate_metrics",
    "classify_image",
    "get_image_model",
    "get_risk_model",
]
