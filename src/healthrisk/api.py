"""
Health Risk Assessment API.

This module exposes a FastAPI application in front of the inference façade.
The risk model is trained lazily on the first assessment (exactly once per
process) and reused afterwards.

Endpoints
---------
- GET  `/`             : Liveness/health check with model state.
- GET  `/version`      : App version.
- GET  `/feature-map`  : Feature contract used by the model.
- GET  `/datasets`     : Metadata of the datasets the generators imitate.
- POST `/assess`       : Risk assessment for one patient.
- POST `/metrics`      : Classification metrics for labels vs predictions.

Notes
-----
- Input validation is handled by Pydantic models in ``.schemas``.
- Blocking work (training, inference) runs in the threadpool.
- No business logic lives here; the API delegates to the service layer.
"""

import logging
from dataclasses import asdict
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool

from . import __version__
from .config import configure_logging
from .exceptions import DataValidationError, ModelError
from .features import feature_map as describe_features, parse_patient_record
from .schemas import MetricsRequest, MetricsResponse, PatientRecord, RiskAssessment
from .services.artifacts import RISK_MODEL, get_risk_model
from .services.assessment import assess_vitals
from .services.metrics import calculate_metrics
from .services.risk_model import RiskModel
from .synthetic import DATASET_METADATA

configure_logging()
logger = logging.getLogger(__name__)

APP_VERSION = __version__

# Instantiate the FastAPI app with descriptive metadata for the OpenAPI schema.
app = FastAPI(
    title="Health Risk Assessment API",
    version=APP_VERSION,
    description="Disease-progression risk estimates from a from-scratch neural network (demo, not for clinical use)",
)


def risk_model_provider() -> Callable[[], RiskModel]:
    """Return the accessor for the process-wide risk model.

    The accessor is only called once the request has been parsed, so a
    malformed patient never triggers training.
    """
    return get_risk_model


# -----------
# Endpoints
# -----------

@app.get("/")
async def health_check():
    """Liveness probe and model state.

    Returns
    -------
    dict
        App version, status and risk-model state/build count.
    """
    return {
        "version": APP_VERSION,
        "status": "OK",
        "model_state": RISK_MODEL.state.value,
        "model_builds": RISK_MODEL.build_count,
    }


@app.get("/version")
async def version():
    """Return the application version."""
    return {"app_version": APP_VERSION}


@app.get("/feature-map")
async def feature_map():
    """Expose the ordered feature contract (name, source field, divisor)."""
    return {"features": describe_features()}


@app.get("/datasets")
async def datasets():
    """Informational metadata for each synthetic dataset family."""
    return {key: asdict(info) for key, info in DATASET_METADATA.items()}


@app.post("/assess", response_model=RiskAssessment)
async def assess(patient: PatientRecord, get_model: Callable[[], RiskModel] = Depends(risk_model_provider)):
    """Estimate disease-progression risk for one patient.

    Parameters
    ----------
    patient:
        Patient fields; numeric values may be strings.

    Returns
    -------
    RiskAssessment
        riskScore, riskLevel, progressionLikelihood and confidence.

    Raises
    ------
    HTTPException
        400 for malformed mandatory fields, 503 if the model is unavailable.
    """
    try:
        vitals = parse_patient_record(patient.to_raw())
    except DataValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        model = await run_in_threadpool(get_model)
        return await run_in_threadpool(assess_vitals, vitals, model)
    except ModelError as e:
        logger.error("Risk model unavailable: %s", e)
        raise HTTPException(status_code=503, detail=f"Assessment unavailable: {e}")


@app.post("/metrics", response_model=MetricsResponse)
async def metrics(payload: MetricsRequest):
    """Compute confusion counts, accuracy, precision, recall and F1.

    Raises
    ------
    HTTPException
        400 if the label and prediction lists differ in length.
    """
    try:
        return calculate_metrics(payload.y_true, payload.y_pred)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error during metrics: {e}")
