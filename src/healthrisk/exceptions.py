"""
Custom exception classes for healthrisk.

Defines a small hierarchy of exceptions for the failure modes of the
pipeline:
- Data validation (malformed patient input)
- Model operations (training and inference)

Degenerate statistics (empty or constant columns) are deliberately not part
of this hierarchy: the preprocessing toolkit returns NaN/0 sentinels instead.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class HealthRiskError(Exception):
    """Base exception class for all project-specific errors."""
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.timestamp = datetime.now().isoformat()

    def __str__(self):
        return f"{self.__class__.__name__}: {super().__str__()}"


class DataError(HealthRiskError):
    """Base class for data-related errors."""
    pass


class DataValidationError(DataError):
    """Raised when data validation checks fail."""
    pass


class MalformedInputError(DataValidationError):
    """Raised when a mandatory patient field is missing or not numeric."""
    def __init__(self, field: str, value: Any = None):
        message = f"Field '{field}' is required and must be numeric (got {value!r})"
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class ModelError(HealthRiskError):
    """Base class for model-related errors."""
    pass


class ModelTrainingError(ModelError):
    """Raised when model training fails or diverges."""
    def __init__(self, message: str, training_metrics: Optional[dict] = None):
        super().__init__(message, {"training_metrics": training_metrics or {}})


class ModelPredictionError(ModelError):
    """Raised when model inference receives unusable input."""
    def __init__(self, message: str, input_shape: Optional[tuple] = None):
        super().__init__(message, {"input_shape": input_shape})
