"""
Process-wide model slots with single-flight initialization.

This module is responsible for:
- Building each model lazily, on first use, exactly once per process.
- Serializing concurrent first callers: one caller trains, the rest block on
  the slot's lock and receive the same trained instance.
- Exposing the slot state (``uninitialized`` / ``training`` / ``ready``) and a
  build counter for health checks and tests.

Design notes
------------
- ``ModelSlot.get`` uses double-checked locking: the fast path reads the
  cached value without the lock; only the initializing path takes it.
- A failed build leaves the slot uninitialized and re-raises, so the error
  reaches every caller that attempted it and a later call may retry.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from ..config import load_image_settings, load_settings
from .imaging import ImageClassifier
from .risk_model import RiskModel

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ModelState(str, Enum):
    UNINITIALIZED = "uninitialized"
    TRAINING = "training"
    READY = "ready"


class ModelSlot(Generic[T]):
    """Lazily built, process-wide model holder.

    Attributes
    ----------
    name : str
        Label used in logs.
    build_count : int
        Number of times ``factory`` has been invoked.
    """
    def __init__(self, factory: Callable[[], T], name: str) -> None:
        self._factory = factory
        self.name = name
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._state = ModelState.UNINITIALIZED
        self.build_count = 0

    @property
    def state(self) -> ModelState:
        return self._state

    def get(self) -> T:
        """Return the model, building it first if no caller has yet."""
        value = self._value
        if value is not None:
            return value

        with self._lock:
            if self._value is None:
                self._state = ModelState.TRAINING
                self.build_count += 1
                logger.info("Initializing %s model (build #%d)", self.name, self.build_count)
                try:
                    self._value = self._factory()
                except Exception:
                    self._state = ModelState.UNINITIALIZED
                    logger.exception("Initialization of %s model failed", self.name)
                    raise
                self._state = ModelState.READY
            return self._value

    def reset(self) -> None:
        """Drop the cached model and counter (next ``get`` rebuilds)."""
        with self._lock:
            self._value = None
            self._state = ModelState.UNINITIALIZED
            self.build_count = 0


def _build_risk_model() -> RiskModel:
    model = RiskModel(load_settings())
    model.train()
    return model


def _build_image_model() -> ImageClassifier:
    model = ImageClassifier(load_image_settings())
    model.train()
    return model


RISK_MODEL = ModelSlot(_build_risk_model, "risk")
IMAGE_MODEL = ModelSlot(_build_image_model, "image")


def get_risk_model() -> RiskModel:
    """Return the process-wide trained risk model (training on first call)."""
    return RISK_MODEL.get()


def get_image_model() -> ImageClassifier:
    """Return the process-wide trained image classifier."""
    return IMAGE_MODEL.get()
