# ============================================
# Configuration Module
# ============================================
"""
Runtime settings and logging setup.

Settings are plain pydantic models whose defaults are the standard
training recipe. Any field can be overridden through an environment variable
named ``HEALTHRISK_<FIELD>`` (``.env`` files are honoured via python-dotenv),
e.g. ``HEALTHRISK_EPOCHS=20``.
"""

import logging
import os
from typing import Optional, Type, TypeVar

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

ENV_PREFIX = "HEALTHRISK_"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

SettingsT = TypeVar("SettingsT", bound=BaseModel)


class TrainingSettings(BaseModel):
    """Hyper-parameters for the tabular risk model.

    Attributes
    ----------
    n_samples:
        Number of synthetic patients generated for training.
    epochs:
        Fixed epoch budget (no early stopping).
    batch_size:
        Mini-batch size.
    learning_rate:
        Adam learning rate.
    test_size:
        Held-out fraction used for the post-training evaluation.
    validation_split:
        Trailing fraction of the training split monitored every epoch.
    dropout:
        Drop probability of both dropout layers.
    seed:
        Seed for data synthesis, splitting and weight initialization.
    """
    n_samples: int = Field(default=1000, ge=10)
    epochs: int = Field(default=50, ge=1)
    batch_size: int = Field(default=32, ge=1)
    learning_rate: float = Field(default=1e-3, gt=0.0)
    test_size: float = Field(default=0.2, gt=0.0, lt=1.0)
    validation_split: float = Field(default=0.2, ge=0.0, lt=1.0)
    dropout: float = Field(default=0.2, ge=0.0, lt=1.0)
    seed: int = 42


class ImageSettings(BaseModel):
    """Hyper-parameters for the image classifier (random-noise demo data)."""
    n_samples: int = Field(default=200, ge=4)
    image_size: int = Field(default=28, ge=4)
    epochs: int = Field(default=10, ge=1)
    batch_size: int = Field(default=16, ge=1)
    learning_rate: float = Field(default=1e-3, gt=0.0)
    validation_split: float = Field(default=0.2, ge=0.0, lt=1.0)
    dropout: float = Field(default=0.5, ge=0.0, lt=1.0)
    seed: int = 7


def _from_env(model: Type[SettingsT], prefix: str) -> SettingsT:
    """Build `model` from defaults overridden by ``<prefix><FIELD>`` env vars."""
    overrides = {}
    for name in model.model_fields:
        value = os.getenv(f"{prefix}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return model(**overrides)


def load_settings() -> TrainingSettings:
    """Return the tabular training settings for this process."""
    return _from_env(TrainingSettings, ENV_PREFIX)


def load_image_settings() -> ImageSettings:
    """Return the image-model settings for this process."""
    return _from_env(ImageSettings, f"{ENV_PREFIX}IMAGE_")


def get_log_level() -> str:
    """Get the configured log level name (default INFO)."""
    return os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging with the project format."""
    logging.basicConfig(
        level=level or get_log_level(),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
