"""
Medical image classification.

Same train/infer contract as the risk model, with an image-shaped input:
images are reduced to a ``size x size`` grayscale grid in [0, 1], flattened,
and fed to ``Dense(128) -> ReLU -> Dropout -> Dense(4) -> Softmax``.

The demo trains on random-noise images with random labels, so predictions
carry no diagnostic meaning; the module exists to exercise the pipeline end
to end.
"""

import logging
from typing import Dict, Optional

import numpy as np

from ..config import ImageSettings, load_image_settings
from ..exceptions import ModelPredictionError, ModelTrainingError
from ..nn_from_scratch import build_image_network, train_model

logger = logging.getLogger(__name__)

CLASSES = ("Normal", "Pneumonia", "Fracture", "Tumor")

SEVERITY: Dict[str, str] = {
    "Normal": "low",
    "Pneumonia": "high",
    "Fracture": "medium",
    "Tumor": "high",
}

DESCRIPTIONS: Dict[str, str] = {
    "Normal": "No significant abnormalities detected in the medical image",
    "Pneumonia": "Signs of inflammation and infection detected in lung tissue",
    "Fracture": "Bone fracture or break detected in the examined area",
    "Tumor": "Suspicious mass or growth requiring further medical investigation",
}

MIN_CONFIDENCE = 60.0


def prepare_image(image, size: int = 28) -> np.ndarray:
    """Convert an ``(H, W)`` or ``(H, W, C)`` image into a flat grayscale vector.

    Channels are averaged, the grid is resampled to ``size x size`` by
    nearest-neighbour indexing, and pixel values above 1 are treated as
    8-bit and divided by 255.
    """
    arr = np.asarray(image, dtype=float)
    if arr.ndim == 3:
        arr = arr.mean(axis=2)
    if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ModelPredictionError("Expected a 2-D or 3-D image array", input_shape=arr.shape)
    rows = np.linspace(0, arr.shape[0] - 1, size).round().astype(int)
    cols = np.linspace(0, arr.shape[1] - 1, size).round().astype(int)
    grid = arr[np.ix_(rows, cols)]
    if grid.max() > 1.0:
        grid = grid / 255.0
    return np.clip(grid, 0.0, 1.0).ravel()


class ImageClassifier:
    """Four-class image classifier over downsampled grayscale pixels."""
    def __init__(self, settings: Optional[ImageSettings] = None) -> None:
        self.settings = settings or load_image_settings()
        self.input_dim = self.settings.image_size ** 2
        self.network = build_image_network(
            self.input_dim, n_classes=len(CLASSES),
            dropout_p=self.settings.dropout, seed=self.settings.seed,
        )
        self.history = None

    @property
    def is_trained(self) -> bool:
        return self.history is not None

    def train(self) -> Dict:
        """Fit on random-normal images with uniformly random labels."""
        s = self.settings
        rng = np.random.default_rng(s.seed)
        images = rng.normal(0.5, 0.25, (s.n_samples, self.input_dim))
        labels = rng.integers(0, len(CLASSES), s.n_samples)
        one_hot = np.eye(len(CLASSES))[labels]

        logger.info("Training image model on %d synthetic images", s.n_samples)
        try:
            self.history = train_model(
                self.network, images, one_hot,
                epochs=s.epochs, batch_size=s.batch_size, lr=s.learning_rate,
                validation_split=s.validation_split, rng=rng,
            )
        except ModelTrainingError:
            raise
        except Exception as e:
            raise ModelTrainingError(f"Image model training failed: {e}") from e
        logger.info("Image model trained: final loss %.4f", self.history["loss"][-1])
        return self.history

    def predict_proba(self, image) -> np.ndarray:
        """Class probabilities (ordered as ``CLASSES``) for one image."""
        if not self.is_trained:
            raise ModelPredictionError("Image model has not been trained")
        x = prepare_image(image, self.settings.image_size).reshape(1, -1)
        return self.network.predict_proba(x)[0]
