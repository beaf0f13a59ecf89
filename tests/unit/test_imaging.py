# ============================================
# Unit Tests for Image Classification
# ============================================
"""
Tests for image preparation and the four-class image model.
"""

import numpy as np
import pytest

from healthrisk.exceptions import ModelPredictionError
from healthrisk.services import artifacts
from healthrisk.services.assessment import classify_image
from healthrisk.services.imaging import CLASSES, ImageClassifier, prepare_image


class TestPrepareImage:
    """Tests for resampling and scaling."""

    def test_output_shape(self):
        assert prepare_image(np.zeros((100, 80)), size=28).shape == (784,)

    def test_rgb_is_averaged(self):
        img = np.zeros((10, 10, 3))
        img[..., 0] = 0.9
        np.testing.assert_allclose(prepare_image(img, size=4), 0.3)

    def test_eight_bit_values_are_rescaled(self):
        vec = prepare_image(np.full((16, 16), 255.0), size=8)
        np.testing.assert_allclose(vec, 1.0)

    def test_invalid_dimensions(self):
        with pytest.raises(ModelPredictionError):
            prepare_image(np.zeros(10))


class TestImageClassifier:
    """Tests for training and prediction."""

    def test_untrained_refuses(self, fast_image_settings):
        with pytest.raises(ModelPredictionError):
            ImageClassifier(fast_image_settings).predict_proba(np.zeros((8, 8)))

    def test_trained_probabilities(self, fast_image_settings):
        model = ImageClassifier(fast_image_settings)
        model.train()
        proba = model.predict_proba(np.random.default_rng(0).random((20, 20)))
        assert proba.shape == (len(CLASSES),)
        assert proba.sum() == pytest.approx(1.0)

    def test_classify_through_slot(self, monkeypatch, fast_image_settings):
        monkeypatch.setattr(artifacts, "load_image_settings", lambda: fast_image_settings)
        finding = classify_image(np.ones((12, 12, 3)) * 128)
        assert finding.condition in CLASSES
        assert 60.0 <= finding.confidence <= 100.0
        assert artifacts.IMAGE_MODEL.build_count == 1
