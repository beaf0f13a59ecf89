# ============================================
# Unit Tests for Configuration
# ============================================
"""
Tests for settings defaults and environment overrides.
"""

import pytest
from pydantic import ValidationError

from healthrisk.config import get_log_level, load_image_settings, load_settings


class TestSettings:
    """Tests for ``load_settings`` and friends."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("HEALTHRISK_EPOCHS", raising=False)
        s = load_settings()
        assert s.epochs == 50
        assert s.batch_size == 32
        assert s.learning_rate == 1e-3

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HEALTHRISK_EPOCHS", "7")
        monkeypatch.setenv("HEALTHRISK_LEARNING_RATE", "0.01")
        s = load_settings()
        assert s.epochs == 7
        assert s.learning_rate == 0.01

    def test_image_prefix(self, monkeypatch):
        monkeypatch.setenv("HEALTHRISK_IMAGE_EPOCHS", "3")
        monkeypatch.setenv("HEALTHRISK_EPOCHS", "99")
        assert load_image_settings().epochs == 3

    def test_invalid_override(self, monkeypatch):
        monkeypatch.setenv("HEALTHRISK_DROPOUT", "1.5")
        with pytest.raises(ValidationError):
            load_settings()

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("HEALTHRISK_LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"
