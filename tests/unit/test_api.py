# ============================================
# Unit Tests for the HTTP API
# ============================================
"""
Tests for the FastAPI endpoints with an injected risk model.
"""

import pytest
from fastapi.testclient import TestClient

from healthrisk import __version__
from healthrisk.api import app, risk_model_provider
from healthrisk.exceptions import ModelTrainingError
from healthrisk.services import artifacts


@pytest.fixture
def client(fixed_model):
    app.dependency_overrides[risk_model_provider] = lambda: (lambda: fixed_model(0.75))
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestInfoEndpoints:
    """Tests for the read-only endpoints."""

    def test_health(self, client):
        body = client.get("/").json()
        assert body["status"] == "OK"
        assert body["model_state"] == "uninitialized"
        assert body["model_builds"] == 0

    def test_version(self, client):
        assert client.get("/version").json() == {"app_version": __version__}

    def test_feature_map(self, client):
        features = client.get("/feature-map").json()["features"]
        assert len(features) == 8
        assert features[0]["feature"] == "age"

    def test_datasets(self, client):
        body = client.get("/datasets").json()
        assert body["heart_disease"]["samples"] == 303


class TestAssess:
    """Tests for POST /assess."""

    def test_assess(self, client, sample_patient):
        resp = client.post("/assess", json=sample_patient)
        assert resp.status_code == 200
        body = resp.json()
        assert body["riskScore"] == pytest.approx(75.0)
        assert body["riskLevel"] == "High"
        assert body["progressionLikelihood"] == "Likely"
        assert body["confidence"] == pytest.approx(82.5)

    def test_malformed_age(self, client, sample_patient):
        sample_patient["age"] = "abc"
        resp = client.post("/assess", json=sample_patient)
        assert resp.status_code == 400
        assert "age" in resp.json()["detail"]

    def test_missing_required_field(self, client, sample_patient):
        del sample_patient["heartRate"]
        assert client.post("/assess", json=sample_patient).status_code == 422

    def test_model_unavailable(self, sample_patient, monkeypatch):
        def broken():
            raise ModelTrainingError("diverged")

        monkeypatch.setattr(artifacts.RISK_MODEL, "_factory", broken)
        resp = TestClient(app).post("/assess", json=sample_patient)
        assert resp.status_code == 503
        assert artifacts.RISK_MODEL.state.value == "uninitialized"

    def test_malformed_input_does_not_train(self, sample_patient, monkeypatch):
        def broken():
            raise ModelTrainingError("diverged")

        monkeypatch.setattr(artifacts.RISK_MODEL, "_factory", broken)
        sample_patient["age"] = "abc"
        resp = TestClient(app).post("/assess", json=sample_patient)
        assert resp.status_code == 400
        assert artifacts.RISK_MODEL.build_count == 0


class TestMetrics:
    """Tests for POST /metrics."""

    def test_metrics(self, client):
        resp = client.post("/metrics", json={"y_true": [1, 1, 0, 0], "y_pred": [1, 0, 0, 1]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["accuracy"] == 0.5
        assert body["confusion_matrix"] == [[1, 1], [1, 1]]

    def test_length_mismatch(self, client):
        resp = client.post("/metrics", json={"y_true": [1, 0], "y_pred": [1]})
        assert resp.status_code == 400
