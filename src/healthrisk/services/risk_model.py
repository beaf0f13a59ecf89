"""
Disease-progression risk model.

``RiskModel`` owns a fixed-topology network (8 -> 64 -> 32 -> 16 -> 1) and
the recipe that trains it on synthetic patients:

1) Synthesize ``n_samples`` labelled ``PatientVitals``.
2) Encode them with the shared feature contract (``healthrisk.features``).
3) Split 80/20 with a seeded ``train_test_split``.
4) Fit with BCE + Adam for a fixed epoch budget, monitoring the trailing
   validation slice of the training split.
5) Score the held-out split (accuracy/precision/recall/F1, ROC-AUC, PR-AUC).

Inference is a single read-only forward pass; a model that has not been
trained refuses to predict.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np

from ..config import TrainingSettings, load_settings
from ..exceptions import ModelPredictionError, ModelTrainingError
from ..features import N_FEATURES, encode_frame
from ..nn_from_scratch import build_risk_network, train_model
from ..preprocessing import train_test_split
from ..synthetic import PatientVitals, generate_patient_vitals, records_to_frame
from .metrics import metrics_from_probs, pr_auc, roc_auc

logger = logging.getLogger(__name__)


class RiskModel:
    """Feedforward risk estimator over the 8-field feature vector.

    Attributes
    ----------
    settings : TrainingSettings
        Hyper-parameters used by ``train``.
    network : NeuralNetwork
        The underlying from-scratch MLP.
    history : dict | None
        Per-epoch training history once trained.
    evaluation : dict | None
        Held-out metrics once trained.
    """
    def __init__(self, settings: Optional[TrainingSettings] = None) -> None:
        self.settings = settings or load_settings()
        self.network = build_risk_network(
            N_FEATURES, dropout_p=self.settings.dropout, seed=self.settings.seed
        )
        self.history: Optional[Dict[str, Any]] = None
        self.evaluation: Optional[Dict[str, Any]] = None

    @property
    def is_trained(self) -> bool:
        return self.history is not None

    def train(self, records: Optional[Sequence[PatientVitals]] = None) -> Dict[str, Any]:
        """Fit the network; returns the held-out evaluation.

        Args:
            records: Labelled vitals to train on. Synthesized from the
                settings' seed when omitted.

        Raises:
            ModelTrainingError: On divergence or any failure during the fit.
        """
        s = self.settings
        if records is None:
            records = generate_patient_vitals(s.n_samples, seed=s.seed)
        frame = records_to_frame(list(records))
        X = encode_frame(frame)
        y = frame["high_risk"].to_numpy(dtype=float) if len(frame) else np.empty(0)

        train_idx, test_idx = train_test_split(np.arange(len(X)), test_size=s.test_size, seed=s.seed)
        logger.info(
            "Training risk model on %d samples (%d held out, %.0f%% positive)",
            len(train_idx), len(test_idx), 100.0 * (y.mean() if y.size else 0.0),
        )

        try:
            self.history = train_model(
                self.network,
                X[train_idx],
                y[train_idx],
                epochs=s.epochs,
                batch_size=s.batch_size,
                lr=s.learning_rate,
                validation_split=s.validation_split,
                rng=np.random.default_rng(s.seed),
            )
        except ModelTrainingError:
            raise
        except Exception as e:
            raise ModelTrainingError(f"Risk model training failed: {e}") from e

        proba = self.network.predict_proba(X[test_idx]).ravel()
        self.evaluation = {
            **metrics_from_probs(proba, y[test_idx], thr=0.5),
            "auc_roc": roc_auc(y[test_idx], proba),
            "auc_pr": pr_auc(y[test_idx], proba),
            "n_test": int(len(test_idx)),
        }
        logger.info(
            "Risk model trained: final loss %.4f | held-out accuracy %.3f | AUC-ROC %.3f",
            self.history["loss"][-1], self.evaluation["accuracy"], self.evaluation["auc_roc"],
        )
        return self.evaluation

    def predict_proba(self, X) -> np.ndarray:
        """Probabilities for an ``(N, 8)`` matrix, shape ``(N,)``."""
        if not self.is_trained:
            raise ModelPredictionError("Risk model has not been trained")
        X = np.atleast_2d(np.asarray(X, dtype=float))
        if X.shape[1] != N_FEATURES:
            raise ModelPredictionError(
                f"Expected {N_FEATURES} features, got {X.shape[1]}", input_shape=X.shape
            )
        return self.network.predict_proba(X).ravel()

    def predict(self, features) -> float:
        """Risk probability in [0, 1] for one feature vector."""
        return float(self.predict_proba(np.asarray(features, dtype=float).reshape(1, -1))[0])
