"""
From-scratch neural network components and training loop.

This module intentionally avoids external ML frameworks to keep every step
transparent for learning and auditing. It includes:

- Core NN building blocks:
    * `DenseLayer`, `ReLU`, `Sigmoid`, `Softmax`, `Dropout`.
    * `NeuralNetwork`: an ordered layer stack with forward/backward passes.
    * `build_risk_network`, `build_image_network`: the two fixed topologies.

- Losses:
    * Binary cross-entropy (BCE) and categorical cross-entropy (CCE) with
      their gradients.

- Optimizer & training:
    * `AdamOptimizer` and `train_model` (fixed epoch budget, monitored
      validation slice, no early stopping).

- Validation:
    * Numerical `gradient_check` for backprop validation.

Notes:
    - Layers only cache activations when called with ``train=True``; the
      inference path (``predict_proba``) is read-only and safe to share
      between threads.
    - Every source of randomness (init, dropout, shuffling) comes from an
      injected ``np.random.Generator``.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from .exceptions import ModelTrainingError

logger = logging.getLogger(__name__)

# -------------
# Core layers
# -------------

class DenseLayer:
    """Fully-connected (affine) layer with Adam moment buffers.

    Uses a uniform initialization with limit 1/sqrt(input_dim).

    Attributes:
        W, b: parameters
        mW, vW, mb, vb: moment buffers (used by Adam)
        dW, db: gradients computed during backprop
    """
    def __init__(self, input_dim: int, output_dim: int, rng: Optional[np.random.Generator] = None) -> None:
        rng = rng if rng is not None else np.random.default_rng()
        limit = 1.0 / math.sqrt(input_dim)
        self.W = rng.uniform(-limit, limit, (input_dim, output_dim))
        self.b = np.zeros((1, output_dim))

        # moments for the optimizer
        self.mW = np.zeros_like(self.W)
        self.vW = np.zeros_like(self.W)
        self.mb = np.zeros_like(self.b)
        self.vb = np.zeros_like(self.b)

        self.dW = None
        self.db = None
        self.x = None

    def forward(self, x: np.ndarray, train: bool = False) -> np.ndarray:
        """Compute affine transform: x @ W + b."""
        if train:
            self.x = x
        return x @ self.W + self.b

    def backward(self, grad_output: np.ndarray) -> np.ndarray:
        """Backprop through the affine transform; returns dL/dx."""
        batch_size = self.x.shape[0]
        self.dW = (self.x.T @ grad_output) / max(batch_size, 1)
        self.db = grad_output.mean(axis=0, keepdims=True)
        return grad_output @ self.W.T


class ReLU:
    """Rectified Linear Unit activation."""
    def __init__(self) -> None:
        self.x = None

    def forward(self, x: np.ndarray, train: bool = False) -> np.ndarray:
        if train:
            self.x = x
        return np.maximum(0, x)

    def backward(self, grad_output: np.ndarray) -> np.ndarray:
        """Mask gradients where the cached input was negative."""
        grad = grad_output.copy()
        grad[self.x < 0] = 0
        return grad


class Sigmoid:
    """Sigmoid activation σ(x) = 1 / (1 + exp(-x))."""
    def __init__(self) -> None:
        self.out = None

    def forward(self, x: np.ndarray, train: bool = False) -> np.ndarray:
        out = 1.0 / (1.0 + np.exp(-np.clip(x, -500, 500)))
        if train:
            self.out = out
        return out

    def backward(self, grad_output: np.ndarray) -> np.ndarray:
        """Return grad_output * σ(x) * (1 - σ(x))."""
        return grad_output * (self.out * (1 - self.out))


class Softmax:
    """Row-wise softmax over class logits."""
    def __init__(self) -> None:
        self.out = None

    def forward(self, x: np.ndarray, train: bool = False) -> np.ndarray:
        shifted = np.exp(x - x.max(axis=1, keepdims=True))
        out = shifted / shifted.sum(axis=1, keepdims=True)
        if train:
            self.out = out
        return out

    def backward(self, grad_output: np.ndarray) -> np.ndarray:
        """Jacobian-vector product: s * (g - sum(g * s))."""
        s = self.out
        return s * (grad_output - np.sum(grad_output * s, axis=1, keepdims=True))

# ----------------------
# Regularization layer
# ----------------------

class Dropout:
    """Train-time dropout; identity at evaluation.

    Args:
        p: Drop probability in [0, 1).
        rng: Generator used to draw masks.

    Notes:
        - During training, scales activations by 1/(1-p) to keep expectations.
    """
    def __init__(self, p: float = 0.5, rng: Optional[np.random.Generator] = None) -> None:
        if not 0.0 <= p < 1.0:
            raise ValueError(f"dropout probability must be in [0, 1), got {p}")
        self.p = p
        self.rng = rng if rng is not None else np.random.default_rng()
        self.mask = None

    def forward(self, x: np.ndarray, train: bool = False) -> np.ndarray:
        """Apply dropout mask at train-time; return x unchanged at eval-time."""
        if not train or self.p == 0.0:
            if train:
                self.mask = None
            return x
        self.mask = (self.rng.random(x.shape) >= self.p).astype(x.dtype) / (1.0 - self.p)
        return x * self.mask

    def backward(self, grad_output: np.ndarray) -> np.ndarray:
        """Propagate gradients through the same mask."""
        if self.mask is None:
            return grad_output
        return grad_output * self.mask

# -------------
# Losses
# -------------

def bce_loss(pred: np.ndarray, target: np.ndarray, eps: float = 1e-8) -> float:
    """Binary cross-entropy loss with epsilon clamping for stability."""
    pred_clamped = np.clip(pred, eps, 1 - eps)
    return float(-np.mean(
        target * np.log(pred_clamped) + (1 - target) * np.log(1 - pred_clamped)
    ))

def bce_loss_grad(pred: np.ndarray, target: np.ndarray, eps: float = 1e-8) -> np.ndarray:
    """Analytical gradient of BCE w.r.t. predictions (sigmoid outputs)."""
    pred_clamped = np.clip(pred, eps, 1 - eps)
    return (pred_clamped - target) / (pred_clamped * (1 - pred_clamped) + eps)

def cce_loss(pred: np.ndarray, target: np.ndarray, eps: float = 1e-8) -> float:
    """Categorical cross-entropy for one-hot targets."""
    return float(-np.mean(np.sum(target * np.log(np.clip(pred, eps, 1.0)), axis=1)))

def cce_loss_grad(pred: np.ndarray, target: np.ndarray, eps: float = 1e-8) -> np.ndarray:
    """Gradient of CCE w.r.t. softmax outputs."""
    return -target / np.clip(pred, eps, 1.0)


LOSSES = {
    "bce": (bce_loss, bce_loss_grad),
    "cce": (cce_loss, cce_loss_grad),
}

# -----------------
# Model definition
# -----------------

class NeuralNetwork:
    """Sequential stack of layers ending in a probability output.

    Args:
        layers: Ordered layers; each exposes ``forward(x, train)`` and
            ``backward(grad)``.
        loss: ``"bce"`` for a sigmoid head, ``"cce"`` for a softmax head.
    """
    def __init__(self, layers: Sequence, loss: str = "bce") -> None:
        if loss not in LOSSES:
            raise ValueError(f"Unknown loss '{loss}'")
        self.layers = list(layers)
        self.loss = loss
        self.input_dim = next(l.W.shape[0] for l in self.layers if isinstance(l, DenseLayer))

    def forward(self, x: np.ndarray, train: bool = False) -> np.ndarray:
        out = x
        for layer in self.layers:
            out = layer.forward(out, train=train)
        return out

    def predict_proba(self, x: np.ndarray) -> np.ndarray:
        """Inference pass: dropout off, nothing cached, no gradients."""
        return self.forward(np.asarray(x, dtype=float), train=False)

    def forward_and_backward(self, x: np.ndarray, y: np.ndarray) -> float:
        """Training step: forward pass with dropout ON, then backprop.

        Returns:
            Scalar loss value for the given batch.
        """
        loss_fn, loss_grad = LOSSES[self.loss]
        pred = self.forward(x, train=True)
        loss_val = loss_fn(pred, y)

        grad = loss_grad(pred, y)
        for layer in reversed(self.layers):
            grad = layer.backward(grad)
        return loss_val

    def parameters(self) -> List[DenseLayer]:
        """Return the list of trainable layers (for optimizers)."""
        return [l for l in self.layers if isinstance(l, DenseLayer)]


def build_risk_network(input_dim: int = 8, dropout_p: float = 0.2, seed: Optional[int] = None) -> NeuralNetwork:
    """Risk model topology.

    Architecture:
        [Input] -> Dense(64) -> ReLU -> Dropout
                -> Dense(32) -> ReLU -> Dropout
                -> Dense(16) -> ReLU
                -> Dense(1)  -> Sigmoid
    """
    rng = np.random.default_rng(seed)
    return NeuralNetwork([
        DenseLayer(input_dim, 64, rng), ReLU(), Dropout(dropout_p, rng),
        DenseLayer(64, 32, rng), ReLU(), Dropout(dropout_p, rng),
        DenseLayer(32, 16, rng), ReLU(),
        DenseLayer(16, 1, rng), Sigmoid(),
    ], loss="bce")


def build_image_network(input_dim: int, n_classes: int = 4, dropout_p: float = 0.5,
                        seed: Optional[int] = None) -> NeuralNetwork:
    """Image classifier topology: Dense(128) -> ReLU -> Dropout -> Dense(n) -> Softmax."""
    rng = np.random.default_rng(seed)
    return NeuralNetwork([
        DenseLayer(input_dim, 128, rng), ReLU(), Dropout(dropout_p, rng),
        DenseLayer(128, n_classes, rng), Softmax(),
    ], loss="cce")

# ---------------
# Optimizer
# ---------------

class AdamOptimizer:
    """Classic Adam optimizer for a list of `DenseLayer` parameters.

    Args:
        params: Layers to update (must expose `W`, `b`, `dW`, `db`, `mW`, `mb`, `vW`, `vb`).
        lr: Learning rate.
        beta1: Exponential decay for first moment.
        beta2: Exponential decay for second moment.
        eps: Numerical stability term.
    """
    def __init__(self, params: List[DenseLayer], lr: float = 1e-3, beta1: float = 0.9, beta2: float = 0.999, eps: float = 1e-8) -> None:
        self.params = params
        self.lr = lr
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps
        self.t = 0

    def step(self) -> None:
        """Apply one Adam update step to all layers."""
        self.t += 1
        for layer in self.params:
            if layer.dW is None or layer.db is None:
                continue
            layer.mW = self.beta1 * layer.mW + (1 - self.beta1) * layer.dW
            layer.mb = self.beta1 * layer.mb + (1 - self.beta1) * layer.db

            layer.vW = self.beta2 * layer.vW + (1 - self.beta2) * (layer.dW ** 2)
            layer.vb = self.beta2 * layer.vb + (1 - self.beta2) * (layer.db ** 2)

            mW_hat = layer.mW / (1 - self.beta1 ** self.t)
            mb_hat = layer.mb / (1 - self.beta1 ** self.t)
            vW_hat = layer.vW / (1 - self.beta2 ** self.t)
            vb_hat = layer.vb / (1 - self.beta2 ** self.t)

            layer.W -= self.lr * (mW_hat / (np.sqrt(vW_hat) + self.eps))
            layer.b -= self.lr * (mb_hat / (np.sqrt(vb_hat) + self.eps))

# ----------------
# Training loop
# ----------------

def _accuracy(model: NeuralNetwork, proba: np.ndarray, y: np.ndarray) -> float:
    if model.loss == "cce":
        return float(np.mean(proba.argmax(axis=1) == y.argmax(axis=1)))
    return float(np.mean((proba >= 0.5).astype(int) == y.astype(int)))


def train_model(
    model: NeuralNetwork,
    X: np.ndarray,
    y: np.ndarray,
    epochs: int = 50,
    batch_size: int = 32,
    lr: float = 1e-3,
    validation_split: float = 0.2,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, List[float]]:
    """Train the network with mini-batch Adam for a fixed number of epochs.

    The trailing ``validation_split`` fraction of ``X``/``y`` is held out and
    evaluated after every epoch; it is monitored only (no early stopping).

    Workflow per epoch:
        1) Shuffle the training rows and iterate mini-batches.
        2) Forward+backward with dropout ON; optimizer.step().
        3) Evaluate loss/accuracy on the validation slice.

    Args:
        model: Neural network instance (updated in place).
        X, y: Training arrays; ``y`` is ``(N, 1)`` for BCE or one-hot for CCE.
        epochs: Epoch budget.
        batch_size: Mini-batch size.
        lr: Adam learning rate.
        validation_split: Trailing fraction kept for monitoring.
        rng: Generator used for shuffling.

    Returns:
        History dict with ``loss``, ``accuracy``, ``val_loss`` and
        ``val_accuracy`` lists (one entry per epoch; validation lists are
        empty when there is no validation slice).

    Raises:
        ModelTrainingError: If the loss becomes NaN or infinite.
    """
    rng = rng if rng is not None else np.random.default_rng()
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    if y.ndim == 1:
        y = y.reshape(-1, 1)

    n_val = int(math.floor(len(X) * validation_split))
    n_train = len(X) - n_val
    if n_train <= 0:
        raise ModelTrainingError("Not enough samples to train", {"n_samples": len(X)})
    X_train, y_train = X[:n_train], y[:n_train]
    X_val, y_val = X[n_train:], y[n_train:]

    optimizer = AdamOptimizer(model.parameters(), lr=lr)
    loss_fn, _ = LOSSES[model.loss]
    n_batches = int(math.ceil(n_train / batch_size))
    history: Dict[str, List[float]] = {"loss": [], "accuracy": [], "val_loss": [], "val_accuracy": []}

    for epoch in range(epochs):
        # train
        perm = rng.permutation(n_train)
        X_shuffled = X_train[perm]
        y_shuffled = y_train[perm]

        epoch_loss = 0.0
        for b in range(n_batches):
            start = b * batch_size
            end = start + batch_size
            loss = model.forward_and_backward(X_shuffled[start:end], y_shuffled[start:end])
            if not math.isfinite(loss):
                raise ModelTrainingError(
                    f"Loss diverged at epoch {epoch + 1}, batch {b + 1}",
                    {"epoch": epoch + 1, "loss": history["loss"]},
                )
            optimizer.step()
            epoch_loss += loss

        history["loss"].append(epoch_loss / max(n_batches, 1))
        history["accuracy"].append(_accuracy(model, model.predict_proba(X_train), y_train))

        # validate
        if n_val:
            val_proba = model.predict_proba(X_val)
            history["val_loss"].append(loss_fn(val_proba, y_val))
            history["val_accuracy"].append(_accuracy(model, val_proba, y_val))

        logger.debug(
            "Epoch [%d/%d] Train Loss: %.4f | Acc: %.3f | Val Loss: %s",
            epoch + 1, epochs, history["loss"][-1], history["accuracy"][-1],
            f"{history['val_loss'][-1]:.4f}" if n_val else "n/a",
        )

    return history

# ============================================
# Validation helpers
# ============================================

def gradient_check(
    model: NeuralNetwork,
    X: np.ndarray,
    y: np.ndarray,
    eps: float = 1e-5,
    num_checks: int = 10,
    seed: int = 0
) -> Dict[str, float]:
    """Numerical gradient checking via central differences on random params.

    For randomly selected entries in each parameter tensor (W and b),
    perturb by ±eps and compare the numerical gradient with backprop.
    Dropout must be disabled (p=0) for the comparison to be meaningful.

    Returns:
        {'max_rel_error': float, 'mean_rel_error': float}
    """
    rng = np.random.default_rng(seed)
    loss_fn, _ = LOSSES[model.loss]
    y_col = y.reshape(-1, 1) if model.loss == "bce" else y

    # Run one backward pass to populate dW/db
    model.forward_and_backward(X, y_col)

    rel_errors: List[float] = []
    for layer in model.parameters():
        for pname in ("W", "b"):
            P = getattr(layer, pname)
            dP = getattr(layer, "d" + pname)
            idx_i = rng.integers(0, P.shape[0], size=num_checks)
            idx_j = rng.integers(0, P.shape[1], size=num_checks)

            for i, j in zip(idx_i, idx_j):
                old = P[i, j]
                P[i, j] = old + eps
                loss_plus = loss_fn(model.predict_proba(X), y_col)
                P[i, j] = old - eps
                loss_minus = loss_fn(model.predict_proba(X), y_col)
                P[i, j] = old

                grad_num = (loss_plus - loss_minus) / (2.0 * eps)
                grad_backprop = dP[i, j]
                rel = abs(grad_num - grad_backprop) / max(1e-8, abs(grad_num) + abs(grad_backprop))
                rel_errors.append(float(rel))

    return {
        "max_rel_error": float(np.max(rel_errors)),
        "mean_rel_error": float(np.mean(rel_errors)),
    }
