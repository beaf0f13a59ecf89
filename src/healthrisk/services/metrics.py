"""
Binary classification metrics.

This module implements:
- `calculate_metrics`: confusion-matrix counts, accuracy, precision, recall,
  F1 and the 2x2 confusion matrix from hard 0/1 predictions.
- `metrics_from_probs`: the same, after thresholding probabilities.
- `_binary_clf_curve`: helper that builds monotonic FP/TP counts vs thresholds
  (scores sorted descending), similar in spirit to scikit-learn's utility.
- `roc_auc`: trapezoidal ROC-AUC.
- `pr_auc`: trapezoidal Precision-Recall AUC.

Notes
-----
- All operations assume **binary** targets encoded as {0, 1}.
- Undefined ratios (zero denominators) are reported as 0.0.
"""

from typing import Any, Dict

import numpy as np


def _ratio(num: float, den: float) -> float:
    return float(num / den) if den else 0.0


def calculate_metrics(y_true, y_pred) -> Dict[str, Any]:
    """Compute confusion counts and summary metrics for hard predictions.

    Args
    ----
    y_true:
        Ground-truth binary labels (0/1).
    y_pred:
        Predicted binary labels (0/1), same length as ``y_true``.

    Returns
    -------
    dict
        Keys: ``tp``, ``fp``, ``tn``, ``fn``, ``accuracy``, ``precision``,
        ``recall``, ``f1_score`` and ``confusion_matrix`` laid out as
        ``[[tn, fp], [fn, tp]]``.

    Raises
    ------
    ValueError
        If the two sequences differ in length.
    """
    y_true = np.asarray(y_true).astype(int).ravel()
    y_pred = np.asarray(y_pred).astype(int).ravel()
    if y_true.size != y_pred.size:
        raise ValueError(f"Length mismatch: {y_true.size} labels vs {y_pred.size} predictions")

    # Confusion matrix counts
    tp = int(np.sum((y_pred == 1) & (y_true == 1)))
    tn = int(np.sum((y_pred == 0) & (y_true == 0)))
    fp = int(np.sum((y_pred == 1) & (y_true == 0)))
    fn = int(np.sum((y_pred == 0) & (y_true == 1)))

    accuracy = _ratio(tp + tn, tp + tn + fp + fn)
    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)
    f1 = _ratio(2 * precision * recall, precision + recall)

    return {
        "tp": tp,
        "fp": fp,
        "tn": tn,
        "fn": fn,
        "accuracy": accuracy,
        "precision": precision,
        "recall": recall,
        "f1_score": f1,
        "confusion_matrix": [[tn, fp], [fn, tp]],
    }


def metrics_from_probs(proba, y, thr: float = 0.5) -> Dict[str, Any]:
    """Binarize positive-class probabilities at ``thr`` and score them."""
    proba = np.asarray(proba, dtype=float).ravel()
    return calculate_metrics(y, (proba >= thr).astype(int))


def _binary_clf_curve(y_true: np.ndarray, y_score: np.ndarray):
    """Construct FP/TP counts and thresholds for binary classifier scores.

    The arrays are computed by sorting scores in **descending** order and
    stepping through distinct score values.

    Returns
    -------
    tuple[np.ndarray, np.ndarray, np.ndarray]
        (fps, tps, thresholds) where arrays are aligned and monotonic with
        decreasing thresholds.
    """
    y_score = np.asarray(y_score, dtype=float).ravel()
    order = np.argsort(-y_score, kind="stable")
    y_true = np.asarray(y_true).astype(int).ravel()[order]
    y_score = y_score[order]

    # Indices where the sorted score value changes
    distinct_value_indices = np.where(np.diff(y_score))[0]
    threshold_idxs = np.r_[distinct_value_indices, y_true.size - 1]

    # Cumulative positives among sorted labels at those thresholds
    tps = np.cumsum(y_true)[threshold_idxs]
    fps = 1 + threshold_idxs - tps
    thresholds = y_score[threshold_idxs]
    return fps, tps, thresholds


def roc_auc(y_true, y_score) -> float:
    """Compute ROC-AUC via trapezoidal integration.

    Returns
    -------
    float
        Area under the ROC curve; NaN when only one class is present.
    """
    y_true = np.asarray(y_true).astype(int).ravel()
    if y_true.size == 0 or y_true.min() == y_true.max():
        return float("nan")
    fps, tps, _ = _binary_clf_curve(y_true, y_score)

    # Prepend the (0, 0) corner so the curve starts at the origin
    fpr = np.r_[0.0, fps / fps[-1]]
    tpr = np.r_[0.0, tps / tps[-1]]
    return float(np.trapezoid(tpr, fpr))


def pr_auc(y_true, y_score) -> float:
    """Compute Precision-Recall AUC via trapezoidal integration.

    Notes
    -----
    - precision = TP / (TP + FP), recall = TP / P, where P = total positives.
    - Returns NaN when there are no positives.
    """
    y_true = np.asarray(y_true).astype(int).ravel()
    if y_true.sum() == 0:
        return float("nan")
    fps, tps, _ = _binary_clf_curve(y_true, y_score)

    # Start the curve at (recall=0, precision=1); recall is already non-decreasing
    precision = np.r_[1.0, tps / np.maximum(tps + fps, 1e-16)]
    recall = np.r_[0.0, tps / tps[-1]]
    return float(np.trapezoid(precision, recall))
