"""
Stateless preprocessing primitives for rectangular numeric data.

This module mirrors the sklearn preprocessing helpers the pipeline needs,
implemented on NumPy so every step stays transparent. It includes:

- Splitting:
    * `train_test_split`: shuffled train/test partition.
    * `cross_validation_split`: contiguous k-fold partitions.
    * `SineRandom`: small deterministic random source for seeded splits.

- Cleaning and scaling:
    * `impute_missing_values` (mean / median / most_frequent).
    * `detect_outliers` (IQR rule).
    * `normalize_min_max`, `standardize`, `normalize_heart_disease_data`.

- Feature engineering:
    * `pearson_correlation`, `select_k_best_features`.
    * `create_polynomial_features`.

Notes:
    - Functions never mutate their inputs.
    - Degenerate statistics (empty or constant columns) yield NaN or 0
      instead of raising.
    - Randomness always comes from an injected or locally created source;
      no global random state is read or written.
"""

import itertools
import math
from dataclasses import asdict
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

IMPUTE_STRATEGIES = ("mean", "median", "most_frequent")

HEART_DISEASE_NUMERIC_COLUMNS = [
    "age", "trestbps", "chol", "fbs", "restecg", "thalach",
    "exang", "oldpeak", "slope", "ca", "thal",
]


class Split(NamedTuple):
    """A train/held-out partition of a dataset."""
    train: Any
    test: Any


class SineRandom:
    """Deterministic random source driven by a running integer seed.

    Each draw computes ``x = sin(s) * 10000``, returns the fractional part of
    ``x`` and increments ``s``. Instances are independent, so seeding one
    never affects any other random source in the process.
    """
    def __init__(self, seed: int) -> None:
        self.state = int(seed)

    def random(self) -> float:
        x = math.sin(self.state) * 10000
        self.state += 1
        return x - math.floor(x)


# ---------------------------
# Splitting
# ---------------------------

def _take(data, indices: Sequence[int]):
    """Select rows by position from a list, ndarray or DataFrame."""
    if isinstance(data, (pd.DataFrame, pd.Series)):
        return data.iloc[list(indices)]
    if isinstance(data, np.ndarray):
        return data[np.asarray(indices, dtype=int)]
    return [data[i] for i in indices]


def _shuffled_indices(n: int, rng) -> List[int]:
    """Fisher-Yates shuffle of ``range(n)`` using ``rng.random()``."""
    order = list(range(n))
    for i in range(n - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        order[i], order[j] = order[j], order[i]
    return order


def train_test_split(data, test_size: float = 0.2, seed: Optional[int] = None, rng=None) -> Split:
    """Shuffle ``data`` and split it into train/test partitions.

    Args:
        data: List, NumPy array or DataFrame of rows.
        test_size: Fraction of rows assigned to the test partition.
        seed: When given, a scoped ``SineRandom(seed)`` drives the shuffle so
            repeated calls produce identical partitions.
        rng: Explicit random source (anything exposing ``random()``); takes
            precedence over ``seed``.

    Returns:
        ``Split(train, test)`` with ``floor(len(data) * (1 - test_size) + 0.5)``
        rows in train and the remainder in test.
    """
    if not 0.0 <= test_size <= 1.0:
        raise ValueError(f"test_size must be in [0, 1], got {test_size}")
    if rng is None:
        rng = SineRandom(seed) if seed is not None else np.random.default_rng()

    n = len(data)
    order = _shuffled_indices(n, rng)
    # round half up
    n_train = int(math.floor(n * (1 - test_size) + 0.5))
    return Split(_take(data, order[:n_train]), _take(data, order[n_train:]))


def cross_validation_split(data, folds: int = 5) -> List[Split]:
    """Contiguous k-fold partitions (no shuffling).

    Fold ``i`` tests on rows ``[i * fold_size, (i + 1) * fold_size)`` where
    ``fold_size = len(data) // folds``; the last fold also takes the
    remainder. Train is every row outside the fold's test range. Shuffle
    beforehand for randomized folds.
    """
    if folds < 1:
        raise ValueError(f"folds must be >= 1, got {folds}")
    n = len(data)
    fold_size = n // folds
    splits = []
    for i in range(folds):
        start = i * fold_size
        end = n if i == folds - 1 else (i + 1) * fold_size
        train_idx = list(range(0, start)) + list(range(end, n))
        splits.append(Split(_take(data, train_idx), _take(data, range(start, end))))
    return splits


# ---------------------------
# Cleaning / scaling
# ---------------------------

def _most_frequent(values: Iterable[float]) -> float:
    """Value with the highest count; ties go to the first value seen."""
    counts = {}
    for v in values:
        counts[v] = counts.get(v, 0) + 1
    best, best_count = math.nan, 0
    for v, c in counts.items():
        if c > best_count:
            best, best_count = v, c
    return best


def _column_fill_value(values: np.ndarray, strategy: str) -> float:
    if values.size == 0:
        return math.nan
    if strategy == "mean":
        return float(values.sum() / values.size)
    if strategy == "median":
        ordered = np.sort(values)
        mid = ordered.size // 2
        if ordered.size % 2:
            return float(ordered[mid])
        return float((ordered[mid - 1] + ordered[mid]) / 2)
    return float(_most_frequent(values.tolist()))


def impute_missing_values(data, strategy: str = "mean") -> np.ndarray:
    """Fill missing cells (``None`` / NaN) column by column.

    Args:
        data: Rows of numbers with ``None`` or NaN for missing cells.
        strategy: ``"mean"``, ``"median"`` or ``"most_frequent"``.

    Returns:
        A fully populated float copy of ``data``. A column without any
        observed value is filled with NaN.
    """
    if strategy not in IMPUTE_STRATEGIES:
        raise ValueError(f"Unknown strategy '{strategy}', expected one of {IMPUTE_STRATEGIES}")
    matrix = np.array(data, dtype=float)
    if matrix.size == 0:
        return matrix
    missing = np.isnan(matrix)
    for col in range(matrix.shape[1]):
        if missing[:, col].any():
            observed = matrix[~missing[:, col], col]
            matrix[missing[:, col], col] = _column_fill_value(observed, strategy)
    return matrix


def detect_outliers(data, contamination: float = 0.1) -> List[bool]:
    """Flag rows lying outside 1.5 IQR of any feature.

    Quartiles are taken by sorted position: Q1 = ``sorted[floor(n * 0.25)]``
    and Q3 = ``sorted[floor(n * 0.75)]``. ``contamination`` is accepted for
    API parity with isolation-forest style detectors and is not used.
    """
    matrix = np.asarray(data, dtype=float)
    if matrix.size == 0:
        return []
    if matrix.ndim == 1:
        matrix = matrix.reshape(-1, 1)
    n = matrix.shape[0]
    flags = np.zeros(n, dtype=bool)
    for col in range(matrix.shape[1]):
        ordered = np.sort(matrix[:, col])
        q1 = ordered[int(math.floor(n * 0.25))]
        q3 = ordered[int(math.floor(n * 0.75))]
        iqr = q3 - q1
        lower, upper = q1 - 1.5 * iqr, q3 + 1.5 * iqr
        flags |= (matrix[:, col] < lower) | (matrix[:, col] > upper)
    return flags.tolist()


def normalize_min_max(data) -> np.ndarray:
    """Column-wise min-max scaling to [0, 1]; constant columns become 0."""
    matrix = np.asarray(data, dtype=float)
    mins = matrix.min(axis=0)
    spans = matrix.max(axis=0) - mins
    safe = np.where(spans == 0, 1.0, spans)
    return np.where(spans == 0, 0.0, (matrix - mins) / safe)


def standardize(data) -> np.ndarray:
    """Column-wise z-score using the population std; constant columns become 0."""
    matrix = np.asarray(data, dtype=float)
    means = matrix.mean(axis=0)
    stds = matrix.std(axis=0)
    # a constant float column can have a tiny non-zero std
    constant = matrix.max(axis=0) == matrix.min(axis=0)
    safe = np.where(constant, 1.0, stds)
    return np.where(constant, 0.0, (matrix - means) / safe)


def normalize_heart_disease_data(records) -> np.ndarray:
    """Min-max scale the numeric UCI columns of heart-disease records."""
    frame = pd.DataFrame([asdict(r) for r in records])
    return normalize_min_max(frame[HEART_DISEASE_NUMERIC_COLUMNS].to_numpy(dtype=float))


# ---------------------------
# Feature engineering
# ---------------------------

def pearson_correlation(x, y) -> float:
    """Pearson correlation from raw sums; 0 when either input is constant."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size == 0 or np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0
    n = x.size
    numerator = n * np.sum(x * y) - np.sum(x) * np.sum(y)
    denom_sq = (n * np.sum(x * x) - np.sum(x) ** 2) * (n * np.sum(y * y) - np.sum(y) ** 2)
    if denom_sq <= 0:
        return 0.0
    return float(numerator / math.sqrt(denom_sq))


def select_k_best_features(features, targets, k: int) -> Tuple[np.ndarray, List[int]]:
    """Keep the ``k`` columns most correlated (in absolute value) with targets.

    Returns:
        ``(selected, indices)`` where ``indices`` follow the ranking order
        (strongest first) and ``selected`` has its columns in that order.
    """
    matrix = np.asarray(features, dtype=float)
    scores = [
        (i, abs(pearson_correlation(matrix[:, i], targets)))
        for i in range(matrix.shape[1])
    ]
    scores.sort(key=lambda item: item[1], reverse=True)
    indices = [i for i, _ in scores[: max(k, 0)]]
    return matrix[:, indices], indices


def create_polynomial_features(data, degree: int = 2) -> np.ndarray:
    """Expand each row with polynomial terms up to ``degree``.

    Column layout: original columns, then squares of every column, then
    products of every pair ``i < j``. For ``degree > 2`` each higher degree
    appends all of its monomials in ``combinations_with_replacement`` order.
    ``degree == 1`` returns a copy of the input.
    """
    if degree < 1:
        raise ValueError(f"degree must be >= 1, got {degree}")
    matrix = np.asarray(data, dtype=float)
    n_cols = matrix.shape[1]
    blocks = [matrix]
    if degree >= 2:
        blocks.append(matrix ** 2)
        pairs = list(itertools.combinations(range(n_cols), 2))
        if pairs:
            blocks.append(np.column_stack([matrix[:, i] * matrix[:, j] for i, j in pairs]))
    for d in range(3, degree + 1):
        terms = itertools.combinations_with_replacement(range(n_cols), d)
        blocks.append(np.column_stack([np.prod(matrix[:, list(t)], axis=1) for t in terms]))
    return np.hstack(blocks)
