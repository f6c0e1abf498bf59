"""
Input checks and conversion of feature tables and target vectors.
"""

import numpy as np
from typing import Optional, Sequence, Tuple

from errors import InvalidInputError
from .types import FeatureTable, TargetVector


def feature_matrix(features: FeatureTable, feature_names: Sequence[str]) -> np.ndarray:
    """
    Convert a column-major feature table to an (n_samples, n_features) matrix.

    Raises:
        InvalidInputError: empty table, ragged columns, name count mismatch
                           or non-finite values
    """
    if features is None or len(features) == 0:
        raise InvalidInputError("Feature table is empty")

    if len(feature_names) != len(features):
        raise InvalidInputError(
            f"Got {len(feature_names)} feature names for {len(features)} feature columns")

    lengths = {len(column) for column in features}
    if len(lengths) != 1:
        raise InvalidInputError("Feature columns have different lengths")
    if lengths == {0}:
        raise InvalidInputError("Feature table has no samples")

    try:
        X = np.asarray(features, dtype=np.float64).T
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Feature values must be numeric: {e}") from e

    if not np.all(np.isfinite(X)):
        raise InvalidInputError("Feature table contains non-finite values")

    return X


def target_vector(targets: TargetVector, n_samples: int) -> np.ndarray:
    """Convert targets to a float vector with one value per sample."""
    try:
        y = np.asarray(targets, dtype=np.float64).ravel()
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Target values must be numeric: {e}") from e

    if len(y) != n_samples:
        raise InvalidInputError(f"Got {len(y)} targets for {n_samples} samples")
    if not np.all(np.isfinite(y)):
        raise InvalidInputError("Targets contain non-finite values")

    return y


def is_binary(y: np.ndarray) -> bool:
    """True if every value is 0 or 1."""
    return bool(np.all((y == 0) | (y == 1)))


def train_test_split(X: np.ndarray, y: np.ndarray, split_ratio: float,
                     random_state: Optional[int] = None
                     ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Shuffle with a seeded permutation and split off the first
    int(n * split_ratio) samples for training.

    Returns:
        (X_train, X_test, y_train, y_test); the test part may be empty
    """
    n_samples = len(X)
    n_train = int(n_samples * split_ratio)
    if n_train == 0:
        raise InvalidInputError(
            f"Split ratio {split_ratio} leaves no training samples out of {n_samples}")

    rng = np.random.default_rng(random_state)
    indices = rng.permutation(n_samples)
    train_idx, test_idx = indices[:n_train], indices[n_train:]

    return X[train_idx], X[test_idx], y[train_idx], y[test_idx]
