"""
K-fold splitting for cross-validation.

Folds are contiguous blocks in sample order; callers that need shuffled
folds permute the data first.
"""

import numpy as np
from typing import List, Tuple

from errors import InvalidInputError


def k_fold_indices(n_samples: int, n_folds: int) -> List[Tuple[np.ndarray, np.ndarray]]:
    """
    Generate k-fold cross-validation indices.

    Parameters
    ----------
    n_samples : int
        Number of samples.
    n_folds : int
        Number of folds, 2 <= n_folds <= n_samples.

    Returns
    -------
    list
        List of (train_indices, test_indices) tuples. Every fold holds
        n_samples // n_folds samples except the last, which also takes the
        remainder. Test folds are disjoint and cover every sample.

    Example
    -------
    >>> [len(test) for _, test in k_fold_indices(10, 3)]
    [3, 3, 4]
    """
    if n_folds < 2 or n_folds > n_samples:
        raise InvalidInputError(
            f"Number of folds must be between 2 and {n_samples}, got {n_folds}")

    indices = np.arange(n_samples)
    fold_size = n_samples // n_folds

    folds = []
    for fold_idx in range(n_folds):
        start = fold_idx * fold_size
        end = n_samples if fold_idx == n_folds - 1 else start + fold_size
        test_idx = indices[start:end]
        train_idx = np.concatenate([indices[:start], indices[end:]])
        folds.append((train_idx, test_idx))

    return folds
