"""
K-fold hyperparameter search.

Each candidate configuration is trained on k-1 folds and scored on the
remaining one, for every fold. Classifiers are scored with accuracy, all
other families with R². The candidate with the highest mean score wins;
the first candidate wins ties and a non-finite mean never wins.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import numpy as np
from loguru import logger

from errors import ModelTrainingError, SingularMatrixError
from evaluation import accuracy_score, k_fold_indices, r2_score
from .hyperparameters import Hyperparameters, resolve_hyperparameters
from .predictor import predict_with_estimator
from .telemetry import CancellationToken, check_cancelled
from .trainers import fit_estimator
from .types import ModelFamily


@dataclass
class CandidateScore:
    """Fold scores of one grid candidate."""
    index: int
    hyperparameters: Hyperparameters
    fold_scores: List[float] = field(default_factory=list)

    @property
    def mean(self) -> float:
        return float(np.mean(self.fold_scores)) if self.fold_scores else float('nan')

    @property
    def std(self) -> float:
        """Population standard deviation around the mean."""
        return float(np.std(self.fold_scores)) if self.fold_scores else float('nan')


def score_fold(family: ModelFamily, estimator: Any,
               X_test: np.ndarray, y_test: np.ndarray) -> float:
    """Accuracy for classifiers, R² otherwise."""
    predictions, _, _ = predict_with_estimator(family, estimator, X_test)
    if family.is_classifier:
        return accuracy_score(y_test, predictions)
    return r2_score(y_test, predictions)


def resolve_grid(family: ModelFamily, grid: Optional[Sequence[Any]]) -> List[Hyperparameters]:
    """Typed candidates; an empty grid means one default configuration."""
    if not grid:
        return [resolve_hyperparameters(family)]
    return [resolve_hyperparameters(family, candidate) for candidate in grid]


def score_candidates(family: ModelFamily, X: np.ndarray, y: np.ndarray,
                     n_folds: int, candidates: Sequence[Hyperparameters],
                     cancel_token: Optional[CancellationToken] = None) -> List[CandidateScore]:
    """
    Score every candidate on the same folds.

    A candidate whose training hits a singular system is kept with no fold
    scores (mean NaN) so it cannot win.
    """
    folds = k_fold_indices(len(X), n_folds)
    results = []

    for index, params in enumerate(candidates):
        check_cancelled(cancel_token, "cross-validation")
        candidate = CandidateScore(index=index, hyperparameters=params)

        try:
            for train_idx, test_idx in folds:
                check_cancelled(cancel_token, "cross-validation")
                estimator = fit_estimator(family, X[train_idx], y[train_idx], params)
                candidate.fold_scores.append(
                    score_fold(family, estimator, X[test_idx], y[test_idx]))
        except SingularMatrixError as e:
            logger.warning(f"Candidate {index} for {family.value} discarded: {e}")
            candidate.fold_scores = []

        logger.debug(f"Candidate {index}: mean score {candidate.mean:.4f}")
        results.append(candidate)

    return results


def select_best(candidates: Sequence[CandidateScore]) -> CandidateScore:
    """
    Highest finite mean wins; earlier candidates win ties.

    Raises:
        ModelTrainingError: no candidate has a finite mean
    """
    best = None
    for candidate in candidates:
        mean = candidate.mean
        if not np.isfinite(mean):
            continue
        if best is None or mean > best.mean:
            best = candidate

    if best is None:
        raise ModelTrainingError("Cross-validation failed to find a best model")
    return best
