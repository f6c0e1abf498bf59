"""
Prediction dispatch keyed on the model family.

Every family yields (predictions, probabilities, confidence):
- probabilities is an (n_samples, n_classes) matrix, or None for regressors
  and the SVM
- confidence is one value in [0, 1] per sample
"""

import numpy as np
from typing import Any, Dict, Optional, Sequence, Tuple

from config import (
    LINEAR_REGRESSION_CONFIDENCE, GRADIENT_BOOSTING_CONFIDENCE, NEURAL_NETWORK_CONFIDENCE,
)
from errors import InvalidModelError, UnsupportedOperationError
from .trainers import ESTIMATOR_TYPES
from .types import Model, ModelFamily

Prediction = Tuple[np.ndarray, Optional[np.ndarray], np.ndarray]


def check_payload(family: ModelFamily, estimator: Any) -> None:
    """
    Make sure a model's payload is a fitted estimator of its family.

    Raises:
        UnsupportedOperationError: family has no prediction routine
        InvalidModelError: wrong payload type or unfitted estimator
    """
    expected = ESTIMATOR_TYPES.get(family)
    if expected is None:
        raise UnsupportedOperationError(f"Prediction not supported for {family.value}")

    if not isinstance(estimator, expected):
        raise InvalidModelError(
            f"Invalid {family.value} model parameters: expected {expected.__name__}, "
            f"got {type(estimator).__name__}")

    if not _is_fitted(estimator):
        raise InvalidModelError(f"Invalid {family.value} model parameters: estimator not fitted")


def _is_fitted(estimator: Any) -> bool:
    for attr in ('coefficients_', 'root', 'classes_', 'alpha', 'base_score'):
        if hasattr(estimator, attr):
            return getattr(estimator, attr) is not None
    if hasattr(estimator, 'trees'):
        return len(estimator.trees) > 0
    return getattr(estimator, '_is_fitted', False)


def _constant(n_samples: int, value: float) -> np.ndarray:
    return np.full(n_samples, value)


def predict_with_estimator(family: ModelFamily, estimator: Any, X: np.ndarray) -> Prediction:
    """Run a fitted estimator of `family` on the matrix X."""
    n_samples = len(X)

    if family == ModelFamily.LINEAR_REGRESSION:
        return estimator.predict(X), None, _constant(n_samples, LINEAR_REGRESSION_CONFIDENCE)

    if family == ModelFamily.LOGISTIC_REGRESSION:
        probabilities = estimator.predict_proba(X)
        p = probabilities[:, 1]
        predictions = estimator.predict(X)
        return predictions, probabilities, np.abs(p - 0.5) * 2

    if family == ModelFamily.DECISION_TREE:
        # A single tree has no spread across members
        return estimator.predict(X), None, _constant(n_samples, 1.0)

    if family == ModelFamily.RANDOM_FOREST:
        predictions, confidence = estimator.predict_with_confidence(X)
        return predictions, None, confidence

    if family == ModelFamily.GRADIENT_BOOSTING:
        return estimator.predict(X), None, _constant(n_samples, GRADIENT_BOOSTING_CONFIDENCE)

    if family == ModelFamily.NEURAL_NETWORK:
        return estimator.predict(X), None, _constant(n_samples, NEURAL_NETWORK_CONFIDENCE)

    if family == ModelFamily.SUPPORT_VECTOR_MACHINE:
        decision = estimator.decision_function(X)
        predictions = np.where(decision > 0, 1.0, estimator.negative_label_)
        return predictions, None, np.minimum(1.0, np.abs(decision))

    if family == ModelFamily.NAIVE_BAYES:
        probabilities = estimator.predict_proba(X)
        predictions = estimator.classes_[np.argmax(probabilities, axis=1)]
        return predictions, probabilities, np.max(probabilities, axis=1)

    raise UnsupportedOperationError(f"Prediction not supported for {family.value}")


def predict(model: Model, X: np.ndarray) -> Prediction:
    """Check the model's payload, then predict."""
    check_payload(model.family, model.parameters)
    return predict_with_estimator(model.family, model.parameters, X)


def positive_class_scores(family: ModelFamily, estimator: Any, X: np.ndarray) -> np.ndarray:
    """P(y = 1) per sample for the probabilistic binary classifiers."""
    if family == ModelFamily.LOGISTIC_REGRESSION:
        return estimator.predict_proba(X)[:, 1]

    if family == ModelFamily.NAIVE_BAYES:
        classes = list(estimator.classes_)
        if 1.0 not in classes:
            return np.zeros(len(X))
        return estimator.predict_proba(X)[:, classes.index(1.0)]

    raise UnsupportedOperationError(f"{family.value} does not produce class scores")


def feature_importance(model: Model, feature_names: Sequence[str]) -> Dict[str, float]:
    """
    Per-feature importance.

    - linear / logistic regression: |weight|, summed over the powers of a
      polynomial fit
    - decision tree / random forest: mean impurity decrease
    - everything else: equal weighting
    """
    estimator = model.parameters
    n_features = len(feature_names)

    if model.family in (ModelFamily.LINEAR_REGRESSION, ModelFamily.LOGISTIC_REGRESSION):
        weights = np.abs(estimator.coef_).reshape(n_features, -1).sum(axis=1)
    elif model.family in (ModelFamily.DECISION_TREE, ModelFamily.RANDOM_FOREST):
        weights = estimator.feature_importances_
    else:
        weights = np.full(n_features, 1.0 / n_features)

    return {name: float(w) for name, w in zip(feature_names, weights)}
