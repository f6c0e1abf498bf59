"""
Scoring functions for fitted models, written directly on NumPy.

Binary classification:
- confusion_matrix, laid out as [[tn, fp], [fn, tp]]
- accuracy, precision, recall and F1
- ROC curve and the area under it

Regression:
- mean squared / absolute error and its square root
- coefficient of determination (R2)
"""

import numpy as np
from typing import Tuple
from dataclasses import dataclass

from config import DECISION_THRESHOLD


def _flat(values, dtype=None) -> np.ndarray:
    return np.asarray(values, dtype=dtype).ravel()


# =============================================================================
# CLASSIFICATION
# =============================================================================

def confusion_matrix(y_true: np.ndarray, y_pred: np.ndarray,
                     n_classes: int = 2) -> np.ndarray:
    """
    Count (true label, predicted label) pairs.

    Parameters
    ----------
    y_true : np.ndarray
        Observed labels, integers in [0, n_classes).
    y_pred : np.ndarray
        Predicted labels, same encoding.
    n_classes : int
        Size of the label alphabet.

    Returns
    -------
    np.ndarray
        Integer matrix of shape (n_classes, n_classes) whose rows follow the
        true label and columns the prediction. In the binary case that reads
        [[tn, fp], [fn, tp]].

    Mathematical Definition
    -----------------------
    CM[i,j] = |{x : y_true(x) = i AND y_pred(x) = j}|
    """
    rows = _flat(y_true).astype(np.int64)
    cols = _flat(y_pred).astype(np.int64)
    counts = np.zeros((n_classes, n_classes), dtype=np.int64)
    np.add.at(counts, (rows, cols), 1)
    return counts


def binarize(scores: np.ndarray, threshold: float = DECISION_THRESHOLD) -> np.ndarray:
    """Labels 1 where score > threshold, else 0."""
    return (_flat(scores, np.float64) > threshold).astype(np.int64)


def accuracy_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Share of predictions equal to the observed label.

    Mathematical Definition
    -----------------------
    Accuracy = (TP + TN) / n

    An empty input scores 0.0.
    """
    y_true, y_pred = _flat(y_true), _flat(y_pred)
    return float(np.mean(y_true == y_pred)) if y_true.size else 0.0


def _ratio(hits: int, misses: int) -> float:
    """hits / (hits + misses), defined as 0.0 when there are no hits."""
    return float(hits / (hits + misses)) if hits else 0.0


def precision_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Positive predictive value TP / (TP + FP); 0.0 without true positives."""
    (_, fp), (_, tp) = confusion_matrix(y_true, y_pred)
    return _ratio(tp, fp)


def recall_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Sensitivity TP / (TP + FN); 0.0 without true positives."""
    _, (fn, tp) = confusion_matrix(y_true, y_pred)
    return _ratio(tp, fn)


def f1_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Harmonic mean of precision and recall.

    Mathematical Definition
    -----------------------
    F1 = 2PR / (P + R), and 0.0 when P + R = 0
    """
    p = precision_score(y_true, y_pred)
    r = recall_score(y_true, y_pred)
    return 2 * p * r / (p + r) if p + r > 0 else 0.0


def precision_recall_f1(y_true: np.ndarray,
                        y_pred: np.ndarray) -> Tuple[float, float, float]:
    return (precision_score(y_true, y_pred),
            recall_score(y_true, y_pred),
            f1_score(y_true, y_pred))


# =============================================================================
# ROC
# =============================================================================

def roc_curve(y_true: np.ndarray, y_scores: np.ndarray,
              pos_label: int = 1) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Receiver operating characteristic.

    Parameters
    ----------
    y_true : np.ndarray
        Observed binary labels.
    y_scores : np.ndarray
        Score for the positive class, higher meaning more likely positive.
    pos_label : int
        Which label counts as positive.

    Returns
    -------
    tuple
        (fpr, tpr, thresholds), starting at (0, 0) with an infinite
        threshold and then one point per distinct score, highest first.
        Samples sharing a score enter the curve together as one step.

    Mathematical Definition
    -----------------------
    At threshold t a sample is called positive when score >= t.
    TPR(t) = TP(t) / P,   FPR(t) = FP(t) / N

    With a single class present the diagonal [0, 1] x [0, 1] is returned.
    """
    positive = _flat(y_true) == pos_label
    scores = _flat(y_scores, np.float64)

    n_pos = int(positive.sum())
    n_neg = positive.size - n_pos
    if n_pos == 0 or n_neg == 0:
        return np.array([0.0, 1.0]), np.array([0.0, 1.0]), np.array([1.0, 0.0])

    order = np.argsort(-scores, kind='stable')
    ranked_scores = scores[order]
    ranked_positive = positive[order]

    # Last index of each run of equal scores
    run_ends = np.flatnonzero(np.diff(ranked_scores) != 0)
    run_ends = np.append(run_ends, ranked_scores.size - 1)

    tp = np.cumsum(ranked_positive)[run_ends]
    fp = (run_ends + 1) - tp

    fpr = np.concatenate([[0.0], fp / n_neg])
    tpr = np.concatenate([[0.0], tp / n_pos])
    thresholds = np.concatenate([[np.inf], ranked_scores[run_ends]])
    return fpr, tpr, thresholds


def roc_auc_score(y_true: np.ndarray, y_scores: np.ndarray,
                  pos_label: int = 1) -> float:
    """
    Area under the ROC curve by the trapezoidal rule.

    Returns
    -------
    float
        1.0 for a perfect ranking, 0.5 for chance (also the value when only
        one class is present), 0.0 for a perfectly inverted ranking.
    """
    fpr, tpr, _ = roc_curve(y_true, y_scores, pos_label=pos_label)
    return float(np.sum(np.diff(fpr) * (tpr[1:] + tpr[:-1]) / 2))


# =============================================================================
# REGRESSION
# =============================================================================

def _residuals(y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
    return _flat(y_true, np.float64) - _flat(y_pred, np.float64)


def mean_squared_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """MSE = mean((y - y_hat)^2); 0.0 for empty input."""
    r = _residuals(y_true, y_pred)
    return float(np.mean(r ** 2)) if r.size else 0.0


def mean_absolute_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """MAE = mean(|y - y_hat|); 0.0 for empty input."""
    r = _residuals(y_true, y_pred)
    return float(np.mean(np.abs(r))) if r.size else 0.0


def root_mean_squared_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def r2_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Coefficient of determination.

    Mathematical Definition
    -----------------------
    R2 = 1 - SS_res / SS_tot
    SS_res = sum((y - y_hat)^2),  SS_tot = sum((y - mean(y))^2)

    Notes
    -----
    1.0 is a perfect fit, 0.0 matches always predicting the mean, and
    negative values are worse than that. Constant targets (SS_tot = 0)
    score 1.0 when reproduced exactly and 0.0 otherwise.
    """
    y_true = _flat(y_true, np.float64)
    y_pred = _flat(y_pred, np.float64)
    ss_tot = float(np.sum((y_true - y_true.mean()) ** 2)) if y_true.size else 0.0
    if ss_tot == 0:
        return 1.0 if np.allclose(y_true, y_pred) else 0.0
    return float(1 - np.sum((y_true - y_pred) ** 2) / ss_tot)


@dataclass
class RegressionReport:
    """MSE, RMSE, MAE and R2 of one set of predictions."""
    mse: float
    rmse: float
    mae: float
    r2: float


def regression_report(y_true: np.ndarray, y_pred: np.ndarray) -> RegressionReport:
    return RegressionReport(
        mse=mean_squared_error(y_true, y_pred),
        rmse=root_mean_squared_error(y_true, y_pred),
        mae=mean_absolute_error(y_true, y_pred),
        r2=r2_score(y_true, y_pred),
    )
