"""
Tests for classification and regression metrics and k-fold splitting.
"""

import numpy as np
import pytest

from errors import InvalidInputError
from evaluation import (
    accuracy_score, binarize, confusion_matrix, f1_score, k_fold_indices,
    mean_absolute_error, mean_squared_error, precision_recall_f1,
    precision_score, r2_score, recall_score, regression_report, roc_auc_score,
    roc_curve, root_mean_squared_error,
)


# =============================================================================
# Classification metrics
# =============================================================================

def test_confusion_matrix_layout():
    y_true = [0, 0, 0, 1, 1, 1, 1]
    y_pred = [0, 1, 0, 1, 1, 0, 1]

    cm = confusion_matrix(y_true, y_pred)

    # [[tn, fp], [fn, tp]]
    assert cm.tolist() == [[2, 1], [1, 3]]


def test_binarize_is_strict():
    assert binarize([0.2, 0.5, 0.51]).tolist() == [0, 0, 1]


def test_precision_recall_f1():
    y_true = [0, 0, 0, 1, 1, 1, 1]
    y_pred = [0, 1, 0, 1, 1, 0, 1]

    assert accuracy_score(y_true, y_pred) == pytest.approx(5 / 7)
    assert precision_score(y_true, y_pred) == pytest.approx(0.75)
    assert recall_score(y_true, y_pred) == pytest.approx(0.75)
    assert f1_score(y_true, y_pred) == pytest.approx(0.75)
    assert precision_recall_f1(y_true, y_pred) == pytest.approx((0.75, 0.75, 0.75))


def test_scores_zero_without_true_positives():
    y_true = [1, 1, 0, 0]
    y_pred = [0, 0, 1, 0]
    assert precision_score(y_true, y_pred) == 0.0
    assert recall_score(y_true, y_pred) == 0.0
    assert f1_score(y_true, y_pred) == 0.0


def test_auc_perfect_and_reversed():
    y_true = [0, 0, 1, 1]
    assert roc_auc_score(y_true, [0.1, 0.2, 0.8, 0.9]) == pytest.approx(1.0)
    assert roc_auc_score(y_true, [0.9, 0.8, 0.2, 0.1]) == pytest.approx(0.0)


def test_auc_single_class_is_half():
    assert roc_auc_score([1, 1, 1], [0.2, 0.4, 0.9]) == pytest.approx(0.5)
    assert roc_auc_score([0, 0], [0.2, 0.4]) == pytest.approx(0.5)


def test_auc_random_scores_near_half(rng):
    y_true = rng.integers(0, 2, 2000)
    scores = rng.uniform(size=2000)
    assert roc_auc_score(y_true, scores) == pytest.approx(0.5, abs=0.05)


def test_auc_ties_count_half():
    """All scores equal: the curve is the diagonal."""
    assert roc_auc_score([0, 1, 0, 1], [0.5, 0.5, 0.5, 0.5]) == pytest.approx(0.5)


def test_auc_matches_pair_ranking():
    y_true = np.array([0, 1, 0, 1, 1, 0])
    scores = np.array([0.3, 0.7, 0.6, 0.4, 0.9, 0.1])

    pos, neg = scores[y_true == 1], scores[y_true == 0]
    pairs = [(p > n) + 0.5 * (p == n) for p in pos for n in neg]

    assert roc_auc_score(y_true, scores) == pytest.approx(np.mean(pairs))


def test_roc_curve_endpoints():
    fpr, tpr, thresholds = roc_curve([0, 1, 1, 0], [0.1, 0.8, 0.4, 0.35])
    assert (fpr[0], tpr[0]) == (0.0, 0.0)
    assert (fpr[-1], tpr[-1]) == (1.0, 1.0)
    assert np.all(np.diff(thresholds) < 0)
    assert np.all(np.diff(fpr) >= 0) and np.all(np.diff(tpr) >= 0)


# =============================================================================
# Regression metrics
# =============================================================================

def test_regression_errors():
    y_true = [1.0, 2.0, 3.0, 4.0]
    y_pred = [1.0, 2.0, 3.0, 6.0]

    assert mean_squared_error(y_true, y_pred) == pytest.approx(1.0)
    assert root_mean_squared_error(y_true, y_pred) == pytest.approx(1.0)
    assert mean_absolute_error(y_true, y_pred) == pytest.approx(0.5)
    assert r2_score(y_true, y_pred) == pytest.approx(1 - 4 / 5)


def test_r2_mean_prediction_is_zero():
    y_true = np.array([1.0, 2.0, 3.0])
    assert r2_score(y_true, np.full(3, 2.0)) == pytest.approx(0.0)


def test_r2_constant_targets():
    assert r2_score([5.0, 5.0, 5.0], [5.0, 5.0, 5.0]) == 1.0
    assert r2_score([5.0, 5.0, 5.0], [5.0, 4.0, 5.0]) == 0.0


def test_regression_report():
    report = regression_report([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])
    assert report.mse == 0.0
    assert report.rmse == 0.0
    assert report.mae == 0.0
    assert report.r2 == 1.0


# =============================================================================
# K-fold
# =============================================================================

def test_k_fold_sizes_and_coverage():
    folds = k_fold_indices(10, 3)

    assert [len(test) for _, test in folds] == [3, 3, 4]
    all_test = np.concatenate([test for _, test in folds])
    assert sorted(all_test.tolist()) == list(range(10))
    for train, test in folds:
        assert len(set(train) & set(test)) == 0
        assert len(train) + len(test) == 10


def test_k_fold_blocks_are_contiguous():
    folds = k_fold_indices(6, 2)
    assert folds[0][1].tolist() == [0, 1, 2]
    assert folds[1][1].tolist() == [3, 4, 5]


@pytest.mark.parametrize("n_folds", [0, 1, 11])
def test_k_fold_invalid_fold_count(n_folds):
    with pytest.raises(InvalidInputError):
        k_fold_indices(10, n_folds)
