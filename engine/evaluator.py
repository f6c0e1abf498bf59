"""
Post-training evaluation of a fitted estimator on held-out data.

Regression metrics are always computed. Classification metrics are added
for logistic regression and naive Bayes when the held-out targets are
binary 0/1.
"""

import numpy as np
from typing import Any

from evaluation import (
    binarize, confusion_matrix, accuracy_score, precision_recall_f1,
    roc_auc_score, regression_report,
)
from .predictor import predict_with_estimator, positive_class_scores
from .types import ModelFamily, ModelPerformance
from .validation import is_binary

PROBABILISTIC_CLASSIFIERS = (ModelFamily.LOGISTIC_REGRESSION, ModelFamily.NAIVE_BAYES)


def evaluate(family: ModelFamily, estimator: Any,
             X_test: np.ndarray, y_test: np.ndarray) -> ModelPerformance:
    """
    Score a fitted estimator.

    Args:
        family: Model family of the estimator
        estimator: Fitted estimator
        X_test: Held-out features (n_samples, n_features)
        y_test: Held-out targets

    Returns:
        ModelPerformance snapshot
    """
    predictions, _, _ = predict_with_estimator(family, estimator, X_test)
    report = regression_report(y_test, predictions)

    if family not in PROBABILISTIC_CLASSIFIERS or not is_binary(y_test):
        return ModelPerformance(mse=report.mse, rmse=report.rmse,
                                mae=report.mae, r2=report.r2)

    labels = binarize(predictions)
    targets = y_test.astype(np.int64)
    cm = confusion_matrix(targets, labels)
    precision, recall, f1 = precision_recall_f1(targets, labels)
    auc = roc_auc_score(targets, positive_class_scores(family, estimator, X_test))

    return ModelPerformance(
        accuracy=accuracy_score(targets, labels),
        precision=precision,
        recall=recall,
        f1_score=f1,
        auc=auc,
        mse=report.mse,
        rmse=report.rmse,
        mae=report.mae,
        r2=report.r2,
        confusion_matrix=((int(cm[0, 0]), int(cm[0, 1])),
                          (int(cm[1, 0]), int(cm[1, 1]))),
    )
