"""
Evaluation module for the predictive modeling engine.

Provides evaluation metrics and fold generation:
- Classification metrics: confusion matrix, accuracy, precision, recall, F1
- ROC-AUC: binary ROC curve and AUC score
- Regression metrics: MSE, MAE, RMSE, R2
- Cross-validation: contiguous k-fold indices

All metrics are implemented from scratch using only NumPy.
"""

from .metrics import (
    # Classification metrics
    confusion_matrix,
    binarize,
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    precision_recall_f1,

    # ROC-AUC
    roc_curve,
    roc_auc_score,

    # Regression metrics
    mean_squared_error,
    mean_absolute_error,
    root_mean_squared_error,
    r2_score,
    RegressionReport,
    regression_report,
)
from .cross_validation import k_fold_indices

__all__ = [
    # Classification metrics
    'confusion_matrix',
    'binarize',
    'accuracy_score',
    'precision_score',
    'recall_score',
    'f1_score',
    'precision_recall_f1',

    # ROC-AUC
    'roc_curve',
    'roc_auc_score',

    # Regression metrics
    'mean_squared_error',
    'mean_absolute_error',
    'root_mean_squared_error',
    'r2_score',
    'RegressionReport',
    'regression_report',

    # Cross-validation
    'k_fold_indices',
]
