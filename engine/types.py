"""
Predictive Engine - Data Model

Feature tables arrive column-major: one sequence per feature, all of the
same length (the sample count), paired with the feature names. Internally
they become (n_samples, n_features) matrices.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from config import MODEL_VERSION

FeatureTable = Sequence[Sequence[float]]
TargetVector = Sequence[float]


class ModelFamily(str, Enum):
    """Supported model families."""
    LINEAR_REGRESSION = 'linear_regression'
    LOGISTIC_REGRESSION = 'logistic_regression'
    DECISION_TREE = 'decision_tree'
    RANDOM_FOREST = 'random_forest'
    GRADIENT_BOOSTING = 'gradient_boosting'
    NEURAL_NETWORK = 'neural_network'
    SUPPORT_VECTOR_MACHINE = 'support_vector_machine'
    NAIVE_BAYES = 'naive_bayes'
    KMEANS = 'kmeans'
    HIERARCHICAL = 'hierarchical'
    DEEP_LEARNING = 'deep_learning'  # Tag only, no implementation

    @property
    def is_clustering(self) -> bool:
        return self in (ModelFamily.KMEANS, ModelFamily.HIERARCHICAL)

    @property
    def is_classifier(self) -> bool:
        return self in (ModelFamily.LOGISTIC_REGRESSION,
                        ModelFamily.NAIVE_BAYES,
                        ModelFamily.SUPPORT_VECTOR_MACHINE)


@dataclass(frozen=True)
class TrainingDataDescriptor:
    """What a model was trained on."""
    feature_names: Tuple[str, ...]
    target_name: str
    split_ratio: float
    sample_count: int


@dataclass(frozen=True)
class ModelPerformance:
    """
    Evaluation snapshot taken right after training.

    Classification fields stay at 0 (and the confusion matrix at None) for
    families evaluated as regressors.
    """
    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0
    auc: float = 0.0
    mse: float = 0.0
    rmse: float = 0.0
    mae: float = 0.0
    r2: float = 0.0
    confusion_matrix: Optional[Tuple[Tuple[int, int], Tuple[int, int]]] = None  # [[tn, fp], [fn, tp]]


@dataclass(frozen=True)
class Model:
    """
    A trained model. Created once after training and never mutated.

    `parameters` holds the fitted estimator for the family (coefficients,
    tree or forest, network weights, support vectors or class statistics).
    """
    family: ModelFamily
    parameters: Any
    hyperparameters: Any
    training_data: TrainingDataDescriptor
    performance: ModelPerformance
    model_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = MODEL_VERSION


@dataclass
class PredictionResult:
    """Predictions for a feature table from one registered model."""
    predictions: np.ndarray
    probabilities: Optional[np.ndarray]  # (n_samples, n_classes) or None
    confidence: np.ndarray
    feature_importance: Dict[str, float]
    model: Model


@dataclass
class ClusteringResult:
    """Cluster assignment plus the synthetic model describing it."""
    labels: np.ndarray
    centroids: np.ndarray  # (n_clusters, n_features)
    inertia: float
    silhouette_score: float
    model: Model


@dataclass
class CrossValidationResult:
    """Outcome of a k-fold hyperparameter search."""
    fold_scores: List[float]
    mean_score: float
    std_score: float
    best_model: Model
    best_hyperparameters: Any
    best_index: int
    candidate_means: List[float]
