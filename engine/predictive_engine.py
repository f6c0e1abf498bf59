"""
Predictive Engine - Public API

PredictiveEngine ties together validation, training, evaluation, the model
registry, clustering and cross-validation. Every public call is timed into
the metrics sink and every failure is routed to the error reporter before it
is re-raised.

Usage:
    engine = PredictiveEngine()
    model = engine.train_model(features, targets, ["age", "bmi"], "risk",
                               ModelFamily.LINEAR_REGRESSION)
    result = engine.predict(model.model_id, features)
"""

import dataclasses
import math
from typing import Any, List, Optional, Sequence

from loguru import logger

from clustering import KMeans, SingleLinkageClustering, silhouette_score
from config import EngineConfig
from errors import InvalidInputError, UnsupportedOperationError
from . import predictor
from .cross_validator import resolve_grid, score_candidates, select_best
from .evaluator import evaluate
from .hyperparameters import Hyperparameters, resolve_hyperparameters
from .logger import instrumented
from .registry import ModelRegistry
from .telemetry import (
    CancellationToken, ErrorReporter, LoggingErrorReporter, LoggingMetricsSink,
    MetricsSink, check_cancelled,
)
from .trainers import fit_estimator
from .types import (
    ClusteringResult, CrossValidationResult, FeatureTable, Model, ModelFamily,
    ModelPerformance, PredictionResult, TargetVector, TrainingDataDescriptor,
)
from .validation import feature_matrix, target_vector, train_test_split


def as_family(value: Any) -> ModelFamily:
    """Accept a ModelFamily or its string value."""
    try:
        return ModelFamily(value)
    except ValueError as e:
        raise InvalidInputError(f"Unknown model family: {value!r}") from e


class PredictiveEngine:
    """
    Train, store and apply statistical models.

    Safe to share between threads: trained models are immutable and the
    registry serializes its own updates.
    """

    def __init__(self,
                 metrics_sink: Optional[MetricsSink] = None,
                 error_reporter: Optional[ErrorReporter] = None,
                 registry: Optional[ModelRegistry] = None,
                 config: Optional[EngineConfig] = None):
        self.metrics_sink = metrics_sink if metrics_sink is not None else LoggingMetricsSink()
        self.error_reporter = error_reporter if error_reporter is not None else LoggingErrorReporter()
        self.registry = registry if registry is not None else ModelRegistry()
        self.config = config or EngineConfig()

    # =========================================================================
    # Training
    # =========================================================================

    @instrumented("model_training", "PredictiveEngine.train_model")
    def train_model(self,
                    features: FeatureTable,
                    targets: TargetVector,
                    feature_names: Sequence[str],
                    target_name: str,
                    model_family: Any,
                    hyperparameters: Any = None,
                    cancel_token: Optional[CancellationToken] = None) -> Model:
        """
        Train a supervised model, evaluate it and register it.

        The data is shuffled with the configured seed and split by
        `split_ratio`; the model trains on the first part and is evaluated on
        the rest (or on the training part when nothing is held out).

        Args:
            features: Column-major feature table
            targets: One target per sample
            feature_names: One name per feature column
            target_name: Name of the target
            model_family: ModelFamily or its string value
            hyperparameters: Typed hyperparameters or a mapping (None = defaults)
            cancel_token: Optional cancellation token

        Returns:
            The registered Model
        """
        family = as_family(model_family)
        params = resolve_hyperparameters(family, hyperparameters)
        return self._train(features, targets, feature_names, target_name,
                           family, params, cancel_token)

    def _train(self, features: FeatureTable, targets: TargetVector,
               feature_names: Sequence[str], target_name: str,
               family: ModelFamily, params: Hyperparameters,
               cancel_token: Optional[CancellationToken]) -> Model:
        if family.is_clustering:
            raise UnsupportedOperationError(
                f"{family.value} is a clustering family, use cluster()")

        X = feature_matrix(features, feature_names)
        y = target_vector(targets, len(X))
        X_train, X_test, y_train, y_test = train_test_split(
            X, y, params.split_ratio, params.random_state)

        check_cancelled(cancel_token, "training")
        estimator = fit_estimator(family, X_train, y_train, params)

        check_cancelled(cancel_token, "evaluation")
        if len(X_test) == 0:
            X_test, y_test = X_train, y_train
        performance = evaluate(family, estimator, X_test, y_test)

        model = Model(
            family=family,
            parameters=estimator,
            hyperparameters=params,
            training_data=TrainingDataDescriptor(
                feature_names=tuple(feature_names),
                target_name=target_name,
                split_ratio=params.split_ratio,
                sample_count=len(X),
            ),
            performance=performance,
            version=self.config.version,
        )
        self.registry.register(model)

        logger.info(f"Trained {family.value} model {model.model_id} "
                    f"(mse={performance.mse:.4f}, r2={performance.r2:.4f})")
        return model

    # =========================================================================
    # Prediction
    # =========================================================================

    @instrumented("model_prediction", "PredictiveEngine.predict")
    def predict(self,
                model_id: str,
                features: FeatureTable,
                cancel_token: Optional[CancellationToken] = None) -> PredictionResult:
        """
        Predict with a registered model.

        Args:
            model_id: Identifier returned by train_model
            features: Column-major feature table with the training features

        Returns:
            PredictionResult
        """
        model = self.registry.get(model_id)
        feature_names = model.training_data.feature_names
        X = feature_matrix(features, feature_names)

        check_cancelled(cancel_token, "prediction")
        predictions, probabilities, confidence = predictor.predict(model, X)

        return PredictionResult(
            predictions=predictions,
            probabilities=probabilities,
            confidence=confidence,
            feature_importance=predictor.feature_importance(model, feature_names),
            model=model,
        )

    # =========================================================================
    # Clustering
    # =========================================================================

    @instrumented("clustering_analysis", "PredictiveEngine.cluster")
    def cluster(self,
                features: FeatureTable,
                feature_names: Sequence[str],
                model_family: Any = ModelFamily.KMEANS,
                hyperparameters: Any = None,
                cancel_token: Optional[CancellationToken] = None) -> ClusteringResult:
        """
        Cluster samples with k-means or single-linkage hierarchical clustering.

        The returned result carries a synthetic Model (not registered) whose
        performance holds mse = inertia and rmse = sqrt(inertia).
        """
        family = as_family(model_family)
        if not family.is_clustering:
            raise UnsupportedOperationError(f"{family.value} is not a clustering family")

        params = resolve_hyperparameters(family, hyperparameters)
        X = feature_matrix(features, feature_names)

        check_cancelled(cancel_token, "clustering")
        if family == ModelFamily.KMEANS:
            clusterer = KMeans(
                n_clusters=params.num_clusters,
                max_iterations=params.max_iterations,
                tolerance=params.tolerance,
                random_state=params.random_state
            )
        else:
            clusterer = SingleLinkageClustering(n_clusters=params.num_clusters)
        clusterer.fit(X)

        check_cancelled(cancel_token, "clustering")
        labels = clusterer.labels_
        inertia = clusterer.inertia_
        silhouette = silhouette_score(X, labels)

        model = Model(
            family=family,
            parameters=clusterer,
            hyperparameters=params,
            training_data=TrainingDataDescriptor(
                feature_names=tuple(feature_names),
                target_name="",
                split_ratio=1.0,
                sample_count=len(X),
            ),
            performance=ModelPerformance(mse=inertia, rmse=math.sqrt(inertia)),
            version=self.config.version,
        )

        logger.info(f"Clustered {len(X)} samples into {clusterer.cluster_centers_.shape[0]} "
                    f"clusters (inertia={inertia:.4f}, silhouette={silhouette:.4f})")

        return ClusteringResult(
            labels=labels,
            centroids=clusterer.cluster_centers_,
            inertia=inertia,
            silhouette_score=silhouette,
            model=model,
        )

    # =========================================================================
    # Cross-validation
    # =========================================================================

    @instrumented("cross_validation", "PredictiveEngine.cross_validate")
    def cross_validate(self,
                       features: FeatureTable,
                       targets: TargetVector,
                       feature_names: Sequence[str],
                       target_name: str,
                       model_family: Any,
                       folds: Optional[int] = None,
                       hyperparameter_grid: Optional[Sequence[Any]] = None,
                       cancel_token: Optional[CancellationToken] = None) -> CrossValidationResult:
        """
        K-fold search over a hyperparameter grid.

        The winning configuration is retrained on the entire dataset
        (split ratio 1.0) and the resulting model is registered.
        """
        family = as_family(model_family)
        if family.is_clustering:
            raise UnsupportedOperationError(
                f"Cross-validation is not supported for {family.value}")

        n_folds = folds if folds is not None else self.config.default_folds
        candidates = resolve_grid(family, hyperparameter_grid)
        X = feature_matrix(features, feature_names)
        y = target_vector(targets, len(X))

        scores = score_candidates(family, X, y, n_folds, candidates, cancel_token)
        best = select_best(scores)

        check_cancelled(cancel_token, "cross-validation")
        final_params = dataclasses.replace(best.hyperparameters, split_ratio=1.0)
        best_model = self._train(features, targets, feature_names, target_name,
                                 family, final_params, cancel_token)

        logger.info(f"Cross-validation picked candidate {best.index} of {len(scores)} "
                    f"(mean={best.mean:.4f}, std={best.std:.4f})")

        return CrossValidationResult(
            fold_scores=list(best.fold_scores),
            mean_score=best.mean,
            std_score=best.std,
            best_model=best_model,
            best_hyperparameters=best.hyperparameters,
            best_index=best.index,
            candidate_means=[candidate.mean for candidate in scores],
        )

    # =========================================================================
    # Registry access
    # =========================================================================

    def get_model(self, model_id: str) -> Model:
        return self.registry.get(model_id)

    def evict_model(self, model_id: str) -> Model:
        return self.registry.evict(model_id)

    def list_models(self) -> List[Model]:
        return self.registry.list_models()

    # =========================================================================
    # Convenience wrappers with preset hyperparameters
    # =========================================================================

    def predict_risk_scores(self,
                            features: FeatureTable,
                            observed_risk: TargetVector,
                            feature_names: Sequence[str]) -> PredictionResult:
        """Random forest (200 trees, depth 10, leaves of 5) fit and applied to the same table."""
        model = self.train_model(
            features, observed_risk, feature_names, "risk_score",
            ModelFamily.RANDOM_FOREST,
            {"num_trees": 200, "max_depth": 10, "min_samples_leaf": 5},
        )
        return self.predict(model.model_id, features)

    def predict_outcome_effectiveness(self,
                                      intervention_features: FeatureTable,
                                      subject_features: FeatureTable,
                                      historical_outcomes: TargetVector) -> PredictionResult:
        """
        Gradient boosting (150 rounds, rate 0.1, depth 5) on the intervention
        columns followed by the subject columns, named feature_0..feature_k.
        """
        combined = list(intervention_features) + list(subject_features)
        feature_names = [f"feature_{i}" for i in range(len(combined))]
        model = self.train_model(
            combined, historical_outcomes, feature_names, "outcome_effectiveness",
            ModelFamily.GRADIENT_BOOSTING,
            {"num_iterations": 150, "learning_rate": 0.1, "max_depth": 5},
        )
        return self.predict(model.model_id, combined)

    def cluster_populations(self,
                            features: FeatureTable,
                            feature_names: Sequence[str],
                            num_clusters: int = 5) -> ClusteringResult:
        """K-means with a 300 iteration cap."""
        return self.cluster(
            features, feature_names, ModelFamily.KMEANS,
            {"num_clusters": num_clusters, "max_iterations": 300, "tolerance": 1e-4},
        )
