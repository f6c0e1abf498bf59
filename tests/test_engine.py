"""
End-to-end tests for PredictiveEngine: training, prediction, clustering,
the registry, telemetry and logging.
"""

import dataclasses
import glob
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from loguru import logger

from config import LoggingConfig
from engine import (
    CancellationToken, ModelFamily, ModelPerformance, ModelRegistry, PredictiveEngine,
    NeuralNetworkParams, RandomForestParams, SVMParams, TrainingDataDescriptor,
    Model, LinearRegressionParams, configure_logging, resolve_hyperparameters,
)
from errors import (
    InvalidInputError, InvalidModelError, ModelNotFoundError,
    OperationCancelledError, UnsupportedOperationError,
)
from stat_models import GaussianNB, LinearRegression


# =============================================================================
# Training and prediction
# =============================================================================

def test_train_and_predict_linear(engine, regression_data):
    features, targets, names = regression_data

    model = engine.train_model(features, targets, names, "y",
                               ModelFamily.LINEAR_REGRESSION)
    result = engine.predict(model.model_id, features)

    assert model.performance.r2 == pytest.approx(1.0)
    assert model.performance.mse == pytest.approx(0.0, abs=1e-12)
    assert model.training_data.feature_names == ("x1", "x2")
    assert model.training_data.sample_count == 60
    assert np.allclose(result.predictions, targets)
    assert result.probabilities is None
    assert np.allclose(result.confidence, 0.95)
    assert result.feature_importance == pytest.approx({"x1": 2.0, "x2": 1.0})
    assert result.model.model_id == model.model_id


def test_family_accepted_as_string(engine, regression_data):
    features, targets, names = regression_data
    model = engine.train_model(features, targets, names, "y", "linear_regression")
    assert model.family is ModelFamily.LINEAR_REGRESSION


def test_logistic_regression_classification_metrics(engine, classification_data):
    features, targets, names = classification_data

    model = engine.train_model(features, targets, names, "label",
                               ModelFamily.LOGISTIC_REGRESSION)
    perf = model.performance

    cm = np.array(perf.confusion_matrix)
    assert cm.sum() == len(targets) - int(len(targets) * 0.8)
    assert perf.accuracy == pytest.approx((cm[0, 0] + cm[1, 1]) / cm.sum())
    assert perf.accuracy > 0.8
    assert perf.auc > 0.9

    result = engine.predict(model.model_id, features)
    assert result.probabilities.shape == (len(targets), 2)
    assert np.all((result.confidence >= 0) & (result.confidence <= 1))
    assert set(result.feature_importance) == {"f1", "f2"}


def test_regressor_has_no_classification_metrics(engine, regression_data):
    features, targets, names = regression_data
    model = engine.train_model(features, targets, names, "y", ModelFamily.DECISION_TREE)
    assert model.performance.confusion_matrix is None
    assert model.performance.accuracy == 0.0


def test_naive_bayes_and_svm_results(engine, classification_data):
    features, targets, names = classification_data

    nb = engine.train_model(features, targets, names, "label", ModelFamily.NAIVE_BAYES)
    nb_result = engine.predict(nb.model_id, features)
    assert np.allclose(nb_result.probabilities.sum(axis=1), 1.0)
    assert np.allclose(nb_result.confidence, nb_result.probabilities.max(axis=1))
    assert nb.performance.auc > 0.9

    svm = engine.train_model(features, targets, names, "label",
                             ModelFamily.SUPPORT_VECTOR_MACHINE)
    svm_result = engine.predict(svm.model_id, features)
    assert svm_result.probabilities is None
    assert set(np.unique(svm_result.predictions)) <= {0.0, 1.0}
    assert np.all((svm_result.confidence >= 0) & (svm_result.confidence <= 1))
    assert svm_result.feature_importance == {"f1": 0.5, "f2": 0.5}


def test_boosting_and_network_confidence(engine, regression_data):
    features, targets, names = regression_data

    boosted = engine.train_model(features, targets, names, "y",
                                 ModelFamily.GRADIENT_BOOSTING, {"num_iterations": 10})
    assert np.allclose(engine.predict(boosted.model_id, features).confidence, 0.9)

    network = engine.train_model(features, targets, names, "y",
                                 ModelFamily.NEURAL_NETWORK,
                                 {"epochs": 2, "learning_rate": 0.0001})
    assert np.allclose(engine.predict(network.model_id, features).confidence, 0.85)


def test_polynomial_regression_through_engine(engine, rng):
    x = rng.uniform(-3, 3, 40)
    y = 2 - x + 0.5 * x ** 2

    model = engine.train_model([x.tolist()], y.tolist(), ["x"], "y",
                               ModelFamily.LINEAR_REGRESSION, {"degree": 2})
    result = engine.predict(model.model_id, [[0.0, 2.0]])

    assert model.performance.r2 == pytest.approx(1.0)
    assert np.allclose(result.predictions, [2.0, 2.0])
    assert result.feature_importance == {"x": pytest.approx(1.5)}


def test_polynomial_degree_needs_single_feature(engine, error_reporter, regression_data):
    features, targets, names = regression_data
    with pytest.raises(InvalidInputError, match="single independent variable"):
        engine.train_model(features, targets, names, "y",
                           ModelFamily.LINEAR_REGRESSION, {"degree": 3})
    assert error_reporter.reports[-1][1] == "PredictiveEngine.train_model"


def test_svm_min_alpha_change_reaches_estimator(engine, classification_data):
    features, targets, names = classification_data
    model = engine.train_model(features, targets, names, "label",
                               ModelFamily.SUPPORT_VECTOR_MACHINE, {"min_alpha_change": 1e-3})
    assert model.parameters.min_alpha_change == 1e-3
    assert SVMParams().min_alpha_change == 1e-5


def test_decision_tree_memorizes_without_holdout(engine, rng):
    x = rng.uniform(size=25)
    targets = rng.normal(size=25).tolist()

    model = engine.train_model([x.tolist()], targets, ["x"], "y",
                               ModelFamily.DECISION_TREE, {"split_ratio": 1.0})
    result = engine.predict(model.model_id, [x.tolist()])

    assert model.performance.r2 == pytest.approx(1.0)
    assert np.allclose(result.predictions, targets)
    assert np.allclose(result.confidence, 1.0)


def test_random_forest_constant_targets(engine, rng):
    features = [rng.uniform(size=30).tolist(), rng.uniform(size=30).tolist()]

    model = engine.train_model(features, [4.0] * 30, ["a", "b"], "y",
                               ModelFamily.RANDOM_FOREST, RandomForestParams(num_trees=5))
    result = engine.predict(model.model_id, features)

    assert np.allclose(result.predictions, 4.0)
    assert np.allclose(result.confidence, 1.0)
    assert model.performance.r2 == 1.0


def test_training_is_reproducible(engine, regression_data):
    features, targets, names = regression_data
    params = {"num_trees": 5, "max_depth": 3}

    first = engine.train_model(features, targets, names, "y", ModelFamily.RANDOM_FOREST, params)
    second = engine.train_model(features, targets, names, "y", ModelFamily.RANDOM_FOREST, params)

    assert first.model_id != second.model_id
    assert first.performance == second.performance


def test_model_is_immutable(engine, regression_data):
    features, targets, names = regression_data
    model = engine.train_model(features, targets, names, "y", ModelFamily.LINEAR_REGRESSION)
    with pytest.raises(dataclasses.FrozenInstanceError):
        model.version = "2.0"


# =============================================================================
# Input errors
# =============================================================================

def test_unknown_family(engine, error_reporter, regression_data):
    features, targets, names = regression_data

    with pytest.raises(InvalidInputError):
        engine.train_model(features, targets, names, "y", "quantum_forest")

    error, context = error_reporter.reports[-1]
    assert isinstance(error, InvalidInputError)
    assert context == "PredictiveEngine.train_model"


def test_deep_learning_is_unsupported(engine, error_reporter, regression_data):
    features, targets, names = regression_data

    with pytest.raises(UnsupportedOperationError):
        engine.train_model(features, targets, names, "y", ModelFamily.DEEP_LEARNING)

    assert isinstance(error_reporter.reports[-1][0], UnsupportedOperationError)


def test_clustering_family_cannot_be_trained(engine, regression_data):
    features, targets, names = regression_data
    with pytest.raises(UnsupportedOperationError):
        engine.train_model(features, targets, names, "y", ModelFamily.KMEANS)


def test_unknown_hyperparameter(engine, regression_data):
    features, targets, names = regression_data
    with pytest.raises(InvalidInputError, match="num_leaves"):
        engine.train_model(features, targets, names, "y",
                           ModelFamily.RANDOM_FOREST, {"num_leaves": 3})


def test_feature_name_mismatch(engine, regression_data):
    features, targets, _ = regression_data
    with pytest.raises(InvalidInputError):
        engine.train_model(features, targets, ["only_one"], "y",
                           ModelFamily.LINEAR_REGRESSION)


def test_ragged_and_empty_tables(engine):
    with pytest.raises(InvalidInputError):
        engine.train_model([[1.0, 2.0], [1.0]], [1.0, 2.0], ["a", "b"], "y",
                           ModelFamily.LINEAR_REGRESSION)
    with pytest.raises(InvalidInputError):
        engine.train_model([], [], [], "y", ModelFamily.LINEAR_REGRESSION)


def test_target_count_mismatch(engine, regression_data):
    features, targets, names = regression_data
    with pytest.raises(InvalidInputError):
        engine.train_model(features, targets[:-1], names, "y",
                           ModelFamily.LINEAR_REGRESSION)


def test_non_binary_targets_for_logistic(engine, regression_data):
    features, targets, names = regression_data
    with pytest.raises(InvalidInputError):
        engine.train_model(features, targets, names, "y",
                           ModelFamily.LOGISTIC_REGRESSION)


def test_split_ratio_leaving_no_training_data(engine):
    with pytest.raises(InvalidInputError):
        engine.train_model([[1.0, 2.0, 3.0]], [1.0, 2.0, 3.0], ["x"], "y",
                           ModelFamily.LINEAR_REGRESSION, {"split_ratio": 0.1})


# =============================================================================
# Registry
# =============================================================================

def test_predict_unknown_model(engine, regression_data):
    features, _, _ = regression_data
    with pytest.raises(ModelNotFoundError):
        engine.predict("missing-id", features)


def test_evicted_model_is_gone(engine, regression_data):
    features, targets, names = regression_data
    model = engine.train_model(features, targets, names, "y", ModelFamily.LINEAR_REGRESSION)

    assert engine.evict_model(model.model_id).model_id == model.model_id
    assert engine.list_models() == []
    with pytest.raises(ModelNotFoundError):
        engine.predict(model.model_id, features)
    with pytest.raises(KeyError):
        engine.evict_model(model.model_id)


def test_refitting_a_returned_estimator_leaves_registry_untouched(engine, regression_data):
    features, targets, names = regression_data
    model = engine.train_model(features, targets, names, "y", ModelFamily.LINEAR_REGRESSION)
    before = engine.predict(model.model_id, features).predictions

    X = np.asarray(features).T
    model.parameters.fit(X, -np.asarray(targets))
    engine.get_model(model.model_id).parameters.fit(X, np.zeros(len(targets)))
    engine.list_models()[0].parameters.fit(X, np.ones(len(targets)))

    after = engine.predict(model.model_id, features).predictions
    assert np.array_equal(before, after)
    assert engine.get_model(model.model_id).parameters is not engine.get_model(model.model_id).parameters


def _model(family, estimator, names=("f1", "f2")):
    return Model(
        family=family,
        parameters=estimator,
        hyperparameters=LinearRegressionParams(),
        training_data=TrainingDataDescriptor(tuple(names), "y", 0.8, 3),
        performance=ModelPerformance(),
    )


def test_wrong_payload_is_invalid_model(engine):
    X = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    nb = GaussianNB().fit(X, [0, 1, 1])
    model = _model(ModelFamily.LINEAR_REGRESSION, nb)
    engine.registry.register(model)

    with pytest.raises(InvalidModelError):
        engine.predict(model.model_id, X.T.tolist())


def test_unfitted_payload_is_invalid_model(engine):
    model = _model(ModelFamily.LINEAR_REGRESSION, LinearRegression())
    engine.registry.register(model)
    with pytest.raises(InvalidModelError):
        engine.predict(model.model_id, [[1.0], [2.0]])


def test_clustering_model_cannot_predict(engine, rng):
    X = rng.normal(size=(2, 12)).tolist()
    result = engine.cluster(X, ["a", "b"], ModelFamily.KMEANS, {"num_clusters": 2})
    engine.registry.register(result.model)

    with pytest.raises(UnsupportedOperationError):
        engine.predict(result.model.model_id, X)


def test_registry_is_thread_safe():
    registry = ModelRegistry()
    models = [_model(ModelFamily.LINEAR_REGRESSION, None) for _ in range(200)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(registry.register, models))
    assert len(registry) == 200

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(registry.evict, [m.model_id for m in models[:100]]))
    assert len(registry) == 100
    assert models[150].model_id in registry
    assert models[50].model_id not in registry


def test_concurrent_training(engine, regression_data):
    features, targets, names = regression_data

    def train(_):
        return engine.train_model(features, targets, names, "y",
                                  ModelFamily.RANDOM_FOREST, {"num_trees": 3})

    with ThreadPoolExecutor(max_workers=4) as pool:
        models = list(pool.map(train, range(8)))

    assert len({m.model_id for m in models}) == 8
    assert len(engine.list_models()) == 8


# =============================================================================
# Clustering
# =============================================================================

def test_cluster_result(engine, rng):
    centers = np.array([[0.0, 0.0], [10.0, 10.0]])
    X = np.vstack([rng.normal(c, 0.5, size=(15, 2)) for c in centers])

    for family in (ModelFamily.KMEANS, ModelFamily.HIERARCHICAL):
        result = engine.cluster(X.T.tolist(), ["a", "b"], family, {"num_clusters": 2})

        assert result.centroids.shape == (2, 2)
        assert result.labels.shape == (30,)
        assert -1.0 <= result.silhouette_score <= 1.0
        assert result.model.family is family
        assert result.model.performance.mse == pytest.approx(result.inertia)
        assert result.model.performance.rmse == pytest.approx(np.sqrt(result.inertia))

    # Single linkage always separates the two blobs
    assert len(set(result.labels[:15])) == 1
    assert result.labels[0] != result.labels[-1]
    assert result.silhouette_score > 0.8
    assert engine.list_models() == []


def test_cluster_rejects_supervised_family(engine, rng):
    with pytest.raises(UnsupportedOperationError):
        engine.cluster(rng.normal(size=(2, 5)).tolist(), ["a", "b"],
                       ModelFamily.LINEAR_REGRESSION)


def test_cluster_too_many_clusters(engine):
    with pytest.raises(InvalidInputError):
        engine.cluster([[1.0, 2.0]], ["a"], ModelFamily.KMEANS, {"num_clusters": 3})


# =============================================================================
# Telemetry and cancellation
# =============================================================================

def test_metric_names(engine, metrics_sink, regression_data, rng):
    features, targets, names = regression_data

    model = engine.train_model(features, targets, names, "y", ModelFamily.LINEAR_REGRESSION)
    engine.predict(model.model_id, features)
    engine.cluster(features, names, ModelFamily.KMEANS, {"num_clusters": 2})
    engine.cross_validate(features, targets, names, "y",
                          ModelFamily.LINEAR_REGRESSION, folds=3)

    recorded = [name for name, _ in metrics_sink.records]
    assert recorded == ["model_training", "model_prediction",
                        "clustering_analysis", "cross_validation"]
    assert all(seconds >= 0 for _, seconds in metrics_sink.records)


def test_failed_call_records_no_metric(engine, metrics_sink, error_reporter):
    with pytest.raises(ModelNotFoundError):
        engine.predict("nope", [[1.0]])
    assert metrics_sink.records == []
    assert error_reporter.reports[-1][1] == "PredictiveEngine.predict"


def test_default_collaborators_only_log(regression_data):
    messages = []
    logger.add(messages.append, format="{message}", level="INFO")
    engine = PredictiveEngine()
    features, targets, names = regression_data

    engine.train_model(features, targets, names, "y", ModelFamily.LINEAR_REGRESSION)
    with pytest.raises(ModelNotFoundError):
        engine.predict("nope", features)

    assert any("[METRIC] model_training" in m for m in messages)
    assert any("[ERROR] PredictiveEngine.predict" in m for m in messages)
    assert vars(engine.metrics_sink) == {}
    assert vars(engine.error_reporter) == {}


def test_cancelled_training(engine, regression_data):
    features, targets, names = regression_data
    token = CancellationToken()
    token.cancel()

    with pytest.raises(OperationCancelledError):
        engine.train_model(features, targets, names, "y",
                           ModelFamily.LINEAR_REGRESSION, cancel_token=token)

    assert token.is_cancelled
    assert engine.list_models() == []


def test_uncancelled_token_is_harmless(engine, regression_data):
    features, targets, names = regression_data
    token = CancellationToken()
    model = engine.train_model(features, targets, names, "y",
                               ModelFamily.LINEAR_REGRESSION, cancel_token=token)
    assert engine.predict(model.model_id, features, cancel_token=token).predictions.shape == (60,)


# =============================================================================
# Convenience helpers
# =============================================================================

def test_predict_risk_scores(engine, rng):
    features = [rng.uniform(size=40).tolist(), rng.uniform(size=40).tolist()]
    risk = (np.asarray(features[0]) * 0.5).tolist()

    result = engine.predict_risk_scores(features, risk, ["age", "bmi"])

    assert result.model.family is ModelFamily.RANDOM_FOREST
    assert result.model.hyperparameters.num_trees == 200
    assert result.model.hyperparameters.min_samples_leaf == 5
    assert result.predictions.shape == (40,)
    assert np.all((result.confidence >= 0) & (result.confidence <= 1))


def test_predict_outcome_effectiveness(engine, rng):
    intervention = [rng.uniform(size=30).tolist()]
    subject = [rng.uniform(size=30).tolist(), rng.uniform(size=30).tolist()]
    outcomes = (np.asarray(intervention[0]) + np.asarray(subject[1])).tolist()

    result = engine.predict_outcome_effectiveness(intervention, subject, outcomes)

    assert result.model.family is ModelFamily.GRADIENT_BOOSTING
    assert result.model.training_data.feature_names == ("feature_0", "feature_1", "feature_2")
    assert result.model.hyperparameters.num_iterations == 150
    assert result.predictions.shape == (30,)


def test_cluster_populations(engine, rng):
    features = rng.normal(size=(3, 20)).tolist()
    result = engine.cluster_populations(features, ["a", "b", "c"], num_clusters=4)
    assert result.centroids.shape == (4, 3)
    assert result.model.hyperparameters.max_iterations == 300


# =============================================================================
# Hyperparameters
# =============================================================================

def test_resolve_hyperparameters():
    assert resolve_hyperparameters(ModelFamily.SUPPORT_VECTOR_MACHINE) == SVMParams()

    params = SVMParams(C=2.0)
    assert resolve_hyperparameters(ModelFamily.SUPPORT_VECTOR_MACHINE, params) is params

    network = resolve_hyperparameters(ModelFamily.NEURAL_NETWORK, {"hidden_layers": [4, 2]})
    assert network == NeuralNetworkParams(hidden_layers=(4, 2))
    assert network.to_dict()["hidden_layers"] == (4, 2)


@pytest.mark.parametrize("value", [
    {"split_ratio": 1.5},
    {"num_trees": 0},
    {"num_trees": "many"},
    SVMParams(),
    [("num_trees", 3)],
])
def test_invalid_hyperparameters(value):
    with pytest.raises(InvalidInputError):
        resolve_hyperparameters(ModelFamily.RANDOM_FOREST, value)


@pytest.mark.parametrize("value", [
    {"degree": 0},
    {"degree": 11},
    {"l2_penalty": -1.0},
    {"min_alpha_change": 1e-3},
])
def test_invalid_linear_hyperparameters(value):
    with pytest.raises(InvalidInputError):
        resolve_hyperparameters(ModelFamily.LINEAR_REGRESSION, value)
    assert resolve_hyperparameters(ModelFamily.LINEAR_REGRESSION, {"degree": 10}).degree == 10


# =============================================================================
# Logging
# =============================================================================

def test_configure_logging_writes_file(tmp_path):
    configure_logging(LoggingConfig(level="DEBUG", log_dir=str(tmp_path)))
    logger.info("engine log line")
    logger.remove()  # flushes the enqueued file sink

    files = glob.glob(os.path.join(str(tmp_path), "*.log"))
    assert len(files) == 1
    with open(files[0]) as f:
        assert "engine log line" in f.read()
