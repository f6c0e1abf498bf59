#!/usr/bin/env python3
"""
Predictive Engine - Demo Entry Point

Runs the engine end to end on small synthetic datasets.

Usage:
    python main.py                          # Run every demo
    python main.py --demo regression        # Linear regression + random forest
    python main.py --demo classification    # Logistic regression + naive Bayes
    python main.py --demo clustering        # K-means + hierarchical clustering
    python main.py --demo cv                # Cross-validated gradient boosting
    python main.py --log-level DEBUG        # More detail from the engine
"""

import argparse

import numpy as np

from config import DEFAULT_RANDOM_STATE, LoggingConfig
from engine import ModelFamily, PredictiveEngine, configure_logging


def make_regression_data(n_samples: int = 200, seed: int = DEFAULT_RANDOM_STATE):
    """y = 3 + 2*x1 - x2 + noise, returned as feature columns."""
    rng = np.random.default_rng(seed)
    x1 = rng.uniform(0, 10, n_samples)
    x2 = rng.uniform(-5, 5, n_samples)
    y = 3 + 2 * x1 - x2 + rng.normal(0, 0.5, n_samples)
    return [x1.tolist(), x2.tolist()], y.tolist(), ["x1", "x2"]


def make_classification_data(n_samples: int = 200, seed: int = DEFAULT_RANDOM_STATE):
    """Two Gaussian blobs labelled 0 and 1."""
    rng = np.random.default_rng(seed)
    half = n_samples // 2
    X0 = rng.normal([-1.5, -1.5], 1.0, size=(half, 2))
    X1 = rng.normal([1.5, 1.5], 1.0, size=(n_samples - half, 2))
    X = np.vstack([X0, X1])
    y = np.concatenate([np.zeros(half), np.ones(n_samples - half)])
    return X.T.tolist(), y.tolist(), ["f1", "f2"]


def make_cluster_data(n_per_cluster: int = 50, seed: int = DEFAULT_RANDOM_STATE):
    """Three well separated blobs."""
    rng = np.random.default_rng(seed)
    centers = np.array([[0.0, 0.0], [8.0, 8.0], [0.0, 8.0]])
    X = np.vstack([rng.normal(c, 0.7, size=(n_per_cluster, 2)) for c in centers])
    return X.T.tolist(), ["a", "b"]


def run_regression(engine: PredictiveEngine):
    features, targets, names = make_regression_data()

    print("\n--- Linear regression ---")
    model = engine.train_model(features, targets, names, "y", ModelFamily.LINEAR_REGRESSION)
    estimator = model.parameters
    print(f"Intercept: {estimator.intercept_:.3f}  Weights: {np.round(estimator.coef_, 3)}")
    print(f"Held-out R2: {model.performance.r2:.4f}  RMSE: {model.performance.rmse:.4f}")

    print("\n--- Random forest ---")
    model = engine.train_model(features, targets, names, "y", ModelFamily.RANDOM_FOREST,
                               {"num_trees": 30, "max_depth": 6})
    result = engine.predict(model.model_id, features)
    print(f"Held-out R2: {model.performance.r2:.4f}")
    print(f"Mean confidence: {np.mean(result.confidence):.4f}")
    print(f"Feature importance: {result.feature_importance}")


def run_classification(engine: PredictiveEngine):
    features, targets, names = make_classification_data()

    for family in (ModelFamily.LOGISTIC_REGRESSION, ModelFamily.NAIVE_BAYES):
        print(f"\n--- {family.value} ---")
        model = engine.train_model(features, targets, names, "label", family)
        perf = model.performance
        print(f"Accuracy: {perf.accuracy:.4f}  F1: {perf.f1_score:.4f}  AUC: {perf.auc:.4f}")
        print(f"Confusion matrix [[tn, fp], [fn, tp]]: {perf.confusion_matrix}")


def run_clustering(engine: PredictiveEngine):
    features, names = make_cluster_data()

    for family in (ModelFamily.KMEANS, ModelFamily.HIERARCHICAL):
        print(f"\n--- {family.value} ---")
        result = engine.cluster(features, names, family, {"num_clusters": 3})
        sizes = np.bincount(result.labels)
        print(f"Cluster sizes: {sizes.tolist()}")
        print(f"Inertia: {result.inertia:.4f}  Silhouette: {result.silhouette_score:.4f}")


def run_cross_validation(engine: PredictiveEngine):
    features, targets, names = make_regression_data(n_samples=120)

    print("\n--- Cross-validated gradient boosting ---")
    grid = [
        {"num_iterations": 20, "max_depth": 2},
        {"num_iterations": 50, "max_depth": 3},
        {"num_iterations": 50, "max_depth": 3, "learning_rate": 0.3},
    ]
    result = engine.cross_validate(features, targets, names, "y",
                                   ModelFamily.GRADIENT_BOOSTING, folds=5,
                                   hyperparameter_grid=grid)
    print(f"Candidate means: {np.round(result.candidate_means, 4).tolist()}")
    print(f"Best candidate: {result.best_index}  "
          f"mean R2 {result.mean_score:.4f} (+/- {result.std_score:.4f})")
    print(f"Final model: {result.best_model.model_id}")


DEMOS = {
    'regression': run_regression,
    'classification': run_classification,
    'clustering': run_clustering,
    'cv': run_cross_validation,
}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Predictive Engine - synthetic data demos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py                          # Run every demo
    python main.py --demo clustering        # Only clustering
    python main.py --log-level DEBUG        # Verbose engine logging
        """
    )

    parser.add_argument('--demo', choices=list(DEMOS) + ['all'], default='all',
                        help='Demo to run')
    parser.add_argument('--log-level', default='INFO',
                        help='Engine log level (DEBUG, INFO, WARNING, ...)')

    args = parser.parse_args()
    configure_logging(LoggingConfig(level=args.log_level.upper()))

    print("=" * 50)
    print("Predictive Engine")
    print("=" * 50)

    engine = PredictiveEngine()
    selected = DEMOS.values() if args.demo == 'all' else [DEMOS[args.demo]]
    for demo in selected:
        demo(engine)

    print(f"\nRegistered models: {len(engine.list_models())}")


if __name__ == "__main__":
    main()
