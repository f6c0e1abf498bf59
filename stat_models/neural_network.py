"""
Multi-layer perceptron for scalar regression, trained by plain SGD.

Topology is [n_inputs] + hidden_layers + [1]. Hidden units use ReLU and the
output unit is linear. Each training sample triggers one forward pass, one
backpropagation of 0.5 * (output - target)^2 and one parameter update.
"""

import numpy as np
from loguru import logger
from typing import List, Sequence, Tuple

from config import DEFAULT_RANDOM_STATE, NETWORK_LOG_EVERY
from errors import InvalidModelError


def relu(z: np.ndarray) -> np.ndarray:
    return np.maximum(0, z)


class NeuralNetwork:
    """
    Fully connected regression network.

    Layer k weights are drawn from U(-s, s) with s = sqrt(2 / fan_in_k),
    biases start at zero. The generator is seeded by `random_state`, so two
    fits on the same data give identical networks.
    """

    def __init__(self,
                 hidden_layers: Sequence[int] = (10, 5),
                 learning_rate: float = 0.01,
                 epochs: int = 100,
                 random_state: int = DEFAULT_RANDOM_STATE):
        """
        Args:
            hidden_layers: Unit count of each hidden layer, input side first
            learning_rate: SGD step size
            epochs: Full passes over the training set
            random_state: Seed for weight initialization
        """
        self.hidden_layers = list(hidden_layers)
        self.learning_rate = learning_rate
        self.epochs = epochs
        self.random_state = random_state

        self.layer_sizes: List[int] = []
        self.weights: List[np.ndarray] = []  # weights[k] has shape (fan_in, fan_out)
        self.biases: List[np.ndarray] = []
        self.loss_history: List[float] = []  # mean per-sample loss of each epoch

        self._is_fitted = False

    def _init_weights(self, n_inputs: int) -> None:
        generator = np.random.default_rng(self.random_state)
        self.layer_sizes = [n_inputs, *self.hidden_layers, 1]

        shapes = list(zip(self.layer_sizes[:-1], self.layer_sizes[1:]))
        self.weights = [generator.uniform(-np.sqrt(2.0 / fan_in), np.sqrt(2.0 / fan_in),
                                          size=(fan_in, fan_out))
                        for fan_in, fan_out in shapes]
        self.biases = [np.zeros(fan_out) for _, fan_out in shapes]

    def _is_output(self, layer: int) -> bool:
        return layer == len(self.weights) - 1

    # =========================================================================
    # Backpropagation
    # =========================================================================

    def _forward(self, x: np.ndarray) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """
        Propagate one sample, keeping every intermediate.

        Returns:
            (activations, pre_activations); index 0 of both holds the input,
            index k + 1 the output of layer k
        """
        activations, pre_activations = [x], [x]
        for layer, (W, b) in enumerate(zip(self.weights, self.biases)):
            z = activations[-1] @ W + b
            pre_activations.append(z)
            activations.append(z if self._is_output(layer) else relu(z))
        return activations, pre_activations

    def _backward(self, target: float, activations: List[np.ndarray],
                  pre_activations: List[np.ndarray]) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """
        Gradients of 0.5 * (output - target)^2 with respect to every layer.

        Returns:
            (weight_gradients, bias_gradients), aligned with weights/biases
        """
        n_layers = len(self.weights)
        dW: List[np.ndarray] = [None] * n_layers
        db: List[np.ndarray] = [None] * n_layers

        delta = activations[-1] - target
        for layer in reversed(range(n_layers)):
            dW[layer] = np.outer(activations[layer], delta)
            db[layer] = delta
            if layer:
                # ReLU passes gradient only where its input was positive
                delta = (self.weights[layer] @ delta) * (pre_activations[layer] > 0)

        return dW, db

    def _sgd_step(self, dW: List[np.ndarray], db: List[np.ndarray]) -> None:
        for W, b, grad_W, grad_b in zip(self.weights, self.biases, dW, db):
            W -= self.learning_rate * grad_W
            b -= self.learning_rate * grad_b

    # =========================================================================
    # Public API
    # =========================================================================

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'NeuralNetwork':
        """
        Train for `epochs` passes, visiting samples in their given order.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Targets (n_samples,)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()

        self._init_weights(X.shape[1])
        self.loss_history = []

        for epoch in range(1, self.epochs + 1):
            total = 0.0
            for x, target in zip(X, y):
                activations, pre_activations = self._forward(x)
                total += 0.5 * (activations[-1][0] - target) ** 2
                self._sgd_step(*self._backward(target, activations, pre_activations))

            self.loss_history.append(float(total / max(len(y), 1)))
            if epoch % NETWORK_LOG_EVERY == 0:
                logger.debug(f"Epoch {epoch}/{self.epochs} - loss: {self.loss_history[-1]:.6f}")

        self._is_fitted = True
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Network output for each row of X, shape (n_samples,)."""
        if not self._is_fitted:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        out = np.array(X, dtype=np.float64)
        for layer, (W, b) in enumerate(zip(self.weights, self.biases)):
            out = out @ W + b
            if not self._is_output(layer):
                out = relu(out)
        return out[:, 0]

    def get_n_parameters(self) -> int:
        """Trainable weights plus biases."""
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))
