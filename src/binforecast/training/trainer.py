"""Logistic regression trainer for the forecasting baseline.

Fits a linear-in-logit model on normalized feature vectors with full-batch
gradient descent and L2 regularization on the coefficients (not the bias).
Pure numpy, no sklearn estimator: every step uses the whole dataset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import numpy as np

from binforecast.features.schema import FEATURE_ORDER

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from binforecast.contracts import FeatureVector

logger = logging.getLogger(__name__)

# Sigmoid input clamp to keep exp() finite
Z_CLAMP = 500.0
# Probability clamp for log(0) protection
PROB_EPS = 1e-15


class InvalidInputError(ValueError):
    """Raised when training arrays are empty or of mismatched length."""


@dataclass(frozen=True)
class TrainingConfig:
    """Training configuration.

    Attributes:
        learning_rate: Gradient step size.
        max_iterations: Hard cap on gradient steps.
        convergence_threshold: Stop once |loss(t) - loss(t-1)| falls below this.
        regularization: L2 penalty weight on coefficients (bias excluded).
        seed: Seed for the small random initial weights. None = unseeded.
    """

    learning_rate: float = 0.01
    max_iterations: int = 50
    convergence_threshold: float = 1e-6
    regularization: float = 0.01
    seed: int | None = 42

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be > 0, got {self.learning_rate}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.convergence_threshold < 0:
            raise ValueError(
                f"convergence_threshold must be >= 0, got {self.convergence_threshold}"
            )
        if self.regularization < 0:
            raise ValueError(f"regularization must be >= 0, got {self.regularization}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")


@dataclass(frozen=True)
class TrainingStep:
    """One entry of the training history."""

    iteration: int
    loss: float
    accuracy: float


@dataclass(frozen=True)
class ModelMetadata:
    """Training provenance.

    Attributes:
        trained_at: When training finished (UTC).
        training_samples: Number of samples used.
        convergence_iterations: Index of the iteration training stopped at.
    """

    trained_at: datetime
    training_samples: int
    convergence_iterations: int


@dataclass(frozen=True)
class LogisticModel:
    """Trained logistic regression model (inference-only).

    Attributes:
        coefficients: One weight per feature, in FEATURE_ORDER.
        bias: Intercept.
        metadata: Training provenance.
        training_history: Per-iteration loss and accuracy.
        feature_names: Feature order the coefficients refer to.
    """

    coefficients: tuple[float, ...]
    bias: float
    metadata: ModelMetadata
    training_history: tuple[TrainingStep, ...] = ()
    feature_names: tuple[str, ...] = field(default=FEATURE_ORDER)

    def __post_init__(self) -> None:
        if len(self.coefficients) != len(FEATURE_ORDER):
            raise ValueError(
                f"Expected {len(FEATURE_ORDER)} coefficients, got {len(self.coefficients)}"
            )
        if len(self.feature_names) != len(self.coefficients):
            raise ValueError(
                f"feature_names length {len(self.feature_names)} does not match "
                f"coefficients length {len(self.coefficients)}"
            )

    @property
    def final_accuracy(self) -> float | None:
        """Training accuracy at the last recorded iteration."""
        if not self.training_history:
            return None
        return self.training_history[-1].accuracy


def sigmoid(z: np.ndarray | float) -> np.ndarray:
    """Logistic function with input clamped to [-500, 500]."""
    clamped = np.clip(z, -Z_CLAMP, Z_CLAMP)
    return 1.0 / (1.0 + np.exp(-clamped))


def log_loss(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Mean binary cross-entropy with predictions clamped away from 0 and 1."""
    p = np.clip(y_pred, PROB_EPS, 1 - PROB_EPS)
    return float(-np.mean(y_true * np.log(p) + (1 - y_true) * np.log(1 - p)))


def accuracy(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Fraction of samples where ``p > 0.5`` agrees with the label."""
    return float(np.mean((y_pred > 0.5) == (y_true > 0.5)))


def feature_matrix(X: Sequence[FeatureVector]) -> np.ndarray:
    """Stack feature vectors into an (n_samples, 8) float64 matrix."""
    if not X:
        return np.zeros((0, len(FEATURE_ORDER)), dtype=np.float64)
    return np.array([x.to_list() for x in X], dtype=np.float64)


def forward(coefficients: np.ndarray, bias: float, X: np.ndarray) -> np.ndarray:
    """Raw model probabilities for a feature matrix."""
    return sigmoid(X @ coefficients + bias)


def fit(
    X: Sequence[FeatureVector],
    y: Sequence[bool],
    config: TrainingConfig | None = None,
    *,
    on_step: Callable[[int, float, float], None] | None = None,
) -> LogisticModel:
    """Train a logistic regression model with full-batch gradient descent.

    Per step: predict all samples, record loss/accuracy, check convergence,
    then update ``coef -= lr * (mean(err * x) + reg * coef)`` and
    ``bias -= lr * mean(err)``.

    Args:
        X: Normalized feature vectors.
        y: Binary labels (True = YES).
        config: Training configuration. Uses defaults if not provided.
        on_step: Optional observer called as ``on_step(iteration, loss, accuracy)``
            after every evaluated iteration.

    Returns:
        Trained LogisticModel.

    Raises:
        InvalidInputError: If X is empty or len(X) != len(y).
    """
    if config is None:
        config = TrainingConfig()

    if len(X) == 0 or len(X) != len(y):
        raise InvalidInputError(
            f"Invalid training data: X and y must have same length > 0 "
            f"(got {len(X)} and {len(y)})"
        )

    features = feature_matrix(X)
    labels = np.array([1.0 if label else 0.0 for label in y], dtype=np.float64)
    n_samples, n_features = features.shape

    rng = np.random.default_rng(config.seed)
    coefficients = (rng.random(n_features) - 0.5) * 0.1
    bias = float((rng.random() - 0.5) * 0.1)

    logger.info(f"Training logistic regression on {n_samples} samples...")

    history: list[TrainingStep] = []
    previous_loss = float("inf")
    stopped_at = config.max_iterations - 1
    converged = False

    for iteration in range(config.max_iterations):
        predictions = forward(coefficients, bias, features)
        current_loss = log_loss(labels, predictions)
        current_accuracy = accuracy(labels, predictions)

        history.append(TrainingStep(iteration, current_loss, current_accuracy))
        if on_step is not None:
            on_step(iteration, current_loss, current_accuracy)

        if abs(previous_loss - current_loss) < config.convergence_threshold:
            stopped_at = iteration
            converged = True
            break
        previous_loss = current_loss

        error = predictions - labels
        grad_coefficients = features.T @ error / n_samples + config.regularization * coefficients
        grad_bias = float(np.mean(error))

        coefficients = coefficients - config.learning_rate * grad_coefficients
        bias -= config.learning_rate * grad_bias

    if converged:
        logger.info(f"Converged at iteration {stopped_at} (loss: {history[-1].loss:.6f})")
    logger.info(
        f"Training completed: {len(history)} iterations, "
        f"final accuracy: {history[-1].accuracy:.3f}"
    )

    return LogisticModel(
        coefficients=tuple(float(c) for c in coefficients),
        bias=bias,
        metadata=ModelMetadata(
            trained_at=datetime.now(UTC),
            training_samples=n_samples,
            convergence_iterations=stopped_at,
        ),
        training_history=tuple(history),
        feature_names=FEATURE_ORDER,
    )
