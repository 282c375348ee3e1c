"""Stateless inference for trained logistic models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from binforecast.training.trainer import (
    PROB_EPS,
    accuracy,
    feature_matrix,
    forward,
    log_loss,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from binforecast.contracts import FeatureVector
    from binforecast.training.trainer import LogisticModel


@dataclass(frozen=True)
class ModelValidation:
    """Model quality on a labeled set.

    Attributes:
        accuracy: Fraction correct at the 0.5 threshold.
        log_loss: Mean binary cross-entropy.
        brier_score: Mean squared probability error.
        n_samples: Number of samples evaluated.
    """

    accuracy: float
    log_loss: float
    brier_score: float
    n_samples: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "accuracy": self.accuracy,
            "log_loss": self.log_loss,
            "brier_score": self.brier_score,
            "n_samples": self.n_samples,
        }


def _predict_array(model: LogisticModel, X: Sequence[FeatureVector]) -> np.ndarray:
    coefficients = np.asarray(model.coefficients, dtype=np.float64)
    probs = forward(coefficients, model.bias, feature_matrix(X))
    # Keep outputs strictly inside (0, 1) even at the sigmoid clamp
    return np.clip(probs, PROB_EPS, 1 - PROB_EPS)


def predict_proba(model: LogisticModel, X: Sequence[FeatureVector]) -> list[float]:
    """Raw YES probabilities, one per feature vector. No side effects."""
    return _predict_array(model, X).tolist()


def predict(model: LogisticModel, X: Sequence[FeatureVector]) -> list[bool]:
    """Binary predictions, thresholding predict_proba at 0.5."""
    return [p > 0.5 for p in predict_proba(model, X)]


def get_feature_importance(model: LogisticModel) -> dict[str, float]:
    """Absolute coefficient magnitude keyed by feature name.

    Only meaningful as a relative ranking, because every feature shares the
    same normalized [0, 1] scale. This is not a causal or statistically
    corrected importance measure.
    """
    return {
        name: abs(coef)
        for name, coef in zip(model.feature_names, model.coefficients, strict=True)
    }


def validate_model(
    model: LogisticModel,
    X_test: Sequence[FeatureVector],
    y_test: Sequence[bool],
) -> ModelValidation:
    """Evaluate accuracy, log loss and Brier score on a labeled set.

    Raises:
        ValueError: If X_test is empty or lengths differ.
    """
    if len(X_test) == 0 or len(X_test) != len(y_test):
        raise ValueError(
            f"X_test and y_test must have same length > 0 (got {len(X_test)} and {len(y_test)})"
        )

    predictions = _predict_array(model, X_test)
    labels = np.array([1.0 if label else 0.0 for label in y_test], dtype=np.float64)

    return ModelValidation(
        accuracy=accuracy(labels, predictions),
        log_loss=log_loss(labels, predictions),
        brier_score=float(np.mean((predictions - labels) ** 2)),
        n_samples=len(labels),
    )
