"""
Platt scaling (sigmoid) calibration.

Learns a one-dimensional affine correction in logit space:
    p_calibrated = sigmoid(a * logit(p_raw) + b)

Parameters start at the identity (a=1, b=0) and are fit by gradient descent
on the Brier score of a training subset; a random holdout subset measures the
Brier score before and after calibration.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

# Minimum samples needed to fit and validate
MIN_SAMPLES = 10
# Minimum holdout size regardless of ratio
MIN_HOLDOUT = 5

_Z_CLAMP = 500.0
_EPS = 1e-15


class InsufficientDataError(ValueError):
    """Raised when fewer than MIN_SAMPLES samples are given to Platt fitting."""

    def __init__(self, n_samples: int) -> None:
        self.n_samples = n_samples
        super().__init__(
            f"Need at least {MIN_SAMPLES} samples for Platt scaling, got {n_samples}"
        )


def sigmoid(z: float) -> float:
    """Sigmoid with input clamped to [-500, 500]."""
    z = max(-_Z_CLAMP, min(_Z_CLAMP, z))
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    exp_z = math.exp(z)
    return exp_z / (1.0 + exp_z)


def logit(p: float) -> float:
    """Logit transform with p clamped to [1e-15, 1 - 1e-15]."""
    p = max(_EPS, min(1 - _EPS, p))
    return math.log(p / (1 - p))


def _brier(predictions: Sequence[float], outcomes: Sequence[int]) -> float:
    total = sum((p - y) ** 2 for p, y in zip(predictions, outcomes, strict=True))
    return total / len(predictions)


@dataclass(frozen=True)
class PlattConfig:
    """Gradient descent settings for Platt fitting.

    Attributes:
        learning_rate: Step size for a and b.
        max_iterations: Hard cap on gradient steps.
        convergence_threshold: Stop once |loss(t) - loss(t-1)| falls below this.
        seed: Seed for the train/holdout shuffle. None = unseeded.
    """

    learning_rate: float = 0.01
    max_iterations: int = 1000
    convergence_threshold: float = 1e-6
    seed: int | None = None

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
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")


@dataclass(frozen=True)
class PlattMetadata:
    """Holdout validation results for a fitted scaling.

    Attributes:
        trained_at: When fitting finished (UTC).
        holdout_samples: Size of the holdout subset.
        original_brier_score: Holdout Brier of the raw probabilities.
        calibrated_brier_score: Holdout Brier after calibration.
        improvement: original - calibrated. May be negative.
    """

    trained_at: datetime
    holdout_samples: int
    original_brier_score: float
    calibrated_brier_score: float
    improvement: float


@dataclass(frozen=True)
class PlattScaling:
    """Fitted Platt scaling parameters.

    Transforms probabilities via:
        calibrated = sigmoid(a * logit(p) + b)

    With a=1, b=0 the transform is the identity. With a > 0 it preserves
    rank order; a <= 0 inverts it and is returned as fitted.

    Attributes:
        a: Scale parameter.
        b: Shift parameter.
        metadata: Holdout validation results.
    """

    a: float
    b: float
    metadata: PlattMetadata

    def transform(self, p_raw: float) -> float:
        """Apply Platt scaling to a single probability."""
        return sigmoid(self.a * logit(p_raw) + self.b)

    def transform_batch(self, probs: Sequence[float]) -> list[float]:
        """Apply Platt scaling to a batch of probabilities."""
        return [self.transform(p) for p in probs]

    @classmethod
    def identity(cls) -> PlattScaling:
        """No-op scaling (a=1, b=0) with empty validation metadata."""
        return cls(
            a=1.0,
            b=0.0,
            metadata=PlattMetadata(
                trained_at=datetime.now(UTC),
                holdout_samples=0,
                original_brier_score=0.0,
                calibrated_brier_score=0.0,
                improvement=0.0,
            ),
        )


@dataclass(frozen=True)
class CalibrationResult:
    """Fitted scaling together with the probabilities it was applied to."""

    calibrated_probabilities: list[float]
    original_probabilities: list[float]
    platt_scaling: PlattScaling

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "calibrated_probabilities": self.calibrated_probabilities,
            "original_probabilities": self.original_probabilities,
            "a": self.platt_scaling.a,
            "b": self.platt_scaling.b,
        }


def calibrate_probabilities(
    raw_probabilities: Sequence[float],
    scaling: PlattScaling,
) -> list[float]:
    """Apply a fitted scaling to new raw probabilities."""
    return scaling.transform_batch(raw_probabilities)


def _gradient_descent(
    logits: Sequence[float],
    outcomes: Sequence[int],
    config: PlattConfig,
    on_step: Callable[[int, float, float, float], None] | None,
) -> tuple[float, float, int]:
    """Minimize Brier score over (a, b). Returns (a, b, stopping iteration)."""
    a = 1.0
    b = 0.0
    n = len(logits)
    previous_loss = float("inf")
    iteration = 0

    for iteration in range(config.max_iterations):
        calibrated = [sigmoid(a * z + b) for z in logits]
        current_loss = _brier(calibrated, outcomes)

        if on_step is not None:
            on_step(iteration, current_loss, a, b)

        if abs(previous_loss - current_loss) < config.convergence_threshold:
            logger.debug(f"Platt scaling converged at iteration {iteration}")
            break
        previous_loss = current_loss

        # d/dθ mean((q - y)^2) with q = sigmoid(a*z + b), dq = q(1-q) dθ-term
        grad_a = 0.0
        grad_b = 0.0
        for q, y, z in zip(calibrated, outcomes, logits, strict=True):
            common = 2.0 * (q - y) * q * (1.0 - q)
            grad_a += common * z
            grad_b += common

        a -= config.learning_rate * grad_a / n
        b -= config.learning_rate * grad_b / n

    return a, b, iteration


def fit_platt_scaling(
    raw_probabilities: Sequence[float],
    outcomes: Sequence[bool],
    holdout_ratio: float = 0.2,
    *,
    config: PlattConfig | None = None,
    rng: np.random.Generator | None = None,
    on_step: Callable[[int, float, float, float], None] | None = None,
) -> PlattScaling:
    """Fit Platt scaling on a random train split and validate on the holdout.

    Holdout size is ``max(5, floor(n * holdout_ratio))``; the remaining samples
    train the parameters. The reported improvement is not required to be
    non-negative: a regression on the holdout is surfaced, not hidden.

    Args:
        raw_probabilities: Raw model probabilities.
        outcomes: Matured outcomes (True = YES).
        holdout_ratio: Fraction of samples reserved for validation.
        config: Gradient descent settings. Uses defaults if not provided.
        rng: Random generator for the shuffle. Takes precedence over config.seed.
        on_step: Optional observer called as ``on_step(iteration, loss, a, b)``.

    Returns:
        Fitted PlattScaling.

    Raises:
        ValueError: If lengths differ or holdout_ratio leaves no training data.
        InsufficientDataError: If fewer than 10 samples are given.
    """
    if config is None:
        config = PlattConfig()

    if len(raw_probabilities) != len(outcomes):
        raise ValueError(
            "Raw probabilities and actual outcomes must have same length "
            f"(got {len(raw_probabilities)} and {len(outcomes)})"
        )

    total = len(raw_probabilities)
    if total < MIN_SAMPLES:
        raise InsufficientDataError(total)

    if not 0 <= holdout_ratio < 1:
        raise ValueError(f"holdout_ratio must be in [0, 1), got {holdout_ratio}")

    holdout_size = max(MIN_HOLDOUT, math.floor(total * holdout_ratio))
    training_size = total - holdout_size
    if training_size < 1:
        raise ValueError(
            f"holdout_ratio={holdout_ratio} leaves no training samples out of {total}"
        )

    if rng is None:
        rng = np.random.default_rng(config.seed)
    indices = rng.permutation(total).tolist()
    training_indices = indices[:training_size]
    holdout_indices = indices[training_size:]

    labels = [1 if outcome else 0 for outcome in outcomes]
    train_logits = [logit(raw_probabilities[i]) for i in training_indices]
    train_outcomes = [labels[i] for i in training_indices]
    holdout_probs = [raw_probabilities[i] for i in holdout_indices]
    holdout_outcomes = [labels[i] for i in holdout_indices]

    logger.info(f"Training Platt scaling on {training_size} samples, holdout: {holdout_size}")

    original_brier = _brier(holdout_probs, holdout_outcomes)
    a, b, stopped_at = _gradient_descent(train_logits, train_outcomes, config, on_step)

    calibrated_holdout = [sigmoid(a * logit(p) + b) for p in holdout_probs]
    calibrated_brier = _brier(calibrated_holdout, holdout_outcomes)
    improvement = original_brier - calibrated_brier

    logger.info(
        f"Platt scaling: a={a:.4f}, b={b:.4f} after {stopped_at + 1} iterations; "
        f"holdout Brier {original_brier:.6f} -> {calibrated_brier:.6f} "
        f"(improvement {improvement:+.6f})"
    )
    if improvement < 0:
        logger.warning(f"Platt scaling worsened holdout Brier score by {-improvement:.6f}")
    if a <= 0:
        logger.warning(f"Platt scaling has non-positive slope (a={a:.4f}); rank order inverts")

    return PlattScaling(
        a=a,
        b=b,
        metadata=PlattMetadata(
            trained_at=datetime.now(UTC),
            holdout_samples=holdout_size,
            original_brier_score=original_brier,
            calibrated_brier_score=calibrated_brier,
            improvement=improvement,
        ),
    )


def calibrate(
    raw_probabilities: Sequence[float],
    outcomes: Sequence[bool],
    holdout_ratio: float = 0.2,
    **kwargs: Any,
) -> CalibrationResult:
    """Fit Platt scaling and apply it to the same raw probabilities.

    Args:
        raw_probabilities: Raw model probabilities.
        outcomes: Matured outcomes.
        holdout_ratio: Fraction of samples reserved for validation.
        **kwargs: Passed to fit_platt_scaling (config, rng, on_step).
    """
    scaling = fit_platt_scaling(raw_probabilities, outcomes, holdout_ratio, **kwargs)
    return CalibrationResult(
        calibrated_probabilities=calibrate_probabilities(raw_probabilities, scaling),
        original_probabilities=list(raw_probabilities),
        platt_scaling=scaling,
    )
