"""
Scoring rules and interval estimates for binary probability forecasts.

- Brier score (probabilistic accuracy)
- Log loss (binary cross-entropy)
- Accuracy at the 0.5 threshold
- Wilson score interval for a binomial proportion
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

# Probability clamp for log loss
EPS = 1e-15


def _check_lengths(predictions: Sequence[float], outcomes: Sequence[bool]) -> None:
    if len(predictions) != len(outcomes):
        raise ValueError(
            "predictions and outcomes must have same length "
            f"(got {len(predictions)} and {len(outcomes)})"
        )


def brier_score(predictions: Sequence[float], outcomes: Sequence[bool]) -> float:
    """Compute Brier score (mean squared error of probabilities).

    Brier score = (1/N) * sum((p_i - y_i)^2)

    Lower is better. Perfect predictions score 0.

    Args:
        predictions: Predicted probabilities in [0, 1].
        outcomes: Binary outcomes.

    Returns:
        Brier score in [0, 1]. Returns 0.0 for empty input.
    """
    _check_lengths(predictions, outcomes)
    if len(predictions) == 0:
        return 0.0

    total = sum((p - float(y)) ** 2 for p, y in zip(predictions, outcomes, strict=True))
    return total / len(predictions)


def log_loss(predictions: Sequence[float], outcomes: Sequence[bool]) -> float:
    """Compute mean binary cross-entropy.

    Probabilities are clamped to [1e-15, 1 - 1e-15] so the result is finite.

    Args:
        predictions: Predicted probabilities in [0, 1].
        outcomes: Binary outcomes.

    Returns:
        Log loss (>= 0). Returns 0.0 for empty input.
    """
    _check_lengths(predictions, outcomes)
    if len(predictions) == 0:
        return 0.0

    total = 0.0
    for p, y in zip(predictions, outcomes, strict=True):
        p = max(EPS, min(1 - EPS, p))
        total -= math.log(p) if y else math.log(1 - p)
    return total / len(predictions)


def accuracy(predictions: Sequence[float], outcomes: Sequence[bool]) -> float:
    """Fraction of predictions on the correct side of 0.5.

    Returns:
        Accuracy in [0, 1]. Returns 0.0 for empty input.
    """
    _check_lengths(predictions, outcomes)
    if len(predictions) == 0:
        return 0.0

    correct = sum(1 for p, y in zip(predictions, outcomes, strict=True) if (p > 0.5) == bool(y))
    return correct / len(predictions)


def wilson_interval(successes: int, trials: int, z: float = 1.96) -> tuple[float, float]:
    """Wilson score interval for a binomial proportion.

    center = (p + z²/2n) / (1 + z²/n)
    margin = z * sqrt((p(1-p) + z²/4n) / n) / (1 + z²/n)

    The bounds are clamped to [0, 1]. At the extremes (no successes, or all
    successes) the closed form lands on 0 or 1 only up to rounding, so those
    bounds are pinned exactly.

    Args:
        successes: Number of positive outcomes.
        trials: Number of trials.
        z: Normal quantile (1.96 for 95%).

    Returns:
        Tuple of (low, high). (0.0, 0.0) when trials == 0.

    Raises:
        ValueError: If successes is outside [0, trials].
    """
    if trials == 0:
        return 0.0, 0.0
    if not 0 <= successes <= trials:
        raise ValueError(f"successes must be in [0, {trials}], got {successes}")

    n = trials
    p = successes / n
    z2 = z * z
    denominator = 1 + z2 / n
    center = (p + z2 / (2 * n)) / denominator
    margin = z * math.sqrt((p * (1 - p) + z2 / (4 * n)) / n) / denominator

    low = 0.0 if successes == 0 else max(0.0, center - margin)
    high = 1.0 if successes == trials else min(1.0, center + margin)
    return low, high
