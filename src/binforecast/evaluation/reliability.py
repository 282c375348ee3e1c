"""
Reliability diagrams and Brier score decomposition.

Predictions are grouped into N equal-width bins over [0, 1]. Each bin reports
its mean prediction, observed outcome rate and a Wilson interval on that rate;
bins whose mean prediction drifts from the observed rate are flagged for
monitoring (never corrected).

The Murphy decomposition splits the Brier score into
reliability - resolution + uncertainty. That identity is exact only when
predictions are constant within each bin; the two within-bin terms close it
in general:

    Brier = REL - RES + UNC + WBV - 2 * WBC

where WBV is the count-weighted within-bin variance of the predictions and WBC
the count-weighted within-bin covariance of predictions and outcomes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from binforecast.evaluation.metrics import accuracy, brier_score, log_loss, wilson_interval

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# Gap between mean prediction and outcome rate that flags a bin
DEFAULT_GAP_THRESHOLD = 0.1


@dataclass(frozen=True)
class EvalConfig:
    """Evaluation settings.

    Attributes:
        n_bins: Number of equal-width reliability bins.
        z: Normal quantile for Wilson intervals (1.96 = 95%).
        gap_threshold: |mean_prediction - mean_outcome| above this flags a bin.
        min_samples: Minimum labeled samples an evaluation run accepts.
    """

    n_bins: int = 10
    z: float = 1.96
    gap_threshold: float = DEFAULT_GAP_THRESHOLD
    min_samples: int = 1

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.n_bins < 1:
            raise ValueError(f"n_bins must be >= 1, got {self.n_bins}")
        if self.z <= 0:
            raise ValueError(f"z must be > 0, got {self.z}")
        if self.gap_threshold < 0:
            raise ValueError(f"gap_threshold must be >= 0, got {self.gap_threshold}")
        if self.min_samples < 1:
            raise ValueError(f"min_samples must be >= 1, got {self.min_samples}")


@dataclass(frozen=True)
class ReliabilityBin:
    """One bin of a reliability diagram.

    Attributes:
        index: Bin position, 0-based.
        range_start: Inclusive lower edge.
        range_end: Exclusive upper edge (inclusive for the last bin).
        count: Samples in the bin.
        mean_prediction: Mean predicted probability (0.0 when empty).
        mean_outcome: Observed positive rate (0.0 when empty).
        wilson_ci: Wilson interval on the outcome rate ((0, 0) when empty).
        flagged: Whether the bin looks miscalibrated.
        prediction_variance: Population variance of predictions in the bin.
        prediction_outcome_covariance: Population covariance of predictions
            and outcomes in the bin.
    """

    index: int
    range_start: float
    range_end: float
    count: int
    mean_prediction: float
    mean_outcome: float
    wilson_ci: tuple[float, float]
    flagged: bool
    prediction_variance: float = 0.0
    prediction_outcome_covariance: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "range_start": self.range_start,
            "range_end": self.range_end,
            "count": self.count,
            "mean_prediction": self.mean_prediction,
            "mean_outcome": self.mean_outcome,
            "wilson_ci": list(self.wilson_ci),
            "flagged": self.flagged,
        }


@dataclass(frozen=True)
class Decomposition:
    """Brier score decomposition terms."""

    reliability: float
    resolution: float
    uncertainty: float
    within_bin_variance: float
    within_bin_covariance: float

    def reconstructed_brier(self) -> float:
        """REL - RES + UNC + WBV - 2 * WBC."""
        return (
            self.reliability
            - self.resolution
            + self.uncertainty
            + self.within_bin_variance
            - 2 * self.within_bin_covariance
        )

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "reliability": self.reliability,
            "resolution": self.resolution,
            "uncertainty": self.uncertainty,
            "within_bin_variance": self.within_bin_variance,
            "within_bin_covariance": self.within_bin_covariance,
        }


@dataclass(frozen=True)
class EvalResult:
    """Complete evaluation of a set of probability forecasts.

    Attributes:
        n_samples: Number of samples evaluated.
        brier_score: Mean squared probability error.
        log_loss: Mean binary cross-entropy.
        accuracy: Fraction correct at the 0.5 threshold.
        reliability: Calibration error term.
        resolution: Discrimination term.
        uncertainty: Base-rate variance term.
        within_bin_variance: Weighted within-bin prediction variance.
        within_bin_covariance: Weighted within-bin prediction/outcome covariance.
        bins: All reliability bins, empty ones included.
    """

    n_samples: int
    brier_score: float
    log_loss: float
    accuracy: float
    reliability: float
    resolution: float
    uncertainty: float
    within_bin_variance: float
    within_bin_covariance: float
    bins: tuple[ReliabilityBin, ...]

    @property
    def flagged_bins(self) -> list[ReliabilityBin]:
        """Bins flagged as miscalibrated."""
        return [b for b in self.bins if b.flagged]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "n_samples": self.n_samples,
            "brier_score": self.brier_score,
            "log_loss": self.log_loss,
            "accuracy": self.accuracy,
            "reliability": self.reliability,
            "resolution": self.resolution,
            "uncertainty": self.uncertainty,
            "within_bin_variance": self.within_bin_variance,
            "within_bin_covariance": self.within_bin_covariance,
            "bins": [b.to_dict() for b in self.bins],
            "flagged_bins": [b.index for b in self.flagged_bins],
        }


def bin_index(p: float, n_bins: int) -> int:
    """Bin for a probability. 1.0 falls in the last bin."""
    return min(int(p * n_bins), n_bins - 1)


def _check_inputs(predictions: Sequence[float], outcomes: Sequence[bool]) -> None:
    if len(predictions) != len(outcomes):
        raise ValueError(
            "predictions and outcomes must have same length "
            f"(got {len(predictions)} and {len(outcomes)})"
        )
    for p in predictions:
        # NaN fails both comparisons
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"predictions must be probabilities in [0, 1], got {p}")


def reliability_diagram(
    predictions: Sequence[float],
    outcomes: Sequence[bool],
    n_bins: int = 10,
    z: float = 1.96,
    gap_threshold: float = DEFAULT_GAP_THRESHOLD,
) -> list[ReliabilityBin]:
    """Group predictions into equal-width bins with Wilson intervals.

    Bins are half-open [start, end); the last bin also contains 1.0. Every
    bin is returned, including empty ones (count 0, means 0.0, CI (0, 0),
    never flagged).

    A non-empty bin is flagged when |mean_prediction - mean_outcome| exceeds
    gap_threshold or mean_prediction lies outside the bin's Wilson interval.

    Args:
        predictions: Predicted probabilities in [0, 1].
        outcomes: Binary outcomes.
        n_bins: Number of bins.
        z: Normal quantile for the Wilson interval.
        gap_threshold: Flagging threshold on the prediction/outcome gap.

    Returns:
        List of n_bins ReliabilityBin, ordered by index.

    Raises:
        ValueError: If lengths differ, n_bins < 1, or a prediction is outside [0, 1].
    """
    if n_bins < 1:
        raise ValueError(f"n_bins must be >= 1, got {n_bins}")
    _check_inputs(predictions, outcomes)

    binned_preds: list[list[float]] = [[] for _ in range(n_bins)]
    binned_outcomes: list[list[float]] = [[] for _ in range(n_bins)]
    for p, y in zip(predictions, outcomes, strict=True):
        idx = bin_index(p, n_bins)
        binned_preds[idx].append(p)
        binned_outcomes[idx].append(1.0 if y else 0.0)

    width = 1.0 / n_bins
    bins: list[ReliabilityBin] = []
    for idx in range(n_bins):
        preds = binned_preds[idx]
        outs = binned_outcomes[idx]
        count = len(preds)

        if count == 0:
            bins.append(
                ReliabilityBin(
                    index=idx,
                    range_start=idx * width,
                    range_end=(idx + 1) * width,
                    count=0,
                    mean_prediction=0.0,
                    mean_outcome=0.0,
                    wilson_ci=(0.0, 0.0),
                    flagged=False,
                )
            )
            continue

        mean_pred = sum(preds) / count
        mean_out = sum(outs) / count
        variance = sum((p - mean_pred) ** 2 for p in preds) / count
        covariance = (
            sum((p - mean_pred) * (o - mean_out) for p, o in zip(preds, outs, strict=True))
            / count
        )
        ci = wilson_interval(int(sum(outs)), count, z)
        flagged = abs(mean_pred - mean_out) > gap_threshold or not ci[0] <= mean_pred <= ci[1]

        bins.append(
            ReliabilityBin(
                index=idx,
                range_start=idx * width,
                range_end=(idx + 1) * width,
                count=count,
                mean_prediction=mean_pred,
                mean_outcome=mean_out,
                wilson_ci=ci,
                flagged=flagged,
                prediction_variance=variance,
                prediction_outcome_covariance=covariance,
            )
        )

    return bins


def decompose_brier(
    bins: Sequence[ReliabilityBin],
    n_samples: int,
    base_rate: float,
) -> Decomposition:
    """Murphy decomposition of the Brier score from reliability bins.

    Args:
        bins: Bins from reliability_diagram.
        n_samples: Total sample count (sum of bin counts).
        base_rate: Overall positive rate.

    Returns:
        Decomposition. All terms are 0.0 when n_samples == 0.
    """
    if n_samples == 0:
        return Decomposition(0.0, 0.0, 0.0, 0.0, 0.0)

    reliability = 0.0
    resolution = 0.0
    within_var = 0.0
    within_cov = 0.0
    for b in bins:
        if b.count == 0:
            continue
        weight = b.count / n_samples
        reliability += weight * (b.mean_prediction - b.mean_outcome) ** 2
        resolution += weight * (b.mean_outcome - base_rate) ** 2
        within_var += weight * b.prediction_variance
        within_cov += weight * b.prediction_outcome_covariance

    return Decomposition(
        reliability=reliability,
        resolution=resolution,
        uncertainty=base_rate * (1 - base_rate),
        within_bin_variance=within_var,
        within_bin_covariance=within_cov,
    )


def evaluate(
    predictions: Sequence[float],
    outcomes: Sequence[bool],
    n_bins: int = 10,
    z: float = 1.96,
    *,
    gap_threshold: float = DEFAULT_GAP_THRESHOLD,
) -> EvalResult:
    """Score a set of probability forecasts against matured outcomes.

    Args:
        predictions: Predicted (typically calibrated) probabilities in [0, 1].
        outcomes: Binary outcomes.
        n_bins: Number of reliability bins.
        z: Normal quantile for Wilson intervals.
        gap_threshold: Flagging threshold on the prediction/outcome gap.

    Returns:
        EvalResult with metrics, decomposition and all bins.

    Raises:
        ValueError: If input is empty, lengths differ, or predictions are
            not probabilities.
    """
    if len(predictions) == 0:
        raise ValueError("Cannot evaluate an empty prediction set")

    bins = reliability_diagram(predictions, outcomes, n_bins, z, gap_threshold)
    n = len(predictions)
    base_rate = sum(1 for y in outcomes if y) / n
    decomposition = decompose_brier(bins, n, base_rate)

    result = EvalResult(
        n_samples=n,
        brier_score=brier_score(predictions, outcomes),
        log_loss=log_loss(predictions, outcomes),
        accuracy=accuracy(predictions, outcomes),
        reliability=decomposition.reliability,
        resolution=decomposition.resolution,
        uncertainty=decomposition.uncertainty,
        within_bin_variance=decomposition.within_bin_variance,
        within_bin_covariance=decomposition.within_bin_covariance,
        bins=tuple(bins),
    )

    drift = result.brier_score - decomposition.reconstructed_brier()
    if not math.isclose(drift, 0.0, abs_tol=1e-9):
        logger.warning(f"Brier decomposition residual {drift:.3e} exceeds tolerance")
    if result.flagged_bins:
        logger.info(
            f"{len(result.flagged_bins)} of {n_bins} reliability bins flagged: "
            f"{[b.index for b in result.flagged_bins]}"
        )

    return result


def validate_calibration(
    calibrated: Sequence[float],
    outcomes: Sequence[bool],
    n_bins: int = 10,
) -> dict[str, float]:
    """Brier score and its decomposition for calibrated probabilities.

    Returns:
        Dictionary with brier_score and the decomposition terms.
    """
    result = evaluate(calibrated, outcomes, n_bins)
    return {
        "brier_score": result.brier_score,
        "reliability": result.reliability,
        "resolution": result.resolution,
        "uncertainty": result.uncertainty,
        "within_bin_variance": result.within_bin_variance,
        "within_bin_covariance": result.within_bin_covariance,
    }
