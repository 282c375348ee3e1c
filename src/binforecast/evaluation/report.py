"""
Evaluation report for a saved (model, scaling) pair.

Produces the JSON document written by the eval CLI and an SVG reliability
diagram. Report keys are camelCase to match the model artifacts.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import TYPE_CHECKING, Any

import orjson

from binforecast.calibration.platt import calibrate_probabilities
from binforecast.evaluation.reliability import EvalConfig, evaluate
from binforecast.training.predictor import predict_proba, validate_model

if TYPE_CHECKING:
    from collections.abc import Sequence

    from binforecast.calibration.platt import PlattScaling
    from binforecast.contracts import FeatureVector
    from binforecast.evaluation.reliability import ReliabilityBin
    from binforecast.training.trainer import LogisticModel

logger = logging.getLogger(__name__)

# SVG geometry
SVG_WIDTH = 600
SVG_HEIGHT = 400
SVG_MARGIN = 50


def _bin_to_dict(b: ReliabilityBin) -> dict[str, Any]:
    return {
        "bin": b.index,
        "binStart": b.range_start,
        "binEnd": b.range_end,
        "count": b.count,
        "meanPrediction": b.mean_prediction,
        "meanOutcome": b.mean_outcome,
        "wilsonCI": list(b.wilson_ci),
        "flagged": b.flagged,
    }


def build_eval_report(
    model_id: str,
    model: LogisticModel,
    scaling: PlattScaling,
    features: Sequence[FeatureVector],
    labels: Sequence[bool],
    config: EvalConfig | None = None,
) -> dict[str, Any]:
    """Evaluate a model and its calibration on labeled data.

    Raw model metrics (log loss, accuracy) come from the uncalibrated
    probabilities; Brier score and its decomposition come from the
    calibrated ones.

    Args:
        model_id: Caller-supplied model version.
        model: Trained logistic model.
        scaling: Fitted Platt scaling for the model.
        features: Feature vectors.
        labels: Matured outcomes.
        config: Evaluation settings. Uses defaults if not provided.

    Returns:
        JSON-serializable report dictionary.

    Raises:
        ValueError: If fewer than config.min_samples samples are given.
    """
    if config is None:
        config = EvalConfig()

    if len(features) < config.min_samples:
        raise ValueError(
            f"Insufficient data: {len(features)} samples (minimum: {config.min_samples})"
        )

    raw = predict_proba(model, features)
    calibrated = calibrate_probabilities(raw, scaling)
    model_metrics = validate_model(model, features, labels)
    result = evaluate(
        calibrated, labels, config.n_bins, config.z, gap_threshold=config.gap_threshold
    )

    logger.info(
        f"Evaluated {model_id} on {result.n_samples} samples: "
        f"brier={result.brier_score:.6f} log_loss={model_metrics.log_loss:.6f} "
        f"accuracy={model_metrics.accuracy:.3f}"
    )

    return {
        "modelId": model_id,
        "evaluationDate": datetime.now(UTC).isoformat(),
        "samples": result.n_samples,
        "metrics": {
            "brierScore": result.brier_score,
            "logLoss": model_metrics.log_loss,
            "accuracy": model_metrics.accuracy,
            "reliability": result.reliability,
            "resolution": result.resolution,
            "uncertainty": result.uncertainty,
            "withinBinVariance": result.within_bin_variance,
            "withinBinCovariance": result.within_bin_covariance,
        },
        "calibration": {
            "originalBrier": scaling.metadata.original_brier_score,
            "calibratedBrier": scaling.metadata.calibrated_brier_score,
            "improvement": scaling.metadata.improvement,
        },
        "reliabilityBins": [_bin_to_dict(b) for b in result.bins],
        "flaggedBins": [b.index for b in result.flagged_bins],
        "modelMetadata": {
            "trainedAt": model.metadata.trained_at.isoformat(),
            "trainingSamples": model.metadata.training_samples,
            "convergenceIterations": model.metadata.convergence_iterations,
        },
        "plattMetadata": {
            "trainedAt": scaling.metadata.trained_at.isoformat(),
            "holdoutSamples": scaling.metadata.holdout_samples,
            "originalBrierScore": scaling.metadata.original_brier_score,
            "calibratedBrierScore": scaling.metadata.calibrated_brier_score,
            "improvement": scaling.metadata.improvement,
        },
    }


def render_reliability_svg(bins: Sequence[ReliabilityBin]) -> str:
    """Render a reliability diagram as SVG.

    Bars show the observed outcome rate per bin, an orange tick the mean
    prediction, and a vertical line the Wilson interval. The dashed diagonal
    marks perfect calibration. Empty bins are left blank.
    """
    width, height, margin = SVG_WIDTH, SVG_HEIGHT, SVG_MARGIN
    plot_width = width - 2 * margin
    plot_height = height - 2 * margin
    baseline = height - margin

    def y_of(value: float) -> float:
        return baseline - value * plot_height

    parts = [
        f'<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">',
        f'<rect width="{width}" height="{height}" fill="white"/>',
        f'<line x1="{margin}" y1="{baseline}" x2="{width - margin}" y2="{baseline}" '
        'stroke="black" stroke-width="2"/>',
        f'<line x1="{margin}" y1="{margin}" x2="{margin}" y2="{baseline}" '
        'stroke="black" stroke-width="2"/>',
        f'<line x1="{margin}" y1="{baseline}" x2="{width - margin}" y2="{margin}" '
        'stroke="red" stroke-width="2" stroke-dasharray="5,5"/>',
    ]

    bin_width = plot_width / len(bins) if bins else plot_width
    for b in bins:
        if b.count == 0:
            continue
        x = margin + b.index * bin_width
        center = x + bin_width / 2
        bar_top = y_of(b.mean_outcome)
        pred_y = y_of(b.mean_prediction)
        ci_low, ci_high = b.wilson_ci
        fill = "indianred" if b.flagged else "steelblue"

        parts.append(
            f'<rect x="{x:.2f}" y="{bar_top:.2f}" width="{bin_width - 2:.2f}" '
            f'height="{baseline - bar_top:.2f}" fill="{fill}" opacity="0.7"/>'
        )
        parts.append(
            f'<line x1="{center - bin_width / 4:.2f}" y1="{pred_y:.2f}" '
            f'x2="{center + bin_width / 4:.2f}" y2="{pred_y:.2f}" '
            'stroke="orange" stroke-width="3"/>'
        )
        parts.append(
            f'<line x1="{center:.2f}" y1="{y_of(ci_high):.2f}" '
            f'x2="{center:.2f}" y2="{y_of(ci_low):.2f}" stroke="black" stroke-width="1"/>'
        )

    parts.append(
        f'<text x="{width / 2}" y="{height - 10}" text-anchor="middle" '
        'font-family="Arial" font-size="14">Predicted Probability</text>'
    )
    parts.append(
        f'<text x="20" y="{height / 2}" text-anchor="middle" font-family="Arial" '
        f'font-size="14" transform="rotate(-90, 20, {height / 2})">Actual Frequency</text>'
    )
    parts.append("</svg>")
    return "".join(parts)


def save_eval_report(report: dict[str, Any], output_path: Path) -> None:
    """Save evaluation report to JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        f.write(orjson.dumps(report, option=orjson.OPT_INDENT_2))
