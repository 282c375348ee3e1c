#!/usr/bin/env python3
"""
CLI script for evaluating a saved model version.

Loads <model-id>.json and <model-id>-platt.json, scores the calibrated
probabilities on labeled data, and writes:
    <output>/<model-id>-eval.json         metrics, decomposition, bins
    <output>/<model-id>-reliability.svg   reliability diagram

Usage:
    python scripts/eval_model.py --model-id v1 --models models/ --data data/labeled.jsonl
    python scripts/eval_model.py --model-id v1 --models models/ --data data/labeled.jsonl \
        --output eval/ --n-bins 10 --min-samples 50
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson
from pydantic import ValidationError

from binforecast.calibration.platt import calibrate_probabilities
from binforecast.evaluation.reliability import EvalConfig, reliability_diagram
from binforecast.evaluation.report import (
    build_eval_report,
    render_reliability_svg,
    save_eval_report,
)
from binforecast.features.schema import FeatureSchemaError
from binforecast.training.artifact import load_model_pair
from binforecast.training.dataset import load_labeled_jsonl, split_xy
from binforecast.training.predictor import predict_proba

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Evaluate a trained model and its Platt scaling on labeled data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--model-id",
        type=str,
        required=True,
        help="Model version to evaluate",
    )
    parser.add_argument(
        "--models",
        type=Path,
        required=True,
        help="Directory holding <id>.json and <id>-platt.json",
    )
    parser.add_argument(
        "--data",
        type=Path,
        required=True,
        help="Path to labeled data file (.jsonl)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("eval"),
        help="Output directory (default: eval)",
    )
    parser.add_argument(
        "--n-bins",
        type=int,
        default=10,
        help="Reliability bins (default: 10)",
    )
    parser.add_argument(
        "--z",
        type=float,
        default=1.96,
        help="Normal quantile for Wilson intervals (default: 1.96)",
    )
    parser.add_argument(
        "--gap-threshold",
        type=float,
        default=0.1,
        help="Prediction/outcome gap that flags a bin (default: 0.1)",
    )
    parser.add_argument(
        "--min-samples",
        type=int,
        default=50,
        help="Minimum labeled samples required (default: 50)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = EvalConfig(
            n_bins=args.n_bins,
            z=args.z,
            gap_threshold=args.gap_threshold,
            min_samples=args.min_samples,
        )
        model, scaling = load_model_pair(args.models, args.model_id)
        points = load_labeled_jsonl(args.data)
    except (FileNotFoundError, orjson.JSONDecodeError, ValidationError, FeatureSchemaError) as e:
        logger.error(f"Failed to load inputs: {e}")
        return 1
    except (KeyError, ValueError) as e:
        logger.error(f"Invalid input: {e}")
        return 1

    features, labels = split_xy(points)
    try:
        report = build_eval_report(args.model_id, model, scaling, features, labels, config)
    except ValueError as e:
        logger.error(f"Evaluation failed: {e}")
        return 1

    calibrated = calibrate_probabilities(predict_proba(model, features), scaling)
    bins = reliability_diagram(calibrated, labels, config.n_bins, config.z, config.gap_threshold)

    report_path = args.output / f"{args.model_id}-eval.json"
    svg_path = args.output / f"{args.model_id}-reliability.svg"
    save_eval_report(report, report_path)
    svg_path.write_text(render_reliability_svg(bins), encoding="utf-8")

    metrics = report["metrics"]
    logger.info("Evaluation complete:")
    logger.info(f"  Samples: {report['samples']}")
    logger.info(f"  Brier Score: {metrics['brierScore']:.6f}")
    logger.info(f"  Log Loss: {metrics['logLoss']:.6f}")
    logger.info(f"  Accuracy: {metrics['accuracy']:.3f}")
    logger.info(
        f"  Reliability/Resolution/Uncertainty: {metrics['reliability']:.6f} / "
        f"{metrics['resolution']:.6f} / {metrics['uncertainty']:.6f}"
    )
    logger.info(f"  Calibration Improvement: {report['calibration']['improvement']:.6f}")
    if report["flaggedBins"]:
        logger.warning(f"  Flagged bins: {report['flaggedBins']}")
    logger.info(f"  Results saved to: {report_path}")
    logger.info(f"  Reliability diagram: {svg_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
