#!/usr/bin/env python3
"""
CLI script for training the forecasting model.

Trains the logistic regression baseline on the older part of a labeled
dataset, fits Platt scaling on the model's raw probabilities for the newer
part, and saves both artifacts under one model version.

Usage:
    python scripts/train_model.py --data data/labeled.jsonl --output models/ --model-id v1
    python scripts/train_model.py --data data/labeled.jsonl --output models/ --model-id v2 \
        --learning-rate 0.05 --max-iterations 100 --regularization 0.1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson
from pydantic import ValidationError

from binforecast.calibration.artifact import save_platt_scaling
from binforecast.calibration.platt import InsufficientDataError, PlattConfig, fit_platt_scaling
from binforecast.features.schema import compute_feature_hash
from binforecast.training.artifact import artifact_paths, save_model
from binforecast.training.dataset import load_labeled_jsonl, split_xy, time_split
from binforecast.training.predictor import get_feature_importance, predict_proba, validate_model
from binforecast.training.trainer import InvalidInputError, TrainingConfig, fit

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Train logistic model and Platt scaling from labeled data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
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
        required=True,
        help="Output directory for model artifacts",
    )
    parser.add_argument(
        "--model-id",
        type=str,
        required=True,
        help="Model version; artifacts are saved as <id>.json and <id>-platt.json",
    )

    # Training options
    parser.add_argument(
        "--learning-rate",
        type=float,
        default=0.01,
        help="Gradient step size (default: 0.01)",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=50,
        help="Max gradient descent iterations (default: 50)",
    )
    parser.add_argument(
        "--convergence-threshold",
        type=float,
        default=1e-6,
        help="Loss change below which training stops (default: 1e-6)",
    )
    parser.add_argument(
        "--regularization",
        type=float,
        default=0.01,
        help="L2 penalty on coefficients (default: 0.01)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for weight init and Platt shuffle (default: 42)",
    )

    # Calibration options
    parser.add_argument(
        "--val-ratio",
        type=float,
        default=0.2,
        help="Newest fraction of data reserved for calibration (default: 0.2)",
    )
    parser.add_argument(
        "--holdout-ratio",
        type=float,
        default=0.2,
        help="Platt holdout fraction of the calibration set (default: 0.2)",
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
        points = load_labeled_jsonl(args.data)
        train_points, cal_points = time_split(points, args.val_ratio)
        logger.info(
            f"Time-based split: {len(train_points)} train, {len(cal_points)} calibration "
            f"(val_ratio={args.val_ratio})"
        )

        config = TrainingConfig(
            learning_rate=args.learning_rate,
            max_iterations=args.max_iterations,
            convergence_threshold=args.convergence_threshold,
            regularization=args.regularization,
            seed=args.seed,
        )
        X_train, y_train = split_xy(train_points)
        model = fit(X_train, y_train, config)

        X_cal, y_cal = split_xy(cal_points)
        raw = predict_proba(model, X_cal)
        scaling = fit_platt_scaling(
            raw,
            y_cal,
            args.holdout_ratio,
            config=PlattConfig(seed=args.seed),
        )
        validation = validate_model(model, X_cal, y_cal)
    except (FileNotFoundError, orjson.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to load dataset: {e}")
        return 1
    except (InvalidInputError, InsufficientDataError, ValueError) as e:
        logger.error(f"Training failed: {e}")
        return 1

    model_path, platt_path = artifact_paths(args.output, args.model_id)
    save_model(model, model_path)
    save_platt_scaling(scaling, platt_path)

    logger.info(f"Calibration-set metrics: {validation.to_dict()}")
    logger.info("Feature importance:")
    for name, weight in sorted(
        get_feature_importance(model).items(), key=lambda kv: kv[1], reverse=True
    ):
        logger.info(f"  {name}: {weight:.4f}")

    logger.info(f"Training complete. Artifacts saved to {args.output}")
    logger.info(f"  Feature hash: {compute_feature_hash()}")
    logger.info(f"  Model: {model_path}")
    logger.info(f"  Platt scaling: {platt_path}")
    logger.info(f"  Convergence iterations: {model.metadata.convergence_iterations}")
    logger.info(f"  Calibration improvement: {scaling.metadata.improvement:.6f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
