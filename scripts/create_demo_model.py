#!/usr/bin/env python3
"""
Create a demo model from synthetic market signals.

Generates raw signals whose YES probability rises with odds, sentiment,
liquidity and positive funding and falls with volatility, trains the
logistic model and Platt scaling on them, and saves both artifacts. The
synthetic dataset can optionally be written as JSONL for the eval CLI.

Usage:
    python scripts/create_demo_model.py --output models/
    python scripts/create_demo_model.py --output models/ --model-id demo \
        --samples 500 --seed 7 --dataset-out data/demo.jsonl
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import numpy as np

from binforecast.calibration.artifact import save_platt_scaling
from binforecast.calibration.platt import PlattConfig, fit_platt_scaling
from binforecast.contracts import LabeledDataPoint
from binforecast.features.normalizer import create_feature_vector
from binforecast.training.artifact import artifact_paths, save_model
from binforecast.training.dataset import save_labeled_jsonl, split_xy
from binforecast.training.predictor import predict_proba
from binforecast.training.trainer import TrainingConfig, fit

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Demo training settings: faster steps and stronger shrinkage than the defaults
DEMO_TRAINING = {
    "learning_rate": 0.05,
    "max_iterations": 100,
    "convergence_threshold": 1e-8,
    "regularization": 0.1,
}


def generate_raw_signals(rng: np.random.Generator) -> dict[str, float]:
    """Draw one set of raw market signals."""
    return {
        "oddsMid": rng.uniform(0.1, 0.9),
        "oddsSpread": rng.uniform(0.0, 0.1),
        "liquidity": rng.uniform(0.0, 1_000_000.0),
        "funding8h": rng.uniform(-0.01, 0.01),
        "funding1d": rng.uniform(-0.05, 0.05),
        "fgi": rng.uniform(0.0, 100.0),
        "pnl30d": rng.uniform(-0.2, 0.2),
        "vol30d": rng.uniform(0.0, 1.0),
    }


def yes_probability(raw: dict[str, float]) -> float:
    """Ground-truth YES probability for a set of raw signals, in [0.05, 0.95]."""
    odds_effect = (raw["oddsMid"] - 0.1) / 0.8 * 0.4
    fgi_effect = (raw["fgi"] / 100) ** 0.7 * 0.3
    liquidity_effect = (raw["liquidity"] / 1_000_000) ** 0.5 * 0.1
    funding_effect = max(0.0, raw["funding8h"] * 10) * 0.1
    vol_effect = -raw["vol30d"] * 0.1

    p = odds_effect + fgi_effect + liquidity_effect + funding_effect + vol_effect
    return max(0.05, min(0.95, p))


def create_demo_data(n_samples: int, rng: np.random.Generator) -> list[LabeledDataPoint]:
    """Synthetic labeled data points, one day apart."""
    start = datetime(2024, 1, 1, tzinfo=UTC)
    points: list[LabeledDataPoint] = []
    for i in range(n_samples):
        raw = generate_raw_signals(rng)
        timestamp = start + timedelta(days=i)
        points.append(
            LabeledDataPoint(
                features=create_feature_vector(raw),
                label=bool(rng.random() < yes_probability(raw)),
                timestamp=timestamp,
                source_id=f"demo-{i:05d}",
                maturity_date=timestamp + timedelta(days=30),
            )
        )
    return points


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Create a demo logistic model and Platt scaling from synthetic data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("models"),
        help="Output directory for model artifacts (default: models)",
    )
    parser.add_argument(
        "--model-id",
        type=str,
        default="v1",
        help="Model version (default: v1)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of synthetic samples (default: 500)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed (default: 42)",
    )
    parser.add_argument(
        "--dataset-out",
        type=Path,
        default=None,
        help="Also write the synthetic dataset as JSONL",
    )

    args = parser.parse_args(argv)

    if args.samples < 10:
        logger.error(f"--samples must be >= 10 for Platt scaling, got {args.samples}")
        return 1

    rng = np.random.default_rng(args.seed)
    points = create_demo_data(args.samples, rng)
    logger.info(f"Generated {len(points)} training samples")

    features, labels = split_xy(points)
    model = fit(features, labels, TrainingConfig(seed=args.seed, **DEMO_TRAINING))

    raw = predict_proba(model, features)
    scaling = fit_platt_scaling(raw, labels, 0.2, config=PlattConfig(), rng=rng)

    model_path, platt_path = artifact_paths(args.output, args.model_id)
    save_model(model, model_path)
    save_platt_scaling(scaling, platt_path)
    if args.dataset_out is not None:
        save_labeled_jsonl(points, args.dataset_out)
        logger.info(f"Dataset saved to {args.dataset_out}")

    logger.info("Demo model creation complete!")
    logger.info(f"  Model: {model_path}")
    logger.info(f"  Platt scaling: {platt_path}")
    logger.info(f"  Training samples: {model.metadata.training_samples}")
    logger.info(f"  Convergence iterations: {model.metadata.convergence_iterations}")
    logger.info(f"  Final accuracy: {model.final_accuracy:.3f}")
    logger.info(f"  Calibration improvement: {scaling.metadata.improvement:.6f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
