"""
Platt scaling artifact storage.

Persisted layout (camelCase keys, shared with the model file):

    {"a": ..., "b": ...,
     "metadata": {"trainedAt": ISO-8601, "holdoutSamples", "originalBrierScore",
                  "calibratedBrierScore", "improvement"}}
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

import orjson

from binforecast.calibration.platt import PlattMetadata, PlattScaling


def platt_to_dict(scaling: PlattScaling) -> dict[str, Any]:
    """Serialize to the persisted dictionary layout."""
    metadata = scaling.metadata
    return {
        "a": scaling.a,
        "b": scaling.b,
        "metadata": {
            "trainedAt": metadata.trained_at.isoformat(),
            "holdoutSamples": metadata.holdout_samples,
            "originalBrierScore": metadata.original_brier_score,
            "calibratedBrierScore": metadata.calibrated_brier_score,
            "improvement": metadata.improvement,
        },
    }


def platt_from_dict(data: dict[str, Any]) -> PlattScaling:
    """Deserialize from the persisted dictionary layout."""
    metadata = data["metadata"]
    return PlattScaling(
        a=float(data["a"]),
        b=float(data["b"]),
        metadata=PlattMetadata(
            trained_at=datetime.fromisoformat(metadata["trainedAt"]),
            holdout_samples=int(metadata["holdoutSamples"]),
            original_brier_score=float(metadata["originalBrierScore"]),
            calibrated_brier_score=float(metadata["calibratedBrierScore"]),
            improvement=float(metadata["improvement"]),
        ),
    )


def dumps_platt_scaling(scaling: PlattScaling) -> str:
    """Serialize a scaling to an indented JSON string."""
    return orjson.dumps(platt_to_dict(scaling), option=orjson.OPT_INDENT_2).decode()


def loads_platt_scaling(data: bytes | str) -> PlattScaling:
    """Parse a Platt scaling JSON document.

    Raises:
        orjson.JSONDecodeError: If the document is not valid JSON.
    """
    return platt_from_dict(orjson.loads(data))


def save_platt_scaling(scaling: PlattScaling, output_path: Path) -> None:
    """Save Platt scaling artifact to JSON file.

    Args:
        scaling: Fitted scaling to save.
        output_path: Path to output file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        f.write(orjson.dumps(platt_to_dict(scaling), option=orjson.OPT_INDENT_2))


def load_platt_scaling(input_path: Path) -> PlattScaling:
    """Load Platt scaling artifact from JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        orjson.JSONDecodeError: If file is not valid JSON.
    """
    if not input_path.exists():
        raise FileNotFoundError(f"Platt scaling artifact not found: {input_path}")

    with input_path.open("rb") as f:
        return loads_platt_scaling(f.read())
