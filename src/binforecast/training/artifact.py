"""
Model artifact serialization.

The persisted layout uses camelCase keys so artifacts stay interchangeable
with other consumers of the same model files:

    {"coefficients": [...8], "bias": ..., "featureNames": [...8],
     "trainingHistory": [{"iteration", "loss", "accuracy"}, ...],
     "metadata": {"trainedAt": ISO-8601, "trainingSamples", "convergenceIterations"}}

Loading checks only the feature ordering and what is needed to rebuild the
model; malformed JSON propagates to the caller.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import TYPE_CHECKING, Any

import orjson

from binforecast.features.schema import FEATURE_ORDER, validate_feature_names
from binforecast.training.trainer import LogisticModel, ModelMetadata, TrainingStep

if TYPE_CHECKING:
    from binforecast.calibration.platt import PlattScaling


def artifact_paths(directory: Path, model_id: str) -> tuple[Path, Path]:
    """Paths of the model and Platt files for a caller-supplied model version.

    Returns:
        Tuple of (``<model_id>.json``, ``<model_id>-platt.json``).
    """
    if not model_id:
        raise ValueError("model_id must be non-empty")
    return directory / f"{model_id}.json", directory / f"{model_id}-platt.json"


def model_to_dict(model: LogisticModel) -> dict[str, Any]:
    """Serialize to the persisted dictionary layout."""
    return {
        "coefficients": list(model.coefficients),
        "bias": model.bias,
        "featureNames": list(model.feature_names),
        "trainingHistory": [
            {"iteration": step.iteration, "loss": step.loss, "accuracy": step.accuracy}
            for step in model.training_history
        ],
        "metadata": {
            "trainedAt": model.metadata.trained_at.isoformat(),
            "trainingSamples": model.metadata.training_samples,
            "convergenceIterations": model.metadata.convergence_iterations,
        },
    }


def model_from_dict(data: dict[str, Any]) -> LogisticModel:
    """Deserialize from the persisted dictionary layout.

    Raises:
        FeatureSchemaError: If featureNames differ from FEATURE_ORDER.
    """
    feature_names = tuple(data.get("featureNames", FEATURE_ORDER))
    validate_feature_names(feature_names)

    metadata = data["metadata"]
    return LogisticModel(
        coefficients=tuple(float(c) for c in data["coefficients"]),
        bias=float(data["bias"]),
        feature_names=feature_names,
        training_history=tuple(
            TrainingStep(
                iteration=int(step["iteration"]),
                loss=float(step["loss"]),
                accuracy=float(step["accuracy"]),
            )
            for step in data.get("trainingHistory", [])
        ),
        metadata=ModelMetadata(
            trained_at=datetime.fromisoformat(metadata["trainedAt"]),
            training_samples=int(metadata["trainingSamples"]),
            convergence_iterations=int(metadata["convergenceIterations"]),
        ),
    )


def dumps_model(model: LogisticModel) -> str:
    """Serialize a model to an indented JSON string."""
    return orjson.dumps(model_to_dict(model), option=orjson.OPT_INDENT_2).decode()


def loads_model(data: bytes | str) -> LogisticModel:
    """Parse a model JSON document.

    Raises:
        orjson.JSONDecodeError: If the document is not valid JSON.
    """
    return model_from_dict(orjson.loads(data))


def save_model(model: LogisticModel, output_path: Path) -> None:
    """Save model artifact to JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        f.write(orjson.dumps(model_to_dict(model), option=orjson.OPT_INDENT_2))


def load_model(input_path: Path) -> LogisticModel:
    """Load model artifact from JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        orjson.JSONDecodeError: If file is not valid JSON.
    """
    if not input_path.exists():
        raise FileNotFoundError(f"Model artifact not found: {input_path}")

    with input_path.open("rb") as f:
        return loads_model(f.read())


def load_model_pair(directory: Path, model_id: str) -> tuple[LogisticModel, PlattScaling]:
    """Load the (model, scaling) pair saved under one model version."""
    from binforecast.calibration.artifact import load_platt_scaling

    model_path, platt_path = artifact_paths(directory, model_id)
    return load_model(model_path), load_platt_scaling(platt_path)
