"""Tests for model artifact serialization."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import orjson
import pytest

from binforecast.calibration.artifact import save_platt_scaling
from binforecast.calibration.platt import PlattMetadata, PlattScaling
from binforecast.features.schema import FEATURE_ORDER, FeatureSchemaError
from binforecast.training.artifact import (
    artifact_paths,
    dumps_model,
    load_model,
    load_model_pair,
    loads_model,
    model_to_dict,
    save_model,
)
from binforecast.training.trainer import LogisticModel, ModelMetadata, TrainingStep


def make_model() -> LogisticModel:
    return LogisticModel(
        coefficients=(0.12, -0.5, 0.0, 1.25, -3.5e-4, 0.9, 0.333, -0.07),
        bias=-0.21,
        metadata=ModelMetadata(
            trained_at=datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=UTC),
            training_samples=321,
            convergence_iterations=2,
        ),
        training_history=(
            TrainingStep(0, 0.69, 0.5),
            TrainingStep(1, 0.61, 0.62),
            TrainingStep(2, 0.6099, 0.63),
        ),
    )


class TestModelSerialization:
    """Tests for the persisted model layout."""

    def test_camel_case_layout(self) -> None:
        data = model_to_dict(make_model())

        assert set(data) == {"coefficients", "bias", "featureNames", "trainingHistory", "metadata"}
        assert set(data["metadata"]) == {"trainedAt", "trainingSamples", "convergenceIterations"}
        assert data["featureNames"] == list(FEATURE_ORDER)
        assert data["trainingHistory"][1] == {"iteration": 1, "loss": 0.61, "accuracy": 0.62}
        assert data["metadata"]["trainedAt"] == "2024-05-06T07:08:09.123456+00:00"

    def test_string_roundtrip(self) -> None:
        model = make_model()
        restored = loads_model(dumps_model(model))

        assert restored == model
        assert isinstance(restored.metadata.trained_at, datetime)

    def test_file_roundtrip(self, tmp_path: Path) -> None:
        model = make_model()
        path = tmp_path / "nested" / "v1.json"
        save_model(model, path)

        assert path.exists()
        assert load_model(path) == model

    def test_output_is_indented_json(self) -> None:
        text = dumps_model(make_model())
        assert text.startswith("{\n  ")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="not found"):
            load_model(tmp_path / "missing.json")

    def test_malformed_json_propagates(self) -> None:
        with pytest.raises(orjson.JSONDecodeError):
            loads_model("{not json")

    def test_mismatched_feature_names_rejected(self) -> None:
        data = model_to_dict(make_model())
        data["featureNames"] = list(reversed(FEATURE_ORDER))
        with pytest.raises(FeatureSchemaError):
            loads_model(orjson.dumps(data))

    def test_missing_history_loads_empty(self) -> None:
        data = model_to_dict(make_model())
        del data["trainingHistory"]
        assert loads_model(orjson.dumps(data)).training_history == ()


class TestArtifactPaths:
    def test_naming(self, tmp_path: Path) -> None:
        model_path, platt_path = artifact_paths(tmp_path, "v3")
        assert model_path == tmp_path / "v3.json"
        assert platt_path == tmp_path / "v3-platt.json"

    def test_empty_model_id_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            artifact_paths(tmp_path, "")

    def test_load_model_pair(self, tmp_path: Path) -> None:
        model = make_model()
        scaling = PlattScaling(
            a=1.1,
            b=-0.05,
            metadata=PlattMetadata(
                trained_at=datetime(2024, 5, 6, tzinfo=UTC),
                holdout_samples=20,
                original_brier_score=0.24,
                calibrated_brier_score=0.22,
                improvement=0.02,
            ),
        )
        model_path, platt_path = artifact_paths(tmp_path, "v1")
        save_model(model, model_path)
        save_platt_scaling(scaling, platt_path)

        loaded_model, loaded_scaling = load_model_pair(tmp_path, "v1")
        assert loaded_model == model
        assert loaded_scaling == scaling

    def test_load_model_pair_missing_platt(self, tmp_path: Path) -> None:
        model_path, _ = artifact_paths(tmp_path, "v1")
        save_model(make_model(), model_path)
        with pytest.raises(FileNotFoundError):
            load_model_pair(tmp_path, "v1")
