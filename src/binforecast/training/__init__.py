"""Training pipeline module.

Provides:
- Full-batch gradient-descent logistic regression
- Stateless prediction and feature importance
- Model artifact serialization
- Labeled dataset loading
"""

from binforecast.training.artifact import (
    artifact_paths,
    dumps_model,
    load_model,
    load_model_pair,
    loads_model,
    save_model,
)
from binforecast.training.dataset import load_labeled_jsonl, split_xy, time_split
from binforecast.training.predictor import (
    ModelValidation,
    get_feature_importance,
    predict,
    predict_proba,
    validate_model,
)
from binforecast.training.trainer import (
    InvalidInputError,
    LogisticModel,
    ModelMetadata,
    TrainingConfig,
    TrainingStep,
    fit,
)

__all__ = [  # noqa: RUF022 - grouped by category for maintainability
    # Trainer
    "InvalidInputError",
    "LogisticModel",
    "ModelMetadata",
    "TrainingConfig",
    "TrainingStep",
    "fit",
    # Predictor
    "ModelValidation",
    "get_feature_importance",
    "predict",
    "predict_proba",
    "validate_model",
    # Artifact
    "artifact_paths",
    "dumps_model",
    "load_model",
    "load_model_pair",
    "loads_model",
    "save_model",
    # Dataset
    "load_labeled_jsonl",
    "split_xy",
    "time_split",
]
