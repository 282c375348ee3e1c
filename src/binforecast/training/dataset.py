"""
Labeled dataset loading.

Reads matured predictions from JSONL. Each line is either a serialized
LabeledDataPoint (with a nested, already-normalized ``features`` object) or
a flat row of raw market signals plus ``label``/``timestamp``/``sourceId``/
``maturityDate``, in which case the raw signals go through the normalizer.
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import TYPE_CHECKING, Any

import orjson

from binforecast.contracts import LabeledDataPoint
from binforecast.features.normalizer import create_feature_vector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from binforecast.contracts import FeatureVector

logger = logging.getLogger(__name__)

# Non-feature keys of a flat row (both alias and field names)
RECORD_FIELDS = frozenset(
    {"label", "timestamp", "sourceId", "source_id", "maturityDate", "maturity_date"}
)


def row_to_data_point(row: dict[str, Any]) -> LabeledDataPoint:
    """Build a LabeledDataPoint from a JSON row.

    Raises:
        pydantic.ValidationError: If record fields are missing or invalid.
    """
    if "features" in row:
        return LabeledDataPoint.model_validate(row)

    raw_signals = {k: v for k, v in row.items() if k not in RECORD_FIELDS}
    record = {k: v for k, v in row.items() if k in RECORD_FIELDS}
    return LabeledDataPoint.model_validate(
        {**record, "features": create_feature_vector(raw_signals)}
    )


def load_labeled_jsonl(input_path: Path) -> list[LabeledDataPoint]:
    """Load labeled data points from a JSONL file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        orjson.JSONDecodeError: If a line is not valid JSON.
        pydantic.ValidationError: If a record is invalid.
    """
    if not input_path.exists():
        raise FileNotFoundError(f"Dataset file not found: {input_path}")

    points: list[LabeledDataPoint] = []
    with input_path.open("rb") as f:
        for line in f:
            if line.strip():
                points.append(row_to_data_point(orjson.loads(line)))

    logger.info(f"Loaded {len(points)} labeled data points from {input_path}")
    return points


def save_labeled_jsonl(points: Sequence[LabeledDataPoint], output_path: Path) -> None:
    """Write labeled data points as JSONL."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        for point in points:
            f.write(point.to_json())
            f.write(b"\n")


def split_xy(points: Sequence[LabeledDataPoint]) -> tuple[list[FeatureVector], list[bool]]:
    """Separate feature vectors and labels."""
    return [p.features for p in points], [p.label for p in points]


def time_split(
    points: Sequence[LabeledDataPoint],
    val_ratio: float,
) -> tuple[list[LabeledDataPoint], list[LabeledDataPoint]]:
    """Split by prediction timestamp into (train, val), oldest first.

    Raises:
        ValueError: If val_ratio is not in (0, 1).
    """
    if not 0 < val_ratio < 1:
        raise ValueError(f"val_ratio must be in (0, 1), got {val_ratio}")

    ordered = sorted(points, key=lambda p: p.timestamp)
    split_idx = int(len(ordered) * (1 - val_ratio))
    return ordered[:split_idx], ordered[split_idx:]
