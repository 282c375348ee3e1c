"""
Feature normalization.

Maps raw, possibly malformed market signals onto [0, 1]. Normalization is a
total function: malformed upstream telemetry never interrupts scoring, it is
replaced by the midpoint of the feature's range.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from binforecast.contracts import FeatureVector, RawMarketSignals, coerce_float
from binforecast.features.schema import FEATURE_ORDER, RAW_DEFAULTS, get_feature_range

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


def normalize_feature(feature_name: str, raw_value: Any) -> float:
    """Normalize a raw feature value to [0, 1].

    Applies ``(value - min) / (max - min)`` and clamps the result. Missing,
    non-numeric, NaN or infinite values are replaced by the range midpoint.

    Args:
        feature_name: Canonical feature name (see FEATURE_ORDER).
        raw_value: Raw value; strings are coerced.

    Returns:
        Normalized value in [0, 1].

    Raises:
        ValueError: If feature_name is unknown.
    """
    feature_range = get_feature_range(feature_name)

    value = math.nan if raw_value is None else coerce_float(raw_value)
    if not math.isfinite(value):
        logger.debug("Substituting midpoint for malformed value", extra={"feature": feature_name})
        value = feature_range.midpoint

    normalized = (value - feature_range.min) / feature_range.width
    return max(0.0, min(1.0, normalized))


def denormalize_feature(feature_name: str, normalized_value: float) -> float:
    """Map a normalized value back to the raw range (diagnostics only).

    Exact affine inverse of the unclamped normalization.
    """
    feature_range = get_feature_range(feature_name)
    return normalized_value * feature_range.width + feature_range.min


def create_feature_vector(
    raw_data: Mapping[str, Any] | RawMarketSignals | None = None,
    **overrides: Any,
) -> FeatureVector:
    """Create a normalized feature vector from raw named inputs.

    Absent (or None) fields take their neutral default from RAW_DEFAULTS;
    present-but-malformed fields are normalized to the range midpoint.

    Args:
        raw_data: Raw signals keyed by camelCase alias (``oddsMid``) or
            canonical name (``odds_mid``).
        **overrides: Additional raw fields, merged over raw_data.

    Returns:
        FeatureVector with every field in [0, 1].
    """
    if isinstance(raw_data, RawMarketSignals):
        signals = raw_data
        if overrides:
            signals = RawMarketSignals.model_validate(
                {**signals.model_dump(exclude_none=True), **overrides}
            )
    else:
        signals = RawMarketSignals.model_validate({**(raw_data or {}), **overrides})

    values: dict[str, float] = {}
    for name in FEATURE_ORDER:
        raw = getattr(signals, name)
        if raw is None:
            raw = RAW_DEFAULTS[name]
        values[name] = normalize_feature(name, raw)

    return FeatureVector(**values)
