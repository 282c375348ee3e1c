"""
Feature schema and normalization.

Provides:
- Canonical feature ordering and normalization ranges
- Total normalization of raw market signals onto [0, 1]
- Feature vector construction with neutral defaults
"""

from binforecast.features.normalizer import (
    create_feature_vector,
    denormalize_feature,
    normalize_feature,
)
from binforecast.features.schema import (
    FEATURE_ORDER,
    FEATURE_RANGES,
    FEATURE_SCHEMA_VERSION,
    RAW_DEFAULTS,
    FeatureRange,
    FeatureSchemaError,
    compute_feature_hash,
    validate_feature_names,
)

__all__ = [
    "FEATURE_ORDER",
    "FEATURE_RANGES",
    "FEATURE_SCHEMA_VERSION",
    "RAW_DEFAULTS",
    "FeatureRange",
    "FeatureSchemaError",
    "compute_feature_hash",
    "create_feature_vector",
    "denormalize_feature",
    "normalize_feature",
    "validate_feature_names",
]
