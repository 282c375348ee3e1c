"""Feature schema for the forecasting baseline.

Defines the canonical feature ordering shared by training, inference and
persisted artifacts, together with the per-feature normalization ranges and
the neutral defaults applied to absent raw inputs.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

# Feature schema version - increment on breaking changes
FEATURE_SCHEMA_VERSION = "1.0.0"

# Canonical feature order. Coefficients in a LogisticModel follow this order.
FEATURE_ORDER: tuple[str, ...] = (
    "odds_mid",  # Mid-point of bid/ask
    "odds_spread",  # Bid-ask spread as fraction
    "liquidity",  # USD volume
    "funding_8h",
    "funding_1d",
    "fgi",  # Fear & Greed Index
    "pnl30d",
    "vol30d",
)


@dataclass(frozen=True)
class FeatureRange:
    """Affine normalization range for a raw feature.

    Attributes:
        min: Raw value mapped to 0.0.
        max: Raw value mapped to 1.0.
    """

    min: float
    max: float

    @property
    def midpoint(self) -> float:
        """Raw value mapped to 0.5."""
        return (self.min + self.max) / 2

    @property
    def width(self) -> float:
        return self.max - self.min


FEATURE_RANGES: dict[str, FeatureRange] = {
    "odds_mid": FeatureRange(0.1, 0.9),
    "odds_spread": FeatureRange(0.0, 0.2),
    "liquidity": FeatureRange(0.0, 1_000_000.0),
    "funding_8h": FeatureRange(-0.01, 0.01),  # -1% to +1%
    "funding_1d": FeatureRange(-0.05, 0.05),  # -5% to +5%
    "fgi": FeatureRange(0.0, 100.0),
    "pnl30d": FeatureRange(-0.5, 0.5),  # -50% to +50%
    "vol30d": FeatureRange(0.0, 2.0),  # 0% to 200%
}

# Raw input names as supplied by the market-signal source
RAW_FIELD_ALIASES: dict[str, str] = {
    "odds_mid": "oddsMid",
    "odds_spread": "oddsSpread",
    "liquidity": "liquidity",
    "funding_8h": "funding8h",
    "funding_1d": "funding1d",
    "fgi": "fgi",
    "pnl30d": "pnl30d",
    "vol30d": "vol30d",
}

# Neutral raw values used when a field is absent (pre-normalization)
RAW_DEFAULTS: dict[str, float] = {
    "odds_mid": 0.5,
    "odds_spread": 0.05,
    "liquidity": 100_000.0,
    "funding_8h": 0.0,
    "funding_1d": 0.0,
    "fgi": 50.0,
    "pnl30d": 0.0,
    "vol30d": 0.1,
}


class FeatureSchemaError(Exception):
    """Raised when a persisted feature ordering does not match FEATURE_ORDER."""


def get_feature_range(feature_name: str) -> FeatureRange:
    """Look up the normalization range for a feature.

    Raises:
        ValueError: If feature_name is unknown.
    """
    if feature_name not in FEATURE_RANGES:
        raise ValueError(f"Unknown feature: {feature_name}")
    return FEATURE_RANGES[feature_name]


def compute_feature_hash(features: list[str] | tuple[str, ...] | None = None) -> str:
    """Compute deterministic SHA256 hash of feature schema.

    Args:
        features: Feature names in order. Uses FEATURE_ORDER if not provided.

    Returns:
        First 16 chars of SHA256 hex digest.
    """
    if features is None:
        features = FEATURE_ORDER

    content = "\n".join(features)
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]


def validate_feature_names(feature_names: list[str] | tuple[str, ...]) -> None:
    """Verify a feature ordering matches FEATURE_ORDER exactly.

    Raises:
        FeatureSchemaError: If count, names or order differ.
    """
    if len(feature_names) != len(FEATURE_ORDER):
        raise FeatureSchemaError(
            f"Feature count mismatch: expected {len(FEATURE_ORDER)}, got {len(feature_names)}"
        )

    for i, (expected, actual) in enumerate(zip(FEATURE_ORDER, feature_names, strict=True)):
        if expected != actual:
            raise FeatureSchemaError(
                f"Feature mismatch at index {i}: expected '{expected}', got '{actual}'"
            )
