"""Tests for the feature schema."""

from __future__ import annotations

import pytest

from binforecast.features.schema import (
    FEATURE_ORDER,
    FEATURE_RANGES,
    RAW_DEFAULTS,
    RAW_FIELD_ALIASES,
    FeatureSchemaError,
    compute_feature_hash,
    get_feature_range,
    validate_feature_names,
)


class TestFeatureOrder:
    """Tests for the canonical ordering and per-feature tables."""

    def test_eight_features(self) -> None:
        assert len(FEATURE_ORDER) == 8
        assert len(set(FEATURE_ORDER)) == 8

    def test_canonical_order(self) -> None:
        assert FEATURE_ORDER == (
            "odds_mid",
            "odds_spread",
            "liquidity",
            "funding_8h",
            "funding_1d",
            "fgi",
            "pnl30d",
            "vol30d",
        )

    def test_tables_cover_every_feature(self) -> None:
        for table in (FEATURE_RANGES, RAW_DEFAULTS, RAW_FIELD_ALIASES):
            assert set(table) == set(FEATURE_ORDER)

    def test_ranges_have_positive_width(self) -> None:
        for name, rng in FEATURE_RANGES.items():
            assert rng.max > rng.min, name
            assert rng.width == pytest.approx(rng.max - rng.min)

    def test_defaults_inside_ranges(self) -> None:
        for name, default in RAW_DEFAULTS.items():
            rng = FEATURE_RANGES[name]
            assert rng.min <= default <= rng.max, name


class TestGetFeatureRange:
    def test_known_feature(self) -> None:
        rng = get_feature_range("fgi")
        assert (rng.min, rng.max) == (0.0, 100.0)
        assert rng.midpoint == 50.0

    def test_unknown_feature(self) -> None:
        with pytest.raises(ValueError, match="Unknown feature"):
            get_feature_range("nope")


class TestFeatureHash:
    def test_hash_is_stable(self) -> None:
        assert compute_feature_hash() == compute_feature_hash(FEATURE_ORDER)
        assert len(compute_feature_hash()) == 16

    def test_hash_changes_with_order(self) -> None:
        swapped = (FEATURE_ORDER[1], FEATURE_ORDER[0], *FEATURE_ORDER[2:])
        assert compute_feature_hash(swapped) != compute_feature_hash()


class TestValidateFeatureNames:
    def test_accepts_canonical_order(self) -> None:
        validate_feature_names(list(FEATURE_ORDER))

    def test_rejects_wrong_count(self) -> None:
        with pytest.raises(FeatureSchemaError, match="count mismatch"):
            validate_feature_names(FEATURE_ORDER[:7])

    def test_rejects_reordering(self) -> None:
        swapped = (FEATURE_ORDER[1], FEATURE_ORDER[0], *FEATURE_ORDER[2:])
        with pytest.raises(FeatureSchemaError, match="index 0"):
            validate_feature_names(swapped)
