"""
Data contracts for the forecasting baseline.

These are the canonical schemas exchanged with the external feature source
and outcome source. Raw signals are permissive by design of the upstream
telemetry; normalized vectors and labeled points are strict and frozen.
"""

from __future__ import annotations

import math
from datetime import datetime  # noqa: TC003 - pydantic resolves at runtime
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_float(value: Any) -> float:
    """Best-effort conversion of a raw signal value to float.

    Strings are parsed; anything that cannot be read as a real number
    (including booleans) becomes NaN. Never raises.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


class RawMarketSignals(BaseModel):
    """
    Raw named market signals as delivered by the feature source.

    Accepts camelCase aliases (``oddsMid``) or the canonical snake_case
    names. Absent fields stay None; malformed values become NaN.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    odds_mid: float | None = Field(default=None, alias="oddsMid")
    odds_spread: float | None = Field(default=None, alias="oddsSpread")
    liquidity: float | None = Field(default=None, alias="liquidity")
    funding_8h: float | None = Field(default=None, alias="funding8h")
    funding_1d: float | None = Field(default=None, alias="funding1d")
    fgi: float | None = Field(default=None, alias="fgi")
    pnl30d: float | None = Field(default=None, alias="pnl30d")
    vol30d: float | None = Field(default=None, alias="vol30d")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> float | None:
        """Coerce string numerics; map junk to NaN instead of failing."""
        if v is None:
            return None
        return coerce_float(v)


class FeatureVector(BaseModel):
    """
    Normalized feature vector. Every field lies in [0, 1].

    Attributes:
        odds_mid: Market mid-point odds.
        odds_spread: Bid-ask spread.
        liquidity: Market liquidity.
        funding_8h: 8-hour funding rate.
        funding_1d: 24-hour funding rate.
        fgi: Fear & Greed Index.
        pnl30d: 30-day PnL.
        vol30d: 30-day volatility.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    odds_mid: float = Field(..., ge=0.0, le=1.0)
    odds_spread: float = Field(..., ge=0.0, le=1.0)
    liquidity: float = Field(..., ge=0.0, le=1.0)
    funding_8h: float = Field(..., ge=0.0, le=1.0)
    funding_1d: float = Field(..., ge=0.0, le=1.0)
    fgi: float = Field(..., ge=0.0, le=1.0)
    pnl30d: float = Field(..., ge=0.0, le=1.0)
    vol30d: float = Field(..., ge=0.0, le=1.0)

    def to_list(self) -> list[float]:
        """Values in canonical feature order (field declaration order)."""
        return [getattr(self, name) for name in type(self).model_fields]

    @classmethod
    def from_list(cls, values: list[float] | tuple[float, ...]) -> FeatureVector:
        """Build from values in canonical feature order."""
        names = list(cls.model_fields)
        if len(values) != len(names):
            raise ValueError(f"Expected {len(names)} values, got {len(values)}")
        return cls(**dict(zip(names, values, strict=True)))


class LabeledDataPoint(BaseModel):
    """
    A matured prediction with its resolved outcome.

    Attributes:
        features: Normalized features at prediction time.
        label: True if the proposition resolved YES.
        timestamp: When the prediction was made.
        source_id: Opaque prediction identifier from the outcome source.
        maturity_date: When the outcome matured.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    features: FeatureVector
    label: bool
    timestamp: datetime
    source_id: str = Field(..., min_length=1, alias="sourceId")
    maturity_date: datetime = Field(..., alias="maturityDate")

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using orjson."""
        return orjson.dumps(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def from_json(cls, data: bytes | str) -> LabeledDataPoint:
        """Deserialize from JSON."""
        if isinstance(data, str):
            data = data.encode()
        return cls.model_validate(orjson.loads(data))
