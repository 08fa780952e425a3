"""Parameter schemas and defaults for the bar simulators.

Each schema accepts the camelCase keys used by API callers as well as
snake_case names; unknown keys are ignored so callers can pass a shared bag
of parameters (``symbol`` and friends) to any strategy.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError


class InvalidParameters(ValueError):
    """Raised when a parameter value cannot be coerced to its declared type."""


class StrategyParams(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    position_fraction: float = Field(
        default=0.15,
        gt=0,
        le=1,
        validation_alias=AliasChoices("positionFraction", "position_fraction"),
    )

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any] | None) -> "StrategyParams":
        payload = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidParameters(str(exc)) from exc


class BreakoutParams(StrategyParams):
    """Opening-range breakout. Percentages are expressed in percent units."""

    range_period: int = Field(
        default=15, ge=1, validation_alias=AliasChoices("rangePeriod", "range_period")
    )
    target_percent: float = Field(
        default=1.5,
        gt=0,
        validation_alias=AliasChoices("targetPercent", "target_percent", "target"),
    )
    stop_loss: float = Field(
        default=0.75, gt=0, validation_alias=AliasChoices("stopLoss", "stop_loss")
    )
    max_range_ratio: float = Field(
        default=0.05,
        gt=0,
        validation_alias=AliasChoices("maxRangeRatio", "max_range_ratio"),
    )
    position_fraction: float = Field(
        default=0.10,
        gt=0,
        le=1,
        validation_alias=AliasChoices("positionFraction", "position_fraction"),
    )


class CrossoverParams(StrategyParams):
    short_period: int = Field(
        default=10, ge=1, validation_alias=AliasChoices("shortPeriod", "short_period")
    )
    long_period: int = Field(
        default=30, ge=1, validation_alias=AliasChoices("longPeriod", "long_period")
    )
    position_fraction: float = Field(
        default=0.20,
        gt=0,
        le=1,
        validation_alias=AliasChoices("positionFraction", "position_fraction"),
    )


class MeanReversionParams(StrategyParams):
    period: int = Field(default=20, ge=2)
    threshold: float = Field(default=2.0, gt=0)


class MomentumParams(StrategyParams):
    lookback: int = Field(default=20, ge=1)
    hold_days: int = Field(
        default=10, ge=1, validation_alias=AliasChoices("holdDays", "hold_days")
    )
    entry_return: float = Field(
        default=0.05, validation_alias=AliasChoices("entryReturn", "entry_return")
    )


class RsiReversalParams(StrategyParams):
    period: int = Field(default=14, ge=1)
    oversold: float = Field(default=30.0, ge=0, le=100)
    overbought: float = Field(default=70.0, ge=0, le=100)


__all__ = [
    "BreakoutParams",
    "CrossoverParams",
    "InvalidParameters",
    "MeanReversionParams",
    "MomentumParams",
    "RsiReversalParams",
    "StrategyParams",
]
