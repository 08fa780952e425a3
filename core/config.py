"""Configuration management utilities."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsSettings(BaseSettings):
    """Defaults shared by the backtest and options analytics entry points.

    Every field can be overridden through a ``PT_``-prefixed environment
    variable, e.g. ``PT_RISK_FREE_RATE=0.05``.
    """

    model_config = SettingsConfigDict(env_prefix="PT_", extra="ignore")

    risk_free_rate: float = Field(default=0.065)
    default_volatility: float = Field(default=0.20, gt=0)
    days_to_expiry: int = Field(default=7, ge=0)
    payoff_range_pct: float = Field(default=0.15, gt=0, lt=1)
    payoff_steps: int = Field(default=150, ge=2)
    greeks_range_pct: float = Field(default=0.20, gt=0, lt=1)
    greeks_steps: int = Field(default=200, ge=2)
    initial_capital: float = Field(default=100_000.0, gt=0)
    min_bars: int = Field(default=5, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()

    @property
    def time_to_expiry(self) -> float:
        """Configured days to expiry expressed in years."""

        return self.days_to_expiry / 365


def _read_config_payload(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    payload = yaml.safe_load(text) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return payload


def load_settings(path: Path) -> AnalyticsSettings:
    """Load settings from a YAML file at ``path``.

    Values from the file take precedence over environment variables.
    """

    payload = _read_config_payload(Path(path))
    return AnalyticsSettings(**payload)


@lru_cache(maxsize=1)
def get_settings() -> AnalyticsSettings:
    """Return cached settings instance loaded from environment variables."""

    return AnalyticsSettings()


__all__ = ["AnalyticsSettings", "get_settings", "load_settings"]
