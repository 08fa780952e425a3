from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Dict, Mapping, Sequence

from backtest.engine import Simulator
from backtest.types import Bar, SimulationResult
from strategies.mean_reversion import MeanReversion
from strategies.momentum import Momentum
from strategies.opening_range import OpeningRangeBreakout
from strategies.rsi_reversal import RsiReversal
from strategies.sma_crossover import MovingAverageCrossover

logger = logging.getLogger(__name__)


class StrategyId(str, Enum):
    OPENING_RANGE_BREAKOUT = "orb"
    SMA_CROSSOVER = "sma_crossover"
    MEAN_REVERSION = "mean_reversion"
    MOMENTUM = "momentum"
    RSI_REVERSAL = "rsi_reversal"


DEFAULT_STRATEGY = StrategyId.OPENING_RANGE_BREAKOUT

_ALIASES: Dict[str, StrategyId] = {
    "orb": StrategyId.OPENING_RANGE_BREAKOUT,
    "opening_range_breakout": StrategyId.OPENING_RANGE_BREAKOUT,
    "sma_crossover": StrategyId.SMA_CROSSOVER,
    "mean_reversion": StrategyId.MEAN_REVERSION,
    "momentum": StrategyId.MOMENTUM,
    "rsi_reversal": StrategyId.RSI_REVERSAL,
}


def normalize_key(key: str) -> str:
    """Lower-case ``key`` and map every character outside ``[a-z_]`` to ``_``."""

    return re.sub(r"[^a-z_]", "_", str(key).lower())


class StrategyRegistry:
    """Closed mapping from strategy id to simulator.

    Unknown keys resolve to the opening-range breakout simulator.
    """

    def __init__(self) -> None:
        self._simulators: Dict[StrategyId, Simulator[Any]] = {
            StrategyId.OPENING_RANGE_BREAKOUT: OpeningRangeBreakout(),
            StrategyId.SMA_CROSSOVER: MovingAverageCrossover(),
            StrategyId.MEAN_REVERSION: MeanReversion(),
            StrategyId.MOMENTUM: Momentum(),
            StrategyId.RSI_REVERSAL: RsiReversal(),
        }

    def resolve_id(self, key: str | StrategyId) -> StrategyId:
        if isinstance(key, StrategyId):
            return key
        normalized = normalize_key(key)
        strategy_id = _ALIASES.get(normalized)
        if strategy_id is None:
            logger.debug(
                "Unknown strategy key, using default",
                extra={"_extra_key": key, "_extra_default": DEFAULT_STRATEGY.value},
            )
            return DEFAULT_STRATEGY
        return strategy_id

    def get(self, key: str | StrategyId) -> Simulator[Any]:
        return self._simulators[self.resolve_id(key)]

    def ids(self) -> list[StrategyId]:
        return list(self._simulators)

    def simulate(
        self,
        key: str | StrategyId,
        bars: Sequence[Bar],
        params: Mapping[str, Any] | None = None,
        initial_capital: float = 100_000.0,
    ) -> SimulationResult:
        return self.get(key).simulate(bars, params, initial_capital)


_REGISTRY = StrategyRegistry()


def get_registry() -> StrategyRegistry:
    return _REGISTRY


def simulate(
    key: str | StrategyId,
    bars: Sequence[Bar],
    params: Mapping[str, Any] | None = None,
    initial_capital: float = 100_000.0,
) -> SimulationResult:
    """Run the simulator registered under ``key`` over ``bars``."""

    return _REGISTRY.simulate(key, bars, params, initial_capital)
