"""Backtest entry point used by request handlers and the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from backtest.metrics import Metrics, compute_metrics
from backtest.types import Bar, EquityPoint, TradeRecord
from core.config import AnalyticsSettings, get_settings
from strategies.registry import StrategyId, get_registry

logger = logging.getLogger(__name__)


class BacktestError(ValueError):
    """Rejected backtest request, carrying an HTTP-style status code."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class BacktestReport:
    strategy: StrategyId
    params: Dict[str, Any]
    initial_capital: float
    bars_used: int
    trades: List[TradeRecord] = field(default_factory=list)
    equity_curve: List[EquityPoint] = field(default_factory=list)
    metrics: Metrics = field(default_factory=Metrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "params": dict(self.params),
            "initialCapital": self.initial_capital,
            "barsUsed": self.bars_used,
            "metrics": self.metrics.to_dict(),
            "trades": [trade.to_dict() for trade in self.trades],
            "equityCurve": [point.to_dict() for point in self.equity_curve],
        }


def run_backtest(
    strategy: str | StrategyId,
    bars: Sequence[Bar],
    params: Mapping[str, Any] | None = None,
    initial_capital: float | None = None,
    *,
    settings: AnalyticsSettings | None = None,
) -> BacktestReport:
    """Validate the request, replay ``bars`` and attach performance metrics.

    Raises :class:`BacktestError` (status 422) when fewer than
    ``settings.min_bars`` bars are supplied. Unknown strategy keys fall back
    to the opening-range breakout.
    """

    cfg = settings or get_settings()
    capital = float(initial_capital if initial_capital is not None else cfg.initial_capital)
    if len(bars) < cfg.min_bars:
        raise BacktestError(
            f"Insufficient historical data (got {len(bars)} bars, need {cfg.min_bars})",
            status_code=422,
        )
    if capital <= 0:
        raise BacktestError("initial capital must be positive", status_code=422)

    registry = get_registry()
    strategy_id = registry.resolve_id(strategy)
    resolved_params = dict(params or {})
    result = registry.get(strategy_id).simulate(bars, resolved_params, capital)
    metrics = compute_metrics(result.trades, capital, result.equity_curve)
    logger.info(
        "Backtest complete",
        extra={
            "_extra_strategy": strategy_id.value,
            "_extra_bars": len(bars),
            "_extra_trades": metrics.total_trades,
        },
    )
    return BacktestReport(
        strategy=strategy_id,
        params=resolved_params,
        initial_capital=capital,
        bars_used=len(bars),
        trades=result.trades,
        equity_curve=result.equity_curve,
        metrics=metrics,
    )


__all__ = ["BacktestError", "BacktestReport", "run_backtest"]
