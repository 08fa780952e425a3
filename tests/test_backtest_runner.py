from __future__ import annotations

import pytest

from core.config import AnalyticsSettings
from services.backtest.runner import BacktestError, run_backtest
from strategies.registry import StrategyId
from tests.fixtures.bars import make_bars, random_walk_bars


def test_rejects_short_series() -> None:
    with pytest.raises(BacktestError) as excinfo:
        run_backtest("orb", make_bars([100, 101, 102, 103]))
    assert excinfo.value.status_code == 422
    assert "Insufficient historical data" in str(excinfo.value)


def test_min_bars_follows_settings() -> None:
    settings = AnalyticsSettings(min_bars=50)
    with pytest.raises(BacktestError):
        run_backtest("orb", random_walk_bars(20), settings=settings)


def test_rejects_non_positive_capital() -> None:
    with pytest.raises(BacktestError):
        run_backtest("orb", random_walk_bars(20), initial_capital=0)


def test_unknown_strategy_uses_breakout() -> None:
    report = run_backtest("no-such-strategy", random_walk_bars(60))
    assert report.strategy is StrategyId.OPENING_RANGE_BREAKOUT
    assert report.initial_capital == 100_000.0
    assert len(report.equity_curve) == 60


def test_report_payload() -> None:
    bars = random_walk_bars(90)
    report = run_backtest(
        "sma_crossover", bars, {"shortPeriod": 5, "longPeriod": 15}, initial_capital=25_000
    )
    payload = report.to_dict()
    assert payload["strategy"] == "sma_crossover"
    assert payload["barsUsed"] == 90
    assert payload["metrics"]["totalTrades"] == len(payload["trades"])
    assert payload["equityCurve"][0] == {"date": bars[0].date.isoformat(), "value": 25_000.0}
