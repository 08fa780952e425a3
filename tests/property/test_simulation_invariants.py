from __future__ import annotations

import pytest

from backtest.metrics import compute_metrics
from strategies.registry import StrategyId, simulate
from tests.fixtures.bars import random_walk_bars

PARAMS = {
    StrategyId.OPENING_RANGE_BREAKOUT: {},
    StrategyId.SMA_CROSSOVER: {"shortPeriod": 5, "longPeriod": 20},
    StrategyId.MEAN_REVERSION: {"period": 10, "threshold": 1.0},
    StrategyId.MOMENTUM: {"lookback": 5, "holdDays": 3, "entryReturn": 0.01},
    StrategyId.RSI_REVERSAL: {"period": 5, "oversold": 40, "overbought": 60},
}


@pytest.mark.parametrize("seed", [1, 2, 3])
@pytest.mark.parametrize("strategy", list(StrategyId))
def test_curve_length_and_capital_conservation(strategy: StrategyId, seed: int) -> None:
    bars = random_walk_bars(160, seed=seed)
    result = simulate(strategy, bars, PARAMS[strategy], 50_000)

    assert len(result.equity_curve) == len(bars)
    assert result.equity_curve[0].value == 50_000.0
    assert [p.date for p in result.equity_curve] == [b.date for b in bars]
    realized = sum(trade.pnl for trade in result.trades)
    assert result.final_equity == pytest.approx(50_000 + realized, abs=0.01 * (len(result.trades) + 1))

    for trade in result.trades:
        assert trade.qty > 0
        assert trade.entry_date <= trade.exit_date


@pytest.mark.parametrize("strategy", list(StrategyId))
def test_metrics_stay_finite(strategy: StrategyId) -> None:
    bars = random_walk_bars(200, seed=11)
    result = simulate(strategy, bars, PARAMS[strategy], 100_000)
    metrics = compute_metrics(result.trades, 100_000, result.equity_curve)
    assert metrics.total_trades == len(result.trades)
    assert 0.0 <= metrics.win_rate <= 100.0
    assert metrics.max_drawdown >= 0.0
    for value in metrics.to_dict().values():
        assert value == value and abs(value) != float("inf")
