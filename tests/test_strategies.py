from __future__ import annotations

from datetime import datetime

import pytest

from backtest.types import Bar, Side
from strategies.params import BreakoutParams, CrossoverParams, InvalidParameters
from strategies.registry import DEFAULT_STRATEGY, StrategyId, get_registry, normalize_key, simulate
from tests.fixtures.bars import make_bars


def _bar(day: int, open_: float, high: float, low: float, close: float) -> Bar:
    return Bar(timestamp=datetime(2024, 3, day), open=open_, high=high, low=low, close=close)


def test_breakout_long_hits_target() -> None:
    bars = [_bar(1, 100, 101, 99, 100), _bar(2, 100.5, 103, 100.5, 102)]
    result = simulate("orb", bars, {}, 100_000)
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.side is Side.LONG
    assert trade.entry_price == 101.0
    assert trade.exit_price == pytest.approx(101 * 1.015, abs=0.01)
    assert trade.qty == 99
    assert trade.pnl == pytest.approx(1.515 * 99, abs=0.01)
    assert trade.pnl_percent == pytest.approx(1.5)
    assert trade.entry_date == trade.exit_date


def test_breakout_short_stopped_out() -> None:
    bars = [_bar(1, 100, 101, 99, 100), _bar(2, 99.5, 100, 98, 99.8)]
    trade = simulate("orb", bars).trades[0]
    assert trade.side is Side.SHORT
    assert trade.entry_price == 99.0
    assert trade.exit_price == pytest.approx(99 * 1.0075, abs=0.01)
    assert trade.pnl < 0


def test_breakout_falls_back_to_close() -> None:
    bars = [_bar(1, 100, 101, 99, 100), _bar(2, 100.5, 101.5, 100.6, 101.2)]
    trade = simulate("orb", bars).trades[0]
    assert trade.exit_price == 101.2


def test_breakout_skips_wide_ranges() -> None:
    bars = [_bar(1, 100, 110, 90, 100), _bar(2, 100, 115, 95, 112)]
    result = simulate("orb", bars)
    assert result.trades == []
    assert [point.value for point in result.equity_curve] == [100_000.0, 100_000.0]


def test_crossover_single_round_trip() -> None:
    closes = [10, 10, 10, 10, 12, 14, 14, 10, 8, 8]
    bars = make_bars(closes)
    result = simulate("sma_crossover", bars, {"shortPeriod": 2, "longPeriod": 3}, 100_000)

    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.side is Side.LONG
    assert trade.entry_date == bars[4].date
    assert trade.entry_price == 12.0
    assert trade.exit_date == bars[7].date
    assert trade.exit_price == 10.0
    assert trade.qty == 1666
    assert trade.pnl == pytest.approx(-3332.0)
    assert len(result.equity_curve) == len(bars)
    assert result.final_equity == pytest.approx(96_668.0)


def test_crossover_force_closes_on_last_bar() -> None:
    bars = make_bars([10, 10, 10, 10, 12, 14, 16])
    result = simulate("sma_crossover", bars, {"short_period": 2, "long_period": 3})
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.exit_date == bars[-1].date
    assert trade.exit_price == 16.0
    assert result.equity_curve[-1].value == pytest.approx(100_000 + trade.pnl)


def test_mean_reversion_round_trip() -> None:
    closes = [100, 100, 101, 99, 100, 100, 90, 100, 100, 100]
    result = simulate("mean_reversion", make_bars(closes), {"period": 5, "threshold": 1.5})
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.side is Side.LONG
    assert trade.entry_price == 90.0
    assert trade.exit_price == 100.0
    assert trade.qty == 166
    assert trade.pnl == pytest.approx(1660.0)


def test_mean_reversion_flat_prices_never_trade() -> None:
    result = simulate("mean_reversion", make_bars([50.0] * 30), {"period": 5})
    assert result.trades == []


def test_momentum_holds_fixed_bars_and_leaves_last_position_open() -> None:
    closes = [100, 100, 100, 110, 112, 115, 116, 117]
    result = simulate(
        "momentum", make_bars(closes), {"lookback": 3, "holdDays": 2, "entryReturn": 0.05}
    )
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert (trade.entry_price, trade.exit_price) == (110.0, 115.0)


def test_rsi_reversal_enters_oversold_exits_overbought() -> None:
    result = simulate(
        "rsi_reversal",
        make_bars([100, 98, 96, 99, 102]),
        {"period": 2, "oversold": 30, "overbought": 70},
    )
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert (trade.entry_price, trade.exit_price) == (96.0, 102.0)
    assert trade.pnl > 0


def test_sizing_below_one_unit_skips_trade() -> None:
    bars = [_bar(1, 100, 101, 99, 100), _bar(2, 100.5, 103, 100.5, 102)]
    result = simulate("orb", bars, {}, initial_capital=500)
    assert result.trades == []


def test_empty_bars_give_empty_result() -> None:
    result = simulate("momentum", [])
    assert result.trades == []
    assert result.equity_curve == []
    assert result.final_equity is None


@pytest.mark.parametrize(
    "key,expected",
    [
        ("orb", StrategyId.OPENING_RANGE_BREAKOUT),
        ("SMA-Crossover", StrategyId.SMA_CROSSOVER),
        ("mean reversion", StrategyId.MEAN_REVERSION),
        ("RSI_REVERSAL", StrategyId.RSI_REVERSAL),
        ("does-not-exist", DEFAULT_STRATEGY),
    ],
)
def test_registry_resolution(key: str, expected: StrategyId) -> None:
    assert get_registry().resolve_id(key) is expected


def test_normalize_key() -> None:
    assert normalize_key("Mean-Reversion 2") == "mean_reversion__"


def test_params_accept_both_spellings_and_ignore_unknown() -> None:
    params = CrossoverParams.from_mapping({"shortPeriod": 5, "long_period": 20, "symbol": "X"})
    assert (params.short_period, params.long_period) == (5, 20)
    assert params.position_fraction == 0.20


def test_params_drop_none_values() -> None:
    params = BreakoutParams.from_mapping({"targetPercent": None, "stopLoss": 1.0})
    assert params.target_percent == 1.5
    assert params.stop_loss == 1.0


def test_invalid_params_raise() -> None:
    with pytest.raises(InvalidParameters):
        CrossoverParams.from_mapping({"shortPeriod": "soon"})
