"""Opening-range breakout against the previous bar's range."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from backtest.engine import Simulator
from backtest.types import Bar, Side, SimulationState
from strategies.params import BreakoutParams

logger = logging.getLogger(__name__)


class OpeningRangeBreakout(Simulator[BreakoutParams]):
    """Enter at a break of the prior bar's high/low and exit within the same bar.

    The exit is the first of target, stop and close, checked in that order
    against the current bar's extremes.
    """

    strategy_id = "orb"
    params_model = BreakoutParams

    def step(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: Any,
        params: BreakoutParams,
    ) -> SimulationState:
        bar = bars[index]
        prev = bars[index - 1]
        range_width = prev.high - prev.low
        if range_width <= 0 or prev.close <= 0:
            return state
        if range_width / prev.close > params.max_range_ratio:
            logger.debug("Skipping volatile range", extra={"_extra_date": str(bar.date)})
            return state

        target_pct = params.target_percent / 100
        stop_pct = params.stop_loss / 100

        if bar.high > prev.high:
            entry = prev.high
            target = entry * (1 + target_pct)
            stop = entry * (1 - stop_pct)
            if bar.high >= target:
                exit_price = target
            elif bar.low <= stop:
                exit_price = stop
            else:
                exit_price = bar.close
            side = Side.LONG
        elif bar.low < prev.low:
            entry = prev.low
            target = entry * (1 - target_pct)
            stop = entry * (1 + stop_pct)
            if bar.low <= target:
                exit_price = target
            elif bar.high >= stop:
                exit_price = stop
            else:
                exit_price = bar.close
            side = Side.SHORT
        else:
            return state

        qty = state.size(entry, params.position_fraction)
        if qty <= 0:
            return state
        return state.open(side, entry, bar, qty, index).close(exit_price, bar)
