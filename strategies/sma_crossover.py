"""Simple moving-average crossover, long only."""

from __future__ import annotations

from typing import Sequence, Tuple

from backtest.engine import Simulator
from backtest.types import Bar, Side, SimulationState
from core.indicators import Series, simple_moving_average
from strategies.params import CrossoverParams


class MovingAverageCrossover(Simulator[CrossoverParams]):
    """Go long when the short SMA crosses above the long SMA, exit on the reverse cross.

    A position still open on the final bar is closed at that bar's close.
    """

    strategy_id = "sma_crossover"
    params_model = CrossoverParams

    def prepare(self, bars: Sequence[Bar], params: CrossoverParams) -> Tuple[Series, Series]:
        closes = [bar.close for bar in bars]
        return (
            simple_moving_average(closes, params.short_period),
            simple_moving_average(closes, params.long_period),
        )

    def step(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: Tuple[Series, Series],
        params: CrossoverParams,
    ) -> SimulationState:
        short_sma, long_sma = context
        bar = bars[index]
        s, l = short_sma[index], long_sma[index]
        ps, pl = short_sma[index - 1], long_sma[index - 1]
        if None not in (s, l, ps, pl):
            if not state.in_position and ps <= pl and s > l:
                qty = state.size(bar.close, params.position_fraction)
                if qty > 0:
                    state = state.open(Side.LONG, bar.close, bar, qty, index)
            elif state.in_position and ps >= pl and s < l:
                state = state.close(bar.close, bar)

        if state.in_position and index == len(bars) - 1:
            state = state.close(bar.close, bar)
        return state
