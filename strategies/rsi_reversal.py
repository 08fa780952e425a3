"""RSI oversold/overbought reversal, long only."""

from __future__ import annotations

from typing import Sequence

from backtest.engine import Simulator
from backtest.types import Bar, Side, SimulationState
from core.indicators import Series, wilder_rsi
from strategies.params import RsiReversalParams


class RsiReversal(Simulator[RsiReversalParams]):
    strategy_id = "rsi_reversal"
    params_model = RsiReversalParams

    def prepare(self, bars: Sequence[Bar], params: RsiReversalParams) -> Series:
        return wilder_rsi([bar.close for bar in bars], params.period)

    def step(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: Series,
        params: RsiReversalParams,
    ) -> SimulationState:
        rsi = context[index]
        if rsi is None:
            return state
        bar = bars[index]
        if not state.in_position and rsi < params.oversold:
            qty = state.size(bar.close, params.position_fraction)
            if qty > 0:
                return state.open(Side.LONG, bar.close, bar, qty, index)
        elif state.in_position and rsi > params.overbought:
            return state.close(bar.close, bar)
        return state
