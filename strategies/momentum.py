"""Time-boxed momentum strategy."""

from __future__ import annotations

from typing import List, Sequence

from backtest.engine import Simulator
from backtest.types import Bar, Side, SimulationState
from core.indicators import trailing_return
from strategies.params import MomentumParams


class Momentum(Simulator[MomentumParams]):
    """Buy after a strong trailing return and hold for a fixed number of bars."""

    strategy_id = "momentum"
    params_model = MomentumParams

    def prepare(self, bars: Sequence[Bar], params: MomentumParams) -> List[float]:
        return [bar.close for bar in bars]

    def step(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: List[float],
        params: MomentumParams,
    ) -> SimulationState:
        if index < params.lookback:
            return state
        bar = bars[index]

        position = state.position
        if position is not None:
            if index - position.opened_index >= params.hold_days:
                return state.close(bar.close, bar)
            return state

        past_return = trailing_return(context, index, params.lookback)
        if past_return is None or past_return <= params.entry_return:
            return state
        qty = state.size(bar.close, params.position_fraction)
        if qty <= 0:
            return state
        return state.open(Side.LONG, bar.close, bar, qty, index)
