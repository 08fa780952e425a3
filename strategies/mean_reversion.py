"""Z-score mean reversion."""

from __future__ import annotations

from typing import Sequence

from backtest.engine import Simulator
from backtest.types import Bar, Side, SimulationState
from core.indicators import Series, rolling_zscore
from strategies.params import MeanReversionParams


class MeanReversion(Simulator[MeanReversionParams]):
    """Fade moves beyond ``threshold`` standard deviations of the rolling mean.

    Longs exit once the z-score is back at or above zero, shorts once it is
    at or below zero. Bars with a flat window are ignored.
    """

    strategy_id = "mean_reversion"
    params_model = MeanReversionParams

    def prepare(self, bars: Sequence[Bar], params: MeanReversionParams) -> Series:
        return rolling_zscore([bar.close for bar in bars], params.period)

    def step(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: Series,
        params: MeanReversionParams,
    ) -> SimulationState:
        if index < params.period:
            return state
        zscore = context[index]
        if zscore is None:
            return state
        bar = bars[index]

        position = state.position
        if position is None:
            if zscore < -params.threshold:
                side = Side.LONG
            elif zscore > params.threshold:
                side = Side.SHORT
            else:
                return state
            qty = state.size(bar.close, params.position_fraction)
            if qty <= 0:
                return state
            return state.open(side, bar.close, bar, qty, index)

        if (position.side is Side.LONG and zscore >= 0) or (
            position.side is Side.SHORT and zscore <= 0
        ):
            return state.close(bar.close, bar)
        return state
