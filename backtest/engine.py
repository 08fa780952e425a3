"""Bar replay driver shared by every strategy simulator."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import reduce
from typing import Any, ClassVar, Generic, Mapping, Sequence, Type, TypeVar

from backtest.types import Bar, SimulationResult, SimulationState
from strategies.params import StrategyParams

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=StrategyParams)


class Simulator(ABC, Generic[P]):
    """Replays bars as a fold over :class:`SimulationState`.

    Subclasses precompute whatever indicator series they need in
    :meth:`prepare` and implement a pure :meth:`step`. The driver appends one
    equity point per bar after the first, so the curve has exactly
    ``len(bars)`` points.
    """

    strategy_id: ClassVar[str]
    params_model: ClassVar[Type[StrategyParams]]

    def resolve_params(self, params: Mapping[str, Any] | None) -> P:
        return self.params_model.from_mapping(params)  # type: ignore[return-value]

    def prepare(self, bars: Sequence[Bar], params: P) -> Any:
        return None

    @abstractmethod
    def step(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: Any,
        params: P,
    ) -> SimulationState:
        """Return the state after processing ``bars[index]``."""

    def advance(
        self,
        state: SimulationState,
        bars: Sequence[Bar],
        index: int,
        context: Any,
        params: P,
    ) -> SimulationState:
        return self.step(state, bars, index, context, params).mark(bars[index])

    def simulate(
        self,
        bars: Sequence[Bar],
        params: Mapping[str, Any] | None = None,
        initial_capital: float = 100_000.0,
    ) -> SimulationResult:
        resolved = self.resolve_params(params)
        state = SimulationState.start(bars, initial_capital)
        if not bars:
            return SimulationResult.from_state(state)
        context = self.prepare(bars, resolved)
        final = reduce(
            lambda acc, index: self.advance(acc, bars, index, context, resolved),
            range(1, len(bars)),
            state,
        )
        logger.debug(
            "Simulation finished",
            extra={
                "_extra_strategy": self.strategy_id,
                "_extra_bars": len(bars),
                "_extra_trades": len(final.trades),
            },
        )
        return SimulationResult.from_state(final)
