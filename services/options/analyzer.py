"""Expiry payoff and aggregate Greeks for multi-leg option strategies."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from core.utils import round2, round4
from services.options.pricing import black_scholes_greeks
from services.options.types import Greeks, OptionLeg, OptionType, PayoffPoint, StrategyGreeks

SpotRange = Tuple[float, float]


def payoff_at(legs: Iterable[OptionLeg], spot: float) -> float:
    return sum(leg.expiry_pnl(spot) for leg in legs)


def _spot_grid(spot_range: SpotRange, steps: int) -> List[float]:
    low, high = spot_range
    steps = max(int(steps), 1)
    width = (high - low) / steps
    return [low + i * width for i in range(steps + 1)]


def default_range(spot_price: float, range_pct: float) -> SpotRange:
    return spot_price * (1 - range_pct), spot_price * (1 + range_pct)


def payoff_curve(
    legs: Sequence[OptionLeg],
    spot_price: float,
    spot_range: Optional[SpotRange] = None,
    steps: int = 150,
    range_pct: float = 0.15,
) -> List[PayoffPoint]:
    """Expiry P&L sampled at ``steps + 1`` evenly spaced spot prices.

    Without an explicit ``spot_range`` the grid spans ``spot_price`` plus or
    minus ``range_pct``. Spots and P&L are rounded to two decimals.
    """

    grid = _spot_grid(spot_range or default_range(spot_price, range_pct), steps)
    return [PayoffPoint(spot_price=round2(s), pnl=round2(payoff_at(legs, s))) for s in grid]


def net_premium(legs: Iterable[OptionLeg]) -> float:
    """Signed premium flow: negative for a net debit, positive for a net credit."""

    return sum(-leg.premium * leg.signed_qty for leg in legs)


def _call_slope(legs: Iterable[OptionLeg]) -> int:
    # payoff slope as spot goes to infinity; puts are flat there
    return sum(leg.signed_qty for leg in legs if leg.type is OptionType.CALL)


def find_breakevens(spots: Sequence[float], pnls: Sequence[float]) -> List[float]:
    """Zero crossings of a sampled payoff, linearly interpolated."""

    found: List[float] = []
    for i in range(1, len(spots)):
        prev_pnl, pnl = pnls[i - 1], pnls[i]
        if prev_pnl == 0 and pnl == 0:
            continue
        if (prev_pnl <= 0 <= pnl) or (prev_pnl >= 0 >= pnl):
            ratio = abs(prev_pnl) / (abs(prev_pnl) + abs(pnl))
            point = round2(spots[i - 1] + ratio * (spots[i] - spots[i - 1]))
            if not found or found[-1] != point:
                found.append(point)
    return found


def strategy_greeks(
    legs: Sequence[OptionLeg],
    spot: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    *,
    range_pct: float = 0.20,
    steps: int = 200,
) -> StrategyGreeks:
    """Net Greeks, premium flow, payoff bounds and breakevens of ``legs``.

    Each leg's per-unit Greeks are signed by action and scaled by quantity.
    Payoff bounds are evaluated on the sampled grid, at every strike and at
    zero spot, so they are exact for the piecewise-linear expiry payoff.
    A positive net call quantity makes profit unbounded (``math.inf``); a
    negative one makes the loss unbounded (``-math.inf``).
    """

    total = Greeks()
    for leg in legs:
        unit = black_scholes_greeks(
            spot, leg.strike, time_to_expiry, volatility, risk_free_rate, leg.type
        )
        total = total + unit.scaled(leg.signed_qty)

    grid = _spot_grid(default_range(spot, range_pct), steps)
    pnls = [payoff_at(legs, s) for s in grid]
    candidates = pnls + [payoff_at(legs, leg.strike) for leg in legs] + [payoff_at(legs, 0.0)]

    slope = _call_slope(legs)
    max_profit = math.inf if slope > 0 else round2(max(candidates))
    max_loss = -math.inf if slope < 0 else round2(min(candidates))

    return StrategyGreeks(
        delta=round4(total.delta),
        gamma=round4(total.gamma),
        theta=round2(total.theta),
        vega=round2(total.vega),
        rho=round2(total.rho),
        net_premium=round2(net_premium(legs)),
        max_profit=max_profit,
        max_loss=max_loss,
        breakevens=find_breakevens(grid, pnls),
    )


__all__ = [
    "default_range",
    "find_breakevens",
    "net_premium",
    "payoff_at",
    "payoff_curve",
    "strategy_greeks",
]
