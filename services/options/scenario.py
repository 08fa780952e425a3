"""What-if repricing of an option position under spot, volatility and time shifts."""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from core.utils import round2
from services.options.pricing import black_scholes_price
from services.options.types import OptionLeg, Scenario, ScenarioResult


def scenario_simulation(
    legs: Sequence[OptionLeg],
    spot_price: float,
    scenarios: Sequence[Scenario | Mapping[str, Any]],
    *,
    days_to_expiry: float = 7,
    base_volatility: float = 0.20,
    risk_free_rate: float = 0.065,
) -> List[ScenarioResult]:
    """Reprice every leg with Black-Scholes under each scenario.

    Time to expiry shrinks by ``days_elapsed`` and floors at zero, where
    legs settle at intrinsic value. P&L is netted against each leg's
    entry premium.
    """

    results: List[ScenarioResult] = []
    for raw in scenarios:
        scenario = raw if isinstance(raw, Scenario) else Scenario.from_mapping(raw)
        new_spot = spot_price * (1 + scenario.spot_change_pct / 100)
        time_left = max(0.0, (days_to_expiry - scenario.days_elapsed) / 365)
        new_iv = base_volatility * (1 + scenario.iv_change_pct / 100)

        pnl = 0.0
        for leg in legs:
            price = black_scholes_price(
                new_spot, leg.strike, time_left, new_iv, risk_free_rate, leg.type
            )
            pnl += (price - leg.premium) * leg.signed_qty

        results.append(
            ScenarioResult(
                label=scenario.label,
                spot_price=round2(new_spot),
                pnl=round2(pnl),
                scenario=scenario,
            )
        )
    return results


__all__ = ["scenario_simulation"]
