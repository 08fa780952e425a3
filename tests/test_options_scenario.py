from __future__ import annotations

import pytest

from services.options.pricing import black_scholes_price
from services.options.scenario import scenario_simulation
from services.options.types import LegAction, OptionLeg, OptionType, Scenario


def _long_call(spot: float = 100.0) -> OptionLeg:
    premium = round(black_scholes_price(spot, 100, 7 / 365, 0.2, 0.065, OptionType.CALL), 2)
    return OptionLeg(OptionType.CALL, 100, LegAction.BUY, 1, premium)


def test_rally_is_profitable() -> None:
    [result] = scenario_simulation([_long_call()], 100, [Scenario(spot_change_pct=10)])
    assert result.pnl > 0
    assert result.spot_price == 110.0
    assert result.label == "Spot +10%, IV +0%, 0d"


def test_expired_out_of_the_money_loses_premium() -> None:
    leg = _long_call()
    [result] = scenario_simulation(
        [leg], 100, [{"spotChangePct": -10, "ivChangePct": 0, "daysElapsed": 7}]
    )
    assert result.pnl == pytest.approx(-leg.premium)
    assert result.label == "Spot -10%, IV +0%, 7d"


def test_volatility_shift_moves_long_premium() -> None:
    leg = _long_call()
    up, down = scenario_simulation(
        [leg], 100, [Scenario(iv_change_pct=50), Scenario(iv_change_pct=-50)]
    )
    assert up.pnl > down.pnl


def test_days_beyond_expiry_floor_at_intrinsic() -> None:
    leg = OptionLeg(OptionType.PUT, 100, LegAction.SELL, 2, 1.25)
    [result] = scenario_simulation([leg], 100, [Scenario(spot_change_pct=-5, days_elapsed=30)])
    assert result.pnl == pytest.approx((1.25 - 5.0) * 2)


def test_settings_driven_assumptions() -> None:
    leg = _long_call()
    base = scenario_simulation([leg], 100, [Scenario()])[0]
    longer = scenario_simulation([leg], 100, [Scenario()], days_to_expiry=30)[0]
    assert longer.pnl > base.pnl
