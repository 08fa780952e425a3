from __future__ import annotations

import math

import pytest

from services.options.pricing import black_scholes_greeks, black_scholes_price
from services.options.types import OptionType


def test_reference_prices() -> None:
    assert black_scholes_price(100, 100, 1.0, 0.2, 0.05, "CALL") == pytest.approx(10.4506, abs=1e-3)
    assert black_scholes_price(100, 100, 1.0, 0.2, 0.05, "PUT") == pytest.approx(5.5735, abs=1e-3)


def test_accepts_exchange_style_types() -> None:
    assert black_scholes_price(100, 95, 0.1, 0.25, 0.05, "CE") == black_scholes_price(
        100, 95, 0.1, 0.25, 0.05, OptionType.CALL
    )
    with pytest.raises(ValueError):
        black_scholes_price(100, 95, 0.1, 0.25, 0.05, "straddle")


def test_reference_greeks() -> None:
    call = black_scholes_greeks(100, 100, 1.0, 0.2, 0.05, OptionType.CALL)
    put = black_scholes_greeks(100, 100, 1.0, 0.2, 0.05, OptionType.PUT)
    assert call.delta == pytest.approx(0.6368, abs=1e-3)
    assert call.delta - put.delta == pytest.approx(1.0)
    assert call.gamma == pytest.approx(put.gamma)
    assert call.vega == pytest.approx(0.3752, abs=1e-3)
    assert call.theta < 0
    assert call.rho > 0 > put.rho


@pytest.mark.parametrize("spot,strike", [(110, 100), (90, 100), (100, 100)])
def test_expiry_collapses_to_intrinsic(spot: float, strike: float) -> None:
    call = black_scholes_price(spot, strike, 0.0, 0.2, 0.05, OptionType.CALL)
    put = black_scholes_price(spot, strike, 0.0, 0.2, 0.05, OptionType.PUT)
    assert call == max(spot - strike, 0)
    assert put == max(strike - spot, 0)


def test_expiry_greeks() -> None:
    itm_call = black_scholes_greeks(110, 100, 0.0, 0.2, 0.05, OptionType.CALL)
    otm_call = black_scholes_greeks(90, 100, 0.0, 0.2, 0.05, OptionType.CALL)
    itm_put = black_scholes_greeks(90, 100, -1.0, 0.2, 0.05, OptionType.PUT)
    otm_put = black_scholes_greeks(110, 100, 0.0, 0.2, 0.05, OptionType.PUT)
    assert (itm_call.delta, otm_call.delta, itm_put.delta, otm_put.delta) == (1.0, 0.0, -1.0, 0.0)
    for greeks in (itm_call, otm_call, itm_put, otm_put):
        assert greeks.gamma == greeks.theta == greeks.vega == greeks.rho == 0.0


def test_zero_volatility_keeps_parity() -> None:
    call = black_scholes_price(100, 100, 0.5, 0.0, 0.05, OptionType.CALL)
    put = black_scholes_price(100, 100, 0.5, 0.0, 0.05, OptionType.PUT)
    assert call == pytest.approx(100 - 100 * math.exp(-0.025))
    assert put == 0.0
    assert call - put == pytest.approx(100 - 100 * math.exp(-0.025))
