"""Black-Scholes pricing and Greeks for European options without dividends."""

from __future__ import annotations

import math
from typing import Tuple

from scipy.stats import norm

from services.options.types import Greeks, OptionType


def _d1_d2(
    spot: float, strike: float, time_to_expiry: float, volatility: float, risk_free_rate: float
) -> Tuple[float, float]:
    sqrt_t = math.sqrt(time_to_expiry)
    d1 = (
        math.log(spot / strike) + (risk_free_rate + 0.5 * volatility**2) * time_to_expiry
    ) / (volatility * sqrt_t)
    return d1, d1 - volatility * sqrt_t


def _degenerate(spot: float, strike: float, volatility: float) -> bool:
    return volatility <= 0 or spot <= 0 or strike <= 0


def intrinsic_value(spot: float, strike: float, option_type: OptionType) -> float:
    if option_type is OptionType.CALL:
        return max(spot - strike, 0.0)
    return max(strike - spot, 0.0)


def black_scholes_price(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    option_type: OptionType | str,
) -> float:
    """Theoretical option price.

    At or past expiry the price is the intrinsic value. With zero volatility
    (or a non-positive spot) the price is the intrinsic value against the
    discounted strike, which keeps put-call parity exact.
    """

    kind = OptionType.parse(option_type)
    if time_to_expiry <= 0:
        return intrinsic_value(spot, strike, kind)
    discount = math.exp(-risk_free_rate * time_to_expiry)
    if _degenerate(spot, strike, volatility):
        return intrinsic_value(spot, strike * discount, kind)

    d1, d2 = _d1_d2(spot, strike, time_to_expiry, volatility, risk_free_rate)
    if kind is OptionType.CALL:
        return float(spot * norm.cdf(d1) - strike * discount * norm.cdf(d2))
    return float(strike * discount * norm.cdf(-d2) - spot * norm.cdf(-d1))


def black_scholes_greeks(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    option_type: OptionType | str,
) -> Greeks:
    """Per-unit Greeks. Theta is per calendar day; vega and rho are per 1%."""

    kind = OptionType.parse(option_type)
    sign = 1.0 if kind is OptionType.CALL else -1.0
    if time_to_expiry <= 0:
        in_the_money = intrinsic_value(spot, strike, kind) > 0
        return Greeks(delta=sign if in_the_money else 0.0)

    discount = math.exp(-risk_free_rate * time_to_expiry)
    if _degenerate(spot, strike, volatility):
        in_the_money = intrinsic_value(spot, strike * discount, kind) > 0
        return Greeks(delta=sign if in_the_money else 0.0)

    sqrt_t = math.sqrt(time_to_expiry)
    d1, d2 = _d1_d2(spot, strike, time_to_expiry, volatility, risk_free_rate)
    pdf_d1 = norm.pdf(d1)
    decay = -spot * pdf_d1 * volatility / (2 * sqrt_t)

    if kind is OptionType.CALL:
        delta = norm.cdf(d1)
        theta = (decay - risk_free_rate * strike * discount * norm.cdf(d2)) / 365
        rho = strike * time_to_expiry * discount * norm.cdf(d2) / 100
    else:
        delta = norm.cdf(d1) - 1
        theta = (decay + risk_free_rate * strike * discount * norm.cdf(-d2)) / 365
        rho = -strike * time_to_expiry * discount * norm.cdf(-d2) / 100

    return Greeks(
        delta=float(delta),
        gamma=float(pdf_d1 / (spot * volatility * sqrt_t)),
        theta=float(theta),
        vega=float(spot * pdf_d1 * sqrt_t / 100),
        rho=float(rho),
    )


__all__ = ["black_scholes_greeks", "black_scholes_price", "intrinsic_value"]
