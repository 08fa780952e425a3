"""Catalog of named multi-leg option strategies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from core.utils import round2, round_half_up
from services.options.pricing import black_scholes_price
from services.options.types import LegAction, OptionLeg, OptionType

CALL = OptionType.CALL
PUT = OptionType.PUT
BUY = LegAction.BUY
SELL = LegAction.SELL

CATEGORIES = ("bullish", "bearish", "neutral", "volatile")


@dataclass(frozen=True, slots=True)
class TemplateLeg:
    """Leg blueprint; ``offset`` counts strike intervals away from ATM."""

    type: OptionType
    offset: int
    action: LegAction
    qty: int = 1
    expiry: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StrategyTemplate:
    id: str
    name: str
    category: str
    legs: Tuple[TemplateLeg, ...]
    description: str
    ideal_condition: str
    risk_level: str

    def to_dict(self) -> Dict[str, Any]:
        legs: List[Dict[str, Any]] = []
        for leg in self.legs:
            item: Dict[str, Any] = {
                "type": leg.type.value,
                "strike": leg.offset,
                "action": leg.action.value,
                "qty": leg.qty,
            }
            if leg.expiry is not None:
                item["expiry"] = leg.expiry
            legs.append(item)
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "legs": legs,
            "description": self.description,
            "idealCondition": self.ideal_condition,
            "riskLevel": self.risk_level,
        }


STRATEGY_TEMPLATES: Tuple[StrategyTemplate, ...] = (
    StrategyTemplate(
        id="long-call",
        name="Long Call",
        category="bullish",
        legs=(TemplateLeg(CALL, 0, BUY),),
        description="Buy a call expecting a strong rise. Upside is open-ended; the loss is capped at the premium.",
        ideal_condition="Strong bullish view with a large upward move expected",
        risk_level="medium",
    ),
    StrategyTemplate(
        id="long-put",
        name="Long Put",
        category="bearish",
        legs=(TemplateLeg(PUT, 0, BUY),),
        description="Buy a put expecting a sharp fall. Profit is capped at strike minus premium; the loss is the premium.",
        ideal_condition="Strong bearish view with a large downward move expected",
        risk_level="medium",
    ),
    StrategyTemplate(
        id="covered-call",
        name="Covered Call",
        category="neutral",
        legs=(TemplateLeg(CALL, 0, SELL),),
        description="Sell a call against shares already held to collect premium income.",
        ideal_condition="Mildly bullish or flat, willing to cap upside for income",
        risk_level="low",
    ),
    StrategyTemplate(
        id="bull-call-spread",
        name="Bull Call Spread",
        category="bullish",
        legs=(TemplateLeg(CALL, -1, BUY), TemplateLeg(CALL, 1, SELL)),
        description="Buy a lower strike call and sell a higher strike call. Profit and risk are both limited.",
        ideal_condition="Moderately bullish, looking to cheapen a long call",
        risk_level="low",
    ),
    StrategyTemplate(
        id="bear-put-spread",
        name="Bear Put Spread",
        category="bearish",
        legs=(TemplateLeg(PUT, 1, BUY), TemplateLeg(PUT, -1, SELL)),
        description="Buy a higher strike put and sell a lower strike put. Profit and risk are both limited.",
        ideal_condition="Moderately bearish, looking to cheapen a long put",
        risk_level="low",
    ),
    StrategyTemplate(
        id="long-straddle",
        name="Long Straddle",
        category="volatile",
        legs=(TemplateLeg(CALL, 0, BUY), TemplateLeg(PUT, 0, BUY)),
        description="Buy a call and a put at the same strike to profit from a big move either way.",
        ideal_condition="Large move expected ahead of an event, direction unknown",
        risk_level="high",
    ),
    StrategyTemplate(
        id="short-straddle",
        name="Short Straddle",
        category="neutral",
        legs=(TemplateLeg(CALL, 0, SELL), TemplateLeg(PUT, 0, SELL)),
        description="Sell a call and a put at the same strike and keep the premium if price stays near it.",
        ideal_condition="Low expected volatility with no major events ahead",
        risk_level="high",
    ),
    StrategyTemplate(
        id="long-strangle",
        name="Long Strangle",
        category="volatile",
        legs=(TemplateLeg(CALL, 1, BUY), TemplateLeg(PUT, -1, BUY)),
        description="Buy an out-of-the-money call and put. Cheaper than a straddle but needs a bigger move.",
        ideal_condition="Big move expected at a lower entry cost than a straddle",
        risk_level="medium",
    ),
    StrategyTemplate(
        id="short-strangle",
        name="Short Strangle",
        category="neutral",
        legs=(TemplateLeg(CALL, 1, SELL), TemplateLeg(PUT, -1, SELL)),
        description="Sell an out-of-the-money call and put to earn time decay inside a range.",
        ideal_condition="Range-bound market with low volatility",
        risk_level="high",
    ),
    StrategyTemplate(
        id="iron-condor",
        name="Iron Condor",
        category="neutral",
        legs=(
            TemplateLeg(PUT, -2, BUY),
            TemplateLeg(PUT, -1, SELL),
            TemplateLeg(CALL, 1, SELL),
            TemplateLeg(CALL, 2, BUY),
        ),
        description="A bull put spread plus a bear call spread. Defined risk, profits in a range.",
        ideal_condition="Neutral view with price expected to hold a defined range",
        risk_level="low",
    ),
    StrategyTemplate(
        id="iron-butterfly",
        name="Iron Butterfly",
        category="neutral",
        legs=(
            TemplateLeg(PUT, -1, BUY),
            TemplateLeg(PUT, 0, SELL),
            TemplateLeg(CALL, 0, SELL),
            TemplateLeg(CALL, 1, BUY),
        ),
        description="A short straddle with protective wings. More credit, narrower profit zone.",
        ideal_condition="Price expected to pin near one level at expiry",
        risk_level="medium",
    ),
    StrategyTemplate(
        id="bull-put-spread",
        name="Bull Put Spread",
        category="bullish",
        legs=(TemplateLeg(PUT, 0, SELL), TemplateLeg(PUT, -1, BUY)),
        description="Sell a higher strike put and buy a lower strike put for a net credit.",
        ideal_condition="Mildly bullish, selling puts with protection",
        risk_level="low",
    ),
    StrategyTemplate(
        id="bear-call-spread",
        name="Bear Call Spread",
        category="bearish",
        legs=(TemplateLeg(CALL, 0, SELL), TemplateLeg(CALL, 1, BUY)),
        description="Sell a lower strike call and buy a higher strike call for a net credit.",
        ideal_condition="Mildly bearish, income with defined risk",
        risk_level="low",
    ),
    StrategyTemplate(
        id="long-call-butterfly",
        name="Long Call Butterfly",
        category="neutral",
        legs=(
            TemplateLeg(CALL, -1, BUY),
            TemplateLeg(CALL, 0, SELL, qty=2),
            TemplateLeg(CALL, 1, BUY),
        ),
        description="Buy one lower call, sell two middle calls, buy one higher call. Peaks at the middle strike.",
        ideal_condition="Minimal movement expected, low-cost bet on pinning",
        risk_level="low",
    ),
    StrategyTemplate(
        id="calendar-spread",
        name="Calendar Spread",
        category="neutral",
        legs=(
            TemplateLeg(CALL, 0, SELL, expiry="near"),
            TemplateLeg(CALL, 0, BUY, expiry="far"),
        ),
        description="Sell a near-expiry call and buy a far-expiry call at the same strike.",
        ideal_condition="Flat near term with higher volatility expected later",
        risk_level="medium",
    ),
    StrategyTemplate(
        id="ratio-call-spread",
        name="Ratio Call Spread",
        category="bullish",
        legs=(TemplateLeg(CALL, 0, BUY), TemplateLeg(CALL, 1, SELL, qty=2)),
        description="Buy one ATM call and sell two OTM calls, often for little or no debit. Exposed to big rallies.",
        ideal_condition="Mildly bullish without a move through the short strikes",
        risk_level="high",
    ),
    StrategyTemplate(
        id="jade-lizard",
        name="Jade Lizard",
        category="bullish",
        legs=(
            TemplateLeg(PUT, -1, SELL),
            TemplateLeg(CALL, 1, SELL),
            TemplateLeg(CALL, 2, BUY),
        ),
        description="A short put plus a bear call spread. No upside risk when the credit exceeds the call spread width.",
        ideal_condition="Bullish to neutral, collecting premium without upside risk",
        risk_level="medium",
    ),
)

_BY_ID: Dict[str, StrategyTemplate] = {template.id: template for template in STRATEGY_TEMPLATES}


def list_templates() -> List[StrategyTemplate]:
    return list(STRATEGY_TEMPLATES)


def get_template(template_id: str) -> Optional[StrategyTemplate]:
    return _BY_ID.get(template_id)


def templates_by_category(category: str) -> List[StrategyTemplate]:
    return [template for template in STRATEGY_TEMPLATES if template.category == category]


def atm_strike(spot: float, strike_interval: float) -> float:
    return round_half_up(spot / strike_interval) * strike_interval


def build_template_legs(
    template: StrategyTemplate | str,
    spot: float,
    strike_interval: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
) -> List[OptionLeg]:
    """Concrete legs for ``template`` around the ATM strike, premiums at fair value."""

    if isinstance(template, str):
        found = get_template(template)
        if found is None:
            raise ValueError(f"unknown strategy template: {template!r}")
        template = found
    if strike_interval <= 0:
        raise ValueError("strike_interval must be positive")

    atm = atm_strike(spot, strike_interval)
    legs: List[OptionLeg] = []
    for blueprint in template.legs:
        strike = atm + blueprint.offset * strike_interval
        premium = black_scholes_price(
            spot, strike, time_to_expiry, volatility, risk_free_rate, blueprint.type
        )
        legs.append(
            OptionLeg(
                type=blueprint.type,
                strike=strike,
                action=blueprint.action,
                qty=blueprint.qty,
                premium=round2(premium),
                expiry=blueprint.expiry,
            )
        )
    return legs


__all__ = [
    "CATEGORIES",
    "STRATEGY_TEMPLATES",
    "StrategyTemplate",
    "TemplateLeg",
    "atm_strike",
    "build_template_legs",
    "get_template",
    "list_templates",
    "templates_by_category",
]
