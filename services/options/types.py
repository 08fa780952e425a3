"""Option leg and analytics result types."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence


class OptionType(str, Enum):
    CALL = "CALL"
    PUT = "PUT"

    @classmethod
    def parse(cls, value: Any) -> "OptionType":
        if isinstance(value, cls):
            return value
        token = str(value).strip().upper()
        if token in {"CALL", "C", "CE"}:
            return cls.CALL
        if token in {"PUT", "P", "PE"}:
            return cls.PUT
        raise ValueError(f"unknown option type: {value!r}")


class LegAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @property
    def sign(self) -> int:
        return 1 if self is LegAction.BUY else -1

    @classmethod
    def parse(cls, value: Any) -> "LegAction":
        if isinstance(value, cls):
            return value
        token = str(value).strip().upper()
        if token in {"BUY", "LONG"}:
            return cls.BUY
        if token in {"SELL", "SHORT", "WRITE"}:
            return cls.SELL
        raise ValueError(f"unknown leg action: {value!r}")


@dataclass(frozen=True, slots=True)
class OptionLeg:
    """A single option position within a multi-leg strategy."""

    type: OptionType
    strike: float
    action: LegAction
    qty: int = 1
    premium: float = 0.0
    expiry: Optional[str] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "OptionLeg":
        return cls(
            type=OptionType.parse(payload["type"]),
            strike=float(payload["strike"]),
            action=LegAction.parse(payload["action"]),
            qty=int(payload.get("qty", 1)),
            premium=float(payload.get("premium", 0.0) or 0.0),
            expiry=payload.get("expiry"),
        )

    @property
    def signed_qty(self) -> int:
        return self.action.sign * self.qty

    def intrinsic(self, spot: float) -> float:
        if self.type is OptionType.CALL:
            return max(spot - self.strike, 0.0)
        return max(self.strike - spot, 0.0)

    def expiry_pnl(self, spot: float) -> float:
        """Profit or loss of the leg at expiry net of the premium paid or received."""

        return (self.intrinsic(spot) - self.premium) * self.signed_qty

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "strike": self.strike,
            "action": self.action.value,
            "qty": self.qty,
            "premium": self.premium,
        }
        if self.expiry is not None:
            payload["expiry"] = self.expiry
        return payload


@dataclass(frozen=True, slots=True)
class Greeks:
    """Per-unit sensitivities. Theta is per calendar day, vega and rho per 1%."""

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    rho: float = 0.0

    def scaled(self, factor: float) -> "Greeks":
        return Greeks(
            delta=self.delta * factor,
            gamma=self.gamma * factor,
            theta=self.theta * factor,
            vega=self.vega * factor,
            rho=self.rho * factor,
        )

    def __add__(self, other: "Greeks") -> "Greeks":
        return Greeks(
            delta=self.delta + other.delta,
            gamma=self.gamma + other.gamma,
            theta=self.theta + other.theta,
            vega=self.vega + other.vega,
            rho=self.rho + other.rho,
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "delta": self.delta,
            "gamma": self.gamma,
            "theta": self.theta,
            "vega": self.vega,
            "rho": self.rho,
        }


def _json_bound(value: float) -> float | str:
    if math.isinf(value):
        return "unbounded"
    return value


@dataclass(frozen=True, slots=True)
class StrategyGreeks:
    """Aggregated Greeks and payoff bounds of a leg set.

    ``max_profit`` is ``math.inf`` and ``max_loss`` is ``-math.inf`` when the
    expiry payoff is unbounded in that direction.
    """

    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float
    net_premium: float
    max_profit: float
    max_loss: float
    breakevens: List[float] = field(default_factory=list)

    @property
    def unbounded_profit(self) -> bool:
        return math.isinf(self.max_profit)

    @property
    def unbounded_loss(self) -> bool:
        return math.isinf(self.max_loss)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delta": self.delta,
            "gamma": self.gamma,
            "theta": self.theta,
            "vega": self.vega,
            "rho": self.rho,
            "netPremium": self.net_premium,
            "maxProfit": _json_bound(self.max_profit),
            "maxLoss": _json_bound(self.max_loss),
            "breakevens": list(self.breakevens),
        }


@dataclass(frozen=True, slots=True)
class PayoffPoint:
    spot_price: float
    pnl: float

    def to_dict(self) -> Dict[str, float]:
        return {"spotPrice": self.spot_price, "pnl": self.pnl}


@dataclass(frozen=True, slots=True)
class PainPoint:
    strike: float
    total_pain: float

    def to_dict(self) -> Dict[str, float]:
        return {"strike": self.strike, "totalPain": self.total_pain}


@dataclass(frozen=True, slots=True)
class MaxPainResult:
    max_pain_strike: float
    pain_by_strike: List[PainPoint]
    call_oi: Dict[float, float] = field(default_factory=dict)
    put_oi: Dict[float, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxPainStrike": self.max_pain_strike,
            "painByStrike": [point.to_dict() for point in self.pain_by_strike],
            "callOI": {str(k): v for k, v in self.call_oi.items()},
            "putOI": {str(k): v for k, v in self.put_oi.items()},
        }


@dataclass(frozen=True, slots=True)
class Scenario:
    spot_change_pct: float = 0.0
    iv_change_pct: float = 0.0
    days_elapsed: float = 0.0

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Scenario":
        return cls(
            spot_change_pct=float(payload.get("spotChangePct", payload.get("spotChange", 0.0))),
            iv_change_pct=float(payload.get("ivChangePct", payload.get("ivChange", 0.0))),
            days_elapsed=float(payload.get("daysElapsed", 0.0)),
        )

    @property
    def label(self) -> str:
        spot_sign = "+" if self.spot_change_pct >= 0 else ""
        iv_sign = "+" if self.iv_change_pct >= 0 else ""
        return (
            f"Spot {spot_sign}{self.spot_change_pct:g}%, "
            f"IV {iv_sign}{self.iv_change_pct:g}%, {self.days_elapsed:g}d"
        )


@dataclass(frozen=True, slots=True)
class ScenarioResult:
    label: str
    spot_price: float
    pnl: float
    scenario: Scenario

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "spotPrice": self.spot_price, "pnl": self.pnl}


@dataclass(frozen=True, slots=True)
class OIAnalysis:
    strike: float
    call_oi: float
    put_oi: float
    call_oi_change: float
    put_oi_change: float
    call_iv: float
    put_iv: float
    pcr: float
    signal: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strike": self.strike,
            "callOI": self.call_oi,
            "putOI": self.put_oi,
            "callOIChange": self.call_oi_change,
            "putOIChange": self.put_oi_change,
            "callIV": self.call_iv,
            "putIV": self.put_iv,
            "pcr": self.pcr,
            "signal": self.signal,
        }


def parse_legs(payload: Sequence[Mapping[str, Any] | OptionLeg]) -> List[OptionLeg]:
    return [leg if isinstance(leg, OptionLeg) else OptionLeg.from_mapping(leg) for leg in payload]
