"""Options analytics facade wired to the configured market assumptions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.config import AnalyticsSettings, get_settings
from services.options.analyzer import payoff_curve, strategy_greeks
from services.options.chain import analyze_open_interest, iv_percentile, max_pain
from services.options.scenario import scenario_simulation
from services.options.templates import (
    StrategyTemplate,
    build_template_legs,
    get_template,
    list_templates,
    templates_by_category,
)
from services.options.types import (
    MaxPainResult,
    OIAnalysis,
    OptionLeg,
    PayoffPoint,
    Scenario,
    ScenarioResult,
    StrategyGreeks,
    parse_legs,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PayoffReport:
    payoff_curve: List[PayoffPoint]
    greeks: StrategyGreeks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payoffCurve": [point.to_dict() for point in self.payoff_curve],
            "greeks": self.greeks.to_dict(),
        }


class OptionsAnalytics:
    """Stateless entry point for the option analytics used by request handlers."""

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        self.settings = settings or get_settings()

    def get_templates(self) -> List[StrategyTemplate]:
        return list_templates()

    def get_template(self, template_id: str) -> Optional[StrategyTemplate]:
        return get_template(template_id)

    def get_templates_by_category(self, category: str) -> List[StrategyTemplate]:
        return templates_by_category(category)

    def build_template(
        self, template_id: str, spot_price: float, strike_interval: float
    ) -> List[OptionLeg]:
        cfg = self.settings
        return build_template_legs(
            template_id,
            spot_price,
            strike_interval,
            cfg.time_to_expiry,
            cfg.default_volatility,
            cfg.risk_free_rate,
        )

    def compute_payoff(
        self, legs: Sequence[OptionLeg | Mapping[str, Any]], spot_price: float
    ) -> PayoffReport:
        cfg = self.settings
        parsed = parse_legs(legs)
        curve = payoff_curve(
            parsed, spot_price, steps=cfg.payoff_steps, range_pct=cfg.payoff_range_pct
        )
        greeks = strategy_greeks(
            parsed,
            spot_price,
            cfg.time_to_expiry,
            cfg.default_volatility,
            cfg.risk_free_rate,
            range_pct=cfg.greeks_range_pct,
            steps=cfg.greeks_steps,
        )
        logger.debug(
            "Payoff computed",
            extra={"_extra_legs": len(parsed), "_extra_spot": spot_price},
        )
        return PayoffReport(payoff_curve=curve, greeks=greeks)

    def compute_max_pain(
        self,
        strikes: Sequence[float],
        call_oi: Mapping[Any, Any],
        put_oi: Mapping[Any, Any],
    ) -> MaxPainResult:
        return max_pain(strikes, call_oi, put_oi)

    def iv_percentile(self, current_iv: float, historical_ivs: Sequence[float]) -> int:
        return iv_percentile(current_iv, historical_ivs)

    def analyze_open_interest(self, strikes: Sequence[float], **chain: Mapping[Any, Any]) -> List[OIAnalysis]:
        return analyze_open_interest(strikes, **chain)

    def scenario_simulation(
        self,
        legs: Sequence[OptionLeg | Mapping[str, Any]],
        spot_price: float,
        scenarios: Sequence[Scenario | Mapping[str, Any]],
    ) -> List[ScenarioResult]:
        cfg = self.settings
        return scenario_simulation(
            parse_legs(legs),
            spot_price,
            scenarios,
            days_to_expiry=cfg.days_to_expiry,
            base_volatility=cfg.default_volatility,
            risk_free_rate=cfg.risk_free_rate,
        )


__all__ = ["OptionsAnalytics", "PayoffReport"]
