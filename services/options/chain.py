"""Option chain statistics: max pain, IV percentile and open-interest signals."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.utils import round2, round_half_up, to_float
from services.options.types import MaxPainResult, OIAnalysis, PainPoint

StrikeMap = Mapping[Any, Any]

BULLISH_PCR = 1.3
BEARISH_PCR = 0.7


def normalize_strike_map(values: Optional[StrikeMap]) -> Dict[float, float]:
    """Key a per-strike mapping by float strike; JSON payloads key by string."""

    if not values:
        return {}
    return {float(strike): to_float(value) for strike, value in values.items()}


def max_pain(
    strikes: Sequence[float],
    call_oi: Optional[StrikeMap] = None,
    put_oi: Optional[StrikeMap] = None,
) -> MaxPainResult:
    """Strike at which option writers pay out the least at expiry.

    Pain at a candidate price ``P`` sums ``call_oi[K] * max(P - K, 0)`` and
    ``put_oi[K] * max(K - P, 0)`` over every listed strike ``K``.
    ``pain_by_strike`` is ordered by ascending total pain; equal pain keeps
    input order, so ties go to the first strike listed. Missing open
    interest counts as zero.
    """

    calls = normalize_strike_map(call_oi)
    puts = normalize_strike_map(put_oi)
    levels = [float(strike) for strike in strikes]

    table: List[PainPoint] = []
    for expiry_price in levels:
        total = 0.0
        for strike in levels:
            total += max(expiry_price - strike, 0.0) * calls.get(strike, 0.0)
            total += max(strike - expiry_price, 0.0) * puts.get(strike, 0.0)
        table.append(PainPoint(strike=expiry_price, total_pain=total))

    table.sort(key=lambda point: point.total_pain)
    return MaxPainResult(
        max_pain_strike=table[0].strike if table else 0.0,
        pain_by_strike=table,
        call_oi=calls,
        put_oi=puts,
    )


def iv_percentile(current_iv: float, historical_ivs: Sequence[float]) -> int:
    """Share of history strictly below ``current_iv``, in whole percent.

    Samples equal to ``current_iv`` are left out of the denominator so the
    historical maximum scores 100 and the minimum scores 0. An empty history
    is neutral (50); a history made only of ``current_iv`` scores 0.
    """

    if not historical_ivs:
        return 50
    below = sum(1 for iv in historical_ivs if iv < current_iv)
    equal = sum(1 for iv in historical_ivs if iv == current_iv)
    denominator = len(historical_ivs) - equal
    if denominator <= 0:
        return 0
    return int(round_half_up(below / denominator * 100))


def _signal(pcr: float) -> str:
    if pcr > BULLISH_PCR:
        return "bullish"
    if pcr < BEARISH_PCR:
        return "bearish"
    return "neutral"


def analyze_open_interest(
    strikes: Sequence[float],
    call_oi: Optional[StrikeMap] = None,
    put_oi: Optional[StrikeMap] = None,
    call_oi_change: Optional[StrikeMap] = None,
    put_oi_change: Optional[StrikeMap] = None,
    call_iv: Optional[StrikeMap] = None,
    put_iv: Optional[StrikeMap] = None,
) -> List[OIAnalysis]:
    """Per-strike put/call ratio with a contrarian sentiment label."""

    calls = normalize_strike_map(call_oi)
    puts = normalize_strike_map(put_oi)
    calls_chg = normalize_strike_map(call_oi_change)
    puts_chg = normalize_strike_map(put_oi_change)
    calls_iv = normalize_strike_map(call_iv)
    puts_iv = normalize_strike_map(put_iv)

    rows: List[OIAnalysis] = []
    for raw_strike in strikes:
        strike = float(raw_strike)
        c_oi = calls.get(strike, 0.0)
        p_oi = puts.get(strike, 0.0)
        pcr = p_oi / c_oi if c_oi > 0 else 0.0
        rows.append(
            OIAnalysis(
                strike=strike,
                call_oi=c_oi,
                put_oi=p_oi,
                call_oi_change=calls_chg.get(strike, 0.0),
                put_oi_change=puts_chg.get(strike, 0.0),
                call_iv=calls_iv.get(strike, 0.0),
                put_iv=puts_iv.get(strike, 0.0),
                pcr=round2(pcr),
                signal=_signal(pcr),
            )
        )
    return rows


__all__ = ["analyze_open_interest", "iv_percentile", "max_pain", "normalize_strike_map"]
