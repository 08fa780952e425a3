"""Technical indicator series used by the bar simulators.

Each helper returns a list aligned with its input where warm-up positions
hold ``None``.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

Series = List[Optional[float]]

# relative floor below which a window counts as flat (float summation noise)
_ZERO_DISPERSION = 1e-12


def simple_moving_average(values: Sequence[float], period: int) -> Series:
    if period <= 0:
        raise ValueError("SMA period must be positive")
    result: Series = []
    for i in range(len(values)):
        if i < period - 1:
            result.append(None)
            continue
        window = values[i - period + 1 : i + 1]
        result.append(sum(window) / period)
    return result


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100 - 100 / (1 + avg_gain / avg_loss)


def wilder_rsi(close: Sequence[float], period: int = 14) -> Series:
    """Relative Strength Index with Wilder smoothing.

    The first value appears at index ``period``; later values blend the
    previous average with the latest change using weight ``1 / period``.
    """

    if period <= 0:
        raise ValueError("RSI period must be positive")
    if not close:
        return []
    result: Series = [None]
    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, len(close)):
        diff = close[i] - close[i - 1]
        gain = diff if diff > 0 else 0.0
        loss = -diff if diff < 0 else 0.0
        if i <= period:
            avg_gain += gain
            avg_loss += loss
            if i == period:
                avg_gain /= period
                avg_loss /= period
                result.append(_rsi_from_averages(avg_gain, avg_loss))
            else:
                result.append(None)
        else:
            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period
            result.append(_rsi_from_averages(avg_gain, avg_loss))
    return result


def rolling_zscore(series: Sequence[float], window: int = 20) -> Series:
    """Z-score of each value against the trailing ``window`` (population std).

    Positions where the window has zero dispersion are ``None``.
    """

    if window <= 1:
        raise ValueError("Z-score window must be greater than 1")
    result: Series = []
    for i in range(len(series)):
        if i < window - 1:
            result.append(None)
            continue
        window_data = series[i - window + 1 : i + 1]
        mu = sum(window_data) / window
        variance = sum((value - mu) ** 2 for value in window_data) / window
        std = math.sqrt(variance)
        if std <= _ZERO_DISPERSION * max(abs(mu), 1.0):
            result.append(None)
            continue
        result.append(float((series[i] - mu) / std))
    return result


def trailing_return(series: Sequence[float], index: int, lookback: int) -> Optional[float]:
    """Fractional change from ``index - lookback`` to ``index``."""

    if index < lookback or lookback <= 0:
        return None
    base = series[index - lookback]
    if base == 0:
        return None
    return (series[index] - base) / base
