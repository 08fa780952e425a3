"""Backtest metrics calculations."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Sequence

import numpy as np

from backtest.types import EquityPoint, TradeRecord
from core.utils import round2, round4

TRADING_DAYS = 252
PROFIT_FACTOR_CAP = 99.0
_DAYS_PER_YEAR = 365.25
_MIN_YEARS = 1 / 12


@dataclass(frozen=True, slots=True)
class Metrics:
    """Performance summary. Percent-valued fields are in percent units."""

    cagr: float = 0.0
    max_drawdown: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    total_trades: int = 0
    avg_win: float = 0.0
    avg_loss: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "cagr": self.cagr,
            "maxDrawdown": self.max_drawdown,
            "sharpeRatio": self.sharpe_ratio,
            "sortinoRatio": self.sortino_ratio,
            "winRate": self.win_rate,
            "profitFactor": self.profit_factor,
            "totalTrades": self.total_trades,
            "avgWin": self.avg_win,
            "avgLoss": self.avg_loss,
        }


def elapsed_years(equity_curve: Sequence[EquityPoint]) -> float:
    """Span of the curve in years, floored at one month."""

    if len(equity_curve) < 2:
        return _MIN_YEARS
    days = (equity_curve[-1].date - equity_curve[0].date).days
    return max(days / _DAYS_PER_YEAR, _MIN_YEARS)


def cagr(final_equity: float, initial_capital: float, years: float) -> float:
    """Compound annual growth rate as a fraction."""

    if initial_capital <= 0 or years <= 0:
        return 0.0
    ratio = final_equity / initial_capital
    if ratio <= 0:
        return -1.0
    return ratio ** (1 / years) - 1


def max_drawdown(equity_curve: Sequence[EquityPoint], initial_capital: float) -> float:
    """Largest peak-to-trough drop in percent, starting from ``initial_capital``."""

    peak = initial_capital
    worst = 0.0
    for point in equity_curve:
        if point.value > peak:
            peak = point.value
        if peak <= 0:
            continue
        drawdown = (peak - point.value) / peak * 100
        if drawdown > worst:
            worst = drawdown
    return worst


def _annualization(years: float, total_trades: int) -> float:
    trades_per_year_estimate = max(years * TRADING_DAYS / total_trades, 1.0)
    return math.sqrt(TRADING_DAYS / trades_per_year_estimate)


def sharpe_ratio(returns: Sequence[float], annualization: float) -> float:
    if not returns:
        return 0.0
    arr = np.asarray(returns, dtype=float)
    std = float(arr.std())
    if std == 0:
        return 0.0
    return float(arr.mean() / std * annualization)


def sortino_ratio(returns: Sequence[float], annualization: float) -> float:
    if not returns:
        return 0.0
    arr = np.asarray(returns, dtype=float)
    downside = arr[arr < 0]
    if downside.size == 0:
        return 0.0
    down_dev = float(np.sqrt(np.mean(downside**2)))
    if down_dev == 0:
        return 0.0
    return float(arr.mean() / down_dev * annualization)


def compute_metrics(
    trades: Sequence[TradeRecord],
    initial_capital: float,
    equity_curve: Sequence[EquityPoint],
) -> Metrics:
    """Derive performance metrics from a trade log and equity curve.

    Sharpe and Sortino use per-trade percentage returns annualized by
    ``sqrt(252 / max(years * 252 / trades, 1))``.
    """

    total_trades = len(trades)
    if total_trades == 0:
        return Metrics()

    wins = [t for t in trades if t.pnl > 0]
    losses = [t for t in trades if t.pnl < 0]
    win_rate = len(wins) / total_trades * 100
    gross_wins = sum(t.pnl for t in wins)
    gross_losses = abs(sum(t.pnl for t in losses))
    if gross_losses > 0:
        profit_factor = gross_wins / gross_losses
    else:
        profit_factor = PROFIT_FACTOR_CAP if gross_wins > 0 else 0.0
    avg_win = sum(t.pnl_percent for t in wins) / len(wins) if wins else 0.0
    avg_loss = sum(t.pnl_percent for t in losses) / len(losses) if losses else 0.0

    final_equity = equity_curve[-1].value if equity_curve else initial_capital
    years = elapsed_years(equity_curve)
    growth = cagr(final_equity, initial_capital, years) * 100

    returns = [t.pnl_percent for t in trades]
    annualization = _annualization(years, total_trades)

    return Metrics(
        cagr=round2(growth),
        max_drawdown=round2(max_drawdown(equity_curve, initial_capital)),
        sharpe_ratio=round2(sharpe_ratio(returns, annualization)),
        sortino_ratio=round2(sortino_ratio(returns, annualization)),
        win_rate=round2(win_rate),
        profit_factor=round2(profit_factor),
        total_trades=total_trades,
        avg_win=round2(avg_win),
        avg_loss=round2(avg_loss),
    )


@dataclass(frozen=True, slots=True)
class RiskReport:
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    calmar_ratio: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    var_95: float = 0.0
    var_99: float = 0.0
    cvar_95: float = 0.0
    volatility: float = 0.0
    annualized_return: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def equity_returns(equity_curve: Sequence[EquityPoint]) -> list[float]:
    """Simple returns between consecutive equity points."""

    values = [point.value for point in equity_curve]
    returns: list[float] = []
    for prev, cur in zip(values, values[1:]):
        returns.append((cur - prev) / prev if prev != 0 else 0.0)
    return returns


def compute_risk_report(
    returns: Sequence[float],
    initial_capital: float,
    risk_free_rate: float | None = None,
) -> RiskReport:
    """Daily-returns risk profile.

    ``risk_free_rate`` is per period and defaults to ``0.06 / 252``. Value at
    risk figures are historical and expressed in cash against
    ``initial_capital``.
    """

    if not returns:
        return RiskReport()

    rf = 0.06 / TRADING_DAYS if risk_free_rate is None else risk_free_rate
    arr = np.asarray(returns, dtype=float)
    n = arr.size
    mean_excess = float(np.mean(arr - rf))
    std_dev = float(arr.std())
    volatility = std_dev * math.sqrt(TRADING_DAYS)
    annualized_return = float(arr.mean()) * TRADING_DAYS

    sharpe = mean_excess / std_dev * math.sqrt(TRADING_DAYS) if std_dev > 0 else 0.0
    negative = arr[arr < 0]
    down_dev = float(np.sqrt(np.mean(negative**2))) if negative.size else 0.0
    sortino = mean_excess / down_dev * math.sqrt(TRADING_DAYS) if down_dev > 0 else 0.0

    nav = np.cumprod(1.0 + arr) * initial_capital
    peaks = np.maximum.accumulate(np.concatenate(([initial_capital], nav)))[1:]
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(peaks > 0, (peaks - nav) / peaks, 0.0)
    max_dd = max(float(drawdowns.max()), 0.0)
    calmar = annualized_return / (max_dd * 100) if max_dd > 0 else 0.0

    ordered = np.sort(arr)
    idx_95 = int((1.0 - 0.95) * n)
    idx_99 = int((1.0 - 0.99) * n)
    var_95 = -float(ordered[idx_95]) * initial_capital if idx_95 < n else 0.0
    var_99 = -float(ordered[idx_99]) * initial_capital if idx_99 < n else 0.0
    cvar_95 = -float(ordered[:idx_95].mean()) * initial_capital if idx_95 > 0 else var_95

    return RiskReport(
        sharpe_ratio=round2(sharpe),
        sortino_ratio=round2(sortino),
        calmar_ratio=round4(calmar),
        max_drawdown=round2(max_dd * initial_capital),
        max_drawdown_percent=round2(max_dd * 100),
        var_95=round2(var_95),
        var_99=round2(var_99),
        cvar_95=round2(cvar_95),
        volatility=round2(volatility * 100),
        annualized_return=round2(annualized_return * 100),
    )
