"""Parameter sweeps and walk-forward analysis over the bar simulators."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from backtest.metrics import Metrics, compute_metrics
from backtest.types import Bar
from core.utils import round2
from strategies.registry import StrategyId, get_registry

logger = logging.getLogger(__name__)

ParamGrid = Mapping[str, Sequence[Any]]

MIN_WALK_FORWARD_BARS = 60
MIN_FOLD_BARS = 20
MIN_IN_SAMPLE_BARS = 15
MIN_OUT_SAMPLE_BARS = 5


def iter_param_combinations(grid: ParamGrid) -> Iterator[Dict[str, Any]]:
    """Cartesian product of ``grid``; the last key varies fastest."""

    keys = list(grid)
    if not keys:
        yield {}
        return
    for values in itertools.product(*(list(grid[key]) for key in keys)):
        yield dict(zip(keys, values))


def _combinations(grid: ParamGrid) -> List[Dict[str, Any]]:
    normalized = {key: list(values) for key, values in grid.items()}
    if any(not values for values in normalized.values()):
        raise ValueError("Empty parameter grid")
    return list(iter_param_combinations(normalized))


@dataclass(slots=True)
class ParamResult:
    params: Dict[str, Any]
    metrics: Metrics
    final_equity: float

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"params": dict(self.params), "finalEquity": self.final_equity}
        payload.update(self.metrics.to_dict())
        return payload


@dataclass(slots=True)
class OptimizeResult:
    best: ParamResult
    results: List[ParamResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bestParams": dict(self.best.params),
            "bestSharpe": self.best.metrics.sharpe_ratio,
            "bestWinRate": self.best.metrics.win_rate,
            "bestProfitFactor": self.best.metrics.profit_factor,
            "allResults": [row.to_dict() for row in self.results],
        }


def evaluate(
    strategy: str | StrategyId,
    bars: Sequence[Bar],
    initial_capital: float,
    params: Mapping[str, Any],
) -> ParamResult:
    result = get_registry().simulate(strategy, bars, params, initial_capital)
    metrics = compute_metrics(result.trades, initial_capital, result.equity_curve)
    final_equity = result.final_equity if result.final_equity is not None else initial_capital
    return ParamResult(params=dict(params), metrics=metrics, final_equity=final_equity)


def optimize(
    strategy: str | StrategyId,
    bars: Sequence[Bar],
    initial_capital: float,
    param_grid: ParamGrid,
) -> OptimizeResult:
    """Backtest every combination in ``param_grid`` and rank by Sharpe ratio."""

    combos = _combinations(param_grid)
    results = [evaluate(strategy, bars, initial_capital, combo) for combo in combos]
    results.sort(key=lambda row: row.metrics.sharpe_ratio, reverse=True)
    best = results[0] if results else ParamResult({}, Metrics(), initial_capital)
    logger.info(
        "Parameter sweep complete",
        extra={"_extra_combinations": len(results), "_extra_best": best.params},
    )
    return OptimizeResult(best=best, results=results)


@dataclass(slots=True)
class FoldResult:
    fold: int
    in_sample_sharpe: float
    out_sample_sharpe: float
    in_sample_win_rate: float
    out_sample_win_rate: float
    best_params: Dict[str, Any]
    out_sample_trades: int
    out_sample_pnl: float
    degradation: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fold": self.fold,
            "inSampleSharpe": self.in_sample_sharpe,
            "outSampleSharpe": self.out_sample_sharpe,
            "inSampleWinRate": self.in_sample_win_rate,
            "outSampleWinRate": self.out_sample_win_rate,
            "bestParams": dict(self.best_params),
            "outSampleTrades": self.out_sample_trades,
            "outSamplePnl": self.out_sample_pnl,
            "degradation": self.degradation,
        }


@dataclass(slots=True)
class WalkForwardResult:
    folds: List[FoldResult]
    avg_in_sample_sharpe: float
    avg_out_sample_sharpe: float
    avg_degradation: float
    total_out_sample_trades: int
    total_out_sample_pnl: float
    consistency_score: float
    best_robust_params: Dict[str, Any]
    overfitting_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folds": [fold.to_dict() for fold in self.folds],
            "aggregate": {
                "avgInSampleSharpe": self.avg_in_sample_sharpe,
                "avgOutSampleSharpe": self.avg_out_sample_sharpe,
                "avgDegradation": self.avg_degradation,
                "totalOutSampleTrades": self.total_out_sample_trades,
                "totalOutSamplePnl": self.total_out_sample_pnl,
                "consistencyScore": self.consistency_score,
            },
            "bestRobustParams": dict(self.best_robust_params),
            "overfittingScore": self.overfitting_score,
        }


def _params_key(params: Mapping[str, Any]) -> tuple:
    return tuple(sorted((str(k), repr(v)) for k, v in params.items()))


def walk_forward(
    strategy: str | StrategyId,
    bars: Sequence[Bar],
    initial_capital: float,
    param_grid: ParamGrid,
    *,
    in_sample_ratio: float = 0.7,
    num_folds: int = 5,
) -> WalkForwardResult:
    """Rolling in-sample optimisation with out-of-sample evaluation.

    Bars are cut into ``num_folds`` consecutive folds (the last one absorbs the
    remainder); each fold is split at ``in_sample_ratio``. The best in-sample
    combination by Sharpe ratio is replayed on the out-of-sample slice.
    """

    n = len(bars)
    if n < MIN_WALK_FORWARD_BARS:
        raise ValueError(f"Need at least {MIN_WALK_FORWARD_BARS} bars for walk-forward analysis")
    folds_wanted = min(max(int(num_folds), 2), 10)
    ratio = min(max(float(in_sample_ratio), 0.5), 0.9)
    fold_size = n // folds_wanted
    if fold_size < MIN_FOLD_BARS:
        raise ValueError("Not enough data for requested number of folds")
    combos = _combinations(param_grid)

    folds: List[FoldResult] = []
    oos_by_params: Dict[tuple, List[float]] = {}
    params_by_key: Dict[tuple, Dict[str, Any]] = {}

    for fold in range(folds_wanted):
        start = fold * fold_size
        end = n if fold == folds_wanted - 1 else (fold + 1) * fold_size
        fold_bars = bars[start:end]
        split = int(len(fold_bars) * ratio)
        if split < MIN_IN_SAMPLE_BARS or len(fold_bars) - split < MIN_OUT_SAMPLE_BARS:
            logger.debug("Skipping short fold", extra={"_extra_fold": fold})
            continue
        in_sample = fold_bars[:split]
        out_sample = fold_bars[split:]

        # max() keeps the first combination on Sharpe ties
        candidates = [evaluate(strategy, in_sample, initial_capital, combo) for combo in combos]
        best = max(candidates, key=lambda row: row.metrics.sharpe_ratio)

        oos = evaluate(strategy, out_sample, initial_capital, best.params)
        is_sharpe = best.metrics.sharpe_ratio
        oos_sharpe = oos.metrics.sharpe_ratio
        degradation = 1.0 - oos_sharpe / is_sharpe if is_sharpe > 0 else 0.0

        key = _params_key(best.params)
        oos_by_params.setdefault(key, []).append(oos_sharpe)
        params_by_key.setdefault(key, dict(best.params))

        folds.append(
            FoldResult(
                fold=fold,
                in_sample_sharpe=round2(is_sharpe),
                out_sample_sharpe=round2(oos_sharpe),
                in_sample_win_rate=round2(best.metrics.win_rate),
                out_sample_win_rate=round2(oos.metrics.win_rate),
                best_params=dict(best.params),
                out_sample_trades=oos.metrics.total_trades,
                out_sample_pnl=round2(oos.final_equity - initial_capital),
                degradation=round2(degradation),
            )
        )

    if not folds:
        raise ValueError("No valid folds produced")

    count = len(folds)
    avg_is = sum(f.in_sample_sharpe for f in folds) / count
    avg_oos = sum(f.out_sample_sharpe for f in folds) / count
    avg_deg = sum(f.degradation for f in folds) / count
    consistency = sum(1 for f in folds if f.out_sample_sharpe > 0) / count
    robust_key = max(
        oos_by_params, key=lambda k: sum(oos_by_params[k]) / len(oos_by_params[k])
    )
    overfit = (avg_is - avg_oos) / avg_is if avg_is > 0 else 0.0

    return WalkForwardResult(
        folds=folds,
        avg_in_sample_sharpe=round2(avg_is),
        avg_out_sample_sharpe=round2(avg_oos),
        avg_degradation=round2(avg_deg),
        total_out_sample_trades=sum(f.out_sample_trades for f in folds),
        total_out_sample_pnl=round2(sum(f.out_sample_pnl for f in folds)),
        consistency_score=round2(consistency),
        best_robust_params=params_by_key[robust_key],
        overfitting_score=round2(min(max(overfit, 0.0), 1.0)),
    )
