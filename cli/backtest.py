"""CLI for replaying a strategy over a CSV of daily bars."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
import yaml

from backtest.optimize import optimize, walk_forward
from backtest.types import bars_from_frame
from core.config import get_settings, load_settings
from core.logging import configure_logging
from services.backtest.runner import BacktestError, run_backtest


def _parse_value(raw: str) -> Any:
    return yaml.safe_load(raw)


def _parse_params(items: List[str]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise SystemExit(f"invalid --param {item!r}, expected key=value")
        params[key.strip()] = _parse_value(value.strip())
    return params


def _parse_grid(items: List[str]) -> Dict[str, List[Any]]:
    grid: Dict[str, List[Any]] = {}
    for item in items:
        key, sep, values = item.partition("=")
        if not sep or not key:
            raise SystemExit(f"invalid --optimize-grid {item!r}, expected key=v1,v2")
        grid[key.strip()] = [_parse_value(v.strip()) for v in values.split(",") if v.strip()]
    return grid


def _merge_fixed_params(grid: Dict[str, List[Any]], params: Dict[str, Any]) -> Dict[str, List[Any]]:
    """Pin each ``--param`` as a single-value axis so every combination carries it."""

    overlap = sorted(set(grid) & set(params))
    if overlap:
        raise SystemExit(f"parameters given both as --param and --optimize-grid: {', '.join(overlap)}")
    merged = dict(grid)
    for key, value in params.items():
        merged[key] = [value]
    return merged


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Backtest a strategy on a CSV of OHLCV bars")
    parser.add_argument("--input", required=True, help="CSV with timestamp/date and OHLCV columns")
    parser.add_argument("--strategy", default="orb", help="Strategy key, e.g. sma_crossover")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        help="Strategy parameter as key=value; held fixed across an --optimize-grid sweep",
    )
    parser.add_argument(
        "--optimize-grid",
        action="append",
        default=[],
        help="Sweep a parameter as key=v1,v2,...; repeat for more keys",
    )
    parser.add_argument(
        "--walk-forward", action="store_true", help="Run walk-forward analysis over the grid"
    )
    parser.add_argument("--folds", type=int, default=5)
    parser.add_argument("--in-sample-ratio", type=float, default=0.7)
    parser.add_argument("--initial-capital", type=float, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config) if args.config else get_settings()
    configure_logging(args.log_level or settings.log_level, stream=sys.stderr)

    bars = bars_from_frame(pd.read_csv(args.input))
    capital = args.initial_capital if args.initial_capital is not None else settings.initial_capital

    try:
        if args.optimize_grid:
            grid = _merge_fixed_params(_parse_grid(args.optimize_grid), _parse_params(args.param))
            if args.walk_forward:
                output = walk_forward(
                    args.strategy,
                    bars,
                    capital,
                    grid,
                    in_sample_ratio=args.in_sample_ratio,
                    num_folds=args.folds,
                ).to_dict()
            else:
                output = optimize(args.strategy, bars, capital, grid).to_dict()
        else:
            report = run_backtest(
                args.strategy, bars, _parse_params(args.param), capital, settings=settings
            )
            output = report.to_dict()
    except BacktestError as exc:
        print(json.dumps({"error": str(exc), "statusCode": exc.status_code}))
        return 1
    except ValueError as exc:
        print(json.dumps({"error": str(exc)}))
        return 1

    print(json.dumps(output, indent=2, default=float))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
