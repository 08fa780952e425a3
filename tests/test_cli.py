"""Subprocess checks for the backtest and options command-line entry points."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pandas as pd

from tests.fixtures.bars import random_walk_bars

ROOT = Path(__file__).resolve().parents[1]


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", *args],
        cwd=ROOT,
        capture_output=True,
        text=True,
    )


def _write_bars(path: Path, n: int) -> Path:
    frame = pd.DataFrame(
        [
            {
                "date": bar.date.isoformat(),
                "open": bar.open,
                "high": bar.high,
                "low": bar.low,
                "close": bar.close,
                "volume": bar.volume,
            }
            for bar in random_walk_bars(n)
        ]
    )
    frame.to_csv(path, index=False)
    return path


def test_backtest_cli_single_run(tmp_path: Path) -> None:
    csv_path = _write_bars(tmp_path / "bars.csv", 80)
    proc = _run(
        "cli.backtest",
        "--input",
        str(csv_path),
        "--strategy",
        "sma_crossover",
        "--param",
        "shortPeriod=5",
        "--param",
        "longPeriod=20",
    )
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["strategy"] == "sma_crossover"
    assert payload["params"] == {"shortPeriod": 5, "longPeriod": 20}
    assert len(payload["equityCurve"]) == 80
    assert "sharpeRatio" in payload["metrics"]


def test_backtest_cli_grid(tmp_path: Path) -> None:
    csv_path = _write_bars(tmp_path / "bars.csv", 80)
    proc = _run(
        "cli.backtest",
        "--input",
        str(csv_path),
        "--strategy",
        "momentum",
        "--optimize-grid",
        "lookback=5,10",
    )
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert len(payload["allResults"]) == 2


def test_backtest_cli_grid_keeps_fixed_params(tmp_path: Path) -> None:
    csv_path = _write_bars(tmp_path / "bars.csv", 80)
    proc = _run(
        "cli.backtest",
        "--input",
        str(csv_path),
        "--strategy",
        "momentum",
        "--param",
        "holdDays=3",
        "--optimize-grid",
        "lookback=5,10",
    )
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    params = sorted((row["params"] for row in payload["allResults"]), key=lambda p: p["lookback"])
    assert params == [{"lookback": 5, "holdDays": 3}, {"lookback": 10, "holdDays": 3}]
    assert payload["bestParams"]["holdDays"] == 3


def test_backtest_cli_rejects_param_also_in_grid(tmp_path: Path) -> None:
    csv_path = _write_bars(tmp_path / "bars.csv", 80)
    proc = _run(
        "cli.backtest",
        "--input",
        str(csv_path),
        "--strategy",
        "momentum",
        "--param",
        "lookback=5",
        "--optimize-grid",
        "lookback=5,10",
    )
    assert proc.returncode != 0
    assert "lookback" in proc.stderr


def test_backtest_cli_short_series(tmp_path: Path) -> None:
    csv_path = _write_bars(tmp_path / "bars.csv", 3)
    proc = _run("cli.backtest", "--input", str(csv_path))
    assert proc.returncode == 1
    assert json.loads(proc.stdout)["statusCode"] == 422


def test_options_cli_payoff(tmp_path: Path) -> None:
    payload_path = tmp_path / "payload.json"
    payload_path.write_text(
        json.dumps(
            {
                "spotPrice": 100,
                "legs": [
                    {"type": "CE", "strike": 100, "action": "BUY", "qty": 1, "premium": 2.0},
                    {"type": "CE", "strike": 110, "action": "SELL", "qty": 1, "premium": 0.5},
                ],
            }
        )
    )
    proc = _run("cli.options", "payoff", "--input", str(payload_path))
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert len(payload["payoffCurve"]) == 151
    assert payload["greeks"]["maxProfit"] == 8.5
    assert payload["greeks"]["maxLoss"] == -1.5


def test_options_cli_max_pain(tmp_path: Path) -> None:
    payload_path = tmp_path / "chain.json"
    payload_path.write_text(
        json.dumps(
            {
                "strikes": [90, 100, 110],
                "callOI": {"90": 100, "100": 500, "110": 1000},
                "putOI": {"90": 1000, "100": 500, "110": 100},
            }
        )
    )
    proc = _run("cli.options", "max-pain", "--input", str(payload_path))
    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout)["maxPainStrike"] == 100.0


def test_options_cli_templates() -> None:
    proc = _run("cli.options", "templates", "--category", "bearish")
    assert proc.returncode == 0, proc.stderr
    ids = {item["id"] for item in json.loads(proc.stdout)}
    assert ids == {"long-put", "bear-put-spread", "bear-call-spread"}
