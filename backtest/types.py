"""Data model for bar replay: bars, trades, equity points and fold state."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from core.utils import round2


class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Side.LONG else -1


@dataclass(frozen=True, slots=True)
class Bar:
    """One OHLCV sample."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def date(self) -> date:
        return self.timestamp.date()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Bar":
        raw_ts = payload.get("timestamp", payload.get("time", payload.get("date")))
        if raw_ts is None:
            raise ValueError("bar is missing a timestamp")
        return cls(
            timestamp=pd.Timestamp(raw_ts).to_pydatetime(),
            open=float(payload["open"]),
            high=float(payload["high"]),
            low=float(payload["low"]),
            close=float(payload["close"]),
            volume=float(payload.get("volume") or 0.0),
        )


def _resolve_time_column(df: pd.DataFrame) -> str:
    for candidate in ("timestamp", "time", "date", "datetime"):
        if candidate in df.columns:
            return candidate
    raise ValueError("bars dataframe must include a time-like column")


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """Build chronologically ordered bars from a tabular OHLCV frame."""

    if df.empty:
        return []
    time_col = _resolve_time_column(df)
    frame = df.copy()
    frame[time_col] = pd.to_datetime(frame[time_col])
    frame = frame.sort_values(time_col).reset_index(drop=True)
    if "volume" not in frame.columns:
        frame["volume"] = 0.0
    return [
        Bar(
            timestamp=row[time_col].to_pydatetime(),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=float(row["volume"]) if not pd.isna(row["volume"]) else 0.0,
        )
        for _, row in frame.iterrows()
    ]


@dataclass(frozen=True, slots=True)
class TradeRecord:
    """A closed position."""

    entry_date: date
    exit_date: date
    entry_price: float
    exit_price: float
    qty: int
    side: Side
    pnl: float
    pnl_percent: float

    @property
    def is_winner(self) -> bool:
        return self.pnl > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entryDate": self.entry_date.isoformat(),
            "exitDate": self.exit_date.isoformat(),
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "qty": self.qty,
            "side": self.side.value,
            "pnl": self.pnl,
            "pnlPercent": self.pnl_percent,
        }


@dataclass(frozen=True, slots=True)
class EquityPoint:
    date: date
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "value": self.value}


@dataclass(frozen=True, slots=True)
class OpenPosition:
    side: Side
    entry_price: float
    entry_date: date
    qty: int
    opened_index: int


@dataclass(frozen=True, slots=True)
class SimulationState:
    """Immutable snapshot carried through a bar replay.

    Every transition returns a new state; nothing is mutated in place.
    """

    capital: float
    position: Optional[OpenPosition] = None
    trades: Tuple[TradeRecord, ...] = ()
    equity_curve: Tuple[EquityPoint, ...] = ()

    @classmethod
    def start(cls, bars: Sequence[Bar], initial_capital: float) -> "SimulationState":
        curve: Tuple[EquityPoint, ...] = ()
        if bars:
            curve = (EquityPoint(bars[0].date, round2(initial_capital)),)
        return cls(capital=float(initial_capital), equity_curve=curve)

    @property
    def in_position(self) -> bool:
        return self.position is not None

    def size(self, price: float, fraction: float) -> int:
        """Whole units affordable with ``fraction`` of current capital."""

        if price <= 0:
            return 0
        return max(int(math.floor(self.capital * fraction / price)), 0)

    def open(self, side: Side, price: float, bar: Bar, qty: int, index: int) -> "SimulationState":
        position = OpenPosition(
            side=side, entry_price=price, entry_date=bar.date, qty=qty, opened_index=index
        )
        return replace(self, position=position)

    def close(self, price: float, bar: Bar) -> "SimulationState":
        position = self.position
        if position is None:
            return self
        delta = (price - position.entry_price) * position.side.sign
        pnl = delta * position.qty
        trade = TradeRecord(
            entry_date=position.entry_date,
            exit_date=bar.date,
            entry_price=round2(position.entry_price),
            exit_price=round2(price),
            qty=position.qty,
            side=position.side,
            pnl=round2(pnl),
            pnl_percent=round2(delta / position.entry_price * 100),
        )
        return replace(
            self,
            capital=self.capital + pnl,
            position=None,
            trades=self.trades + (trade,),
        )

    def mark(self, bar: Bar) -> "SimulationState":
        point = EquityPoint(bar.date, round2(self.capital))
        return replace(self, equity_curve=self.equity_curve + (point,))


@dataclass(slots=True)
class SimulationResult:
    trades: List[TradeRecord] = field(default_factory=list)
    equity_curve: List[EquityPoint] = field(default_factory=list)

    @classmethod
    def from_state(cls, state: SimulationState) -> "SimulationResult":
        return cls(trades=list(state.trades), equity_curve=list(state.equity_curve))

    @property
    def final_equity(self) -> Optional[float]:
        return self.equity_curve[-1].value if self.equity_curve else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trades": [trade.to_dict() for trade in self.trades],
            "equityCurve": [point.to_dict() for point in self.equity_curve],
        }
