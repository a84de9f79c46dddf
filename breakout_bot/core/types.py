"""
Core data types for bars, snapshots, positions, risk state and run results.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

import pandas as pd

BAR_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class Pattern(str, Enum):
    PULLBACK = "PULLBACK"
    ABCD = "ABCD"


@dataclass
class Bar:
    """OHLCV candle."""
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


def bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    """Bars (oldest -> newest) as a DataFrame with BAR_COLUMNS."""
    rows = [
        {"time": b.time, "open": b.open, "high": b.high, "low": b.low, "close": b.close, "volume": b.volume}
        for b in bars
    ]
    return pd.DataFrame(rows, columns=BAR_COLUMNS)


@dataclass
class TickerSnapshot:
    """Normalized market-data snapshot row. None = missing or non-numeric upstream."""
    symbol: str
    day_close: Optional[float] = None
    day_volume: Optional[float] = None
    pct_change: Optional[float] = None
    avg_minute_volume: Optional[float] = None


@dataclass
class WatchlistEntry:
    """Screened ticker with the values the filters were applied to."""
    symbol: str
    last_price: Optional[float]
    pct_change: Optional[float]
    relative_volume: Optional[float]
    volume: Optional[float]


@dataclass
class Account:
    equity: float
    buying_power: float = 0.0


@dataclass
class Position:
    """Open position. Only the symbol matters for the one-bullet rule."""
    symbol: str
    quantity: float = 0.0
    avg_entry_price: float = 0.0
    unrealized_pnl: float = 0.0


@dataclass
class RiskState:
    """Per-trading-day risk counters. Wire form uses camelCase keys."""
    date: Optional[str] = None
    start_equity: Optional[float] = None
    hit_daily_max_loss: bool = False
    consecutive_losses: int = 0
    daily_max_loss_pct: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "startEquity": self.start_equity,
            "hitDailyMaxLoss": self.hit_daily_max_loss,
            "consecutiveLosses": self.consecutive_losses,
            "dailyMaxLossPct": self.daily_max_loss_pct,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "RiskState":
        """Field-by-field load; wrongly typed values fall back to defaults."""
        if not isinstance(data, dict):
            return cls()

        def number(key: str) -> Optional[float]:
            value = data.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            return None

        losses = data.get("consecutiveLosses")
        date = data.get("date")
        return cls(
            date=str(date) if date is not None else None,
            start_equity=number("startEquity"),
            hit_daily_max_loss=bool(data.get("hitDailyMaxLoss", False)),
            consecutive_losses=int(losses) if isinstance(losses, int) and not isinstance(losses, bool) else 0,
            daily_max_loss_pct=number("dailyMaxLossPct"),
        )


@dataclass
class RiskSnapshot:
    """
    RiskState as returned by get_or_update, plus the day's P&L so far.
    tripped_now is True only on the call that set the max-loss flag.
    """
    date: str
    start_equity: float
    current_day_pl: float
    hit_daily_max_loss: bool
    consecutive_losses: int
    daily_max_loss_pct: float
    tripped_now: bool = False

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "startEquity": self.start_equity,
            "currentDayPL": self.current_day_pl,
            "hitDailyMaxLoss": self.hit_daily_max_loss,
            "consecutiveLosses": self.consecutive_losses,
            "dailyMaxLossPct": self.daily_max_loss_pct,
            "trippedNow": self.tripped_now,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RiskSnapshot":
        return cls(
            date=str(data["date"]),
            start_equity=float(data["startEquity"]),
            current_day_pl=float(data["currentDayPL"]),
            hit_daily_max_loss=bool(data["hitDailyMaxLoss"]),
            consecutive_losses=int(data["consecutiveLosses"]),
            daily_max_loss_pct=float(data["dailyMaxLossPct"]),
            tripped_now=bool(data.get("trippedNow", False)),
        )


@dataclass
class TradeResultReport:
    date: str
    consecutive_losses: int

    def to_dict(self) -> dict:
        return {"date": self.date, "consecutiveLosses": self.consecutive_losses}


@dataclass
class SignalAction:
    """Sized entry produced by one run. Never persisted."""
    symbol: str
    pattern: Pattern
    price_now: float
    trigger_price: float
    shares: int
    risk_dollars: float
    risk_per_share: float
    order_ok: Optional[bool] = None
    order_id: Optional[str] = None
    order_message: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["pattern"] = self.pattern.value
        return data


@dataclass
class RunResult:
    """Structured outcome of one run; failures are reasons, never exceptions."""
    ok: bool
    reason: Optional[str] = None
    risk_state: Optional[RiskSnapshot] = None
    scanned: Optional[int] = None
    signals: Optional[int] = None
    actions: List[SignalAction] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"ok": self.ok}
        if self.reason is not None:
            data["reason"] = self.reason
        if self.risk_state is not None:
            data["riskState"] = self.risk_state.to_dict()
        if self.scanned is not None:
            data["scanned"] = self.scanned
            data["signals"] = self.signals
            data["actions"] = [a.to_dict() for a in self.actions]
        return data
