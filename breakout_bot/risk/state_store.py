"""
Per-trading-day risk state: start equity, sticky daily max-loss flag,
consecutive losses.

One store owns one state record and serializes every read-modify-write
behind its lock. Each call mutates a copy, persists it, then publishes it,
so a failed write leaves memory and storage as they were.
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

from breakout_bot.core.types import RiskSnapshot, RiskState, TradeResultReport
from breakout_bot.utils.parsing import (
    DEFAULT_DAILY_MAX_LOSS_PCT,
    DEFAULT_EQUITY,
    DEFAULT_PNL,
    parse_float,
)

logger = logging.getLogger("breakout_bot.risk.state")

STATE_KEY = "botState"


class StateStorage(ABC):
    """Durable key-value storage for state records."""

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        pass

    @abstractmethod
    def put(self, key: str, value: dict) -> None:
        pass


class MemoryStorage(StateStorage):
    def __init__(self):
        self._data: Dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def put(self, key: str, value: dict) -> None:
        self._data[key] = dict(value)


class JsonFileStorage(StateStorage):
    """All keys in one JSON file, rewritten atomically (temp file + os.replace)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Unreadable state file %s, starting empty: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[dict]:
        value = self._read_all().get(key)
        return value if isinstance(value, dict) else None

    def put(self, key: str, value: dict) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


class RiskStateStore:
    """Single serialized owner of the daily RiskState record."""

    def __init__(self, storage: Optional[StateStorage] = None, key: str = STATE_KEY):
        self._storage = storage or MemoryStorage()
        self._key = key
        self._lock = threading.Lock()
        self._state: Optional[RiskState] = None

    def _load(self) -> RiskState:
        if self._state is None:
            self._state = RiskState.from_dict(self._storage.get(self._key))
        return self._state

    def _commit(self, state: RiskState) -> None:
        self._storage.put(self._key, state.to_dict())
        self._state = state

    @property
    def state(self) -> RiskState:
        with self._lock:
            return replace(self._load())

    def get_or_update(self, date: str, equity: Any, daily_max_loss_pct: Any = None) -> RiskSnapshot:
        """
        Observe equity for `date`. A new date (or no baseline yet) resets the
        record with this equity as start equity. Trips the sticky daily
        max-loss flag when the day's P&L reaches -|start * pct|.
        """
        eq = parse_float(equity, DEFAULT_EQUITY)
        max_loss_pct = parse_float(daily_max_loss_pct, DEFAULT_DAILY_MAX_LOSS_PCT)

        with self._lock:
            state = replace(self._load())
            if state.date != date or state.start_equity is None:
                if state.date is not None and state.date != date:
                    logger.info("New trading day %s (was %s), resetting risk state", date, state.date)
                state = RiskState(
                    date=date,
                    start_equity=eq,
                    hit_daily_max_loss=False,
                    consecutive_losses=0,
                    daily_max_loss_pct=max_loss_pct,
                )
            else:
                state.daily_max_loss_pct = max_loss_pct

            current_day_pl = eq - state.start_equity
            max_loss = -abs(state.start_equity * state.daily_max_loss_pct)
            tripped_now = False
            if current_day_pl <= max_loss and not state.hit_daily_max_loss:
                logger.warning(
                    "Daily max loss hit on %s: dayPL=%.2f <= %.2f", date, current_day_pl, max_loss
                )
                state.hit_daily_max_loss = True
                tripped_now = True

            self._commit(state)
            return RiskSnapshot(
                date=state.date,
                start_equity=state.start_equity,
                current_day_pl=current_day_pl,
                hit_daily_max_loss=state.hit_daily_max_loss,
                consecutive_losses=state.consecutive_losses,
                daily_max_loss_pct=state.daily_max_loss_pct,
                tripped_now=tripped_now,
            )

    def register_trade_result(self, date: str, pnl: Any) -> TradeResultReport:
        """
        Count consecutive losing trades. A new date only resets the loss
        counter; start equity and the max-loss flag are left alone until
        the next get_or_update.
        """
        value = parse_float(pnl, DEFAULT_PNL)
        with self._lock:
            state = replace(self._load())
            if state.date != date:
                state.date = date
                state.consecutive_losses = 0
            if value < 0:
                state.consecutive_losses += 1
            elif value > 0:
                state.consecutive_losses = 0
            self._commit(state)
            logger.info("Trade result %.2f on %s -> consecutive losses=%d", value, date, state.consecutive_losses)
            return TradeResultReport(date=state.date, consecutive_losses=state.consecutive_losses)
