"""
Daily watchlist: numeric liquidity/volatility screen over the full market
snapshot, built at most once per trading day.

Cache invalidation:
- keyed by trading day; caching a new day evicts older days
- a failed snapshot caches an empty list for the day (no retry that day)
- invalidate() clears explicitly
"""

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from breakout_bot.core.errors import MarketDataError
from breakout_bot.core.types import TickerSnapshot, WatchlistEntry

logger = logging.getLogger("breakout_bot.screening")

SnapshotFetcher = Callable[[], List[TickerSnapshot]]


@dataclass(frozen=True)
class ScreenFilters:
    price_min: float = 5.0
    price_max: float = 200.0
    pct_change_min: float = 2.0
    rel_vol_min: float = 1.5
    vol_min: float = 500000.0
    max_screen: int = 100

    @classmethod
    def from_config(cls, config) -> "ScreenFilters":
        return cls(
            price_min=config.price_min,
            price_max=config.price_max,
            pct_change_min=config.pct_change_min,
            rel_vol_min=config.rel_vol_min,
            vol_min=config.vol_min,
            max_screen=config.max_screen,
        )


@dataclass
class FilterChecks:
    price_ok: bool
    pct_ok: bool
    rel_vol_ok: bool
    vol_ok: bool

    @property
    def passed(self) -> bool:
        return self.price_ok and self.pct_ok and self.rel_vol_ok and self.vol_ok


def to_entry(ticker: TickerSnapshot) -> WatchlistEntry:
    """Relative volume = day volume / average minute volume; None if the average is missing or <= 0."""
    rel_vol = None
    if ticker.avg_minute_volume is not None and ticker.avg_minute_volume > 0 and ticker.day_volume is not None:
        rel_vol = ticker.day_volume / ticker.avg_minute_volume
    return WatchlistEntry(
        symbol=ticker.symbol,
        last_price=ticker.day_close,
        pct_change=ticker.pct_change,
        relative_volume=rel_vol,
        volume=ticker.day_volume,
    )


def check_entry(entry: WatchlistEntry, filters: ScreenFilters) -> FilterChecks:
    price, pct, rel_vol, vol = entry.last_price, entry.pct_change, entry.relative_volume, entry.volume
    return FilterChecks(
        price_ok=price is not None and filters.price_min <= price <= filters.price_max,
        pct_ok=pct is not None and abs(pct) >= filters.pct_change_min,
        rel_vol_ok=rel_vol is not None and rel_vol >= filters.rel_vol_min,
        vol_ok=vol is not None and vol >= filters.vol_min,
    )


def screen(tickers: List[TickerSnapshot], filters: ScreenFilters) -> List[WatchlistEntry]:
    """Passing tickers in snapshot order, truncated at max_screen."""
    passed: List[WatchlistEntry] = []
    stats = {"price_ok": 0, "pct_ok": 0, "rel_vol_ok": 0, "vol_ok": 0, "all_ok": 0}
    for ticker in tickers:
        entry = to_entry(ticker)
        checks = check_entry(entry, filters)
        stats["price_ok"] += checks.price_ok
        stats["pct_ok"] += checks.pct_ok
        stats["rel_vol_ok"] += checks.rel_vol_ok
        stats["vol_ok"] += checks.vol_ok
        if checks.passed:
            stats["all_ok"] += 1
            passed.append(entry)
            if len(passed) >= filters.max_screen:
                break
    logger.info(
        "Screen stats: total=%d, price_ok=%d, pct_ok=%d, rel_vol_ok=%d, vol_ok=%d, all_ok=%d",
        len(tickers), stats["price_ok"], stats["pct_ok"], stats["rel_vol_ok"], stats["vol_ok"], stats["all_ok"],
    )
    return passed


class WatchlistBuilder:
    """Owns the per-day watchlist cache. Builds are serialized per day."""

    def __init__(self, filters: Optional[ScreenFilters] = None):
        self.filters = filters or ScreenFilters()
        self._cache: Dict[str, List[WatchlistEntry]] = {}
        self._build_locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, day: str) -> threading.Lock:
        with self._guard:
            lock = self._build_locks.get(day)
            if lock is None:
                lock = self._build_locks[day] = threading.Lock()
            return lock

    def cached(self, day: str) -> Optional[List[str]]:
        with self._guard:
            entries = self._cache.get(day)
        return [e.symbol for e in entries] if entries is not None else None

    def invalidate(self, day: Optional[str] = None) -> None:
        with self._guard:
            if day is None:
                self._cache.clear()
            else:
                self._cache.pop(day, None)

    def _store(self, day: str, entries: List[WatchlistEntry]) -> None:
        with self._guard:
            self._cache = {day: entries}
            self._build_locks = {d: l for d, l in self._build_locks.items() if d == day}

    def get_or_build(
        self,
        day: str,
        fetch_snapshot: SnapshotFetcher,
        filters: Optional[ScreenFilters] = None,
    ) -> List[str]:
        hit = self.cached(day)
        if hit is not None:
            logger.info("Reusing watchlist for %s (size=%d)", day, len(hit))
            return hit

        with self._lock_for(day):
            hit = self.cached(day)
            if hit is not None:
                return hit

            logger.info("Building watchlist for %s", day)
            try:
                tickers = fetch_snapshot()
            except MarketDataError as e:
                logger.error("Snapshot fetch failed, empty watchlist for %s: %s", day, e)
                self._store(day, [])
                return []

            entries = screen(tickers, filters or self.filters)
            if not entries:
                logger.warning("No symbols passed numeric filters; watchlist for %s stays empty", day)
            else:
                logger.info("Watchlist for %s built: %d symbols", day, len(entries))
            self._store(day, entries)
            return [e.symbol for e in entries]
