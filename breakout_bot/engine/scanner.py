"""
Per-symbol scan over the watchlist: one-bullet check, bars, strategy,
sizing, then a dry-run record or a market buy.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import pandas as pd

from breakout_bot.core.errors import MarketDataError
from breakout_bot.core.types import BAR_COLUMNS, OrderSide, Position, SignalAction
from breakout_bot.execution.base import BrokerClient, MarketDataClient, OrderRequest
from breakout_bot.risk.sizing import size_position
from breakout_bot.strategies.base import BaseStrategy

logger = logging.getLogger("breakout_bot.scanner")


@dataclass
class ScanResult:
    scanned: int = 0
    signals: int = 0
    actions: List[SignalAction] = field(default_factory=list)


class SignalScanner:
    """
    Sequential evaluation in watchlist order. With workers > 1 the bar
    fetches are prefetched on a bounded thread pool; sizing and order
    submission stay on the calling thread.
    """

    def __init__(
        self,
        market_data: MarketDataClient,
        broker: BrokerClient,
        strategy: BaseStrategy,
        risk_pct: float = 0.01,
        dry_run: bool = True,
        bars_lookback: int = 60,
        workers: int = 1,
        on_action: Optional[Callable[[SignalAction, bool], None]] = None,
    ):
        self.market_data = market_data
        self.broker = broker
        self.strategy = strategy
        self.risk_pct = risk_pct
        self.dry_run = dry_run
        self.bars_lookback = bars_lookback
        self.workers = max(1, workers)
        self.on_action = on_action

    def _fetch_bars(self, symbol: str) -> pd.DataFrame:
        """A failed fetch is an empty frame for that symbol only."""
        try:
            return self.market_data.get_bars(symbol, self.bars_lookback)
        except (MarketDataError, ValueError, OverflowError, OSError) as e:
            logger.warning("%s: bar fetch failed, skipping symbol: %s", symbol, e)
            return pd.DataFrame(columns=BAR_COLUMNS)

    def _prefetch(self, symbols: List[str]) -> Dict[str, pd.DataFrame]:
        if self.workers <= 1 or not symbols:
            return {}
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            frames = pool.map(self._fetch_bars, symbols)
            return dict(zip(symbols, frames))

    def scan(self, watchlist: List[str], positions_by_symbol: Dict[str, Position], equity: float) -> ScanResult:
        logger.info("Scanning %d symbols for PULLBACK or ABCD entries", len(watchlist))
        result = ScanResult()
        prefetched = self._prefetch([s for s in watchlist if s not in positions_by_symbol])

        for symbol in watchlist:
            result.scanned += 1
            if symbol in positions_by_symbol:
                logger.info("%s: position already open, skipping (one bullet rule)", symbol)
                continue

            bars = prefetched[symbol] if symbol in prefetched else self._fetch_bars(symbol)
            if bars is None or len(bars) < self.strategy.min_bars:
                logger.info("%s: not enough 1-min bars (%d), skipping", symbol, 0 if bars is None else len(bars))
                continue

            setup = self.strategy.get_setup(bars, symbol=symbol)
            if setup is None:
                continue
            result.signals += 1

            price_now = float(bars["close"].iloc[-1])
            sizing = size_position(equity, self.risk_pct, setup.trigger_price, setup.stop_reference, price_now)
            if not sizing.allowed:
                logger.warning("%s [%s]: %s, skipping order", symbol, setup.pattern.value, sizing.reason)
                continue

            action = SignalAction(
                symbol=symbol,
                pattern=setup.pattern,
                price_now=price_now,
                trigger_price=setup.trigger_price,
                shares=sizing.shares,
                risk_dollars=sizing.risk_dollars,
                risk_per_share=sizing.risk_per_share,
            )
            result.actions.append(action)
            self._execute(action)
        return result

    def _execute(self, action: SignalAction) -> None:
        if self.dry_run:
            logger.info(
                "DRY_RUN: would BUY %d %s [%s] @ ~%.2f (trigger=%.2f, risk=$%.2f, risk/share=$%.2f)",
                action.shares, action.symbol, action.pattern.value, action.price_now,
                action.trigger_price, action.risk_dollars, action.risk_per_share,
            )
        else:
            order = self.broker.place_order(OrderRequest(symbol=action.symbol, qty=action.shares, side=OrderSide.BUY))
            action.order_ok = order.success
            action.order_id = order.order_id
            action.order_message = order.message
            if order.success:
                logger.info("Placed BUY %d %s [%s] order_id=%s", action.shares, action.symbol,
                            action.pattern.value, order.order_id)
            else:
                logger.error("Order for %s failed: %s", action.symbol, order.message)
        if self.on_action is not None:
            self.on_action(action, self.dry_run)
