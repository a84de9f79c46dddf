"""
One bot run: time-of-day gate, daily watchlist, account + risk gate,
position snapshot, then the signal scan.
"""

from __future__ import annotations
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from breakout_bot.core.config import Config
from breakout_bot.core.errors import BrokerError, RiskStateError
from breakout_bot.core.types import Position, RunResult
from breakout_bot.engine.scanner import SignalScanner
from breakout_bot.execution.base import BrokerClient, MarketDataClient
from breakout_bot.risk.rpc import RiskStateClient
from breakout_bot.screening.watchlist import ScreenFilters, WatchlistBuilder
from breakout_bot.strategies.base import BaseStrategy
from breakout_bot.strategies.macd_breakout import MacdBreakoutStrategy
from breakout_bot.utils.market_time import entry_window_status, exchange_time_info, format_minutes
from breakout_bot.utils.telegram import TelegramNotifier

logger = logging.getLogger("breakout_bot.runner")


class BotRunner:
    """Composes the risk store, watchlist builder and scanner. Safe to run overlapping."""

    def __init__(
        self,
        config: Config,
        market_data: MarketDataClient,
        broker: BrokerClient,
        risk_client: RiskStateClient,
        watchlist: Optional[WatchlistBuilder] = None,
        strategy: Optional[BaseStrategy] = None,
        notifier: Optional[TelegramNotifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.market_data = market_data
        self.broker = broker
        self.risk_client = risk_client
        self.watchlist = watchlist or WatchlistBuilder(ScreenFilters.from_config(config))
        self.strategy = strategy or MacdBreakoutStrategy(
            macd_fast=config.macd_fast,
            macd_slow=config.macd_slow,
            macd_signal=config.macd_signal,
            abcd_lookback=config.abcd_lookback,
            min_bars=config.min_bars,
        )
        self.notifier = notifier or TelegramNotifier()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _scanner(self) -> SignalScanner:
        return SignalScanner(
            market_data=self.market_data,
            broker=self.broker,
            strategy=self.strategy,
            risk_pct=self.config.risk_pct_per_trade,
            dry_run=self.config.dry_run,
            bars_lookback=self.config.bars_lookback,
            workers=self.config.scan_workers,
            on_action=self.notifier.action,
        )

    def _positions(self) -> Dict[str, Position]:
        try:
            positions = self.broker.get_positions()
        except BrokerError as e:
            logger.warning("Positions fetch failed, treating as none open: %s", e)
            return {}
        return {p.symbol: p for p in positions}

    def run_once(self, force: bool = False) -> RunResult:
        minutes, day = exchange_time_info(self.clock(), self.config.exchange_timezone)
        logger.info("Run start. day=%s, time=%s, force=%s", day, format_minutes(minutes), force)

        if not force:
            status = entry_window_status(minutes, self.config.entry_window_start, self.config.entry_window_end)
            if status is not None:
                logger.info(
                    "Outside entry window %s-%s (%s), skipping scan",
                    format_minutes(self.config.entry_window_start),
                    format_minutes(self.config.entry_window_end),
                    status,
                )
                return RunResult(ok=True, reason=status)
        else:
            logger.info("Force=true, bypassing time-of-day entry restrictions")

        symbols = self.watchlist.get_or_build(day, self.market_data.snapshot)
        if not symbols:
            logger.warning("Watchlist is empty. Nothing to scan.")
            return RunResult(ok=False, reason="empty-watchlist")
        logger.info("Using watchlist of size=%d", len(symbols))

        try:
            account = self.broker.get_account()
        except BrokerError as e:
            logger.error("Failed to fetch account; aborting run: %s", e)
            return RunResult(ok=False, reason="account-fetch-failed")
        logger.info("Account equity=%.2f, buying_power=%.2f", account.equity, account.buying_power)

        try:
            risk = self.risk_client.get_or_update(day, account.equity, self.config.daily_max_loss_pct)
        except RiskStateError as e:
            logger.error("Risk state unavailable; aborting run: %s", e)
            return RunResult(ok=False, reason="risk-state-failed")
        logger.info(
            "Risk state for %s: startEquity=%.2f, dayPL=%.2f, hitDailyMaxLoss=%s, consecutiveLosses=%d, maxLossPct=%s",
            risk.date, risk.start_equity, risk.current_day_pl, risk.hit_daily_max_loss,
            risk.consecutive_losses, risk.daily_max_loss_pct,
        )

        if risk.tripped_now:
            self.notifier.max_loss_hit(risk)
        if risk.hit_daily_max_loss and not force:
            logger.warning("Daily max loss reached (dayPL=%.2f). Skipping new entries.", risk.current_day_pl)
            return RunResult(ok=True, reason="daily-max-loss-hit", risk_state=risk)

        positions = self._positions()
        logger.info("Currently open positions=%d", len(positions))

        scan = self._scanner().scan(symbols, positions, account.equity)
        logger.info("Run done: scanned=%d, signals=%d, actions=%d", scan.scanned, scan.signals, len(scan.actions))
        return RunResult(
            ok=True,
            risk_state=risk,
            scanned=scan.scanned,
            signals=scan.signals,
            actions=scan.actions,
        )


def run_in_background(runner: BotRunner, force: bool = False, name: str = "bot-run") -> threading.Thread:
    """
    Timer-triggered run on a daemon thread. Failures are logged with the
    traceback and never reach the trigger; the caller does not wait.
    """
    def target() -> None:
        try:
            result = runner.run_once(force=force)
            logger.info("Background run finished: ok=%s reason=%s", result.ok, result.reason)
        except Exception:
            logger.exception("Background run failed")

    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()
    return thread
