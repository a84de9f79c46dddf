"""Core: config, types, errors, logging."""

from breakout_bot.core.config import load_config, Config
from breakout_bot.core.errors import BotError, BrokerError, MarketDataError, RiskStateError
from breakout_bot.core.types import (
    Account,
    Bar,
    Pattern,
    Position,
    RiskSnapshot,
    RiskState,
    RunResult,
    SignalAction,
    TickerSnapshot,
    WatchlistEntry,
)
from breakout_bot.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "BotError",
    "BrokerError",
    "MarketDataError",
    "RiskStateError",
    "Account",
    "Bar",
    "Pattern",
    "Position",
    "RiskSnapshot",
    "RiskState",
    "RunResult",
    "SignalAction",
    "TickerSnapshot",
    "WatchlistEntry",
    "setup_logging",
]
