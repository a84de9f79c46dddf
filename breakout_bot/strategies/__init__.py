"""Strategies: MACD momentum, breakout patterns, strategy interface."""

from breakout_bot.strategies.base import BaseStrategy
from breakout_bot.strategies.indicators import MacdResult, calculate_macd, ema
from breakout_bot.strategies.macd_breakout import MacdBreakoutStrategy
from breakout_bot.strategies.patterns import Setup, detect_abcd, detect_pullback, is_breakout_confirmed, select_setup

__all__ = [
    "BaseStrategy",
    "MacdResult",
    "calculate_macd",
    "ema",
    "MacdBreakoutStrategy",
    "Setup",
    "detect_abcd",
    "detect_pullback",
    "is_breakout_confirmed",
    "select_setup",
]
