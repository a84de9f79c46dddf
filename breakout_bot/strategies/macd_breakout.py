"""
MACD-gated breakout strategy: Pullback or ABCD setup, confirmed by price
through the trigger on rising volume.
"""

from __future__ import annotations
import logging
from typing import Optional

import pandas as pd

from breakout_bot.strategies.base import BaseStrategy
from breakout_bot.strategies.indicators import calculate_macd
from breakout_bot.strategies.patterns import (
    ABCD_LOOKBACK,
    Setup,
    detect_pullback,
    find_abcd_levels,
    is_breakout_confirmed,
    select_setup,
)

logger = logging.getLogger("breakout_bot.strategy")


class MacdBreakoutStrategy(BaseStrategy):
    """
    Long only. Requires MACD line > signal on the latest bar, then picks
    Pullback (priority) or ABCD and checks the breakout.
    """

    def __init__(
        self,
        macd_fast: int = 12,
        macd_slow: int = 26,
        macd_signal: int = 9,
        abcd_lookback: int = ABCD_LOOKBACK,
        min_bars: int = 30,
    ):
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.abcd_lookback = abcd_lookback
        self.min_bars = min_bars

    def get_setup(self, df: pd.DataFrame, symbol: str = "") -> Optional[Setup]:
        if len(df) < self.min_bars:
            logger.info("%s: not enough bars (%d < %d)", symbol, len(df), self.min_bars)
            return None

        macd = calculate_macd(df["close"], self.macd_fast, self.macd_slow, self.macd_signal)
        if macd is None:
            logger.info("%s: could not compute MACD from %d bars", symbol, len(df))
            return None
        if not macd.is_positive:
            logger.info("%s: MACD not positive (line=%.4f, signal=%.4f)", symbol, macd.line, macd.signal)
            return None

        setup = select_setup(df, self.abcd_lookback)
        if setup is None:
            levels = find_abcd_levels(df, self.abcd_lookback)
            if levels is None:
                logger.debug("%s: ABCD point B is the newest bar, no C yet", symbol)
            logger.info(
                "%s: no valid PULLBACK or ABCD setup (pullback=%s, abcd=%s)",
                symbol, detect_pullback(df) is not None, bool(levels and levels.fires),
            )
            return None

        if not is_breakout_confirmed(df, setup):
            current, last = df.iloc[-1], df.iloc[-2]
            logger.info(
                "%s [%s]: breakout not confirmed (price=%.2f, trigger=%.2f, vol=%s, prev_vol=%s)",
                symbol, setup.pattern.value, float(current["close"]), setup.trigger_price,
                current["volume"], last["volume"],
            )
            return None

        setup.details.update({"macd_line": macd.line, "macd_signal": macd.signal, "macd_hist": macd.histogram})
        return setup
