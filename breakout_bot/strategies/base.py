"""Abstract strategy: confirmed setup on the newest bar."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import pandas as pd

from breakout_bot.strategies.patterns import Setup


class BaseStrategy(ABC):
    """Strategy may return a confirmed Setup from the bar sequence."""

    min_bars: int = 30

    @abstractmethod
    def get_setup(self, df: pd.DataFrame, symbol: str = "") -> Optional[Setup]:
        """
        Return the breakout-confirmed Setup for the newest bar (iloc[-1]) or None.
        Sizing is left to the caller.
        """
        pass
