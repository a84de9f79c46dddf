"""
MACD on close prices. EMAs are seeded with the simple average of the first
`period` values, then smoothed with k = 2 / (period + 1).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

Closes = Union[Sequence[float], pd.Series, np.ndarray]


@dataclass
class MacdResult:
    line: float
    signal: float
    histogram: float

    @property
    def is_positive(self) -> bool:
        return self.line > self.signal


def ema(values: Closes, period: int) -> pd.Series:
    """
    SMA-seeded EMA. Element j corresponds to input index j + period - 1.
    Empty when there are fewer than `period` values.
    """
    series = pd.Series(np.asarray(values, dtype=float))
    if period <= 0 or len(series) < period:
        return pd.Series(dtype=float)
    seed = pd.Series([series.iloc[:period].mean()])
    seeded = pd.concat([seed, series.iloc[period:]], ignore_index=True)
    # adjust=False: y[0] = seed, y[i] = k * x[i] + (1 - k) * y[i-1]
    return seeded.ewm(span=period, adjust=False).mean()


def macd_frame(closes: Closes, fast: int = 12, slow: int = 26, signal: int = 9) -> pd.DataFrame:
    """
    Line / signal / histogram aligned to the input positions (NaN where a
    value is not yet defined).
    """
    values = np.asarray(closes, dtype=float)
    n = len(values)
    out = pd.DataFrame(np.nan, index=range(n), columns=["macd_line", "macd_signal", "macd_hist"])
    ema_fast = ema(values, fast)
    ema_slow = ema(values, slow)
    if ema_fast.empty or ema_slow.empty:
        return out
    # both defined from input index slow - 1 onwards
    line = ema_fast.iloc[slow - fast:].to_numpy() - ema_slow.to_numpy()
    out.loc[slow - 1:, "macd_line"] = line
    sig = ema(line, signal)
    if not sig.empty:
        start = slow - 1 + signal - 1
        out.loc[start:, "macd_signal"] = sig.to_numpy()
        out["macd_hist"] = out["macd_line"] - out["macd_signal"]
    return out


def calculate_macd(closes: Closes, fast: int = 12, slow: int = 26, signal: int = 9) -> Optional[MacdResult]:
    """Latest MACD values, or None with fewer than slow + signal closes."""
    if fast >= slow or len(closes) < slow + signal:
        return None
    frame = macd_frame(closes, fast, slow, signal)
    last = frame.iloc[-1]
    line, sig = float(last["macd_line"]), float(last["macd_signal"])
    if not (np.isfinite(line) and np.isfinite(sig)):
        return None
    return MacdResult(line=line, signal=sig, histogram=line - sig)
