"""
Breakout setups on one-minute bars (oldest -> newest):
  current = iloc[-1] (still forming), last = iloc[-2] (last closed), prev = iloc[-3].

Pullback (bull flag): prev green, last red; trigger = last.high, stop = last.low.
ABCD: B = highest high of the lookback window, C = lowest low after B;
  fires when C holds above the window's first open and price curls back
  between C and B; trigger = B, stop = C.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from breakout_bot.core.types import Pattern

ABCD_LOOKBACK = 30


@dataclass
class Setup:
    """Selected entry pattern with its trigger and stop reference."""
    pattern: Pattern
    trigger_price: float
    stop_reference: float
    details: dict = field(default_factory=dict)


@dataclass
class AbcdLevels:
    point_b: float
    point_c: float
    session_open: float
    higher_low: bool
    curling_up: bool

    @property
    def fires(self) -> bool:
        return self.higher_low and self.curling_up


def is_green(bar: pd.Series) -> bool:
    return float(bar["close"]) > float(bar["open"])


def is_red(bar: pd.Series) -> bool:
    return float(bar["close"]) < float(bar["open"])


def detect_pullback(df: pd.DataFrame) -> Optional[Setup]:
    if len(df) < 3:
        return None
    prev, last = df.iloc[-3], df.iloc[-2]
    if not (is_green(prev) and is_red(last)):
        return None
    return Setup(
        pattern=Pattern.PULLBACK,
        trigger_price=float(last["high"]),
        stop_reference=float(last["low"]),
    )


def find_abcd_levels(df: pd.DataFrame, lookback: int = ABCD_LOOKBACK) -> Optional[AbcdLevels]:
    """
    None when B is the newest bar (no room for C). Session open is the
    open of the first bar of the window, not the real session open.
    """
    if df.empty:
        return None
    window = df.iloc[-lookback:]
    highs = window["high"].to_numpy(dtype=float)
    b_idx = int(highs.argmax())  # first occurrence of the max
    if b_idx >= len(window) - 1:
        return None
    point_b = float(highs[b_idx])
    point_c = float(window["low"].iloc[b_idx + 1:].min())
    session_open = float(window["open"].iloc[0])
    close_now = float(window["close"].iloc[-1])
    return AbcdLevels(
        point_b=point_b,
        point_c=point_c,
        session_open=session_open,
        higher_low=point_c > session_open,
        curling_up=point_c < close_now < point_b,
    )


def detect_abcd(df: pd.DataFrame, lookback: int = ABCD_LOOKBACK) -> Optional[Setup]:
    levels = find_abcd_levels(df, lookback)
    if levels is None or not levels.fires:
        return None
    return Setup(
        pattern=Pattern.ABCD,
        trigger_price=levels.point_b,
        stop_reference=levels.point_c,
        details={"point_c": levels.point_c, "session_open": levels.session_open},
    )


def select_setup(df: pd.DataFrame, lookback: int = ABCD_LOOKBACK) -> Optional[Setup]:
    """Pullback has priority; ABCD only when no pullback."""
    setup = detect_pullback(df) or detect_abcd(df, lookback)
    if setup is None or not setup.trigger_price > 0:
        return None
    return setup


def is_breakout_confirmed(df: pd.DataFrame, setup: Setup) -> bool:
    """Current close at/above trigger on rising volume vs the last closed bar."""
    if len(df) < 2:
        return False
    current, last = df.iloc[-1], df.iloc[-2]
    return float(current["close"]) >= setup.trigger_price and float(current["volume"]) > float(last["volume"])
