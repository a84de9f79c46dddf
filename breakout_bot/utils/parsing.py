"""
Parse-with-default helpers for numeric values arriving at the boundaries
(broker payloads, RPC bodies, env vars).

Defaults per field:
  equity              -> 0.0
  pnl                 -> 0.0
  daily_max_loss_pct  -> 0.03
  screen thresholds   -> their Config defaults
"""

from __future__ import annotations
import math
from typing import Any, Optional

DEFAULT_EQUITY = 0.0
DEFAULT_PNL = 0.0
DEFAULT_DAILY_MAX_LOSS_PCT = 0.03


def parse_float(value: Any, default: float) -> float:
    """
    Number or numeric string -> float. None, "", bools, garbage and
    non-finite values -> default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        text = str(value).strip()
        if not text:
            return default
        try:
            result = float(text)
        except ValueError:
            return default
    return result if math.isfinite(result) else default


def parse_int(value: Any, default: int) -> int:
    parsed = parse_float(value, float(default))
    return int(parsed)


def parse_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    return default


def numeric_or_none(value: Any) -> Optional[float]:
    """Strict: only real finite numbers pass. Used for provider payload fields."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def parse_clock_minutes(value: Any, default: int) -> int:
    """'09:24' or 564 -> minutes past midnight."""
    if value is None:
        return default
    if isinstance(value, str) and ":" in value:
        hours, _, minutes = value.strip().partition(":")
        try:
            h, m = int(hours), int(minutes)
        except ValueError:
            return default
        if 0 <= h < 24 and 0 <= m < 60:
            return h * 60 + m
        return default
    return parse_int(value, default)
