"""
Position sizing: shares = floor(equity * risk_pct / risk_per_share).
risk_per_share = trigger - stop reference, with a 1%-of-price floor when
that distance is non-positive or non-finite.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass

logger = logging.getLogger("breakout_bot.risk")

FALLBACK_RISK_PCT_OF_PRICE = 0.01


@dataclass
class SizingResult:
    """Result of sizing: allowed or rejected + reason."""
    allowed: bool
    shares: int = 0
    risk_dollars: float = 0.0
    risk_per_share: float = 0.0
    reason: str = ""


def size_position(
    equity: float,
    risk_pct: float,
    trigger_price: float,
    stop_reference: float,
    price_now: float,
) -> SizingResult:
    risk_dollars = equity * risk_pct
    risk_per_share = trigger_price - stop_reference
    if not math.isfinite(risk_per_share) or risk_per_share <= 0:
        risk_per_share = price_now * FALLBACK_RISK_PCT_OF_PRICE

    try:
        raw = risk_dollars / risk_per_share
    except ZeroDivisionError:
        raw = math.nan
    if not math.isfinite(raw):
        return SizingResult(
            allowed=False, risk_dollars=risk_dollars, risk_per_share=risk_per_share,
            reason="non-finite share count",
        )
    shares = math.floor(raw)
    if shares <= 0:
        return SizingResult(
            allowed=False, risk_dollars=risk_dollars, risk_per_share=risk_per_share,
            reason=f"sizing non-positive (risk$={risk_dollars:.2f}, risk/share={risk_per_share:.2f})",
        )
    return SizingResult(allowed=True, shares=shares, risk_dollars=risk_dollars, risk_per_share=risk_per_share)
