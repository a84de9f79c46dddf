"""
Massive (Polygon-compatible) market data: full-market snapshot and
one-minute aggregates.
"""

from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

import pandas as pd
import requests

from breakout_bot.core.errors import MarketDataError
from breakout_bot.core.types import BAR_COLUMNS, Bar, TickerSnapshot, bars_to_frame
from breakout_bot.execution.base import MarketDataClient
from breakout_bot.execution.http_utils import make_session, retry_on_rate_limit
from breakout_bot.utils.parsing import numeric_or_none

logger = logging.getLogger("breakout_bot.execution.massive")

REQUEST_TIMEOUT = 30
SNAPSHOT_PATH = "/v2/snapshot/locale/us/markets/stocks/tickers"
BARS_LOOKBACK_DAYS = 4


def parse_snapshot_ticker(raw: Any) -> Optional[TickerSnapshot]:
    """
    Normalize one snapshot row: ticker, day.c, day.v, todaysChangePerc, min.av.
    Non-numeric values become None so the screen fails that check.
    """
    if not isinstance(raw, dict) or not raw.get("ticker"):
        return None
    day = raw.get("day") if isinstance(raw.get("day"), dict) else {}
    minute = raw.get("min") if isinstance(raw.get("min"), dict) else {}
    return TickerSnapshot(
        symbol=str(raw["ticker"]),
        day_close=numeric_or_none(day.get("c")),
        day_volume=numeric_or_none(day.get("v")),
        pct_change=numeric_or_none(raw.get("todaysChangePerc")),
        avg_minute_volume=numeric_or_none(minute.get("av")),
    )


def parse_aggregates(results: Any) -> pd.DataFrame:
    """Aggregate rows {t, o, h, l, c, v} -> bar frame sorted oldest -> newest."""
    bars = []
    for r in results if isinstance(results, list) else []:
        if not isinstance(r, dict):
            continue
        values = [numeric_or_none(r.get(k)) for k in ("t", "o", "h", "l", "c", "v")]
        if any(v is None for v in values):
            continue
        t, o, h, l, c, v = values
        bars.append(Bar(
            time=datetime.fromtimestamp(t / 1000, tz=timezone.utc),
            open=o, high=h, low=l, close=c, volume=v,
        ))
    bars.sort(key=lambda b: b.time)
    df = bars_to_frame(bars).drop_duplicates("time", keep="last").reset_index(drop=True)
    return df[BAR_COLUMNS]


class MassiveMarketDataClient(MarketDataClient):
    """REST client; API key passed as a query parameter and never logged."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.massive.com",
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._session = session or make_session()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        params = dict(params or {})
        params["apiKey"] = self.api_key
        r = self._session.get(f"{self.base_url}{path}", params=params, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        return r.json()

    def snapshot(self) -> List[TickerSnapshot]:
        if not self.api_key:
            raise MarketDataError("Massive API key missing; cannot fetch snapshot")
        logger.info("Calling Massive snapshot %s", SNAPSHOT_PATH)
        try:
            data = self._get(SNAPSHOT_PATH)
        except requests.HTTPError as e:
            body = e.response.text[:200] if e.response is not None else ""
            raise MarketDataError(f"snapshot HTTP error: {e} {body}".strip()) from e
        except (requests.RequestException, ValueError) as e:
            raise MarketDataError(f"snapshot error: {e}") from e
        tickers = data.get("tickers") if isinstance(data, dict) else None
        if not isinstance(tickers, list):
            raise MarketDataError("snapshot payload has no tickers list")
        parsed = [t for t in (parse_snapshot_ticker(raw) for raw in tickers) if t is not None]
        logger.info("Massive snapshot: received %d tickers", len(parsed))
        return parsed

    def get_bars(self, symbol: str, limit: int = 60) -> pd.DataFrame:
        now = self._clock()
        start = now - timedelta(days=BARS_LOOKBACK_DAYS)
        path = (
            f"/v2/aggs/ticker/{symbol}/range/1/minute/"
            f"{int(start.timestamp() * 1000)}/{int(now.timestamp() * 1000)}"
        )
        try:
            data = self._get(path, {"adjusted": "true", "sort": "desc", "limit": limit})
        except (requests.RequestException, ValueError) as e:
            logger.warning("%s: bar fetch failed: %s", symbol, e)
            return pd.DataFrame(columns=BAR_COLUMNS)
        results = data.get("results") if isinstance(data, dict) else None
        try:
            bars = parse_aggregates(results)
        except (OverflowError, OSError, ValueError) as e:
            logger.warning("%s: unreadable aggregates: %s", symbol, e)
            return pd.DataFrame(columns=BAR_COLUMNS)
        return bars.tail(limit).reset_index(drop=True)
