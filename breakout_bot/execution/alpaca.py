"""
Alpaca trading REST client (paper or live): account, positions, market orders.
"""

from __future__ import annotations
import logging
from typing import List

import requests

from breakout_bot.core.errors import BrokerError
from breakout_bot.core.types import Account, Position
from breakout_bot.execution.base import BrokerClient, OrderRequest, OrderResult
from breakout_bot.execution.http_utils import make_session, retry_on_rate_limit
from breakout_bot.utils.parsing import DEFAULT_EQUITY, parse_float

logger = logging.getLogger("breakout_bot.execution.alpaca")

REQUEST_TIMEOUT = 10


class AlpacaBrokerClient(BrokerClient):
    """Alpaca v2 trading API over requests."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = "https://paper-api.alpaca.markets",
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._session = session or make_session()
        self._session.headers.update({"APCA-API-KEY-ID": api_key, "APCA-API-SECRET-KEY": api_secret})
        logger.info("Alpaca broker: %s", "PAPER" if "paper" in self.base_url else "LIVE")

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _get(self, path: str):
        r = self._session.get(f"{self.base_url}{path}", timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        return r.json()

    def get_account(self) -> Account:
        try:
            data = self._get("/v2/account")
        except (requests.RequestException, ValueError) as e:
            raise BrokerError(f"account fetch failed: {e}") from e
        if not isinstance(data, dict):
            raise BrokerError("account payload is not an object")
        return Account(
            equity=parse_float(data.get("equity"), DEFAULT_EQUITY),
            buying_power=parse_float(data.get("buying_power"), 0.0),
        )

    def get_positions(self) -> List[Position]:
        try:
            data = self._get("/v2/positions")
        except (requests.RequestException, ValueError) as e:
            raise BrokerError(f"positions fetch failed: {e}") from e
        positions = []
        for p in data if isinstance(data, list) else []:
            symbol = p.get("symbol") if isinstance(p, dict) else None
            if not symbol:
                continue
            positions.append(Position(
                symbol=symbol,
                quantity=parse_float(p.get("qty"), 0.0),
                avg_entry_price=parse_float(p.get("avg_entry_price"), 0.0),
                unrealized_pnl=parse_float(p.get("unrealized_pl"), 0.0),
            ))
        return positions

    @retry_on_rate_limit(max_retries=2)
    def _post_order(self, payload: dict) -> dict:
        r = self._session.post(f"{self.base_url}/v2/orders", json=payload, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        return r.json()

    def place_order(self, order: OrderRequest) -> OrderResult:
        payload = {
            "symbol": order.symbol,
            "qty": str(order.qty),
            "side": order.side.value,
            "type": order.order_type,
            "time_in_force": order.time_in_force,
        }
        try:
            res = self._post_order(payload)
        except requests.HTTPError as e:
            body = e.response.text[:200] if e.response is not None else ""
            logger.error("Alpaca order error for %s: %s %s", order.symbol, e, body)
            return OrderResult(success=False, message=f"{e} {body}".strip())
        except (requests.RequestException, ValueError) as e:
            logger.exception("Alpaca order error for %s: %s", order.symbol, e)
            return OrderResult(success=False, message=str(e))
        return OrderResult(success=True, order_id=str(res.get("id")), status=res.get("status"))
