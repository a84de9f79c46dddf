"""
Request/response boundary of the risk state store.

Body: JSON object {"action": "getOrUpdate", "date", "equity", "dailyMaxLossPct"}
   or {"action": "registerTradeResult", "date", "pnl"}.
Numeric fields are parsed with defaults (equity 0, pnl 0, pct 0.03).
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Union

from breakout_bot.core.errors import (
    MalformedRequest,
    MethodNotAllowed,
    RiskStateError,
    RpcError,
    UnknownAction,
)
from breakout_bot.core.types import RiskSnapshot, TradeResultReport
from breakout_bot.risk.state_store import RiskStateStore
from breakout_bot.utils.parsing import (
    DEFAULT_DAILY_MAX_LOSS_PCT,
    DEFAULT_EQUITY,
    DEFAULT_PNL,
    parse_float,
)

logger = logging.getLogger("breakout_bot.risk.rpc")


@dataclass(frozen=True)
class GetOrUpdateRequest:
    date: str
    equity: float
    daily_max_loss_pct: float

    action = "getOrUpdate"

    def to_body(self) -> dict:
        return {
            "action": self.action,
            "date": self.date,
            "equity": self.equity,
            "dailyMaxLossPct": self.daily_max_loss_pct,
        }


@dataclass(frozen=True)
class RegisterTradeResultRequest:
    date: str
    pnl: float

    action = "registerTradeResult"

    def to_body(self) -> dict:
        return {"action": self.action, "date": self.date, "pnl": self.pnl}


RiskRequest = Union[GetOrUpdateRequest, RegisterTradeResultRequest]


@dataclass
class RpcResponse:
    status: int
    body: dict

    def json(self) -> str:
        return json.dumps(self.body)


def parse_request(raw: Union[str, bytes, dict]) -> RiskRequest:
    """Validate a request body into one of the two request variants."""
    if isinstance(raw, (str, bytes)):
        try:
            body = json.loads(raw)
        except ValueError as e:
            raise MalformedRequest(f"body is not JSON: {e}") from e
    else:
        body = raw
    if not isinstance(body, dict):
        raise MalformedRequest("body must be a JSON object")

    action = body.get("action")
    if action not in (GetOrUpdateRequest.action, RegisterTradeResultRequest.action):
        raise UnknownAction(f"unknown action: {action!r}")

    date = body.get("date")
    if date is None or str(date).strip() == "":
        raise MalformedRequest("missing date")
    date = str(date)

    if action == GetOrUpdateRequest.action:
        return GetOrUpdateRequest(
            date=date,
            equity=parse_float(body.get("equity"), DEFAULT_EQUITY),
            daily_max_loss_pct=parse_float(body.get("dailyMaxLossPct"), DEFAULT_DAILY_MAX_LOSS_PCT),
        )
    return RegisterTradeResultRequest(date=date, pnl=parse_float(body.get("pnl"), DEFAULT_PNL))


def dispatch(store: RiskStateStore, request: RiskRequest) -> Union[RiskSnapshot, TradeResultReport]:
    if isinstance(request, GetOrUpdateRequest):
        return store.get_or_update(request.date, request.equity, request.daily_max_loss_pct)
    if isinstance(request, RegisterTradeResultRequest):
        return store.register_trade_result(request.date, request.pnl)
    raise UnknownAction(f"unsupported request type: {type(request).__name__}")


def handle_request(store: RiskStateStore, method: str, raw: Union[str, bytes, dict]) -> RpcResponse:
    """Full boundary: method check, validation, dispatch. Rejections become 4xx responses."""
    try:
        if method.upper() != "POST":
            raise MethodNotAllowed("Method Not Allowed")
        request = parse_request(raw)
    except RpcError as e:
        logger.warning("Rejected risk state request (%s): %s", e.code, e)
        return RpcResponse(status=e.status, body={"ok": False, "error": e.code, "message": str(e)})
    try:
        result = dispatch(store, request)
    except OSError as e:
        logger.exception("Risk state storage failed for %s: %s", request.action, e)
        return RpcResponse(status=500, body={"ok": False, "error": "storage-error", "message": str(e)})
    return RpcResponse(status=200, body=result.to_dict())


class RiskStateClient:
    """Caller-side view of the store: typed requests in, typed results out."""

    def __init__(self, store: RiskStateStore):
        self._store = store

    def _call(self, request: RiskRequest) -> dict:
        response = handle_request(self._store, "POST", json.dumps(request.to_body()))
        if response.status != 200:
            raise RiskStateError(
                response.body.get("message", "risk state request failed"),
                status=response.status,
                code=response.body.get("error", "risk-state-error"),
            )
        return response.body

    def get_or_update(self, date: str, equity: Any, daily_max_loss_pct: Any) -> RiskSnapshot:
        body = self._call(GetOrUpdateRequest(
            date=date,
            equity=parse_float(equity, DEFAULT_EQUITY),
            daily_max_loss_pct=parse_float(daily_max_loss_pct, DEFAULT_DAILY_MAX_LOSS_PCT),
        ))
        return RiskSnapshot.from_dict(body)

    def register_trade_result(self, date: str, pnl: Any) -> TradeResultReport:
        body = self._call(RegisterTradeResultRequest(date=date, pnl=parse_float(pnl, DEFAULT_PNL)))
        return TradeResultReport(date=str(body["date"]), consecutive_losses=int(body["consecutiveLosses"]))
