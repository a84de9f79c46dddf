"""
Exception taxonomy. Runs never raise these to the trigger; the runner turns
them into RunResult reasons or degrades locally.
"""

from __future__ import annotations


class BotError(Exception):
    """Base for all bot errors."""


class MarketDataError(BotError):
    """Snapshot or bar fetch failed (HTTP, network or payload shape)."""


class BrokerError(BotError):
    """Account, positions or order call failed."""


class RiskStateError(BotError):
    """Risk state store call returned a non-success response."""

    def __init__(self, message: str, status: int = 500, code: str = "risk-state-error"):
        super().__init__(message)
        self.status = status
        self.code = code


class RpcError(BotError):
    """Request rejected at the risk state RPC boundary."""
    status = 400
    code = "rpc-error"


class MethodNotAllowed(RpcError):
    status = 405
    code = "method-not-allowed"


class MalformedRequest(RpcError):
    status = 400
    code = "malformed-request"


class UnknownAction(RpcError):
    status = 400
    code = "unknown-action"
