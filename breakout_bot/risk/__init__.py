"""Risk: position sizing, per-day risk state store and its request boundary."""

from breakout_bot.risk.sizing import SizingResult, size_position
from breakout_bot.risk.state_store import JsonFileStorage, MemoryStorage, RiskStateStore, StateStorage
from breakout_bot.risk.rpc import RiskStateClient, handle_request, parse_request

__all__ = [
    "SizingResult",
    "size_position",
    "JsonFileStorage",
    "MemoryStorage",
    "RiskStateStore",
    "StateStorage",
    "RiskStateClient",
    "handle_request",
    "parse_request",
]
