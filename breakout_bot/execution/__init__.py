"""Execution: collaborator interfaces, Alpaca broker and Massive market data."""

from breakout_bot.execution.base import BrokerClient, MarketDataClient, OrderRequest, OrderResult
from breakout_bot.execution.alpaca import AlpacaBrokerClient
from breakout_bot.execution.massive import MassiveMarketDataClient

__all__ = [
    "BrokerClient",
    "MarketDataClient",
    "OrderRequest",
    "OrderResult",
    "AlpacaBrokerClient",
    "MassiveMarketDataClient",
]
