"""Abstract collaborators: market data (snapshot, bars) and broker (account, positions, orders)."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from breakout_bot.core.types import Account, OrderSide, Position, TickerSnapshot


@dataclass
class OrderRequest:
    symbol: str
    qty: int
    side: OrderSide = OrderSide.BUY
    order_type: str = "market"
    time_in_force: str = "day"


@dataclass
class OrderResult:
    """Result of placing an order."""
    success: bool
    order_id: Optional[str] = None
    status: Optional[str] = None
    message: str = ""


class MarketDataClient(ABC):
    @abstractmethod
    def snapshot(self) -> List[TickerSnapshot]:
        """Full-market snapshot. Raises MarketDataError on fetch or parse failure."""
        pass

    @abstractmethod
    def get_bars(self, symbol: str, limit: int = 60) -> pd.DataFrame:
        """Most recent one-minute bars, oldest -> newest. Empty (or short) frame on failure."""
        pass


class BrokerClient(ABC):
    @abstractmethod
    def get_account(self) -> Account:
        """Raises BrokerError on failure."""
        pass

    @abstractmethod
    def get_positions(self) -> List[Position]:
        """Raises BrokerError on failure."""
        pass

    @abstractmethod
    def place_order(self, order: OrderRequest) -> OrderResult:
        """Submit an order. Never raises; failures come back as OrderResult(success=False)."""
        pass
