"""Shared fixtures: bar frames and collaborator fakes."""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from breakout_bot.core.errors import BrokerError, MarketDataError
from breakout_bot.core.types import BAR_COLUMNS, Account, Bar, bars_to_frame
from breakout_bot.execution.base import BrokerClient, MarketDataClient, OrderResult

T0 = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)


def bars_from_rows(rows):
    """rows: (open, high, low, close, volume) tuples, oldest first."""
    return bars_to_frame(
        Bar(time=T0 + timedelta(minutes=i), open=o, high=h, low=l, close=c, volume=v)
        for i, (o, h, l, c, v) in enumerate(rows)
    )


def trend_with_pullback_breakout():
    """
    57 green bars on a linear uptrend, then prev green, last red
    (high 16.0, low 15.5) and a current bar breaking 16.0 on higher volume.
    """
    rows = []
    for i in range(58):
        o = 10.0 + 0.1 * i
        c = o + 0.08
        rows.append((o, c + 0.02, o - 0.02, c, 1000))
    rows.append((15.9, 16.0, 15.5, 15.8, 800))
    rows.append((15.8, 16.3, 15.8, 16.25, 2000))
    return bars_from_rows(rows)


@pytest.fixture
def make_bars():
    return bars_from_rows


@pytest.fixture
def breakout_bars():
    return trend_with_pullback_breakout()


class FakeMarketData(MarketDataClient):
    def __init__(self, tickers=None, bars=None, fail_snapshot=False, fail_bars=()):
        self.tickers = tickers or []
        self.bars = bars or {}
        self.fail_snapshot = fail_snapshot
        self.fail_bars = set(fail_bars)
        self.snapshot_calls = 0
        self.bar_calls = []

    def snapshot(self):
        self.snapshot_calls += 1
        if self.fail_snapshot:
            raise MarketDataError("snapshot down")
        return list(self.tickers)

    def get_bars(self, symbol, limit=60):
        self.bar_calls.append(symbol)
        if symbol in self.fail_bars:
            raise MarketDataError("bars down")
        return self.bars.get(symbol, pd.DataFrame(columns=BAR_COLUMNS)).tail(limit)


class FakeBroker(BrokerClient):
    def __init__(self, equity=10000.0, positions=None, fail_account=False, fail_order=False):
        self.equity = equity
        self.positions = positions or []
        self.fail_account = fail_account
        self.fail_order = fail_order
        self.orders = []

    def get_account(self):
        if self.fail_account:
            raise BrokerError("account down")
        return Account(equity=self.equity, buying_power=self.equity * 4)

    def get_positions(self):
        return list(self.positions)

    def place_order(self, order):
        self.orders.append(order)
        if self.fail_order:
            return OrderResult(success=False, message="insufficient buying power")
        return OrderResult(success=True, order_id=f"ord-{len(self.orders)}", status="accepted")


@pytest.fixture
def fake_market_data():
    return FakeMarketData


@pytest.fixture
def fake_broker():
    return FakeBroker
