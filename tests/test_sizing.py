"""Unit tests for risk.sizing."""

import math

import pytest
from breakout_bot.risk.sizing import size_position


def test_size_from_trigger_and_stop():
    r = size_position(equity=10000, risk_pct=0.01, trigger_price=20, stop_reference=19.5, price_now=20.1)
    assert r.allowed is True
    assert r.risk_dollars == pytest.approx(100)
    assert r.risk_per_share == pytest.approx(0.5)
    assert r.shares == 200


def test_stop_above_trigger_falls_back_to_one_percent_of_price():
    # risk/share = 50 * 0.01 = 0.5
    r = size_position(equity=10000, risk_pct=0.01, trigger_price=20, stop_reference=21, price_now=50)
    assert r.risk_per_share == pytest.approx(0.5)
    assert r.shares == 200


def test_non_finite_stop_falls_back():
    r = size_position(equity=10000, risk_pct=0.01, trigger_price=20, stop_reference=math.nan, price_now=50)
    assert r.allowed is True
    assert r.risk_per_share == pytest.approx(0.5)


def test_tiny_account_rejected():
    r = size_position(equity=10, risk_pct=0.01, trigger_price=20, stop_reference=19.5, price_now=20)
    assert r.allowed is False
    assert r.shares == 0
    assert "non-positive" in r.reason


def test_zero_price_fallback_rejected():
    r = size_position(equity=10000, risk_pct=0.01, trigger_price=0, stop_reference=0, price_now=0)
    assert r.allowed is False
