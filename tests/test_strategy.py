"""Unit tests for MacdBreakoutStrategy and Telegram message formatting."""

from breakout_bot.core.types import Pattern, RiskSnapshot, SignalAction
from breakout_bot.strategies.macd_breakout import MacdBreakoutStrategy
from breakout_bot.utils.telegram import TelegramNotifier, format_action, format_max_loss, send_telegram


def test_setup_on_pullback_breakout(breakout_bars):
    setup = MacdBreakoutStrategy().get_setup(breakout_bars, symbol="ABC")
    assert setup is not None
    assert setup.pattern == Pattern.PULLBACK
    assert setup.trigger_price == 16.0
    assert setup.stop_reference == 15.5
    assert setup.details["macd_line"] > setup.details["macd_signal"]


def test_setup_needs_min_bars(breakout_bars):
    assert MacdBreakoutStrategy(min_bars=100).get_setup(breakout_bars) is None


def test_setup_needs_macd(breakout_bars):
    # 50 + 20 closes required, 60 available
    assert MacdBreakoutStrategy(macd_slow=50, macd_signal=20).get_setup(breakout_bars) is None


def test_setup_needs_volume_confirmation(breakout_bars):
    df = breakout_bars.copy()
    df.loc[df.index[-1], "volume"] = 500
    assert MacdBreakoutStrategy().get_setup(df) is None


def _action(order_ok=None, message=""):
    return SignalAction(
        symbol="ABC",
        pattern=Pattern.PULLBACK,
        price_now=16.25,
        trigger_price=16.0,
        shares=200,
        risk_dollars=100.0,
        risk_per_share=0.5,
        order_ok=order_ok,
        order_message=message,
    )


def test_format_action():
    assert format_action(_action(), dry_run=True).startswith("DRY_RUN would BUY 200 ABC [PULLBACK] @ ~16.25")
    failed = format_action(_action(order_ok=False, message="rejected"), dry_run=False)
    assert failed.startswith("BUY 200 ABC")
    assert failed.endswith("ORDER FAILED: rejected")


def test_format_max_loss():
    snapshot = RiskSnapshot(
        date="2024-03-05",
        start_equity=10000.0,
        current_day_pl=-400.0,
        hit_daily_max_loss=True,
        consecutive_losses=0,
        daily_max_loss_pct=0.03,
    )
    text = format_max_loss(snapshot)
    assert "dayPL=-400.00" in text
    assert "limit=3.00%" in text


def test_unconfigured_telegram_does_not_send():
    assert send_telegram("hello") is False
    assert TelegramNotifier().action(_action(), dry_run=True) is False
