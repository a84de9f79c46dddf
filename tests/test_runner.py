"""End-to-end tests for engine.runner with fake collaborators."""

import logging
from datetime import datetime, timezone

import pytest
from breakout_bot.core.config import Config
from breakout_bot.core.types import Pattern, Position, TickerSnapshot
from breakout_bot.engine.runner import BotRunner, run_in_background
from breakout_bot.risk.rpc import RiskStateClient
from breakout_bot.risk.state_store import RiskStateStore

# 2024-03-05 is before the DST switch: New York = UTC-5
IN_WINDOW = datetime(2024, 3, 5, 15, 0, tzinfo=timezone.utc)    # 10:00 ET
TOO_EARLY = datetime(2024, 3, 5, 14, 0, tzinfo=timezone.utc)    # 09:00 ET
TOO_LATE = datetime(2024, 3, 5, 16, 30, tzinfo=timezone.utc)    # 11:30 ET
DAY = "2024-03-05"

LIQUID = TickerSnapshot("ABC", day_close=16.0, day_volume=2_000_000, pct_change=6.0, avg_minute_volume=20_000)


def make_runner(market_data, broker, now=IN_WINDOW, store=None, notifier=None, **config):
    return BotRunner(
        config=Config(**config),
        market_data=market_data,
        broker=broker,
        risk_client=RiskStateClient(store or RiskStateStore()),
        notifier=notifier,
        clock=lambda: now,
    )


def test_too_early_touches_nothing(fake_market_data, fake_broker):
    md = fake_market_data([LIQUID])
    store = RiskStateStore()
    result = make_runner(md, fake_broker(), now=TOO_EARLY, store=store).run_once()
    assert result.to_dict() == {"ok": True, "reason": "too-early"}
    assert md.snapshot_calls == 0
    assert store.state.date is None


def test_too_late(fake_market_data, fake_broker):
    result = make_runner(fake_market_data([LIQUID]), fake_broker(), now=TOO_LATE).run_once()
    assert result.ok is True
    assert result.reason == "too-late"


def test_force_bypasses_window(fake_market_data, fake_broker):
    result = make_runner(fake_market_data([]), fake_broker(), now=TOO_LATE).run_once(force=True)
    assert result.reason == "empty-watchlist"


def test_empty_watchlist(fake_market_data, fake_broker):
    result = make_runner(fake_market_data([]), fake_broker()).run_once()
    assert result.to_dict() == {"ok": False, "reason": "empty-watchlist"}


def test_snapshot_failure_is_empty_watchlist(fake_market_data, fake_broker):
    md = fake_market_data(fail_snapshot=True)
    runner = make_runner(md, fake_broker())
    assert runner.run_once().reason == "empty-watchlist"
    assert runner.run_once().reason == "empty-watchlist"
    assert md.snapshot_calls == 1


def test_account_fetch_failure(fake_market_data, fake_broker):
    result = make_runner(fake_market_data([LIQUID]), fake_broker(fail_account=True)).run_once()
    assert result.to_dict() == {"ok": False, "reason": "account-fetch-failed"}


def test_daily_max_loss_blocks_scan(fake_market_data, fake_broker, breakout_bars):
    store = RiskStateStore()
    store.get_or_update(DAY, 10000, 0.03)
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, fake_broker(equity=9600), store=store).run_once()
    assert result.ok is True
    assert result.reason == "daily-max-loss-hit"
    assert result.risk_state.hit_daily_max_loss is True
    assert result.scanned is None
    assert md.bar_calls == []
    assert result.to_dict()["riskState"]["currentDayPL"] == pytest.approx(-400)


def test_force_scans_despite_daily_max_loss(fake_market_data, fake_broker, breakout_bars):
    store = RiskStateStore()
    store.get_or_update(DAY, 10000, 0.03)
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, fake_broker(equity=9600), store=store).run_once(force=True)
    assert result.reason is None
    assert result.scanned == 1


def test_dry_run_emits_sized_pullback(fake_market_data, fake_broker, breakout_bars):
    broker = fake_broker(equity=10000)
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, broker).run_once()
    assert result.ok is True
    assert (result.scanned, result.signals) == (1, 1)
    action = result.actions[0]
    assert action.symbol == "ABC"
    assert action.pattern == Pattern.PULLBACK
    assert action.trigger_price == 16.0
    assert action.risk_per_share == pytest.approx(0.5)
    assert action.shares == 200
    assert broker.orders == []
    payload = result.to_dict()
    assert payload["actions"][0]["pattern"] == "PULLBACK"
    assert payload["riskState"]["startEquity"] == 10000


def test_live_mode_places_market_buy(fake_market_data, fake_broker, breakout_bars):
    broker = fake_broker(equity=10000)
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, broker, dry_run=False).run_once()
    assert len(broker.orders) == 1
    order = broker.orders[0]
    assert (order.symbol, order.qty, order.side.value) == ("ABC", 200, "buy")
    assert result.actions[0].order_ok is True
    assert result.actions[0].order_id == "ord-1"


def test_failed_order_is_recorded_not_raised(fake_market_data, fake_broker, breakout_bars):
    broker = fake_broker(fail_order=True)
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, broker, dry_run=False).run_once()
    assert result.ok is True
    assert result.actions[0].order_ok is False
    assert "buying power" in result.actions[0].order_message


def test_one_bullet_rule_skips_held_symbol(fake_market_data, fake_broker, breakout_bars):
    broker = fake_broker(positions=[Position(symbol="ABC", quantity=100)])
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, broker).run_once()
    assert (result.scanned, result.signals, result.actions) == (1, 0, [])
    assert md.bar_calls == []


def test_short_bar_history_skipped(fake_market_data, fake_broker, breakout_bars):
    md = fake_market_data([LIQUID], {"ABC": breakout_bars.tail(29)})
    result = make_runner(md, fake_broker()).run_once()
    assert (result.scanned, result.signals) == (1, 0)


def test_parallel_prefetch_keeps_watchlist_order(fake_market_data, fake_broker, breakout_bars):
    tickers = [
        TickerSnapshot(s, day_close=16.0, day_volume=2_000_000, pct_change=6.0, avg_minute_volume=20_000)
        for s in ("AAA", "BBB", "CCC")
    ]
    md = fake_market_data(tickers, {"AAA": breakout_bars, "CCC": breakout_bars})
    result = make_runner(md, fake_broker(), scan_workers=3).run_once()
    assert [a.symbol for a in result.actions] == ["AAA", "CCC"]
    assert result.scanned == 3


class RecordingNotifier:
    def __init__(self):
        self.actions = []
        self.max_loss = []

    def action(self, action, dry_run):
        self.actions.append(action)
        return True

    def max_loss_hit(self, snapshot):
        self.max_loss.append(snapshot)
        return True


def test_config_screen_thresholds_apply(fake_market_data, fake_broker, breakout_bars):
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    result = make_runner(md, fake_broker(), price_min=50.0).run_once()
    assert result.reason == "empty-watchlist"
    assert md.bar_calls == []


def test_bars_failure_skips_only_that_symbol(fake_market_data, fake_broker, breakout_bars):
    bad = TickerSnapshot("BAD", day_close=16.0, day_volume=2_000_000, pct_change=6.0, avg_minute_volume=20_000)
    md = fake_market_data([bad, LIQUID], {"ABC": breakout_bars}, fail_bars=["BAD"])
    result = make_runner(md, fake_broker()).run_once()
    assert result.ok is True
    assert result.scanned == 2
    assert [a.symbol for a in result.actions] == ["ABC"]


def test_bars_failure_during_prefetch(fake_market_data, fake_broker, breakout_bars):
    bad = TickerSnapshot("BAD", day_close=16.0, day_volume=2_000_000, pct_change=6.0, avg_minute_volume=20_000)
    md = fake_market_data([bad, LIQUID], {"ABC": breakout_bars}, fail_bars=["BAD"])
    result = make_runner(md, fake_broker(), scan_workers=2).run_once()
    assert [a.symbol for a in result.actions] == ["ABC"]


def test_max_loss_notified_once_per_day(fake_market_data, fake_broker, breakout_bars):
    store = RiskStateStore()
    store.get_or_update(DAY, 10000, 0.03)
    notifier = RecordingNotifier()
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    runner = make_runner(md, fake_broker(equity=9600), store=store, notifier=notifier)
    assert runner.run_once().reason == "daily-max-loss-hit"
    assert runner.run_once().reason == "daily-max-loss-hit"
    assert len(notifier.max_loss) == 1
    assert notifier.max_loss[0].tripped_now is True


def test_dry_run_action_is_notified(fake_market_data, fake_broker, breakout_bars):
    notifier = RecordingNotifier()
    md = fake_market_data([LIQUID], {"ABC": breakout_bars})
    make_runner(md, fake_broker(), notifier=notifier).run_once()
    assert [a.symbol for a in notifier.actions] == ["ABC"]
    assert notifier.max_loss == []


class ExplodingRunner:
    def run_once(self, force=False):
        raise RuntimeError("boom")


def test_background_run_failure_is_logged(caplog):
    with caplog.at_level(logging.ERROR, logger="breakout_bot.runner"):
        thread = run_in_background(ExplodingRunner())
        thread.join(timeout=5)
    assert not thread.is_alive()
    assert "Background run failed" in caplog.text
