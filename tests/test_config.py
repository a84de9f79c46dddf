"""Unit tests for core.config and utils.parsing."""

import pytest
from breakout_bot.core.config import load_config
from breakout_bot.utils.parsing import numeric_or_none, parse_bool, parse_clock_minutes, parse_float

ENV_KEYS = ("MASSIVE_BASE_URL", "PRICE_MIN", "MAX_SCREEN", "DRY_RUN", "ENTRY_WINDOW_START", "RISK_PCT_PER_TRADE", "DAILY_MAX_LOSS_PCT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_files(tmp_path):
    c = load_config(tmp_path / "missing.yaml", tmp_path)
    assert (c.price_min, c.price_max, c.pct_change_min) == (5.0, 200.0, 2.0)
    assert (c.rel_vol_min, c.vol_min, c.max_screen) == (1.5, 500000.0, 100)
    assert c.risk_pct_per_trade == 0.01
    assert c.daily_max_loss_pct == 0.03
    assert c.dry_run is True
    assert (c.entry_window_start, c.entry_window_end) == (564, 660)


def test_yaml_then_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "screen:\n  price_min: 10\n  max_screen: 20\nrisk:\n  dry_run: false\n"
        "schedule:\n  entry_window_end: '10:30'\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("MAX_SCREEN", "5")
    monkeypatch.setenv("ENTRY_WINDOW_START", "09:45")
    c = load_config(path, tmp_path)
    assert c.price_min == 10.0
    assert c.max_screen == 5
    assert c.dry_run is False
    assert (c.entry_window_start, c.entry_window_end) == (585, 630)


def test_empty_yaml_sections_use_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api:\nscreen:\nrisk:\n  dry_run: false\n", encoding="utf-8")
    c = load_config(path, tmp_path)
    assert c.massive_base_url == "https://api.massive.com"
    assert c.price_min == 5.0
    assert c.dry_run is False


def test_unparsable_env_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICE_MIN", "cheap")
    monkeypatch.setenv("RISK_PCT_PER_TRADE", "")
    monkeypatch.setenv("DRY_RUN", "maybe")
    c = load_config(tmp_path / "missing.yaml", tmp_path)
    assert c.price_min == 5.0
    assert c.risk_pct_per_trade == 0.01
    assert c.dry_run is True


def test_parse_float():
    assert parse_float("12.5", 0.0) == 12.5
    assert parse_float(7, 0.0) == 7.0
    assert parse_float("abc", 3.0) == 3.0
    assert parse_float(None, 0.03) == 0.03
    assert parse_float("nan", 1.0) == 1.0
    assert parse_float(True, 2.0) == 2.0


def test_parse_bool_and_clock():
    assert parse_bool("YES", False) is True
    assert parse_bool("0", True) is False
    assert parse_clock_minutes("11:00", 0) == 660
    assert parse_clock_minutes("25:00", 564) == 564
    assert parse_clock_minutes(600, 0) == 600


def test_numeric_or_none_is_strict():
    assert numeric_or_none(3) == 3.0
    assert numeric_or_none("3") is None
    assert numeric_or_none(False) is None
    assert numeric_or_none(float("inf")) is None
