"""
Load configuration from config.yaml and .env. API keys only from env.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from breakout_bot.utils.parsing import (
    parse_bool,
    parse_clock_minutes,
    parse_float,
    parse_int,
    DEFAULT_DAILY_MAX_LOSS_PCT,
)


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # Env overrides; unparsable values fall back to the yaml/default value
    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return parse_bool(os.getenv(key), default)

    def env_int(key: str, default: int = 0) -> int:
        return parse_int(os.getenv(key), parse_int(default, 0))

    def env_float(key: str, default: float = 0.0) -> float:
        return parse_float(os.getenv(key), parse_float(default, 0.0))

    def env_minutes(key: str, default: Any) -> int:
        return parse_clock_minutes(os.getenv(key), parse_clock_minutes(default, 0))

    api = data.get("api") or {}
    screen = data.get("screen") or {}
    strategy = data.get("strategy") or {}
    risk = data.get("risk") or {}
    schedule = data.get("schedule") or {}
    telegram = data.get("telegram") or {}
    logging_cfg = data.get("logging") or {}

    return Config(
        # API (env only; never put keys in config.yaml)
        massive_api_key=env("MASSIVE_API_KEY"),
        massive_base_url=env("MASSIVE_BASE_URL", api.get("massive_base_url", "https://api.massive.com")),
        alpaca_api_key=env("ALPACA_API_KEY"),
        alpaca_api_secret=env("ALPACA_API_SECRET"),
        alpaca_base_url=env("ALPACA_BASE_URL", api.get("alpaca_base_url", "https://paper-api.alpaca.markets")),
        # Screen
        price_min=env_float("PRICE_MIN", screen.get("price_min", 5.0)),
        price_max=env_float("PRICE_MAX", screen.get("price_max", 200.0)),
        pct_change_min=env_float("PCT_CHANGE_MIN", screen.get("pct_change_min", 2.0)),
        rel_vol_min=env_float("REL_VOL_MIN", screen.get("rel_vol_min", 1.5)),
        vol_min=env_float("VOL_MIN", screen.get("vol_min", 500000.0)),
        max_screen=env_int("MAX_SCREEN", screen.get("max_screen", 100)),
        # Strategy
        macd_fast=env_int("MACD_FAST", strategy.get("macd_fast", 12)),
        macd_slow=env_int("MACD_SLOW", strategy.get("macd_slow", 26)),
        macd_signal=env_int("MACD_SIGNAL", strategy.get("macd_signal", 9)),
        bars_lookback=env_int("BARS_LOOKBACK", strategy.get("bars_lookback", 60)),
        min_bars=env_int("MIN_BARS", strategy.get("min_bars", 30)),
        abcd_lookback=env_int("ABCD_LOOKBACK", strategy.get("abcd_lookback", 30)),
        scan_workers=env_int("SCAN_WORKERS", strategy.get("scan_workers", 1)),
        # Risk
        risk_pct_per_trade=env_float("RISK_PCT_PER_TRADE", risk.get("risk_pct_per_trade", 0.01)),
        daily_max_loss_pct=env_float(
            "DAILY_MAX_LOSS_PCT", risk.get("daily_max_loss_pct", DEFAULT_DAILY_MAX_LOSS_PCT)
        ),
        dry_run=env_bool("DRY_RUN", risk.get("dry_run", True)),
        state_path=Path(env("STATE_PATH", risk.get("state_path", "data/risk_state.json"))),
        # Schedule
        exchange_timezone=env("EXCHANGE_TIMEZONE", schedule.get("exchange_timezone", "America/New_York")),
        entry_window_start=env_minutes("ENTRY_WINDOW_START", schedule.get("entry_window_start", "09:24")),
        entry_window_end=env_minutes("ENTRY_WINDOW_END", schedule.get("entry_window_end", "11:00")),
        poll_interval_seconds=env_int("POLL_INTERVAL_SECONDS", schedule.get("poll_interval_seconds", 60)),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN", telegram.get("bot_token", "")),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", str(telegram.get("chat_id", ""))),
        # Logging
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "breakout_bot.log"),
    )


class Config:
    """Unified configuration, built once by load_config and not mutated by the bot."""

    __slots__ = (
        "massive_api_key", "massive_base_url", "alpaca_api_key", "alpaca_api_secret", "alpaca_base_url",
        "price_min", "price_max", "pct_change_min", "rel_vol_min", "vol_min", "max_screen",
        "macd_fast", "macd_slow", "macd_signal", "bars_lookback", "min_bars", "abcd_lookback", "scan_workers",
        "risk_pct_per_trade", "daily_max_loss_pct", "dry_run", "state_path",
        "exchange_timezone", "entry_window_start", "entry_window_end", "poll_interval_seconds",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        massive_api_key: str = "",
        massive_base_url: str = "https://api.massive.com",
        alpaca_api_key: str = "",
        alpaca_api_secret: str = "",
        alpaca_base_url: str = "https://paper-api.alpaca.markets",
        price_min: float = 5.0,
        price_max: float = 200.0,
        pct_change_min: float = 2.0,
        rel_vol_min: float = 1.5,
        vol_min: float = 500000.0,
        max_screen: int = 100,
        macd_fast: int = 12,
        macd_slow: int = 26,
        macd_signal: int = 9,
        bars_lookback: int = 60,
        min_bars: int = 30,
        abcd_lookback: int = 30,
        scan_workers: int = 1,
        risk_pct_per_trade: float = 0.01,
        daily_max_loss_pct: float = DEFAULT_DAILY_MAX_LOSS_PCT,
        dry_run: bool = True,
        state_path: Path = None,
        exchange_timezone: str = "America/New_York",
        entry_window_start: int = 9 * 60 + 24,
        entry_window_end: int = 11 * 60,
        poll_interval_seconds: int = 60,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "breakout_bot.log",
    ):
        self.massive_api_key = massive_api_key
        self.massive_base_url = massive_base_url
        self.alpaca_api_key = alpaca_api_key
        self.alpaca_api_secret = alpaca_api_secret
        self.alpaca_base_url = alpaca_base_url
        self.price_min = price_min
        self.price_max = price_max
        self.pct_change_min = pct_change_min
        self.rel_vol_min = rel_vol_min
        self.vol_min = vol_min
        self.max_screen = max_screen
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.bars_lookback = bars_lookback
        self.min_bars = min_bars
        self.abcd_lookback = abcd_lookback
        self.scan_workers = max(1, scan_workers)
        self.risk_pct_per_trade = risk_pct_per_trade
        self.daily_max_loss_pct = daily_max_loss_pct
        self.dry_run = dry_run
        self.state_path = Path(state_path) if state_path else Path("data/risk_state.json")
        self.exchange_timezone = exchange_timezone
        self.entry_window_start = entry_window_start
        self.entry_window_end = entry_window_end
        self.poll_interval_seconds = poll_interval_seconds
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
