#!/usr/bin/env python3
"""
Breakout bot CLI: run | loop | register-trade | status
Usage:
  python main.py run [--force] [--config config.yaml]
  python main.py loop [--config config.yaml]
  python main.py register-trade --pnl -12.5 [--config config.yaml]
  python main.py status
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from breakout_bot.core.config import Config, load_config
from breakout_bot.core.errors import RiskStateError
from breakout_bot.core.logger import setup_logging
from breakout_bot.engine.runner import BotRunner, run_in_background
from breakout_bot.execution.alpaca import AlpacaBrokerClient
from breakout_bot.execution.massive import MassiveMarketDataClient
from breakout_bot.risk.rpc import RiskStateClient
from breakout_bot.risk.state_store import JsonFileStorage, RiskStateStore
from breakout_bot.screening.watchlist import ScreenFilters, WatchlistBuilder
from breakout_bot.utils.market_time import trading_day
from breakout_bot.utils.telegram import TelegramNotifier

logger = logging.getLogger("breakout_bot")


def _setup(config_path: Path | None) -> Config:
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    return config


def _risk_client(config: Config) -> RiskStateClient:
    return RiskStateClient(RiskStateStore(JsonFileStorage(config.state_path)))


def build_runner(config: Config) -> BotRunner:
    return BotRunner(
        config=config,
        market_data=MassiveMarketDataClient(config.massive_api_key, config.massive_base_url),
        broker=AlpacaBrokerClient(config.alpaca_api_key, config.alpaca_api_secret, config.alpaca_base_url),
        risk_client=_risk_client(config),
        watchlist=WatchlistBuilder(ScreenFilters.from_config(config)),
        notifier=TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id),
    )


def run_once(config_path: Path | None, force: bool) -> int:
    """Single run; prints the structured result as JSON."""
    config = _setup(config_path)
    if not config.alpaca_api_key or not config.alpaca_api_secret:
        logger.error("Missing ALPACA_API_KEY or ALPACA_API_SECRET in .env")
        return 1
    result = build_runner(config).run_once(force=force)
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.ok else 2


def run_loop(config_path: Path | None) -> int:
    """Timer trigger: start a background run every poll interval, never wait on it."""
    config = _setup(config_path)
    if not config.alpaca_api_key or not config.alpaca_api_secret:
        logger.error("Missing ALPACA_API_KEY or ALPACA_API_SECRET in .env")
        return 1
    runner = build_runner(config)
    logger.info("Scheduler started: every %ds, dry_run=%s", config.poll_interval_seconds, config.dry_run)
    while True:
        try:
            run_in_background(runner, force=False)
            time.sleep(config.poll_interval_seconds)
        except KeyboardInterrupt:
            logger.info("Shutdown by user")
            break
    return 0


def register_trade(config_path: Path | None, pnl: str) -> int:
    config = _setup(config_path)
    day = trading_day(tz=config.exchange_timezone)
    try:
        report = _risk_client(config).register_trade_result(day, pnl)
    except RiskStateError as e:
        logger.error("Could not register trade result: %s", e)
        return 1
    print(json.dumps(report.to_dict()))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Breakout bot CLI")
    parser.add_argument("mode", choices=["run", "loop", "register-trade", "status"], help="What to do")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--force", action="store_true", help="Bypass entry window and daily max-loss gates")
    parser.add_argument("--pnl", default=None, help="Closed trade P&L for register-trade")
    args = parser.parse_args()
    if args.mode == "status":
        print(json.dumps({"ok": True, "message": "breakout bot is installed"}))
        return 0
    if args.mode == "run":
        return run_once(args.config, args.force)
    if args.mode == "register-trade":
        if args.pnl is None:
            parser.error("register-trade requires --pnl")
        return register_trade(args.config, args.pnl)
    return run_loop(args.config)


if __name__ == "__main__":
    sys.exit(main())
