"""Utils: exchange clock, parse-with-default helpers, Telegram."""

from breakout_bot.utils.market_time import entry_window_status, exchange_time_info, trading_day
from breakout_bot.utils.parsing import parse_bool, parse_float, parse_int

__all__ = ["entry_window_status", "exchange_time_info", "trading_day", "parse_bool", "parse_float", "parse_int"]
