"""Screening: daily watchlist from the market snapshot."""

from breakout_bot.screening.watchlist import ScreenFilters, WatchlistBuilder, screen

__all__ = ["ScreenFilters", "WatchlistBuilder", "screen"]
