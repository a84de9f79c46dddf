"""Engine: per-symbol scanner and the run orchestrator."""

from breakout_bot.engine.scanner import ScanResult, SignalScanner
from breakout_bot.engine.runner import BotRunner, run_in_background

__all__ = ["ScanResult", "SignalScanner", "BotRunner", "run_in_background"]
