"""Telegram notifications for entries and risk trips. Never log token or chat_id."""

from __future__ import annotations
import logging

import requests

from breakout_bot.core.types import RiskSnapshot, SignalAction

logger = logging.getLogger("breakout_bot.utils.telegram")


def send_telegram(text: str, bot_token: str = "", chat_id: str = "") -> bool:
    """Send message to Telegram. Returns True on success; False when not configured or on error."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        r = requests.post(url, json={"chat_id": chat_id, "text": text}, timeout=10)
        if r.status_code != 200:
            logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
            return False
        return True
    except requests.RequestException as e:
        logger.warning("Telegram error: %s", e)
        return False


def format_action(action: SignalAction, dry_run: bool) -> str:
    prefix = "DRY_RUN would BUY" if dry_run else "BUY"
    text = (
        f"{prefix} {action.shares} {action.symbol} [{action.pattern.value}] @ ~{action.price_now:.2f} "
        f"trigger={action.trigger_price:.2f} risk=${action.risk_dollars:.2f} "
        f"risk/share=${action.risk_per_share:.2f}"
    )
    if not dry_run and action.order_ok is False:
        text += f" | ORDER FAILED: {action.order_message}"
    return text


def format_max_loss(snapshot: RiskSnapshot) -> str:
    return (
        f"Daily max loss hit {snapshot.date}: dayPL={snapshot.current_day_pl:.2f} "
        f"(start={snapshot.start_equity:.2f}, limit={snapshot.daily_max_loss_pct:.2%}). No new entries."
    )


class TelegramNotifier:
    def __init__(self, bot_token: str = "", chat_id: str = ""):
        self.bot_token = bot_token
        self.chat_id = chat_id

    def action(self, action: SignalAction, dry_run: bool) -> bool:
        return send_telegram(format_action(action, dry_run), self.bot_token, self.chat_id)

    def max_loss_hit(self, snapshot: RiskSnapshot) -> bool:
        return send_telegram(format_max_loss(snapshot), self.bot_token, self.chat_id)
