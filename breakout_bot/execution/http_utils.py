"""Shared HTTP plumbing: session factory and retry on rate limits."""

from __future__ import annotations
import functools
import logging
import time

import requests

logger = logging.getLogger("breakout_bot.execution.http_utils")

RATE_LIMIT_STATUSES = (429,)


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on HTTP 429 with exponential backoff."""
    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except requests.HTTPError as e:
                    status = e.response.status_code if e.response is not None else None
                    if status in RATE_LIMIT_STATUSES and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
        return wrapped
    return decorator


def make_session(headers: dict | None = None) -> requests.Session:
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    if headers:
        session.headers.update(headers)
    return session
