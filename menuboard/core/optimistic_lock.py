"""
Menu Board — Compare-and-swap conflicts and the retry decorator

Layout activations (`layout_scopes.version_id`) and menu item writes
(`menu_items.version_id`) use `UPDATE ... WHERE version_id = <read value>`.
Zero rows updated means a concurrent writer won; the loser rolls back and
raises StaleDataError.
"""
import asyncio
import random
import functools
import logging

from menuboard.core.config import get_settings
from menuboard.core.errors import MenuBoardError

settings = get_settings()
logger = logging.getLogger(__name__)


class StaleDataError(MenuBoardError):
    """The row changed between our read and our CAS update."""
    status_code = 409


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry `attempt`: capped exponential plus jitter."""
    exponential = settings.OPT_LOCK_BASE_DELAY_MS * (2 ** attempt)
    capped = min(exponential, settings.OPT_LOCK_MAX_DELAY_MS)
    return (capped + random.uniform(0, settings.OPT_LOCK_JITTER_MS)) / 1000.0


def with_optimistic_retry(max_retries: int | None = None):
    """
    Re-run an async CAS write on StaleDataError, up to `max_retries` calls
    in total (default OPT_LOCK_MAX_RETRIES). The last conflict propagates
    and is answered with 409.

    The wrapped function rolls back its own session before raising, so the
    next attempt starts from a fresh read.
    """
    attempts = max_retries or settings.OPT_LOCK_MAX_RETRIES

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except StaleDataError:
                    if attempt >= attempts:
                        logger.error("%s still conflicting after %d attempts", func.__name__, attempts)
                        raise
                delay = backoff_delay(attempt)
                logger.warning("%s lost a CAS race (attempt %d/%d), retrying in %.3fs",
                               func.__name__, attempt, attempts, delay)
                await asyncio.sleep(delay)
                attempt += 1
        return wrapper
    return decorator
