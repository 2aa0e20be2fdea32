"""
Menu Board — Live change notices over Redis pub/sub

Every committed mutation publishes a small notice on `live:<topic>`.
The SSE endpoint (api/live.py) subscribes and re-runs the topic query.
"""
import json
import logging

from menuboard.core.clock import now_ms
from menuboard.core.redis_client import get_redis

logger = logging.getLogger(__name__)

LIVE_PREFIX = "live:"

MENU = "menu"
LAYOUTS = "layouts"
ORDERS = "orders"
SETTINGS = "settings"
CATALOG = "catalog"


def order_topic(session_id: str) -> str:
    return f"order:{session_id}"


def channel_for(topic: str) -> str:
    return f"{LIVE_PREFIX}{topic}"


async def notify(*topics: str) -> None:
    """Publish a change notice for each topic. Failures never reach the caller."""
    for topic in topics:
        try:
            redis = get_redis()
            await redis.publish(channel_for(topic), json.dumps({"topic": topic, "at": now_ms()}))
        except Exception as exc:
            # A missed notice only delays viewers until the next change
            logger.warning("Live notice for '%s' not published: %s", topic, exc)
