"""Redis cache for the latest periodic snapshot.

The periodic pass (a Celery task) publishes each fresh snapshot as JSON
under a single key with a TTL; the API serves it without re-fetching the
change feed on every request.  This is a read-through optimisation only:
every write replaces the previous snapshot wholesale, nothing accumulates,
and a missing or expired key makes the API fall back to a live pass.

Both directions are best-effort.  A Redis outage is logged at WARNING and
never fails the pass or the request.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis
import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

SNAPSHOT_KEY: str = "wiki_radar:snapshot:latest"


def publish_snapshot(redis_url: str, payload: dict[str, Any], ttl_seconds: int) -> bool:
    """Store *payload* as the latest snapshot.

    Designed for synchronous Celery task bodies: opens a short-lived
    connection, writes one key, closes.

    Args:
        redis_url: Redis connection URL (``settings.redis_url``).
        payload: JSON-ready snapshot dict (``RadarSnapshot.to_dict()``).
        ttl_seconds: Key expiry.

    Returns:
        ``True`` if the snapshot was written.
    """
    try:
        client = redis.from_url(redis_url, decode_responses=True)
        try:
            client.setex(SNAPSHOT_KEY, ttl_seconds, json.dumps(payload))
        finally:
            client.close()
    except redis.RedisError as exc:
        logger.warning("snapshot_store: failed to publish snapshot: %s", exc)
        return False
    logger.debug("snapshot_store: published snapshot (ttl=%ds)", ttl_seconds)
    return True


async def read_snapshot(redis_url: str) -> dict[str, Any] | None:
    """Return the cached snapshot dict, or ``None`` if absent or unreadable."""
    try:
        client: aioredis.Redis = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            raw = await client.get(SNAPSHOT_KEY)
        finally:
            await client.aclose()
    except redis.RedisError as exc:
        logger.warning("snapshot_store: failed to read snapshot: %s", exc)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("snapshot_store: cached snapshot is not valid JSON; ignoring")
        return None
