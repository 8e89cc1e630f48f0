"""Health check route handler for the Wiki Radar API.

``GET /api/health``
    Liveness check: verifies the process is alive and checks the Wikimedia
    Action API and the Redis snapshot cache in parallel.  Always returns
    HTTP 200; the ``status`` field distinguishes ``"ok"`` from
    ``"degraded"``.

This endpoint is diagnostic and must never raise HTTP 5xx errors.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

import redis.asyncio as aioredis
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from wiki_radar import __version__
from wiki_radar.api.dependencies import ClientDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


# ---------------------------------------------------------------------------
# Helper: Redis check
# ---------------------------------------------------------------------------


async def _check_redis(redis_url: str) -> str:
    """Send ``PING`` to the configured Redis instance.

    Returns:
        ``"ok"`` if Redis responds, ``"error"`` otherwise.
    """
    client: aioredis.Redis | None = None
    try:
        client = aioredis.from_url(
            redis_url,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        await client.ping()
        return "ok"
    except Exception:
        logger.exception("Health check: Redis unreachable")
        return "error"
    finally:
        if client is not None:
            await client.aclose()


# ---------------------------------------------------------------------------
# GET /api/health
# ---------------------------------------------------------------------------


@router.get("/api/health", include_in_schema=True)
async def system_health(settings: SettingsDep, client: ClientDep) -> JSONResponse:
    """Return process-level health including upstream and cache connectivity.

    Redis is only checked when the snapshot cache is enabled; with the cache
    disabled it is reported as ``"disabled"`` and does not degrade status.

    Returns:
        JSON with keys: ``status``, ``version``, ``project``, ``wikimedia``,
        ``redis``, ``timestamp``.
    """

    async def _redis_status() -> str:
        if not settings.snapshot_cache_enabled:
            return "disabled"
        return await _check_redis(settings.redis_url)

    upstream, redis_status = await asyncio.gather(
        client.health_check(),
        _redis_status(),
    )

    wikimedia_status = upstream.get("status", "down")
    if wikimedia_status == "ok" and redis_status in ("ok", "disabled"):
        overall = "ok"
    else:
        overall = "degraded"

    payload = {
        "status": overall,
        "version": __version__,
        "project": settings.wiki_project,
        "wikimedia": wikimedia_status,
        "redis": redis_status,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    logger.info("system_health_check", extra={"health": payload})
    return JSONResponse(payload)
