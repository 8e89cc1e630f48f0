"""Celery tasks for the periodic radar pass.

Wraps :func:`~wiki_radar.core.radar_service.build_snapshot` as a Celery
task driven by Beat every ``poll_interval_seconds``.

Task naming convention::

    wiki_radar.workers.tasks.<action>

Retry policy:
- ``UpstreamRateLimitError`` triggers automatic retry with exponential
  backoff (up to ``max_retries=3``).
- Any other ``WikiRadarError`` (change feed down or malformed) is logged and
  re-raised so Celery marks the task FAILED.  The previous cached snapshot
  stays in place until its TTL expires.

Publishing the snapshot to Redis is best-effort (failures are logged at
WARNING and do not mask the pass outcome).
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from celery.exceptions import SoftTimeLimitExceeded

from wiki_radar.config.settings import get_settings
from wiki_radar.core.exceptions import UpstreamRateLimitError, WikiRadarError
from wiki_radar.core.radar_service import build_snapshot
from wiki_radar.core.snapshot_store import publish_snapshot
from wiki_radar.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="wiki_radar.workers.tasks.refresh_radar_snapshot",
    bind=True,
    max_retries=3,
    autoretry_for=(UpstreamRateLimitError,),
    retry_backoff=True,
    retry_backoff_max=300,
    acks_late=True,
)
def refresh_radar_snapshot(self: Any) -> dict[str, Any]:
    """Run one periodic pass and publish the resulting snapshot.

    Returns:
        Dict with ``status``, ``generated_at``, ``edit_count``,
        ``contested``, ``edit_wars``, ``views_available``, ``cached`` and
        ``elapsed_seconds``.

    Raises:
        UpstreamRateLimitError: Triggers automatic retry with exponential backoff.
        WikiRadarError: Marks the task as FAILED in Celery.
    """
    settings = get_settings()
    task_start = time.monotonic()

    try:
        snapshot = asyncio.run(build_snapshot(settings=settings))
    except UpstreamRateLimitError:
        logger.warning(
            "radar: rate limited during pass (attempt %d)", self.request.retries + 1
        )
        raise
    except WikiRadarError as exc:
        logger.error("radar: periodic pass failed: %s", exc)
        raise
    except SoftTimeLimitExceeded:
        logger.error("radar: periodic pass exceeded its soft time limit")
        raise

    cached = False
    if settings.snapshot_cache_enabled:
        cached = publish_snapshot(
            settings.redis_url,
            snapshot.to_dict(),
            ttl_seconds=settings.snapshot_ttl_seconds,
        )

    elapsed = round(time.monotonic() - task_start, 2)
    logger.info(
        "radar: pass complete: edits=%d contested=%d edit_wars=%d views=%s cached=%s (%.2fs)",
        snapshot.edit_count,
        len(snapshot.contested_topics),
        len(snapshot.edit_wars),
        snapshot.views_available,
        cached,
        elapsed,
    )
    return {
        "status": "completed",
        "generated_at": snapshot.generated_at.isoformat(),
        "edit_count": snapshot.edit_count,
        "contested": len(snapshot.contested_topics),
        "edit_wars": len(snapshot.edit_wars),
        "views_available": snapshot.views_available,
        "cached": cached,
        "elapsed_seconds": elapsed,
    }
