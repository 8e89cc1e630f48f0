"""Radar service: joins the Wikimedia fetch layer to the scoring engine.

Two entry points, independent of each other and sharing no mutable state:

- :func:`build_snapshot`: the periodic pass.  Fetches the change feed and
  yesterday's top-viewed list concurrently, then runs the engine pipeline
  once both have returned.
- :func:`lookup_profile`: the on-demand single-article profile.  Fetches
  metadata first to resolve redirects, then the daily view series and
  talk-page revisions of the resolved title concurrently, then scores the
  article.

Degradation policy
------------------
- View source failures (``UpstreamUnavailableError`` or
  ``MalformedResponseError``) never fail the periodic pass; it proceeds
  with an empty view list and ``views_available=False``.
- Change-feed failures propagate: there is nothing to score without it.
- For profiles, ``NotFoundError`` on the article propagates as the
  distinct "article not found" outcome.  A missing talk page counts as
  zero talk activity and a failing view series as zero views; every other
  failure propagates as a generic lookup failure.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog

from wiki_radar.config.settings import Settings, get_settings
from wiki_radar.core.exceptions import (
    MalformedResponseError,
    NotFoundError,
    UpstreamUnavailableError,
)
from wiki_radar.engine.models import ArticleProfile, DailyViews, RadarSnapshot, Revision
from wiki_radar.engine.pipeline import PipelineLimits, run_pipeline
from wiki_radar.engine.profile import score_profile
from wiki_radar.sources.wikimedia import WikimediaClient

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Periodic pass
# ---------------------------------------------------------------------------


async def _fetch_top_viewed_or_empty(
    client: WikimediaClient, day: date
) -> tuple[list[dict[str, Any]], bool]:
    """Fetch the top-viewed list, degrading to ``([], False)`` on failure."""
    try:
        return await client.fetch_top_viewed(day), True
    except (UpstreamUnavailableError, MalformedResponseError) as exc:
        logger.warning(
            "top_viewed_unavailable",
            day=day.isoformat(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return [], False


async def build_snapshot(
    client: WikimediaClient | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> RadarSnapshot:
    """Run one periodic pass and return a fresh snapshot.

    Args:
        client: Fetch client; a default :class:`WikimediaClient` when ``None``.
        settings: Radar settings; defaults to :func:`get_settings`.
        now: Pass timestamp (UTC); defaults to the current time.  The
            top-viewed list is requested for the day before *now*.

    Returns:
        The :class:`RadarSnapshot` for this pass.

    Raises:
        UpstreamUnavailableError: If the change feed cannot be fetched.
        MalformedResponseError: If the change feed response is malformed.
    """
    settings = settings or get_settings()
    client = client or WikimediaClient(settings=settings)
    now = now or datetime.now(tz=timezone.utc)
    views_day = (now - timedelta(days=1)).date()

    log = logger.bind(pass_id=str(uuid.uuid4()))

    edits, (top_viewed, views_available) = await asyncio.gather(
        client.fetch_recent_changes(settings.recent_changes_limit),
        _fetch_top_viewed_or_empty(client, views_day),
    )

    snapshot = run_pipeline(
        edits,
        top_viewed,
        generated_at=now,
        limits=PipelineLimits.from_settings(settings),
        views_available=views_available,
    )
    log.info(
        "radar_pass_complete",
        edits=snapshot.edit_count,
        contested=len(snapshot.contested_topics),
        edit_wars=len(snapshot.edit_wars),
        categories=len(snapshot.categories),
        views_available=views_available,
    )
    return snapshot


# ---------------------------------------------------------------------------
# On-demand profile
# ---------------------------------------------------------------------------


async def _fetch_view_series_or_empty(
    client: WikimediaClient, title: str, start: date, end: date
) -> list[DailyViews]:
    try:
        series = await client.fetch_daily_views(title, start, end)
    except (UpstreamUnavailableError, MalformedResponseError) as exc:
        logger.warning("profile_views_unavailable", title=title, error=str(exc))
        return []
    return [DailyViews(date=point["date"], views=point["views"]) for point in series]


async def _fetch_talk_or_none(client: WikimediaClient, title: str) -> list[Revision] | None:
    try:
        return await client.fetch_talk_revisions(title)
    except NotFoundError:
        logger.debug("profile_talk_page_missing", title=title)
        return None


async def lookup_profile(
    title: str,
    client: WikimediaClient | None = None,
    settings: Settings | None = None,
    today: date | None = None,
) -> ArticleProfile:
    """Fetch and score the deep profile of one article.

    Metadata is fetched first so that a redirect title resolves to its
    target; the view series and talk page are then fetched concurrently
    for the resolved title, keeping every input on the same article.

    Args:
        title: Article title as entered by the user.
        client: Fetch client; a default :class:`WikimediaClient` when ``None``.
        settings: Radar settings; defaults to :func:`get_settings`.
        today: Last day of the view window; defaults to today (UTC).

    Returns:
        The scored :class:`ArticleProfile`.

    Raises:
        NotFoundError: If the article does not exist.
        UpstreamUnavailableError: If the metadata or talk-page source fails.
        MalformedResponseError: If the metadata response is malformed.
    """
    settings = settings or get_settings()
    client = client or WikimediaClient(settings=settings)
    end = today or datetime.now(tz=timezone.utc).date()
    start = end - timedelta(days=settings.profile_view_window_days)

    metadata = await client.fetch_article_metadata(title)
    resolved = metadata.title
    views, talk = await asyncio.gather(
        _fetch_view_series_or_empty(client, resolved, start, end),
        _fetch_talk_or_none(client, resolved),
    )

    profile = score_profile(metadata, views, talk)
    logger.info(
        "profile_scored",
        title=profile.title,
        requested=title,
        canonization=round(profile.canonization_score, 1),
        contestation=round(profile.contestation_score, 1),
        status=round(profile.status_score, 1),
    )
    return profile
