"""Radar route handlers: snapshot views and on-demand article profiles.

Endpoints:

- ``GET /api/radar/snapshot``: the latest full snapshot.
- ``GET /api/radar/contested``: contested topics, optionally filtered
  (``?filter=all|editwars|highchurn|multieditor``).
- ``GET /api/radar/categories``: category buckets with previews.
- ``GET /api/radar/top-viewed``: yesterday's top-viewed articles,
  flagged when also contested.
- ``GET /api/radar/trending``: articles ordered by edit frequency.
- ``GET /api/articles/{title}/profile``: deep single-article profile.

Snapshot endpoints serve the snapshot cached in Redis by the periodic
Celery pass when one is available, and otherwise run a live pass for the
request.  Profile lookups always hit upstream.

Error mapping:

- ``NotFoundError`` → HTTP 404 ``"Article not found"``.
- Any other ``WikiRadarError`` → HTTP 502.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from wiki_radar.api.dependencies import ClientDep, SettingsDep
from wiki_radar.config.settings import Settings
from wiki_radar.core.exceptions import NotFoundError, WikiRadarError
from wiki_radar.core.radar_service import build_snapshot, lookup_profile
from wiki_radar.core.snapshot_store import read_snapshot
from wiki_radar.engine.contestation import filter_topics
from wiki_radar.engine.models import ContestedTopic
from wiki_radar.sources.wikimedia import WikimediaClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["radar"])

TopicFilter = Literal["all", "editwars", "highchurn", "multieditor"]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ContestedTopicOut(BaseModel):
    title: str
    edit_count: int
    unique_editors: int
    revert_count: int
    size_churn: int
    contestation_score: float
    is_edit_war: bool


class CategoryOut(BaseModel):
    """One category bucket.

    Attributes:
        name: Bucket display name.
        count: Number of contested topics in the full group.
        total_contestation_score: Sum over the full group.
        topics: Display-capped preview of the group.
    """

    name: str
    count: int
    total_contestation_score: float
    topics: list[ContestedTopicOut]


class ViewedArticleOut(BaseModel):
    title: str
    views: int
    rank: int
    is_contested: bool


class TrendingArticleOut(BaseModel):
    title: str
    edit_count: int


class FeedEditOut(BaseModel):
    title: str
    timestamp: datetime | None
    editor: str
    comment: str | None
    size_change: int
    is_revert: bool


class SnapshotOut(BaseModel):
    """Full radar snapshot as produced by one periodic pass."""

    generated_at: datetime
    edit_count: int
    unique_editors: int = 0
    total_size_churn: int = 0
    contested_topics: list[ContestedTopicOut]
    edit_wars: list[ContestedTopicOut]
    categories: list[CategoryOut]
    top_viewed: list[ViewedArticleOut]
    trending: list[TrendingArticleOut]
    recent_edits: list[FeedEditOut] = Field(default_factory=list)
    views_available: bool


class ContestedOut(BaseModel):
    filter: TopicFilter
    count: int
    generated_at: datetime
    topics: list[ContestedTopicOut]


class CategoriesOut(BaseModel):
    generated_at: datetime
    categories: list[CategoryOut]


class TopViewedOut(BaseModel):
    generated_at: datetime
    views_available: bool = Field(
        description="False when the pageview source failed and the list is empty for that reason."
    )
    articles: list[ViewedArticleOut]


class TrendingOut(BaseModel):
    generated_at: datetime
    articles: list[TrendingArticleOut]


class RadarAxisOut(BaseModel):
    label: str
    value: float


class ReadingOut(BaseModel):
    dimension: str
    level: str
    summary: str


class RevisionOut(BaseModel):
    timestamp: datetime | None
    editor: str
    comment: str | None
    size: int
    is_revert: bool


class DailyViewsOut(BaseModel):
    date: str
    views: int


class ArticleProfileOut(BaseModel):
    """Deep profile of one article; the three scores are clamped to 0–100."""

    title: str
    length_bytes: int
    category_count: int
    language_link_count: int
    revision_count: int
    talk_page_revision_count: int
    unique_editors: int
    avg_edit_size: float
    revert_count: int
    total_views: int
    avg_daily_views: float
    canonization_score: float
    contestation_score: float
    status_score: float
    radar: list[RadarAxisOut]
    interpretation: list[ReadingOut]
    recent_edits: list[RevisionOut]
    daily_views: list[DailyViewsOut]
    talk_revisions: list[RevisionOut]


# ---------------------------------------------------------------------------
# Snapshot access
# ---------------------------------------------------------------------------


async def _current_snapshot(settings: Settings, client: WikimediaClient) -> dict[str, Any]:
    """Return the cached snapshot dict, or run a live pass.

    Raises:
        HTTPException 502: If the live pass fails.
    """
    if settings.snapshot_cache_enabled:
        cached = await read_snapshot(settings.redis_url)
        if cached is not None:
            return cached
        logger.info("radar router: no cached snapshot, running live pass")

    try:
        snapshot = await build_snapshot(client=client, settings=settings)
    except WikiRadarError as exc:
        logger.error("radar router: live pass failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Radar pass failed: {exc}",
        ) from exc
    return snapshot.to_dict()


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


@router.get(
    "/api/radar/snapshot",
    response_model=SnapshotOut,
    summary="Latest radar snapshot",
)
async def get_snapshot(settings: SettingsDep, client: ClientDep) -> dict[str, Any]:
    return await _current_snapshot(settings, client)


@router.get(
    "/api/radar/contested",
    response_model=ContestedOut,
    summary="Contested topics, optionally filtered",
)
async def get_contested(
    settings: SettingsDep,
    client: ClientDep,
    mode: TopicFilter = Query(
        default="all",
        alias="filter",
        description="One of: all, editwars, highchurn, multieditor.",
    ),
) -> dict[str, Any]:
    """Return the ranked contested topics after applying *filter*.

    An unknown filter value is rejected with HTTP 422 before any upstream
    call is made.
    """
    snapshot = await _current_snapshot(settings, client)
    topics = [ContestedTopic(**item) for item in snapshot["contested_topics"]]
    filtered = filter_topics(topics, mode)
    return {
        "filter": mode,
        "count": len(filtered),
        "generated_at": snapshot["generated_at"],
        "topics": [t.to_dict() for t in filtered],
    }


@router.get(
    "/api/radar/categories",
    response_model=CategoriesOut,
    summary="Contested topics grouped into topical buckets",
)
async def get_categories(settings: SettingsDep, client: ClientDep) -> dict[str, Any]:
    snapshot = await _current_snapshot(settings, client)
    return {"generated_at": snapshot["generated_at"], "categories": snapshot["categories"]}


@router.get(
    "/api/radar/top-viewed",
    response_model=TopViewedOut,
    summary="Top-viewed articles cross-referenced with edit activity",
)
async def get_top_viewed(settings: SettingsDep, client: ClientDep) -> dict[str, Any]:
    snapshot = await _current_snapshot(settings, client)
    return {
        "generated_at": snapshot["generated_at"],
        "views_available": snapshot["views_available"],
        "articles": snapshot["top_viewed"],
    }


@router.get(
    "/api/radar/trending",
    response_model=TrendingOut,
    summary="Articles ordered by edit frequency in the latest batch",
)
async def get_trending(settings: SettingsDep, client: ClientDep) -> dict[str, Any]:
    snapshot = await _current_snapshot(settings, client)
    return {"generated_at": snapshot["generated_at"], "articles": snapshot["trending"]}


@router.get(
    "/api/articles/{title:path}/profile",
    response_model=ArticleProfileOut,
    summary="Deep profile of a single article",
    description=(
        "Fetches article metadata, the daily view series and talk-page "
        "activity concurrently, then computes canonization, contestation "
        "and status scores (each clamped to 0–100) with interpretive readings."
    ),
)
async def get_article_profile(
    title: str,
    settings: SettingsDep,
    client: ClientDep,
) -> dict[str, Any]:
    """Profile one article.

    Args:
        title: Article title; underscores and spaces are both accepted.
        settings: Injected settings.
        client: Injected Wikimedia client.

    Returns:
        The serialized :class:`~wiki_radar.engine.models.ArticleProfile`.

    Raises:
        HTTPException 404: If the article does not exist.
        HTTPException 502: On any other upstream failure.
    """
    try:
        profile = await lookup_profile(title, client=client, settings=settings)
    except NotFoundError as exc:
        logger.info("radar router: article not found: %s", title)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Article not found",
        ) from exc
    except WikiRadarError as exc:
        logger.error("radar router: profile lookup failed for '%s': %s", title, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Profile lookup failed: {exc}",
        ) from exc
    return profile.to_dict()
