"""One full radar pass over an already-fetched batch.

:func:`run_pipeline` chains aggregation, contestation ranking,
classification, category summarising, the view cross-reference and the
batch totals with the live edit feed.  It takes every input explicitly and
returns a fresh :class:`~wiki_radar.engine.models.RadarSnapshot`, so
running it twice on the same inputs yields equal snapshots.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from wiki_radar.engine.aggregator import (
    aggregate_edits,
    batch_size_churn,
    count_batch_editors,
    recent_feed,
)
from wiki_radar.engine.categories import DEFAULT_PREVIEW_CAP, summarize_categories
from wiki_radar.engine.classifier import classify_topics
from wiki_radar.engine.contestation import (
    DEFAULT_DISPLAY_CAP,
    DEFAULT_MIN_EDITS,
    extract_edit_wars,
    rank_contested_topics,
    trending_by_edit_count,
)
from wiki_radar.engine.models import EditRecord, RadarSnapshot
from wiki_radar.engine.views import DEFAULT_TOP_VIEWED_CAP, cross_reference_views

DEFAULT_RECENT_EDITS_CAP: int = 20


@dataclass(frozen=True)
class PipelineLimits:
    """Display caps and thresholds applied by :func:`run_pipeline`."""

    contested_display_cap: int = DEFAULT_DISPLAY_CAP
    min_edits_for_contest: int = DEFAULT_MIN_EDITS
    category_preview_cap: int = DEFAULT_PREVIEW_CAP
    top_viewed_cap: int = DEFAULT_TOP_VIEWED_CAP
    trending_cap: int = 10
    recent_edits_cap: int = DEFAULT_RECENT_EDITS_CAP

    @classmethod
    def from_settings(cls, settings: Any) -> PipelineLimits:
        return cls(
            contested_display_cap=settings.contested_display_cap,
            min_edits_for_contest=settings.min_edits_for_contest,
            category_preview_cap=settings.category_preview_cap,
            top_viewed_cap=settings.top_viewed_cap,
            trending_cap=settings.trending_cap,
            recent_edits_cap=settings.recent_edits_cap,
        )


def run_pipeline(
    edits: Sequence[EditRecord],
    top_viewed: Sequence[Mapping[str, Any]],
    generated_at: datetime,
    limits: PipelineLimits | None = None,
    views_available: bool = True,
) -> RadarSnapshot:
    """Run the full contestation pipeline on one batch.

    Args:
        edits: One change-feed batch.
        top_viewed: Top-viewed list (``title``/``views``/``rank`` dicts);
            empty when the view source degraded.
        generated_at: Timestamp recorded on the snapshot.
        limits: Caps and thresholds; defaults match the dashboard.
        views_available: Whether *top_viewed* came from a successful fetch.

    Returns:
        The immutable :class:`RadarSnapshot` for this pass.
    """
    limits = limits or PipelineLimits()

    stats = aggregate_edits(edits)
    contested = rank_contested_topics(
        stats,
        display_cap=limits.contested_display_cap,
        min_edits=limits.min_edits_for_contest,
    )
    categories = summarize_categories(
        classify_topics(contested), preview_cap=limits.category_preview_cap
    )
    viewed = cross_reference_views(top_viewed, stats, cap=limits.top_viewed_cap)

    return RadarSnapshot(
        generated_at=generated_at,
        edit_count=len(edits),
        contested_topics=tuple(contested),
        edit_wars=tuple(extract_edit_wars(contested)),
        categories=tuple(categories),
        top_viewed=tuple(viewed),
        trending=tuple(trending_by_edit_count(stats, limit=limits.trending_cap)),
        views_available=views_available,
        unique_editors=count_batch_editors(edits),
        total_size_churn=batch_size_churn(edits),
        recent_edits=tuple(recent_feed(edits, limit=limits.recent_edits_cap)),
    )
