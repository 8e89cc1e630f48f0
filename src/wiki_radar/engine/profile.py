"""Single-article deep-profile scoring.

Computes three clamped 0–100 sub-scores for one article from its metadata,
revision history, daily view series and (optionally) talk-page history:

``canonization``
    How established the article looks::

        2*language_links + 3*categories + min(20, 2*unique_editors)
        + min(30, total_views / 3333)

``contestation``
    How disputed the article currently is::

        15*reverts + 2*talk_page_revisions + min(20, avg_edit_size / 50)

``status``
    How much attention the article commands::

        total_views / 5000 + 1.5*language_links + min(30, length_bytes / 1666)

The coefficients and caps are fixed so profiles stay comparable across
articles.  On top of the scores the module derives the five radar axes and
short interpretive readings shown next to the radar chart, and keeps the
dated view series and a capped talk-page listing for display.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from wiki_radar.engine.models import (
    AnnotatedRevision,
    ArticleMetadata,
    ArticleProfile,
    DailyViews,
    RadarAxis,
    Reading,
    Revision,
)
from wiki_radar.engine.reverts import is_revert

SCORE_MIN: float = 0.0
SCORE_MAX: float = 100.0

RECENT_EDITS_LIMIT: int = 10
TALK_LISTING_LIMIT: int = 15


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Indicators
# ---------------------------------------------------------------------------


def count_unique_editors(revisions: Iterable[Revision]) -> int:
    return len({rev.editor for rev in revisions})


def average_edit_size(revisions: Sequence[Revision]) -> float:
    """Mean absolute size change between consecutive revisions.

    Returns ``0.0`` when fewer than two revisions are available.
    """
    if len(revisions) < 2:
        return 0.0
    deltas = [
        abs(revisions[i].size - revisions[i - 1].size)
        for i in range(1, len(revisions))
    ]
    return sum(deltas) / len(deltas)


def count_reverts(revisions: Iterable[Revision]) -> int:
    return sum(1 for rev in revisions if is_revert(rev.comment))


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------


def canonization_score(
    language_link_count: int,
    category_count: int,
    unique_editors: int,
    total_views: int,
) -> float:
    return clamp(
        2 * language_link_count
        + 3 * category_count
        + min(20, 2 * unique_editors)
        + min(30, total_views / 3333)
    )


def contestation_score(
    revert_count: int,
    talk_page_revision_count: int,
    avg_edit_size: float,
) -> float:
    return clamp(
        15 * revert_count
        + 2 * talk_page_revision_count
        + min(20, avg_edit_size / 50)
    )


def status_score(total_views: int, language_link_count: int, length_bytes: int) -> float:
    return clamp(
        total_views / 5000
        + 1.5 * language_link_count
        + min(30, length_bytes / 1666)
    )


# ---------------------------------------------------------------------------
# Radar axes and readings
# ---------------------------------------------------------------------------


def radar_axes(
    canonization: float,
    contestation: float,
    status: float,
    language_link_count: int,
    unique_editors: int,
) -> tuple[RadarAxis, ...]:
    """Return the five axes of the profile radar chart, each in [0, 100]."""
    return (
        RadarAxis("Canonization", canonization),
        RadarAxis("Contestation", contestation),
        RadarAxis("Status", status),
        RadarAxis("Global Reach", clamp(2 * language_link_count)),
        RadarAxis("Editor Diversity", clamp(5 * unique_editors)),
    )


def _reach_reading(language_link_count: int) -> Reading:
    if language_link_count > 50:
        level, reach = "high", "strong global"
    elif language_link_count > 20:
        level, reach = "moderate", "moderate"
    else:
        level, reach = "low", "limited"
    return Reading(
        "global_reach",
        level,
        f"Available in {language_link_count} other languages, this article shows {reach} reach.",
    )


def _norm_reading(revert_count: int) -> Reading:
    if revert_count > 5:
        return Reading(
            "norm_formation",
            "high",
            f"High revert activity ({revert_count} detected) indicates active contestation "
            "over what counts as legitimate content.",
        )
    if revert_count > 0:
        return Reading(
            "norm_formation",
            "moderate",
            f"Some revert activity ({revert_count} detected) suggests moderate editorial "
            "disputes around largely settled content.",
        )
    return Reading(
        "norm_formation",
        "low",
        "Low revert activity suggests established consensus.",
    )


def _attention_reading(total_views: int) -> Reading:
    if total_views > 100_000:
        level, text = "high", "High attention topic"
    elif total_views > 10_000:
        level, text = "moderate", "Moderate attention"
    else:
        level, text = "low", "Lower attention"
    return Reading("attention", level, f"{text} ({total_views:,} views in the window).")


def _contestation_reading(score: float) -> Reading:
    if score > 50:
        return Reading("contestation", "high", "This topic is actively disputed.")
    if score > 25:
        return Reading(
            "contestation",
            "moderate",
            "Some disagreement exists but the dominant version is largely stable.",
        )
    return Reading("contestation", "low", "Little sign of ongoing dispute.")


def _canonization_reading(score: float) -> Reading:
    if score > 70:
        return Reading(
            "canonization",
            "high",
            "Highly canonized: extensively documented, widely translated and frequently read.",
        )
    if score > 40:
        return Reading(
            "canonization",
            "moderate",
            "Moderately canonized: recognised but not deeply embedded.",
        )
    return Reading(
        "canonization",
        "low",
        "Lower canonization suggests emerging, specialised or marginal knowledge.",
    )


def interpret_profile(
    language_link_count: int,
    revert_count: int,
    total_views: int,
    contestation: float,
    canonization: float,
) -> tuple[Reading, ...]:
    """Return the interpretive readings shown alongside a profile."""
    return (
        _reach_reading(language_link_count),
        _norm_reading(revert_count),
        _attention_reading(total_views),
        _contestation_reading(contestation),
        _canonization_reading(canonization),
    )


def annotate_revisions(
    revisions: Iterable[Revision],
    limit: int = RECENT_EDITS_LIMIT,
) -> tuple[AnnotatedRevision, ...]:
    """Return up to *limit* revisions (upstream order) flagged for reverts."""
    annotated: list[AnnotatedRevision] = []
    for rev in revisions:
        if len(annotated) >= limit:
            break
        annotated.append(
            AnnotatedRevision(
                timestamp=rev.timestamp,
                editor=rev.editor,
                comment=rev.comment,
                size=rev.size,
                is_revert=is_revert(rev.comment),
            )
        )
    return tuple(annotated)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def score_profile(
    metadata: ArticleMetadata,
    daily_views: Sequence[DailyViews],
    talk_revisions: Sequence[Revision] | None = None,
) -> ArticleProfile:
    """Compute the deep profile for one article.

    Args:
        metadata: Article metadata including its revision history.
        daily_views: Daily view series over the profile window, oldest first.
        talk_revisions: Talk-page revisions, or ``None`` when the article has
            no talk page.

    Returns:
        The :class:`ArticleProfile` with clamped sub-scores, radar axes,
        readings, the annotated recent edits, the view series and the
        talk-page listing.
    """
    revisions = metadata.revisions
    unique_editors = count_unique_editors(revisions)
    avg_edit_size = average_edit_size(revisions)
    revert_count = count_reverts(revisions)
    series = tuple(DailyViews(date=d.date, views=max(0, d.views)) for d in daily_views)
    total_views = sum(d.views for d in series)
    avg_daily_views = total_views / len(series) if series else 0.0
    talk_revisions = talk_revisions or ()
    talk_count = len(talk_revisions)
    language_link_count = len(metadata.language_links)
    category_count = len(metadata.categories)

    canonization = canonization_score(
        language_link_count, category_count, unique_editors, total_views
    )
    contestation = contestation_score(revert_count, talk_count, avg_edit_size)
    status = status_score(total_views, language_link_count, metadata.length_bytes)

    return ArticleProfile(
        title=metadata.title,
        length_bytes=metadata.length_bytes,
        category_count=category_count,
        language_link_count=language_link_count,
        revision_count=len(revisions),
        talk_page_revision_count=talk_count,
        unique_editors=unique_editors,
        avg_edit_size=avg_edit_size,
        revert_count=revert_count,
        total_views=total_views,
        avg_daily_views=avg_daily_views,
        canonization_score=canonization,
        contestation_score=contestation,
        status_score=status,
        radar=radar_axes(canonization, contestation, status, language_link_count, unique_editors),
        interpretation=interpret_profile(
            language_link_count, revert_count, total_views, contestation, canonization
        ),
        recent_edits=annotate_revisions(revisions),
        daily_views=series,
        talk_revisions=annotate_revisions(talk_revisions, limit=TALK_LISTING_LIMIT),
    )
