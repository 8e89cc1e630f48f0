"""Contestation scoring and ranking.

Turns aggregator output into a ranked list of contested articles and flags
edit wars.  The score is a deliberate heuristic rather than a calibrated
metric::

    score = edit_count * sqrt(unique_editors) * (1 + 3 * revert_count)

Edit volume dominates, editor diversity contributes sub-linearly, and each
revert adds 300% weight.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from wiki_radar.engine.models import ArticleStats, ContestedTopic, TrendingArticle

DEFAULT_DISPLAY_CAP: int = 30
DEFAULT_MIN_EDITS: int = 2

EDIT_WAR_MIN_REVERTS: int = 2
EDIT_WAR_MIN_EDITS: int = 5
EDIT_WAR_MIN_EDITORS: int = 3

HIGH_CHURN_BYTES: int = 5_000
MULTI_EDITOR_MIN: int = 3

FILTER_MODES: tuple[str, ...] = ("all", "editwars", "highchurn", "multieditor")


def contestation_score(stats: ArticleStats) -> float:
    """Return the contestation score for one article's batch statistics."""
    return stats.edit_count * math.sqrt(stats.unique_editors) * (1 + 3 * stats.revert_count)


def is_edit_war(stats: ArticleStats) -> bool:
    """Return ``True`` if *stats* trip either edit-war trigger.

    Triggers: at least two reverts, or at least five edits by at least
    three distinct editors.
    """
    if stats.revert_count >= EDIT_WAR_MIN_REVERTS:
        return True
    return (
        stats.edit_count >= EDIT_WAR_MIN_EDITS
        and stats.unique_editors >= EDIT_WAR_MIN_EDITORS
    )


def rank_contested_topics(
    stats_by_title: Mapping[str, ArticleStats],
    display_cap: int = DEFAULT_DISPLAY_CAP,
    min_edits: int = DEFAULT_MIN_EDITS,
) -> list[ContestedTopic]:
    """Build the ranked contested-topic list.

    Articles with fewer than *min_edits* edits are dropped.  The rest are
    sorted by score descending; ``sorted`` is stable so ties keep the
    mapping's insertion order.  The result is truncated to *display_cap*.

    Args:
        stats_by_title: Output of
            :func:`~wiki_radar.engine.aggregator.aggregate_edits`.
        display_cap: Maximum number of topics returned.
        min_edits: Minimum edit count for an article to be considered.

    Returns:
        Ranked :class:`ContestedTopic` list.
    """
    topics = [
        ContestedTopic(
            title=title,
            edit_count=stats.edit_count,
            unique_editors=stats.unique_editors,
            revert_count=stats.revert_count,
            size_churn=stats.size_churn,
            contestation_score=contestation_score(stats),
            is_edit_war=is_edit_war(stats),
        )
        for title, stats in stats_by_title.items()
        if stats.edit_count >= min_edits
    ]
    topics.sort(key=lambda t: t.contestation_score, reverse=True)
    return topics[:display_cap]


def extract_edit_wars(topics: Iterable[ContestedTopic]) -> list[ContestedTopic]:
    """Return the edit-war subset of *topics*, preserving order."""
    return [t for t in topics if t.is_edit_war]


def filter_topics(topics: Iterable[ContestedTopic], mode: str = "all") -> list[ContestedTopic]:
    """Apply one of the dashboard topic filters.

    Modes:

    - ``all``: every topic.
    - ``editwars``: topics flagged as edit wars.
    - ``highchurn``: cumulative byte churn above 5 000.
    - ``multieditor``: three or more distinct editors.

    Raises:
        ValueError: If *mode* is not one of :data:`FILTER_MODES`.
    """
    if mode == "all":
        return list(topics)
    if mode == "editwars":
        return extract_edit_wars(topics)
    if mode == "highchurn":
        return [t for t in topics if t.size_churn > HIGH_CHURN_BYTES]
    if mode == "multieditor":
        return [t for t in topics if t.unique_editors >= MULTI_EDITOR_MIN]
    raise ValueError(f"Unknown topic filter '{mode}'. Valid filters: {list(FILTER_MODES)}")


def trending_by_edit_count(
    stats_by_title: Mapping[str, ArticleStats],
    limit: int = 10,
) -> list[TrendingArticle]:
    """Return the most frequently edited articles, most edits first (stable)."""
    ranked = sorted(
        stats_by_title.items(),
        key=lambda item: item[1].edit_count,
        reverse=True,
    )
    return [TrendingArticle(title=title, edit_count=stats.edit_count) for title, stats in ranked[:limit]]
