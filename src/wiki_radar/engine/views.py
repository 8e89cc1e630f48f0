"""Cross-reference of the top-viewed list with the edit batch."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from wiki_radar.engine.models import ArticleStats, ViewedArticle
from wiki_radar.engine.titles import is_content_title, normalize_title

DEFAULT_TOP_VIEWED_CAP: int = 20
CONTESTED_MIN_EDITS: int = 2


def cross_reference_views(
    top_viewed: Iterable[Mapping[str, Any]],
    stats_by_title: Mapping[str, ArticleStats],
    cap: int = DEFAULT_TOP_VIEWED_CAP,
) -> list[ViewedArticle]:
    """Flag which of the most-viewed articles are also being contested.

    Non-content entries (namespaced titles, the front page) are removed
    before truncating to *cap*.  Upstream rank is kept as supplied.  An
    article is contested when its batch statistics show at least two edits;
    lookups use the normalized title so ``"Joe_Biden"`` matches edits to
    ``"Joe Biden"``.

    Args:
        top_viewed: Dicts with ``title``, ``views`` and ``rank`` keys, in
            upstream rank order.
        stats_by_title: Aggregator output keyed by normalized title.
        cap: Maximum number of articles returned.

    Returns:
        Cross-referenced :class:`ViewedArticle` list.
    """
    results: list[ViewedArticle] = []
    for entry in top_viewed:
        if len(results) >= cap:
            break
        raw_title = entry.get("title")
        if not is_content_title(raw_title):
            continue
        title = normalize_title(raw_title)
        stats = stats_by_title.get(title)
        results.append(
            ViewedArticle(
                title=title,
                views=max(0, int(entry.get("views") or 0)),
                rank=int(entry.get("rank") or 0),
                is_contested=stats is not None and stats.edit_count >= CONTESTED_MIN_EDITS,
            )
        )
    return results
