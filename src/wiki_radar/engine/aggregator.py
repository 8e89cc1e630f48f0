"""Per-article aggregation of one change-feed batch.

Folds a batch of :class:`~wiki_radar.engine.models.EditRecord` into
:class:`~wiki_radar.engine.models.ArticleStats` keyed by normalized title.
Each call is self-contained: nothing is carried over from earlier batches.

The batch-level helpers at the bottom produce the dashboard totals (distinct
editors, byte churn) and the live feed of the newest edits.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from wiki_radar.engine.models import ArticleStats, EditRecord, FeedEdit
from wiki_radar.engine.reverts import is_revert
from wiki_radar.engine.titles import normalize_title

logger = structlog.get_logger(__name__)


def aggregate_edits(edits: Iterable[EditRecord]) -> dict[str, ArticleStats]:
    """Group *edits* by title and compute per-article statistics.

    The returned dict preserves first-appearance order of titles in the
    batch, which later stages rely on as the stable tie-breaker.

    Edits with an empty title are skipped.

    Args:
        edits: One batch of edit records, in feed order.

    Returns:
        Mapping of normalized title to its :class:`ArticleStats`.
    """
    edit_counts: dict[str, int] = {}
    editors: dict[str, set[str]] = {}
    reverts: dict[str, int] = {}
    churn: dict[str, int] = {}
    skipped = 0

    for edit in edits:
        title = normalize_title(edit.title)
        if not title:
            skipped += 1
            continue
        edit_counts[title] = edit_counts.get(title, 0) + 1
        editors.setdefault(title, set()).add(edit.editor)
        if is_revert(edit.comment):
            reverts[title] = reverts.get(title, 0) + 1
        churn[title] = churn.get(title, 0) + abs(edit.size_after - edit.size_before)

    if skipped:
        logger.debug("aggregate_edits_skipped_untitled", skipped=skipped)

    return {
        title: ArticleStats(
            edit_count=count,
            unique_editors=len(editors[title]),
            revert_count=reverts.get(title, 0),
            size_churn=churn[title],
        )
        for title, count in edit_counts.items()
    }


# ---------------------------------------------------------------------------
# Batch-level totals
# ---------------------------------------------------------------------------


def count_batch_editors(edits: Iterable[EditRecord]) -> int:
    """Return the number of distinct editors across the whole batch."""
    return len({edit.editor for edit in edits})


def batch_size_churn(edits: Iterable[EditRecord]) -> int:
    """Return the summed absolute byte delta of every edit in the batch."""
    return sum(abs(edit.size_after - edit.size_before) for edit in edits)


def recent_feed(edits: Iterable[EditRecord], limit: int = 20) -> list[FeedEdit]:
    """Return the first *limit* edits in feed order as live-feed entries.

    The change feed arrives most recent first, so this is the newest slice
    of the batch.  Titles are normalized and each entry is flagged with
    :func:`~wiki_radar.engine.reverts.is_revert`.
    """
    feed: list[FeedEdit] = []
    for edit in edits:
        if len(feed) >= limit:
            break
        feed.append(
            FeedEdit(
                title=normalize_title(edit.title),
                timestamp=edit.timestamp,
                editor=edit.editor,
                comment=edit.comment,
                size_change=edit.size_after - edit.size_before,
                is_revert=is_revert(edit.comment),
            )
        )
    return feed
