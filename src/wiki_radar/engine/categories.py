"""Category summarizer.

Groups classified contested topics into buckets and ranks the buckets by
aggregate contestation.  The preview cap only shapes what dashboards show;
ranking sums always cover the whole group.
"""

from __future__ import annotations

from collections.abc import Iterable

from wiki_radar.engine.classifier import BUCKETS
from wiki_radar.engine.models import CategoryBucket, ContestedTopic

DEFAULT_PREVIEW_CAP: int = 5


def summarize_categories(
    classified: Iterable[tuple[str, ContestedTopic]],
    preview_cap: int = DEFAULT_PREVIEW_CAP,
) -> list[CategoryBucket]:
    """Build ranked category buckets from ``(bucket, topic)`` pairs.

    Empty buckets are dropped.  Buckets are sorted by
    ``total_contestation_score`` descending; equal totals keep the canonical
    :data:`~wiki_radar.engine.classifier.BUCKETS` order.

    Args:
        classified: Output of
            :func:`~wiki_radar.engine.classifier.classify_topics`.
        preview_cap: Number of topics exposed in each bucket's preview.

    Returns:
        Ranked list of non-empty :class:`CategoryBucket`.

    Raises:
        ValueError: If a pair names a bucket outside the closed set.
    """
    groups: dict[str, list[ContestedTopic]] = {name: [] for name in BUCKETS}
    for bucket, topic in classified:
        if bucket not in groups:
            raise ValueError(f"Unknown category bucket '{bucket}'")
        groups[bucket].append(topic)

    buckets = [
        CategoryBucket(
            name=name,
            topics=tuple(topics),
            preview=tuple(topics[:preview_cap]),
            total_contestation_score=sum(t.contestation_score for t in topics),
        )
        for name, topics in groups.items()
        if topics
    ]
    buckets.sort(key=lambda b: b.total_contestation_score, reverse=True)
    return buckets
