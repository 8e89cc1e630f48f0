"""Typed containers passed between engine stages.

Every container is a frozen dataclass: a pass builds its results once and
hands them to the presentation layer untouched.  Sequences are stored as
tuples for the same reason.

``to_dict()`` helpers return plain JSON-ready dicts (datetimes as ISO 8601
strings) so the API and the snapshot cache can serialise results without a
custom encoder.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


def _dt_iso(value: Any) -> Any:
    """Convert a datetime to an ISO 8601 string; pass everything else through."""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


# ---------------------------------------------------------------------------
# Change-feed batch
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EditRecord:
    """One observed edit from the recent-changes feed.

    Attributes:
        title: Article title as delivered upstream (separator convention
            not yet normalized).
        timestamp: UTC time of the edit, or ``None`` when upstream omitted it.
        editor: Editor identity (username or IP); not globally unique.
        comment: Free-text edit summary; may be ``None`` or empty.
        size_before: Page size in bytes before the edit.
        size_after: Page size in bytes after the edit (may be smaller).
    """

    title: str
    timestamp: datetime | None
    editor: str
    comment: str | None
    size_before: int
    size_after: int


@dataclass(frozen=True)
class ArticleStats:
    """Per-article statistics folded from one batch of edits."""

    edit_count: int
    unique_editors: int
    revert_count: int
    size_churn: int


@dataclass(frozen=True)
class ContestedTopic:
    """An article ranked by contestation within one batch."""

    title: str
    edit_count: int
    unique_editors: int
    revert_count: int
    size_churn: int
    contestation_score: float
    is_edit_war: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CategoryBucket:
    """Contested topics grouped under one topical bucket.

    ``topics`` holds the full group; ``preview`` is the display-capped
    slice.  ``total_contestation_score`` is always summed over ``topics``.
    """

    name: str
    topics: tuple[ContestedTopic, ...]
    preview: tuple[ContestedTopic, ...]
    total_contestation_score: float

    @property
    def count(self) -> int:
        return len(self.topics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "total_contestation_score": self.total_contestation_score,
            "topics": [t.to_dict() for t in self.preview],
        }


@dataclass(frozen=True)
class ViewedArticle:
    """A top-viewed article cross-referenced against the edit batch."""

    title: str
    views: int
    rank: int
    is_contested: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrendingArticle:
    """An article ordered purely by how often it was edited in the batch."""

    title: str
    edit_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FeedEdit:
    """One entry of the live edit feed exposed with a snapshot.

    ``size_change`` is signed: negative when the edit removed content.
    """

    title: str
    timestamp: datetime | None
    editor: str
    comment: str | None
    size_change: int
    is_revert: bool

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = _dt_iso(self.timestamp)
        return data


@dataclass(frozen=True)
class RadarSnapshot:
    """Immutable result of one periodic pass over the change feed.

    Attributes:
        generated_at: When the pass ran (UTC).
        edit_count: Number of edits in the batch the pass consumed.
        contested_topics: Ranked, capped contested articles.
        edit_wars: Subset of ``contested_topics`` flagged as edit wars.
        categories: Non-empty buckets ranked by total contestation.
        top_viewed: Cross-referenced top-viewed articles.
        trending: Articles ordered by raw edit frequency.
        views_available: ``False`` when the view source degraded and
            ``top_viewed`` is empty for that reason.
        unique_editors: Distinct editors across the whole batch.
        total_size_churn: Sum of absolute byte deltas across the batch.
        recent_edits: Newest edits of the batch, flagged for reverts.
    """

    generated_at: datetime
    edit_count: int
    contested_topics: tuple[ContestedTopic, ...]
    edit_wars: tuple[ContestedTopic, ...]
    categories: tuple[CategoryBucket, ...]
    top_viewed: tuple[ViewedArticle, ...]
    trending: tuple[TrendingArticle, ...]
    views_available: bool = True
    unique_editors: int = 0
    total_size_churn: int = 0
    recent_edits: tuple[FeedEdit, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": _dt_iso(self.generated_at),
            "edit_count": self.edit_count,
            "unique_editors": self.unique_editors,
            "total_size_churn": self.total_size_churn,
            "contested_topics": [t.to_dict() for t in self.contested_topics],
            "edit_wars": [t.to_dict() for t in self.edit_wars],
            "categories": [c.to_dict() for c in self.categories],
            "top_viewed": [v.to_dict() for v in self.top_viewed],
            "trending": [t.to_dict() for t in self.trending],
            "recent_edits": [e.to_dict() for e in self.recent_edits],
            "views_available": self.views_available,
        }


# ---------------------------------------------------------------------------
# Single-article profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Revision:
    """One revision of an article or talk page."""

    timestamp: datetime | None
    editor: str
    comment: str | None
    size: int


@dataclass(frozen=True)
class ArticleMetadata:
    """Raw single-article metadata as returned by the metadata source.

    ``revisions`` keeps upstream order (newest first).
    """

    title: str
    length_bytes: int
    categories: tuple[str, ...] = ()
    language_links: tuple[str, ...] = ()
    revisions: tuple[Revision, ...] = ()


@dataclass(frozen=True)
class DailyViews:
    """View count of one calendar day; ``date`` is ``YYYY-MM-DD``."""

    date: str
    views: int


@dataclass(frozen=True)
class RadarAxis:
    label: str
    value: float


@dataclass(frozen=True)
class Reading:
    """One interpretive reading of a profile indicator.

    ``level`` is a short keyword (``"high"``, ``"moderate"``, ``"low"``) and
    ``summary`` a one-sentence explanation for dashboards.
    """

    dimension: str
    level: str
    summary: str


@dataclass(frozen=True)
class AnnotatedRevision:
    timestamp: datetime | None
    editor: str
    comment: str | None
    size: int
    is_revert: bool

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = _dt_iso(self.timestamp)
        return data


@dataclass(frozen=True)
class ArticleProfile:
    """Deep profile of a single article with clamped 0–100 sub-scores.

    ``daily_views`` is the full view series over the profile window;
    ``talk_revisions`` is the display-capped talk-page listing, while
    ``talk_page_revision_count`` counts every fetched talk revision.
    """

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
    radar: tuple[RadarAxis, ...] = ()
    interpretation: tuple[Reading, ...] = ()
    recent_edits: tuple[AnnotatedRevision, ...] = field(default_factory=tuple)
    daily_views: tuple[DailyViews, ...] = ()
    talk_revisions: tuple[AnnotatedRevision, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "length_bytes": self.length_bytes,
            "category_count": self.category_count,
            "language_link_count": self.language_link_count,
            "revision_count": self.revision_count,
            "talk_page_revision_count": self.talk_page_revision_count,
            "unique_editors": self.unique_editors,
            "avg_edit_size": self.avg_edit_size,
            "revert_count": self.revert_count,
            "total_views": self.total_views,
            "avg_daily_views": self.avg_daily_views,
            "canonization_score": self.canonization_score,
            "contestation_score": self.contestation_score,
            "status_score": self.status_score,
            "radar": [asdict(a) for a in self.radar],
            "interpretation": [asdict(r) for r in self.interpretation],
            "recent_edits": [r.to_dict() for r in self.recent_edits],
            "daily_views": [asdict(d) for d in self.daily_views],
            "talk_revisions": [r.to_dict() for r in self.talk_revisions],
        }
