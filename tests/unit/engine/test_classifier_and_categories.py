"""Unit tests for the topic classifier and category summarizer.

Covers:
- classify_title(): one representative title per bucket, rule precedence,
  totality over arbitrary input
- classify_topics(): order preservation
- summarize_categories(): preview cap vs. full-group sums, empty-bucket
  removal, ordering, unknown buckets
"""

from __future__ import annotations

import pytest

from wiki_radar.engine.categories import summarize_categories
from wiki_radar.engine.classifier import (
    BUCKETS,
    CULTURE,
    CURRENT_EVENTS,
    OTHER,
    PEOPLE,
    POLITICS,
    SCIENCE,
    classify_title,
    classify_topics,
)
from wiki_radar.engine.models import ContestedTopic


def _topic(title: str, score: float) -> ContestedTopic:
    return ContestedTopic(
        title=title,
        edit_count=2,
        unique_editors=1,
        revert_count=0,
        size_churn=0,
        contestation_score=score,
        is_edit_war=False,
    )


# ---------------------------------------------------------------------------
# classify_title()
# ---------------------------------------------------------------------------


class TestClassifyTitle:
    @pytest.mark.parametrize(
        ("title", "bucket"),
        [
            ("2024 United States presidential election", POLITICS),
            ("COVID-19 vaccine", SCIENCE),
            ("Software engineering", SCIENCE),
            ("Oppenheimer (film)", CULTURE),
            ("Taylor Swift", PEOPLE),
            ("Death of Queen Elizabeth", PEOPLE),
            ("2025 Kentucky shooting", CURRENT_EVENTS),
            ("Zebra", OTHER),
        ],
    )
    def test_representative_titles(self, title: str, bucket: str) -> None:
        """Each bucket is reachable from a typical title."""
        assert classify_title(title) == bucket

    def test_politics_wins_over_science(self) -> None:
        """'Climate change law' matches both keyword sets; politics is checked first."""
        assert classify_title("Climate change law") == POLITICS

    def test_politics_wins_over_person_pattern(self) -> None:
        """A two-word name containing a politics keyword goes to politics."""
        assert classify_title("Mike Lawson") == POLITICS

    def test_person_pattern_uses_original_case(self) -> None:
        """The name pattern needs capitalised words; lower-case input falls through."""
        assert classify_title("Joe Biden") == PEOPLE
        assert classify_title("joe biden") == OTHER

    def test_underscore_titles_classify_like_spaced_titles(self) -> None:
        """Pageview-style titles are normalized before classification."""
        assert classify_title("Taylor_Swift") == classify_title("Taylor Swift")

    @pytest.mark.parametrize("title", ["", " ", "???", "X" * 500, "Ünïcödé Tïtle"])
    def test_is_total(self, title: str) -> None:
        """Every title maps to exactly one known bucket."""
        assert classify_title(title) in BUCKETS


class TestClassifyTopics:
    def test_preserves_order_and_pairs_topics(self) -> None:
        """classify_topics() returns (bucket, topic) pairs in input order."""
        topics = [_topic("Zebra", 1.0), _topic("Election", 2.0)]
        assert classify_topics(topics) == [(OTHER, topics[0]), (POLITICS, topics[1])]


# ---------------------------------------------------------------------------
# summarize_categories()
# ---------------------------------------------------------------------------


class TestSummarizeCategories:
    def test_total_covers_full_group_not_preview(self) -> None:
        """The ranking total sums every topic even when the preview is capped."""
        pairs = [(POLITICS, _topic(f"P{i}", 10.0)) for i in range(7)]

        (bucket,) = summarize_categories(pairs, preview_cap=5)

        assert bucket.count == 7
        assert len(bucket.preview) == 5
        assert bucket.total_contestation_score == pytest.approx(70.0)

    def test_drops_empty_buckets(self) -> None:
        """Only buckets with at least one topic are returned."""
        buckets = summarize_categories([(SCIENCE, _topic("S", 1.0))])
        assert [b.name for b in buckets] == [SCIENCE]

    def test_sorted_by_total_descending(self) -> None:
        """Buckets are ordered by total contestation score."""
        pairs = [
            (POLITICS, _topic("P", 5.0)),
            (CULTURE, _topic("C1", 4.0)),
            (CULTURE, _topic("C2", 4.0)),
            (OTHER, _topic("O", 20.0)),
        ]
        assert [b.name for b in summarize_categories(pairs)] == [OTHER, CULTURE, POLITICS]

    def test_ties_keep_canonical_bucket_order(self) -> None:
        """Equal totals fall back to the canonical bucket order."""
        pairs = [(OTHER, _topic("O", 3.0)), (PEOPLE, _topic("P", 3.0))]
        assert [b.name for b in summarize_categories(pairs)] == [PEOPLE, OTHER]

    def test_unknown_bucket_raises(self) -> None:
        """A bucket outside the closed set is rejected."""
        with pytest.raises(ValueError, match="Unknown category bucket"):
            summarize_categories([("Sports", _topic("X", 1.0))])

    def test_to_dict_exposes_preview_as_topics(self) -> None:
        """Serialized buckets carry the full count but only the preview topics."""
        pairs = [(POLITICS, _topic(f"P{i}", 1.0)) for i in range(3)]
        (bucket,) = summarize_categories(pairs, preview_cap=2)

        data = bucket.to_dict()

        assert data["count"] == 3
        assert [t["title"] for t in data["topics"]] == ["P0", "P1"]
