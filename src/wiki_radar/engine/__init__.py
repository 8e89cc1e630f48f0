"""Pure scoring engine: aggregation, contestation ranking, classification and profiles."""

from __future__ import annotations

from wiki_radar.engine.aggregator import aggregate_edits
from wiki_radar.engine.categories import summarize_categories
from wiki_radar.engine.classifier import BUCKETS, classify_title, classify_topics
from wiki_radar.engine.contestation import (
    contestation_score,
    extract_edit_wars,
    filter_topics,
    is_edit_war,
    rank_contested_topics,
    trending_by_edit_count,
)
from wiki_radar.engine.models import (
    ArticleMetadata,
    ArticleProfile,
    ArticleStats,
    CategoryBucket,
    ContestedTopic,
    EditRecord,
    RadarSnapshot,
    Revision,
    ViewedArticle,
)
from wiki_radar.engine.pipeline import PipelineLimits, run_pipeline
from wiki_radar.engine.profile import score_profile
from wiki_radar.engine.reverts import is_revert
from wiki_radar.engine.titles import is_content_title, normalize_title
from wiki_radar.engine.views import cross_reference_views

__all__ = [
    # models
    "ArticleMetadata",
    "ArticleProfile",
    "ArticleStats",
    "CategoryBucket",
    "ContestedTopic",
    "EditRecord",
    "RadarSnapshot",
    "Revision",
    "ViewedArticle",
    # operations
    "BUCKETS",
    "PipelineLimits",
    "aggregate_edits",
    "classify_title",
    "classify_topics",
    "contestation_score",
    "cross_reference_views",
    "extract_edit_wars",
    "filter_topics",
    "is_content_title",
    "is_edit_war",
    "is_revert",
    "normalize_title",
    "rank_contested_topics",
    "run_pipeline",
    "score_profile",
    "summarize_categories",
    "trending_by_edit_count",
]
