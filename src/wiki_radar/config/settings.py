"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
Every tunable of the radar (display caps, polling cadence, upstream
identity) is accessed through this module. Never call ``os.getenv``
directly elsewhere in the codebase.

Usage::

    from wiki_radar.config.settings import get_settings

    settings = get_settings()
    cap = settings.contested_display_cap
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Radar configuration backed by environment variables and an optional .env file.

    Every field has a default so the radar runs without any configuration.
    Environment variables use the ``WIKI_RADAR_`` prefix, e.g.
    ``WIKI_RADAR_POLL_INTERVAL_SECONDS=120``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WIKI_RADAR_",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    app_name: str = "Wiki Radar"
    """Human-readable application name shown in the OpenAPI docs."""

    debug: bool = False
    """Enable FastAPI debug mode and verbose error responses.  Never True in production."""

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]
    """Origins permitted by the CORS middleware (dashboard hosts)."""

    # ------------------------------------------------------------------
    # Upstream (Wikimedia)
    # ------------------------------------------------------------------

    wiki_project: str = "en.wikipedia"
    """Wiki project queried for edits, pageviews and article metadata.

    Maps to ``https://{wiki_project}.org`` for the MediaWiki Action API and
    to the ``{project}`` path segment of the Pageviews API.
    """

    user_agent: str = "WikiRadar/1.0 (contestation research dashboard) python-httpx"
    """User-Agent sent on every Wikimedia request, as Wikimedia policy requires."""

    http_timeout_seconds: float = Field(default=30.0, gt=0)
    """Per-request timeout for the Wikimedia HTTP client."""

    recent_changes_limit: int = Field(default=500, ge=1, le=500)
    """Number of edits fetched from the change feed per pass (API hard cap = 500)."""

    include_bot_edits: bool = True
    """Keep bot-flagged edits in the change feed.

    When ``False`` the feed is requested with ``rcshow=!bot`` so automated
    maintenance edits do not inflate edit counts.
    """

    # ------------------------------------------------------------------
    # Ranking / display caps
    # ------------------------------------------------------------------

    contested_display_cap: int = Field(default=30, ge=1)
    """Maximum number of contested topics kept after ranking."""

    min_edits_for_contest: int = Field(default=2, ge=1)
    """Articles with fewer edits than this carry no contestation signal."""

    category_preview_cap: int = Field(default=5, ge=1)
    """Number of topics exposed per category bucket for display."""

    top_viewed_cap: int = Field(default=20, ge=1)
    """Number of top-viewed content articles kept after filtering."""

    trending_cap: int = Field(default=10, ge=1)
    """Number of entries in the edit-frequency trending list."""

    recent_edits_cap: int = Field(default=20, ge=1)
    """Number of newest edits exposed as the snapshot's live feed."""

    # ------------------------------------------------------------------
    # Deep profile lookups
    # ------------------------------------------------------------------

    profile_revision_limit: int = Field(default=50, ge=1, le=500)
    """Revisions fetched for a single-article profile."""

    talk_revision_limit: int = Field(default=30, ge=1, le=500)
    """Talk-page revisions fetched for a single-article profile."""

    profile_view_window_days: int = Field(default=60, ge=1)
    """Length of the daily view series used for a profile, ending today."""

    # ------------------------------------------------------------------
    # Periodic pass / snapshot cache
    # ------------------------------------------------------------------

    poll_interval_seconds: int = Field(default=60, ge=10)
    """Cadence of the periodic change-feed pass run by Celery beat."""

    snapshot_cache_enabled: bool = True
    """Publish each periodic snapshot to Redis for the API to serve.

    When ``False`` (or Redis is unreachable) the API computes a live pass
    per request instead.
    """

    snapshot_ttl_seconds: int = Field(default=300, ge=1)
    """Expiry of the cached snapshot so stale passes are never served."""

    redis_url: str = "redis://localhost:6379/0"
    """Redis connection URL used for the snapshot cache."""

    celery_broker_url: str = "redis://localhost:6379/1"
    """Redis URL used as Celery's message broker (database 1 to isolate from app)."""

    celery_result_backend: str = "redis://localhost:6379/2"
    """Redis URL used to store Celery task results (database 2)."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated settings object.
    """
    return Settings()
