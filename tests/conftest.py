"""Shared pytest fixtures for Wiki Radar tests.

Fixture summary
---------------
settings        Settings with the snapshot cache disabled and bots included.
edit_factory    Callable building ``EditRecord`` objects with sensible defaults.
revision_factory  Callable building ``Revision`` objects with sensible defaults.

Every test runs without a network connection or Redis: HTTP is mocked with
respx and service doubles use ``unittest.mock``.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set env vars before any application modules are imported so that
# module-level ``get_settings()`` calls (Celery app, API singleton) see the
# test values.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "WIKI_RADAR_WIKI_PROJECT": "en.wikipedia",
    "WIKI_RADAR_SNAPSHOT_CACHE_ENABLED": "false",
    "WIKI_RADAR_REDIS_URL": "redis://localhost:6379/0",
    "WIKI_RADAR_CELERY_BROKER_URL": "memory://",
    "WIKI_RADAR_CELERY_RESULT_BACKEND": "cache+memory://",
    "WIKI_RADAR_LOG_LEVEL": "INFO",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _default)

# ---------------------------------------------------------------------------
# Application imports (after env bootstrap)
# ---------------------------------------------------------------------------

from wiki_radar.config.settings import Settings, get_settings  # noqa: E402
from wiki_radar.engine.models import EditRecord, Revision  # noqa: E402

# Clear the lru_cache so Settings() re-reads from the patched environment.
get_settings.cache_clear()

_BASE_TS = datetime(2026, 2, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    """Return settings isolated from any developer .env file."""
    return Settings(
        _env_file=None,
        snapshot_cache_enabled=False,
        include_bot_edits=True,
    )


@pytest.fixture
def edit_factory() -> Callable[..., EditRecord]:
    """Return a builder for ``EditRecord`` test data."""

    def _make(
        title: str = "Example",
        editor: str = "Alice",
        comment: str | None = "copyedit",
        size_before: int = 1000,
        size_after: int = 1010,
        timestamp: datetime | None = _BASE_TS,
    ) -> EditRecord:
        return EditRecord(
            title=title,
            timestamp=timestamp,
            editor=editor,
            comment=comment,
            size_before=size_before,
            size_after=size_after,
        )

    return _make


@pytest.fixture
def revision_factory() -> Callable[..., Revision]:
    """Return a builder for ``Revision`` test data."""

    def _make(
        editor: str = "Alice",
        size: int = 1000,
        comment: str | None = "copyedit",
        timestamp: datetime | None = _BASE_TS,
    ) -> Revision:
        return Revision(timestamp=timestamp, editor=editor, comment=comment, size=size)

    return _make


@pytest.fixture
def top_viewed_payload() -> list[dict[str, Any]]:
    """Return a top-viewed list as produced by the fetch layer (raw titles)."""
    return [
        {"title": "Main_Page", "views": 5_000_000, "rank": 1},
        {"title": "Special:Search", "views": 900_000, "rank": 2},
        {"title": "Joe_Biden", "views": 250_000, "rank": 3},
        {"title": "Climate_change", "views": 120_000, "rank": 4},
    ]
