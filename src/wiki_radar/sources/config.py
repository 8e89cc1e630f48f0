"""Constants for the Wikimedia fetch layer.

Used by :class:`~wiki_radar.sources.wikimedia.WikimediaClient`.  Values that
operators are expected to change (project, limits, User-Agent) live in
:mod:`wiki_radar.config.settings`; this module holds the fixed API shapes.

Rate-limit policy:
    Wikimedia asks automated tools to stay well below ~200 req/s.  We target
    5 req/s (``WIKIMEDIA_RATE_LIMIT_PER_SECOND``) as a polite baseline,
    enforced via ``asyncio.Semaphore`` plus a courtesy sleep inside the
    client.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

WIKIMEDIA_RATE_LIMIT_PER_SECOND: float = 5.0
"""Target request rate to stay within Wikimedia's polite-use guidelines."""

MAX_CONCURRENT_REQUESTS: int = 5
"""Maximum concurrent outbound requests per client."""

# ---------------------------------------------------------------------------
# API base URLs
# ---------------------------------------------------------------------------

MEDIAWIKI_ACTION_API_BASE: str = "https://{project}.org/w/api.php"
"""MediaWiki Action API base URL template.

Replace ``{project}`` with e.g. ``en.wikipedia`` to produce
``https://en.wikipedia.org/w/api.php``.
"""

WIKIMEDIA_PAGEVIEWS_API_BASE: str = "https://wikimedia.org/api/rest_v1/metrics/pageviews"
"""Wikimedia Analytics Pageviews REST API base URL.

Daily data populates with roughly a 24-hour delay, so the most recent
complete top-viewed list is yesterday's (UTC).
"""

# ---------------------------------------------------------------------------
# Change feed
# ---------------------------------------------------------------------------

MAIN_NAMESPACE: int = 0
"""MediaWiki namespace of content articles."""

RECENT_CHANGES_PROPS: str = "title|timestamp|user|comment|sizes|flags"
"""``rcprop`` fields requested from ``list=recentchanges``."""

# ---------------------------------------------------------------------------
# Article metadata
# ---------------------------------------------------------------------------

ARTICLE_PROPS: str = "info|revisions|categories|langlinks"
"""``prop`` modules requested for a single-article profile."""

REVISION_PROPS: str = "timestamp|user|comment|size"
"""``rvprop`` fields requested for article and talk-page revisions."""

TALK_NAMESPACE_PREFIX: str = "Talk:"
"""Prefix turning a main-namespace title into its talk-page title."""

# ---------------------------------------------------------------------------
# Pageview options
# ---------------------------------------------------------------------------

PAGEVIEW_ACCESS: str = "all-access"
"""Wikimedia pageview ``access`` parameter (desktop + mobile web + apps)."""

PAGEVIEW_AGENT: str = "user"
"""Wikimedia pageview ``agent`` parameter.

``"user"`` filters out most automated traffic, returning only estimated
human pageviews.
"""

PAGEVIEW_GRANULARITY: str = "daily"
"""Granularity of the per-article series."""
