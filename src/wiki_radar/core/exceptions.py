"""Application-wide exception hierarchy for Wiki Radar.

All custom exceptions subclass ``WikiRadarError``, enabling consistent
error handling and structured logging across the application.

Hierarchy::

    WikiRadarError
    ├── UpstreamUnavailableError     (source: str | None)
    │   └── UpstreamRateLimitError   (retry_after: float)
    ├── MalformedResponseError       (source: str | None)
    └── NotFoundError                (title: str)

The engine itself raises none of these; they originate in the fetch layer
(:mod:`wiki_radar.sources.wikimedia`) and are interpreted by the radar
service and the API layer.
"""

from __future__ import annotations


class WikiRadarError(Exception):
    """Base class for all Wiki Radar exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Upstream exceptions
# ---------------------------------------------------------------------------


class UpstreamUnavailableError(WikiRadarError):
    """Raised when an upstream source fails or times out.

    Args:
        message: Human-readable description of the failure.
        source: Which upstream failed (``"recent_changes"``, ``"pageviews"``,
            ``"article_metadata"``, ...).
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class UpstreamRateLimitError(UpstreamUnavailableError):
    """Raised when Wikimedia answers HTTP 429.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds to wait before retrying. Defaults to 60.
        source: Which upstream was rate-limited.
    """

    def __init__(
        self,
        message: str,
        retry_after: float = 60.0,
        source: str | None = None,
    ) -> None:
        super().__init__(message, source=source)
        self.retry_after = retry_after


class MalformedResponseError(WikiRadarError):
    """Raised when an upstream response does not have the expected shape.

    Covers non-JSON bodies and JSON missing the keys the parser relies on.

    Args:
        message: Human-readable description of the mismatch.
        source: Which upstream produced the response.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


# ---------------------------------------------------------------------------
# Lookup exceptions
# ---------------------------------------------------------------------------


class NotFoundError(WikiRadarError):
    """Raised when a requested article (or its talk page) does not exist.

    This is a terminal, user-visible outcome for profile lookups and is
    surfaced as "article not found" rather than as a generic failure.

    Args:
        title: The title that could not be resolved.
    """

    def __init__(self, title: str) -> None:
        super().__init__(f"Article not found: '{title}'")
        self.title = title
