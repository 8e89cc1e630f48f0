"""Wikimedia fetch layer.

Implements the five boundary operations the radar engine depends on, over
two Wikimedia APIs:

- **MediaWiki Action API** (``/w/api.php``): the recent-changes feed,
  single-article metadata and revisions, talk-page revisions.
- **Wikimedia Analytics Pageviews API** (``wikimedia.org/api/rest_v1``):
  the daily top-viewed list and per-article daily view series.

Every method returns engine types or plain dicts; none of them score
anything.  Failures are mapped onto the radar exception hierarchy:

- transport errors, timeouts and HTTP 5xx → ``UpstreamUnavailableError``
- HTTP 429 → ``UpstreamRateLimitError``
- non-JSON bodies and missing keys → ``MalformedResponseError``
- missing article or talk page → ``NotFoundError``

**No credentials required**: all read endpoints are unauthenticated.  A
descriptive ``User-Agent`` header is mandatory per Wikimedia policy.

**Rate limiting**: ``asyncio.Semaphore(5)`` caps concurrent requests and a
0.2-second courtesy sleep follows every request.

No retries happen here; the Celery task wrapping the periodic pass retries
on rate limits.
"""

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from datetime import date, datetime, timezone
from typing import Any

import httpx

from wiki_radar.config.settings import Settings, get_settings
from wiki_radar.core.exceptions import (
    MalformedResponseError,
    NotFoundError,
    UpstreamRateLimitError,
    UpstreamUnavailableError,
)
from wiki_radar.engine.models import ArticleMetadata, EditRecord, Revision
from wiki_radar.engine.titles import normalize_title
from wiki_radar.sources.config import (
    ARTICLE_PROPS,
    MAIN_NAMESPACE,
    MAX_CONCURRENT_REQUESTS,
    MEDIAWIKI_ACTION_API_BASE,
    PAGEVIEW_ACCESS,
    PAGEVIEW_AGENT,
    PAGEVIEW_GRANULARITY,
    RECENT_CHANGES_PROPS,
    REVISION_PROPS,
    TALK_NAMESPACE_PREFIX,
    WIKIMEDIA_PAGEVIEWS_API_BASE,
    WIKIMEDIA_RATE_LIMIT_PER_SECOND,
)

logger = logging.getLogger(__name__)

# Inter-request courtesy sleep (seconds) to stay within 5 req/s.
_REQUEST_SLEEP_SECONDS: float = 1.0 / WIKIMEDIA_RATE_LIMIT_PER_SECOND  # 0.2 s


class WikimediaClient:
    """Async client for the Wikimedia endpoints the radar reads.

    Args:
        settings: Radar settings; defaults to :func:`get_settings`.
        http_client: Optional injected :class:`httpx.AsyncClient` for testing.
            If ``None``, a new client is created per call.
        request_interval: Courtesy sleep after each request in seconds.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        request_interval: float = _REQUEST_SLEEP_SECONDS,
    ) -> None:
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._request_interval = request_interval
        self._semaphore = asyncio.Semaphore(MAX_CONCURRENT_REQUESTS)

    @property
    def project(self) -> str:
        return self._settings.wiki_project

    @property
    def action_api_url(self) -> str:
        return MEDIAWIKI_ACTION_API_BASE.format(project=self.project)

    # ------------------------------------------------------------------
    # Boundary operations
    # ------------------------------------------------------------------

    async def fetch_recent_changes(self, limit: int | None = None) -> list[EditRecord]:
        """Fetch the most recent main-namespace edits, most recent first.

        Args:
            limit: Number of edits to request (capped at 500 by the API).
                Defaults to ``settings.recent_changes_limit``.

        Returns:
            One batch of :class:`EditRecord`.

        Raises:
            UpstreamUnavailableError: On transport failure or HTTP error.
            MalformedResponseError: If the response lacks
                ``query.recentchanges``.
        """
        effective_limit = limit if limit is not None else self._settings.recent_changes_limit
        params: dict[str, Any] = {
            "action": "query",
            "list": "recentchanges",
            "rcnamespace": str(MAIN_NAMESPACE),
            "rclimit": min(effective_limit, 500),
            "rctype": "edit",
            "rcprop": RECENT_CHANGES_PROPS,
            "format": "json",
        }
        if not self._settings.include_bot_edits:
            params["rcshow"] = "!bot"

        data = await self._get_json(self.action_api_url, params, source="recent_changes")
        changes = _require(data, ("query", "recentchanges"), source="recent_changes")
        if not isinstance(changes, list):
            raise MalformedResponseError(
                "wikimedia: query.recentchanges is not a list", source="recent_changes"
            )

        records = [_parse_edit_record(change) for change in changes if isinstance(change, dict)]
        logger.info(
            "wikimedia: fetched %d recent changes from %s", len(records), self.project
        )
        return records

    async def fetch_top_viewed(self, day: date) -> list[dict[str, Any]]:
        """Fetch the ranked top-viewed articles for one calendar day.

        Titles are returned exactly as upstream reports them (underscore
        separated, namespaced entries included); the engine normalizes and
        filters them.

        Args:
            day: The (UTC) day to query.

        Returns:
            List of ``{"title", "views", "rank"}`` dicts in rank order.

        Raises:
            UpstreamUnavailableError: On transport failure or HTTP error
                (including 404 while the day's data is not yet published).
            MalformedResponseError: If ``items[0].articles`` is missing.
        """
        url = (
            f"{WIKIMEDIA_PAGEVIEWS_API_BASE}/top/{self.project}/{PAGEVIEW_ACCESS}"
            f"/{day.year:04d}/{day.month:02d}/{day.day:02d}"
        )
        data = await self._get_json(url, {}, source="top_viewed")
        items = data.get("items")
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise MalformedResponseError(
                "wikimedia: top-viewed response has no items", source="top_viewed"
            )
        articles = items[0].get("articles")
        if not isinstance(articles, list):
            raise MalformedResponseError(
                "wikimedia: top-viewed response has no articles list", source="top_viewed"
            )

        return [
            {
                "title": entry.get("article", ""),
                "views": _non_negative_int(entry.get("views"), "views", "top_viewed"),
                "rank": _non_negative_int(entry.get("rank"), "rank", "top_viewed"),
            }
            for entry in articles
            if isinstance(entry, dict)
        ]

    async def fetch_daily_views(
        self,
        title: str,
        start: date,
        end: date,
    ) -> list[dict[str, Any]]:
        """Fetch the daily view series for one article.

        Pageview data may not exist for recently created or renamed
        articles; upstream answers 404 and this returns an empty series.

        Args:
            title: Article title (either separator convention).
            start: First day of the series (inclusive).
            end: Last day of the series (inclusive).

        Returns:
            List of ``{"date": "YYYY-MM-DD", "views": int}`` dicts.

        Raises:
            UpstreamUnavailableError: On transport failure or HTTP error
                other than 404.
            MalformedResponseError: If ``items`` is missing.
        """
        encoded = urllib.parse.quote(normalize_title(title).replace(" ", "_"), safe="")
        url = (
            f"{WIKIMEDIA_PAGEVIEWS_API_BASE}/per-article/{self.project}"
            f"/{PAGEVIEW_ACCESS}/{PAGEVIEW_AGENT}/{encoded}/{PAGEVIEW_GRANULARITY}"
            f"/{start.strftime('%Y%m%d')}/{end.strftime('%Y%m%d')}"
        )
        try:
            data = await self._get_json(url, {}, source="daily_views", not_found_title=title)
        except NotFoundError:
            logger.debug("wikimedia: no pageview data for '%s' on %s", title, self.project)
            return []

        items = data.get("items")
        if not isinstance(items, list):
            raise MalformedResponseError(
                "wikimedia: per-article response has no items", source="daily_views"
            )

        series: list[dict[str, Any]] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            raw_timestamp = str(item.get("timestamp", ""))
            # Pageview timestamps are YYYYMMDDHH; keep the date part.
            date_part = raw_timestamp[:8]
            if len(date_part) == 8:
                date_str = f"{date_part[:4]}-{date_part[4:6]}-{date_part[6:8]}"
            else:
                date_str = date_part
            views = _non_negative_int(item.get("views"), "views", "daily_views")
            series.append({"date": date_str, "views": views})
        return series

    async def fetch_article_metadata(self, title: str) -> ArticleMetadata:
        """Fetch length, categories, language links and revisions for one article.

        Redirects are followed so a lookup of ``"USA"`` profiles
        ``"United States"``.

        Args:
            title: Article title (either separator convention).

        Returns:
            The article's :class:`ArticleMetadata`.

        Raises:
            NotFoundError: If the article does not exist or the title is
                invalid.
            UpstreamUnavailableError: On transport failure or HTTP error.
            MalformedResponseError: If ``query.pages`` is missing.
        """
        normalized = normalize_title(title)
        if not normalized:
            raise NotFoundError(title)

        params: dict[str, Any] = {
            "action": "query",
            "titles": normalized,
            "prop": ARTICLE_PROPS,
            "rvprop": REVISION_PROPS,
            "rvlimit": self._settings.profile_revision_limit,
            "lllimit": "max",
            "cllimit": "max",
            "redirects": "1",
            "format": "json",
            "formatversion": "2",
        }
        data = await self._get_json(self.action_api_url, params, source="article_metadata")
        page = _single_page(data, normalized, source="article_metadata")

        return ArticleMetadata(
            title=page.get("title", normalized),
            length_bytes=_non_negative_int(page.get("length"), "length", "article_metadata"),
            categories=tuple(
                c.get("title", "") for c in page.get("categories", []) if isinstance(c, dict)
            ),
            language_links=tuple(
                ll.get("lang", "") for ll in page.get("langlinks", []) if isinstance(ll, dict)
            ),
            revisions=tuple(
                _parse_revision(rev, "article_metadata")
                for rev in page.get("revisions", [])
                if isinstance(rev, dict)
            ),
        )

    async def fetch_talk_revisions(self, title: str) -> list[Revision]:
        """Fetch recent revisions of an article's talk page.

        Redirects are followed, matching :meth:`fetch_article_metadata`.

        Args:
            title: Main-namespace article title.

        Returns:
            Talk-page revisions, newest first.

        Raises:
            NotFoundError: If the talk page does not exist.
            UpstreamUnavailableError: On transport failure or HTTP error.
            MalformedResponseError: If ``query.pages`` is missing.
        """
        talk_title = f"{TALK_NAMESPACE_PREFIX}{normalize_title(title)}"
        params: dict[str, Any] = {
            "action": "query",
            "titles": talk_title,
            "prop": "revisions",
            "rvprop": REVISION_PROPS,
            "rvlimit": self._settings.talk_revision_limit,
            "redirects": "1",
            "format": "json",
            "formatversion": "2",
        }
        data = await self._get_json(self.action_api_url, params, source="talk_revisions")
        page = _single_page(data, talk_title, source="talk_revisions")
        return [
            _parse_revision(rev, "talk_revisions")
            for rev in page.get("revisions", [])
            if isinstance(rev, dict)
        ]

    async def health_check(self) -> dict[str, Any]:
        """Verify that the MediaWiki API of the configured project is reachable.

        Fetches ``action=query&meta=siteinfo`` and checks the response is
        valid JSON containing site metadata.  Never raises.

        Returns:
            Dict with ``status`` (``"ok"`` | ``"down"``), ``project``,
            ``checked_at``, and optionally ``site`` or ``detail``.
        """
        base: dict[str, Any] = {
            "project": self.project,
            "checked_at": datetime.now(tz=timezone.utc).isoformat(),
        }
        params = {"action": "query", "meta": "siteinfo", "format": "json"}
        try:
            data = await self._get_json(self.action_api_url, params, source="siteinfo")
        except (UpstreamUnavailableError, MalformedResponseError) as exc:
            return {**base, "status": "down", "detail": str(exc)}
        sitename = data.get("query", {}).get("general", {}).get("sitename", "Unknown")
        return {**base, "status": "ok", "site": sitename}

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any],
        source: str,
        not_found_title: str | None = None,
    ) -> dict[str, Any]:
        """Make a rate-limited GET request and decode the JSON body.

        Args:
            url: Full endpoint URL.
            params: Query parameters.
            source: Upstream label attached to raised exceptions.
            not_found_title: When set, HTTP 404 raises ``NotFoundError`` for
                this title instead of ``UpstreamUnavailableError``.

        Returns:
            Parsed JSON object.

        Raises:
            UpstreamRateLimitError: On HTTP 429.
            NotFoundError: On HTTP 404 when *not_found_title* is given.
            UpstreamUnavailableError: On other HTTP errors or transport failure.
            MalformedResponseError: If the body is not a JSON object.
        """
        async with self._semaphore:
            try:
                response = await self._send(url, params)
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code == 429:
                    retry_after = _parse_retry_after(exc.response.headers.get("Retry-After"))
                    raise UpstreamRateLimitError(
                        f"wikimedia: rate limited by {source} (HTTP 429)",
                        retry_after=retry_after,
                        source=source,
                    ) from exc
                if status_code == 404 and not_found_title is not None:
                    raise NotFoundError(not_found_title) from exc
                raise UpstreamUnavailableError(
                    f"wikimedia: HTTP {status_code} from {source}",
                    source=source,
                ) from exc
            except httpx.RequestError as exc:
                raise UpstreamUnavailableError(
                    f"wikimedia: request error calling {source}: {exc}",
                    source=source,
                ) from exc
            except ValueError as exc:
                raise MalformedResponseError(
                    f"wikimedia: non-JSON response from {source}",
                    source=source,
                ) from exc
            finally:
                await asyncio.sleep(self._request_interval)

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"wikimedia: expected a JSON object from {source}", source=source
            )
        api_error = payload.get("error")
        if isinstance(api_error, dict):
            raise MalformedResponseError(
                f"wikimedia: API error from {source}: {api_error.get('code', 'unknown')}",
                source=source,
            )
        return payload

    async def _send(self, url: str, params: dict[str, Any]) -> httpx.Response:
        """Issue the GET on the injected client, or on a short-lived one.

        The injected client is owned by the caller and is never closed here.
        """
        if self._http_client is not None:
            return await self._http_client.get(url, params=params)
        async with self._build_http_client() as client:
            return await client.get(url, params=params)

    def _build_http_client(self) -> httpx.AsyncClient:
        """Return a new async client with the mandatory Wikimedia headers."""
        return httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds,
            headers=self._make_headers(),
        )

    def _make_headers(self) -> dict[str, str]:
        return {"User-Agent": self._settings.user_agent}


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _require(data: dict[str, Any], path: tuple[str, ...], source: str) -> Any:
    """Walk *path* through nested dicts, raising on the first missing key."""
    node: Any = data
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise MalformedResponseError(
                f"wikimedia: response from {source} is missing '{'.'.join(path)}'",
                source=source,
            )
        node = node[key]
    return node


def _single_page(data: dict[str, Any], title: str, source: str) -> dict[str, Any]:
    """Extract the single page of a ``formatversion=2`` query response.

    Raises:
        NotFoundError: If the page is flagged ``missing`` or ``invalid``.
        MalformedResponseError: If ``query.pages`` is absent or empty.
    """
    pages = _require(data, ("query", "pages"), source=source)
    if not isinstance(pages, list) or not pages or not isinstance(pages[0], dict):
        raise MalformedResponseError(
            f"wikimedia: response from {source} has no pages", source=source
        )
    page = pages[0]
    if page.get("missing") or page.get("invalid"):
        raise NotFoundError(title)
    return page


def _non_negative_int(value: Any, field: str, source: str) -> int:
    """Coerce a numeric upstream field (sizes, views) to a non-negative int.

    Raises:
        MalformedResponseError: If *value* is not numeric.
    """
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(
            f"wikimedia: non-numeric '{field}' ({value!r}) from {source}",
            source=source,
        ) from exc


def _parse_edit_record(change: dict[str, Any]) -> EditRecord:
    return EditRecord(
        title=change.get("title", ""),
        timestamp=_parse_timestamp(change.get("timestamp")),
        editor=change.get("user", ""),
        comment=change.get("comment") or None,
        size_before=_non_negative_int(change.get("oldlen"), "oldlen", "recent_changes"),
        size_after=_non_negative_int(change.get("newlen"), "newlen", "recent_changes"),
    )


def _parse_revision(rev: dict[str, Any], source: str = "revisions") -> Revision:
    return Revision(
        timestamp=_parse_timestamp(rev.get("timestamp")),
        editor=rev.get("user", ""),
        comment=rev.get("comment") or None,
        size=_non_negative_int(rev.get("size"), "size", source),
    )


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse a MediaWiki ISO 8601 timestamp (``2026-02-17T12:00:00Z``).

    Returns ``None`` for missing or unparseable values.
    """
    if not value or not isinstance(value, str):
        return None
    for fmt in ("%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            dt = datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    logger.debug("wikimedia: could not parse timestamp '%s'", value)
    return None


def _parse_retry_after(value: str | None) -> float:
    try:
        return float(value) if value is not None else 60.0
    except ValueError:
        return 60.0
