"""Tests for the Wikimedia fetch layer.

Covers:
- fetch_recent_changes(): parameters, oldlen/newlen parsing, bot filter,
  missing keys
- fetch_top_viewed(): URL shape, raw titles, malformed bodies, HTTP errors
- fetch_daily_views(): title encoding, 404 -> empty series
- fetch_article_metadata(): page parsing, missing page -> NotFoundError
- fetch_talk_revisions(): talk-page title, missing talk page
- health_check(): ok and down
- error mapping: 429, 5xx, transport errors, non-JSON, API error payloads
- User-Agent header on outgoing requests

These tests run without a network connection; httpx is mocked with respx.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

import httpx
import pytest
import respx

from wiki_radar.config.settings import Settings
from wiki_radar.core.exceptions import (
    MalformedResponseError,
    NotFoundError,
    UpstreamRateLimitError,
    UpstreamUnavailableError,
)
from wiki_radar.sources.wikimedia import WikimediaClient, _parse_timestamp

ACTION_API = "https://en.wikipedia.org/w/api.php"
PAGEVIEWS = "https://wikimedia.org/api/rest_v1/metrics/pageviews"


# ---------------------------------------------------------------------------
# Canned API responses
# ---------------------------------------------------------------------------

RECENT_CHANGES_RESPONSE: dict[str, Any] = {
    "batchcomplete": "",
    "query": {
        "recentchanges": [
            {
                "type": "edit",
                "ns": 0,
                "title": "Joe Biden",
                "user": "Alice",
                "oldlen": 1000,
                "newlen": 1200,
                "timestamp": "2026-02-17T12:00:00Z",
                "comment": "copyedit",
            },
            {
                "type": "edit",
                "ns": 0,
                "title": "Joe Biden",
                "user": "Bob",
                "oldlen": 1200,
                "newlen": 1000,
                "timestamp": "2026-02-17T11:59:00Z",
                "comment": "",
            },
        ]
    },
}

TOP_VIEWED_RESPONSE: dict[str, Any] = {
    "items": [
        {
            "project": "en.wikipedia",
            "access": "all-access",
            "year": "2026",
            "month": "02",
            "day": "17",
            "articles": [
                {"article": "Main_Page", "views": 5000000, "rank": 1},
                {"article": "Joe_Biden", "views": 250000, "rank": 2},
            ],
        }
    ]
}

DAILY_VIEWS_RESPONSE: dict[str, Any] = {
    "items": [
        {"article": "Joe_Biden", "timestamp": "2026021700", "views": 1200},
        {"article": "Joe_Biden", "timestamp": "2026021800", "views": 800},
    ]
}

ARTICLE_RESPONSE: dict[str, Any] = {
    "batchcomplete": True,
    "query": {
        "pages": [
            {
                "pageid": 145422,
                "ns": 0,
                "title": "Joe Biden",
                "length": 250000,
                "revisions": [
                    {"user": "Alice", "timestamp": "2026-02-17T12:00:00Z", "comment": "rvv", "size": 250000},
                    {"user": "Bob", "timestamp": "2026-02-17T11:00:00Z", "comment": "", "size": 249000},
                ],
                "categories": [
                    {"ns": 14, "title": "Category:Presidents of the United States"},
                    {"ns": 14, "title": "Category:Living people"},
                ],
                "langlinks": [{"lang": "de", "title": "Joe Biden"}, {"lang": "fr", "title": "Joe Biden"}],
            }
        ]
    },
}

MISSING_PAGE_RESPONSE: dict[str, Any] = {
    "batchcomplete": True,
    "query": {"pages": [{"ns": 0, "title": "Nonexistent Article", "missing": True}]},
}

TALK_RESPONSE: dict[str, Any] = {
    "batchcomplete": True,
    "query": {
        "pages": [
            {
                "pageid": 1,
                "ns": 1,
                "title": "Talk:Joe Biden",
                "revisions": [
                    {"user": "Carol", "timestamp": "2026-02-16T10:00:00Z", "comment": "reply", "size": 900},
                ],
            }
        ]
    },
}


@pytest.fixture
def radar_settings() -> Settings:
    return Settings(_env_file=None, wiki_project="en.wikipedia", include_bot_edits=True)


def _client(settings: Settings) -> WikimediaClient:
    return WikimediaClient(settings=settings, request_interval=0)


# ---------------------------------------------------------------------------
# fetch_recent_changes()
# ---------------------------------------------------------------------------


class TestFetchRecentChanges:
    @pytest.mark.asyncio
    async def test_parses_edit_records(self, radar_settings: Settings) -> None:
        """Each change becomes an EditRecord with sizes from oldlen/newlen."""
        with respx.mock:
            route = respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=RECENT_CHANGES_RESPONSE)
            )
            records = await _client(radar_settings).fetch_recent_changes(limit=50)

        assert len(records) == 2
        first = records[0]
        assert first.title == "Joe Biden"
        assert first.editor == "Alice"
        assert (first.size_before, first.size_after) == (1000, 1200)
        assert first.timestamp == datetime(2026, 2, 17, 12, 0, tzinfo=timezone.utc)
        assert records[1].comment is None

        params = route.calls.last.request.url.params
        assert params["list"] == "recentchanges"
        assert params["rcnamespace"] == "0"
        assert params["rctype"] == "edit"
        assert params["rclimit"] == "50"
        assert "rcshow" not in params

    @pytest.mark.asyncio
    async def test_limit_is_capped_at_500(self, radar_settings: Settings) -> None:
        """Requests never ask for more than the API maximum."""
        with respx.mock:
            route = respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=RECENT_CHANGES_RESPONSE)
            )
            await _client(radar_settings).fetch_recent_changes(limit=5000)

        assert route.calls.last.request.url.params["rclimit"] == "500"

    @pytest.mark.asyncio
    async def test_excludes_bots_when_configured(self) -> None:
        """include_bot_edits=False adds rcshow=!bot."""
        settings = Settings(_env_file=None, include_bot_edits=False)
        with respx.mock:
            route = respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=RECENT_CHANGES_RESPONSE)
            )
            await _client(settings).fetch_recent_changes()

        assert route.calls.last.request.url.params["rcshow"] == "!bot"

    @pytest.mark.asyncio
    async def test_missing_recentchanges_raises_malformed(self, radar_settings: Settings) -> None:
        """A body without query.recentchanges raises MalformedResponseError."""
        with respx.mock:
            respx.get(ACTION_API).mock(return_value=httpx.Response(200, json={"query": {}}))
            with pytest.raises(MalformedResponseError):
                await _client(radar_settings).fetch_recent_changes()

    @pytest.mark.asyncio
    async def test_sends_user_agent(self, radar_settings: Settings) -> None:
        """Outgoing requests carry the configured User-Agent."""
        with respx.mock:
            route = respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=RECENT_CHANGES_RESPONSE)
            )
            await _client(radar_settings).fetch_recent_changes()

        assert route.calls.last.request.headers["User-Agent"] == radar_settings.user_agent

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("field", "value"), [("oldlen", "n/a"), ("newlen", [1200])])
    async def test_non_numeric_sizes_raise_malformed(
        self, radar_settings: Settings, field: str, value: Any
    ) -> None:
        """A non-numeric oldlen or newlen is a malformed response."""
        change = dict(RECENT_CHANGES_RESPONSE["query"]["recentchanges"][0], **{field: value})
        with respx.mock:
            respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json={"query": {"recentchanges": [change]}})
            )
            with pytest.raises(MalformedResponseError) as exc_info:
                await _client(radar_settings).fetch_recent_changes()

        assert exc_info.value.source == "recent_changes"
        assert field in str(exc_info.value)


# ---------------------------------------------------------------------------
# fetch_top_viewed()
# ---------------------------------------------------------------------------


class TestFetchTopViewed:
    @pytest.mark.asyncio
    async def test_returns_raw_ranked_titles(self, radar_settings: Settings) -> None:
        """Titles come back exactly as upstream reports them."""
        url = f"{PAGEVIEWS}/top/en.wikipedia/all-access/2026/02/17"
        with respx.mock:
            respx.get(url).mock(return_value=httpx.Response(200, json=TOP_VIEWED_RESPONSE))
            articles = await _client(radar_settings).fetch_top_viewed(date(2026, 2, 17))

        assert articles == [
            {"title": "Main_Page", "views": 5000000, "rank": 1},
            {"title": "Joe_Biden", "views": 250000, "rank": 2},
        ]

    @pytest.mark.asyncio
    async def test_empty_items_raises_malformed(self, radar_settings: Settings) -> None:
        """A body without items raises MalformedResponseError."""
        with respx.mock:
            respx.get(url__startswith=f"{PAGEVIEWS}/top/").mock(
                return_value=httpx.Response(200, json={"items": []})
            )
            with pytest.raises(MalformedResponseError):
                await _client(radar_settings).fetch_top_viewed(date(2026, 2, 17))

    @pytest.mark.asyncio
    async def test_non_numeric_views_raise_malformed(self, radar_settings: Settings) -> None:
        """A non-numeric view count is a malformed response."""
        body = {"items": [{"articles": [{"article": "Joe_Biden", "views": "many", "rank": 1}]}]}
        with respx.mock:
            respx.get(url__startswith=f"{PAGEVIEWS}/top/").mock(
                return_value=httpx.Response(200, json=body)
            )
            with pytest.raises(MalformedResponseError):
                await _client(radar_settings).fetch_top_viewed(date(2026, 2, 17))

    @pytest.mark.asyncio
    async def test_unpublished_day_raises_unavailable(self, radar_settings: Settings) -> None:
        """A 404 for a day without data is an upstream failure, not NotFound."""
        with respx.mock:
            respx.get(url__startswith=f"{PAGEVIEWS}/top/").mock(
                return_value=httpx.Response(404, json={"title": "Not found."})
            )
            with pytest.raises(UpstreamUnavailableError):
                await _client(radar_settings).fetch_top_viewed(date(2026, 2, 17))


# ---------------------------------------------------------------------------
# fetch_daily_views()
# ---------------------------------------------------------------------------


class TestFetchDailyViews:
    @pytest.mark.asyncio
    async def test_parses_series_and_encodes_title(self, radar_settings: Settings) -> None:
        """Spaces become underscores in the URL; dates are YYYY-MM-DD."""
        url = (
            f"{PAGEVIEWS}/per-article/en.wikipedia/all-access/user/Joe_Biden/daily"
            "/20260217/20260218"
        )
        with respx.mock:
            respx.get(url).mock(return_value=httpx.Response(200, json=DAILY_VIEWS_RESPONSE))
            series = await _client(radar_settings).fetch_daily_views(
                "Joe Biden", date(2026, 2, 17), date(2026, 2, 18)
            )

        assert series == [
            {"date": "2026-02-17", "views": 1200},
            {"date": "2026-02-18", "views": 800},
        ]

    @pytest.mark.asyncio
    async def test_not_found_returns_empty_series(self, radar_settings: Settings) -> None:
        """Articles without pageview data yield an empty series."""
        with respx.mock:
            respx.get(url__startswith=f"{PAGEVIEWS}/per-article/").mock(
                return_value=httpx.Response(404)
            )
            series = await _client(radar_settings).fetch_daily_views(
                "Brand new article", date(2026, 2, 1), date(2026, 2, 2)
            )

        assert series == []


# ---------------------------------------------------------------------------
# fetch_article_metadata() / fetch_talk_revisions()
# ---------------------------------------------------------------------------


class TestFetchArticleMetadata:
    @pytest.mark.asyncio
    async def test_parses_page(self, radar_settings: Settings) -> None:
        """Length, categories, language links and revisions are extracted."""
        with respx.mock:
            route = respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=ARTICLE_RESPONSE)
            )
            meta = await _client(radar_settings).fetch_article_metadata("Joe_Biden")

        assert meta.title == "Joe Biden"
        assert meta.length_bytes == 250000
        assert meta.categories == (
            "Category:Presidents of the United States",
            "Category:Living people",
        )
        assert meta.language_links == ("de", "fr")
        assert [r.editor for r in meta.revisions] == ["Alice", "Bob"]
        assert meta.revisions[1].comment is None

        params = route.calls.last.request.url.params
        assert params["titles"] == "Joe Biden"
        assert params["redirects"] == "1"
        assert params["formatversion"] == "2"
        assert params["rvlimit"] == str(radar_settings.profile_revision_limit)

    @pytest.mark.asyncio
    async def test_missing_page_raises_not_found(self, radar_settings: Settings) -> None:
        """A page flagged missing raises NotFoundError."""
        with respx.mock:
            respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=MISSING_PAGE_RESPONSE)
            )
            with pytest.raises(NotFoundError) as exc_info:
                await _client(radar_settings).fetch_article_metadata("Nonexistent Article")

        assert exc_info.value.title == "Nonexistent Article"

    @pytest.mark.asyncio
    async def test_blank_title_raises_not_found_without_request(
        self, radar_settings: Settings
    ) -> None:
        """An empty title never reaches upstream."""
        with respx.mock(assert_all_called=False) as router:
            route = router.get(ACTION_API)
            with pytest.raises(NotFoundError):
                await _client(radar_settings).fetch_article_metadata("  ")

        assert route.call_count == 0


class TestFetchTalkRevisions:
    @pytest.mark.asyncio
    async def test_queries_talk_namespace(self, radar_settings: Settings) -> None:
        """The talk page title is prefixed with 'Talk:' and follows redirects."""
        with respx.mock:
            route = respx.get(ACTION_API).mock(return_value=httpx.Response(200, json=TALK_RESPONSE))
            revisions = await _client(radar_settings).fetch_talk_revisions("Joe_Biden")

        assert [r.editor for r in revisions] == ["Carol"]
        params = route.calls.last.request.url.params
        assert params["titles"] == "Talk:Joe Biden"
        assert params["redirects"] == "1"

    @pytest.mark.asyncio
    async def test_missing_talk_page_raises_not_found(self, radar_settings: Settings) -> None:
        """A missing talk page raises NotFoundError for the caller to interpret."""
        with respx.mock:
            respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=MISSING_PAGE_RESPONSE)
            )
            with pytest.raises(NotFoundError):
                await _client(radar_settings).fetch_talk_revisions("Obscure topic")

    @pytest.mark.asyncio
    async def test_non_numeric_revision_size_raises_malformed(
        self, radar_settings: Settings
    ) -> None:
        """A revision with a non-numeric size is a malformed response."""
        body = {
            "query": {
                "pages": [
                    {
                        "ns": 1,
                        "title": "Talk:Joe Biden",
                        "revisions": [{"user": "Carol", "size": "large"}],
                    }
                ]
            }
        }
        with respx.mock:
            respx.get(ACTION_API).mock(return_value=httpx.Response(200, json=body))
            with pytest.raises(MalformedResponseError) as exc_info:
                await _client(radar_settings).fetch_talk_revisions("Joe Biden")

        assert exc_info.value.source == "talk_revisions"


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_429_raises_rate_limit_with_retry_after(self, radar_settings: Settings) -> None:
        """HTTP 429 maps to UpstreamRateLimitError carrying Retry-After."""
        with respx.mock:
            respx.get(ACTION_API).mock(
                return_value=httpx.Response(429, headers={"Retry-After": "30"})
            )
            with pytest.raises(UpstreamRateLimitError) as exc_info:
                await _client(radar_settings).fetch_recent_changes()

        assert exc_info.value.retry_after == 30.0
        assert exc_info.value.source == "recent_changes"

    @pytest.mark.asyncio
    async def test_5xx_raises_unavailable(self, radar_settings: Settings) -> None:
        """Server errors map to UpstreamUnavailableError."""
        with respx.mock:
            respx.get(ACTION_API).mock(return_value=httpx.Response(503))
            with pytest.raises(UpstreamUnavailableError):
                await _client(radar_settings).fetch_recent_changes()

    @pytest.mark.asyncio
    async def test_transport_error_raises_unavailable(self, radar_settings: Settings) -> None:
        """Connection failures map to UpstreamUnavailableError."""
        with respx.mock:
            respx.get(ACTION_API).mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(UpstreamUnavailableError):
                await _client(radar_settings).fetch_recent_changes()

    @pytest.mark.asyncio
    async def test_non_json_raises_malformed(self, radar_settings: Settings) -> None:
        """A non-JSON body maps to MalformedResponseError."""
        with respx.mock:
            respx.get(ACTION_API).mock(return_value=httpx.Response(200, text="<html>oops</html>"))
            with pytest.raises(MalformedResponseError):
                await _client(radar_settings).fetch_recent_changes()

    @pytest.mark.asyncio
    async def test_api_error_payload_raises_malformed(self, radar_settings: Settings) -> None:
        """A MediaWiki error object maps to MalformedResponseError."""
        with respx.mock:
            respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json={"error": {"code": "badvalue"}})
            )
            with pytest.raises(MalformedResponseError, match="badvalue"):
                await _client(radar_settings).fetch_recent_changes()

    @pytest.mark.asyncio
    async def test_injected_client_is_used_and_left_open(self, radar_settings: Settings) -> None:
        """An injected httpx client serves requests and is not closed by the wrapper."""
        with respx.mock:
            respx.get(ACTION_API).mock(
                return_value=httpx.Response(200, json=RECENT_CHANGES_RESPONSE)
            )
            async with httpx.AsyncClient() as http_client:
                client = WikimediaClient(
                    settings=radar_settings, http_client=http_client, request_interval=0
                )
                await client.fetch_recent_changes()
                assert http_client.is_closed is False


# ---------------------------------------------------------------------------
# health_check()
# ---------------------------------------------------------------------------


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_ok(self, radar_settings: Settings) -> None:
        """A siteinfo response reports ok with the site name."""
        body = {"query": {"general": {"sitename": "Wikipedia"}}}
        with respx.mock:
            respx.get(ACTION_API).mock(return_value=httpx.Response(200, json=body))
            result = await _client(radar_settings).health_check()

        assert result["status"] == "ok"
        assert result["site"] == "Wikipedia"
        assert result["project"] == "en.wikipedia"

    @pytest.mark.asyncio
    async def test_down_never_raises(self, radar_settings: Settings) -> None:
        """Connection failures report down instead of raising."""
        with respx.mock:
            respx.get(ACTION_API).mock(side_effect=httpx.ConnectError("refused"))
            result = await _client(radar_settings).health_check()

        assert result["status"] == "down"
        assert "detail" in result


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


class TestParseTimestamp:
    def test_parses_z_suffix(self) -> None:
        """MediaWiki 'Z' timestamps are parsed as UTC."""
        assert _parse_timestamp("2026-02-17T12:00:00Z") == datetime(
            2026, 2, 17, 12, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", [None, "", "yesterday", 12345])
    def test_invalid_values_return_none(self, value: Any) -> None:
        """Missing or unparseable timestamps become None."""
        assert _parse_timestamp(value) is None
