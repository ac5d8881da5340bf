"""Tests for the proxy HTTP client."""

import httpx
import pytest

from rssproxy.client.proxy import ProxyClient, ProxyClientError

ENDPOINT = "http://proxy.test/api/rss"
FEED_URL = "https://www.theverge.com/rss/index.xml"


def _client(handler) -> ProxyClient:
    return ProxyClient(endpoint=ENDPOINT, transport=httpx.MockTransport(handler))


class TestProxyClient:
    @pytest.mark.asyncio
    async def test_parses_canonical_feed(self):
        body = {
            "title": "Verge",
            "description": "",
            "link": FEED_URL,
            "source": "verge",
            "items": [
                {
                    "id": "1",
                    "title": "A",
                    "content": "",
                    "link": "https://v/1",
                    "pubDate": "Wed, 05 Feb 2026 10:00:00 GMT",
                    "author": "Unknown",
                    "categories": [],
                    "thumbnail": None,
                    "source": "verge",
                }
            ],
        }
        seen = []

        def handler(request):
            seen.append(request.url.params["url"])
            return httpx.Response(200, json=body)

        feed = await _client(handler).fetch_feed(FEED_URL)

        assert seen == [FEED_URL]
        assert feed.title == "Verge"
        assert feed.items[0].pub_date == "Wed, 05 Feb 2026 10:00:00 GMT"

    @pytest.mark.asyncio
    async def test_error_body(self):
        def handler(request):
            return httpx.Response(
                500,
                json={"error": "Failed to fetch RSS feed", "message": "timeout", "url": FEED_URL},
            )

        with pytest.raises(ProxyClientError) as info:
            await _client(handler).fetch_feed(FEED_URL)

        assert info.value.status_code == 500
        assert info.value.error == "Failed to fetch RSS feed"
        assert info.value.message == "timeout"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        with pytest.raises(ProxyClientError):
            await _client(lambda r: httpx.Response(200, text="<html>")).fetch_feed(FEED_URL)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProxyClientError):
            await _client(handler).fetch_feed(FEED_URL)

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_normalized(self):
        body = {"channel": {"title": "Raw", "item": [{"title": "x", "link": "https://v/x"}]}}
        feed = await _client(lambda r: httpx.Response(200, json=body)).fetch_feed(FEED_URL)

        assert feed.title == "Raw"
        assert feed.source == "verge"
        assert feed.items[0].id == "https://v/x"

    @pytest.mark.asyncio
    async def test_empty_body_placeholder(self):
        feed = await _client(lambda r: httpx.Response(200, json={})).fetch_feed(FEED_URL)
        assert feed.title == "Empty Feed"
        assert feed.items == []

    @pytest.mark.asyncio
    async def test_null_items_become_empty_list(self):
        body = {"title": "T", "items": None}
        feed = await _client(lambda r: httpx.Response(200, json=body)).fetch_feed(FEED_URL)
        assert feed.title == "T"
        assert feed.items == []

    @pytest.mark.asyncio
    async def test_single_item_object_is_wrapped(self):
        body = {"title": "T", "items": {"id": "only", "title": "One"}}
        feed = await _client(lambda r: httpx.Response(200, json=body)).fetch_feed(FEED_URL)
        assert [i.id for i in feed.items] == ["only"]

    @pytest.mark.asyncio
    async def test_invalid_items_raise_client_error(self):
        body = {"title": "T", "items": [{"title": "no id"}]}
        with pytest.raises(ProxyClientError) as info:
            await _client(lambda r: httpx.Response(200, json=body)).fetch_feed(FEED_URL)
        assert info.value.status_code == 200
