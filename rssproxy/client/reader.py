"""Feed reader - cached, coalesced access to the proxy for a set of feeds."""

import asyncio
import logging
import time

from bs4 import BeautifulSoup

from rssproxy.client.cache import FeedCache
from rssproxy.client.proxy import ProxyClient
from rssproxy.models import CanonicalFeed

logger = logging.getLogger(__name__)


class FeedReaderError(Exception):
    """Raised when none of the requested feeds could be loaded."""


class FeedReader:
    """Reads feeds through the proxy, honoring the cache's refresh interval.

    At most one fetch per URL is in flight; concurrent callers for the same
    URL await the same task.
    """

    def __init__(
        self,
        client: ProxyClient | None = None,
        cache: FeedCache | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.client = client or ProxyClient()
        self.cache = cache or FeedCache()
        self.log = log or logger
        self.last_fetch_time: float | None = None
        self._in_flight: dict[str, asyncio.Task] = {}

    async def get_feed(self, url: str) -> CanonicalFeed:
        entry = self.cache.get(url)
        if entry is not None:
            self.log.debug("Using cached feed for %s", url)
            return entry.feed

        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._fetch(url))
            self._in_flight[url] = task
            task.add_done_callback(lambda _: self._in_flight.pop(url, None))
        else:
            self.log.debug("Fetch already in progress for %s, joining it", url)
        return await asyncio.shield(task)

    async def _fetch(self, url: str) -> CanonicalFeed:
        feed = await self.client.fetch_feed(url)
        self.cache.put(url, feed)
        return feed

    def in_flight(self, url: str) -> bool:
        return url in self._in_flight

    async def get_feeds(self, urls: list[str]) -> list[CanonicalFeed]:
        """Load every URL; failures are logged and dropped.

        Raises:
            FeedReaderError: if URLs were given and every one of them failed.
        """
        if not urls:
            self.log.warning("No feed URLs provided")
            return []

        results = await asyncio.gather(*(self.get_feed(u) for u in urls), return_exceptions=True)
        feeds = []
        for url, result in zip(urls, results):
            if isinstance(result, BaseException):
                self.log.error("Error fetching feed %s: %s", url, result)
            else:
                feeds.append(result)

        if not feeds:
            raise FeedReaderError("Failed to fetch any valid feeds")
        self.last_fetch_time = time.time()
        self.log.info("Feed fetch completed: %d/%d feeds", len(feeds), len(urls))
        return feeds

    async def refresh(self, urls: list[str]) -> list[CanonicalFeed]:
        """Drop cached entries for ``urls`` and load them again."""
        for url in urls:
            self.cache.invalidate(url)
        return await self.get_feeds(urls)


def excerpt(html: str, max_length: int = 120) -> str:
    """Plain-text excerpt of item content for card display."""
    text = BeautifulSoup(html or "", "html.parser").get_text(" ", strip=True)
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
