"""Per-URL feed cache with a refresh interval."""

import time
from collections.abc import Callable
from dataclasses import dataclass

from rssproxy.config import get_settings
from rssproxy.models import CanonicalFeed


@dataclass(frozen=True)
class CacheEntry:
    feed: CanonicalFeed
    timestamp: float


class FeedCache:
    """Maps feed URL -> (CanonicalFeed, timestamp).

    An entry is fresh for ``refresh_interval`` seconds after it was stored;
    stale entries are evicted on lookup.
    """

    def __init__(
        self,
        refresh_interval: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if refresh_interval is None:
            refresh_interval = get_settings().refresh_interval_seconds
        self.refresh_interval = refresh_interval
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, url: str) -> CacheEntry | None:
        """Return the entry for ``url`` if it is still fresh."""
        entry = self._entries.get(url)
        if entry is None:
            return None
        if self.clock() - entry.timestamp >= self.refresh_interval:
            del self._entries[url]
            return None
        return entry

    def put(self, url: str, feed: CanonicalFeed) -> CacheEntry:
        entry = CacheEntry(feed=feed, timestamp=self.clock())
        self._entries[url] = entry
        return entry

    def invalidate(self, url: str | None = None) -> None:
        """Drop one URL, or everything when ``url`` is None."""
        if url is None:
            self._entries.clear()
        else:
            self._entries.pop(url, None)

    def is_fresh(self, url: str) -> bool:
        return self.get(url) is not None

    def __len__(self) -> int:
        return len(self._entries)
