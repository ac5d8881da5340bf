"""APScheduler job that keeps a FeedReader's cache warm."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from rssproxy.client.reader import FeedReader, FeedReaderError
from rssproxy.config import get_settings
from rssproxy.sources import get_active_feed_urls

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def refresh_due_feeds(reader: FeedReader, urls: list[str]) -> None:
    """Job function: re-fetch every URL whose cache entry has expired."""
    due = [u for u in urls if not reader.cache.is_fresh(u) and not reader.in_flight(u)]
    if not due:
        logger.debug("All %d feeds fresh, skipping refresh", len(urls))
        return
    logger.info("Checking for feed updates: %d due", len(due))
    try:
        await reader.get_feeds(due)
    except FeedReaderError as exc:
        logger.warning("Feed refresh failed: %s", exc)


def start_refresher(reader: FeedReader, urls: list[str] | None = None) -> AsyncIOScheduler:
    """Start the scheduler; checks at most once per ``refresh_check_seconds``."""
    global _scheduler
    settings = get_settings()
    urls = list(urls) if urls is not None else get_active_feed_urls()
    interval = min(settings.refresh_interval_seconds, settings.refresh_check_seconds)

    _scheduler = AsyncIOScheduler()
    _scheduler.add_job(
        refresh_due_feeds,
        trigger=IntervalTrigger(seconds=interval),
        args=[reader, urls],
        id="feed_refresh",
        name="Feed Refresh",
        replace_existing=True,
    )
    _scheduler.start()
    logger.info("Refresher started: %d feeds, checking every %ds", len(urls), interval)
    return _scheduler


def stop_refresher() -> None:
    """Shut down the scheduler gracefully."""
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown()
        logger.info("Refresher stopped")
    _scheduler = None


def get_refresher() -> AsyncIOScheduler | None:
    """Return the current scheduler instance."""
    return _scheduler
