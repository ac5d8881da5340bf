"""Feed proxy API routes."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from rssproxy.config import get_settings
from rssproxy.models import CanonicalFeed, FeedSource
from rssproxy.pipeline.feed import FeedPipeline
from rssproxy.sources import get_active_feed_sources

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

T = TypeVar("T")

# Nginx-style status for a request the client abandoned.
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The client went away before the pipeline finished."""


def get_pipeline() -> FeedPipeline:
    """Pipeline dependency; overridden in tests."""
    return FeedPipeline()


async def run_until_disconnect(request: Request, work: Awaitable[T]) -> T:
    """Await ``work``, cancelling it if the client disconnects first."""
    poll = get_settings().disconnect_poll_seconds
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise ClientDisconnected(str(request.url))
    finally:
        if not task.done():
            task.cancel()


@router.get("/rss", response_model=CanonicalFeed)
async def proxy_feed(
    request: Request,
    url: str | None = Query(None, description="Feed URL to fetch"),
    pipeline: FeedPipeline = Depends(get_pipeline),
):
    """Fetch, parse and normalize a remote feed."""
    try:
        return await run_until_disconnect(request, pipeline.run(url))
    except ClientDisconnected:
        logger.info("Client disconnected, abandoned fetch of %s", url)
        return Response(status_code=CLIENT_CLOSED_REQUEST)


@router.get("/sources", response_model=list[FeedSource])
async def list_sources():
    """List the configured, enabled feed sources."""
    return get_active_feed_sources()
