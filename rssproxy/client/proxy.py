"""HTTP client for the feed proxy endpoint."""

import logging

import httpx
from pydantic import ValidationError

from rssproxy.config import get_settings
from rssproxy.models import CanonicalFeed
from rssproxy.pipeline.normalizer import normalize
from rssproxy.sources import get_feed_source

logger = logging.getLogger(__name__)


class ProxyClientError(Exception):
    """Raised when the proxy answers with an error or an unusable body."""

    def __init__(self, message: str, status_code: int | None = None, error: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error


class ProxyClient:
    """Calls ``GET <endpoint>?url=...`` and returns the CanonicalFeed."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint or get_settings().proxy_endpoint
        self.timeout = timeout
        self.transport = transport

    async def fetch_feed(self, feed_url: str) -> CanonicalFeed:
        logger.debug("Fetching feed from %s via %s", feed_url, self.endpoint)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.endpoint, params={"url": feed_url})
        except httpx.HTTPError as exc:
            raise ProxyClientError(f"Proxy request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProxyClientError(
                "Proxy returned a non-JSON body", status_code=resp.status_code
            ) from exc

        if resp.status_code != 200:
            body = data if isinstance(data, dict) else {}
            raise ProxyClientError(
                body.get("message") or body.get("error") or f"HTTP {resp.status_code}",
                status_code=resp.status_code,
                error=body.get("error", ""),
            )

        if not data:
            logger.warning("Empty feed received from %s, using empty placeholder", feed_url)
            return CanonicalFeed(
                title="Empty Feed",
                description="No content available",
                link=feed_url,
                source=get_feed_source(feed_url),
            )
        if not isinstance(data, dict) or "items" not in data:
            logger.warning("Feed %s not in expected format, attempting to normalize", feed_url)
            return normalize(data, feed_url)
        items = data["items"]
        if not isinstance(items, list):
            logger.warning("Feed %s has invalid items field, coercing to a list", feed_url)
            data = {**data, "items": [] if items is None else [items]}
        try:
            return CanonicalFeed.model_validate(data)
        except ValidationError as exc:
            raise ProxyClientError(
                f"Proxy returned an invalid feed: {exc.error_count()} errors",
                status_code=resp.status_code,
            ) from exc
