"""Feed fetcher - GET a feed URL with a browser-like request profile."""

import logging
from urllib.parse import urlparse

import httpx

from rssproxy.config import get_settings
from rssproxy.errors import FetchError, FetchErrorKind
from rssproxy.models import RawFeedDocument
from rssproxy.sources import host_matches

logger = logging.getLogger(__name__)

# Many feed origins degrade or reject responses to non-browser clients.
BROWSER_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "max-age=0",
    "Connection": "keep-alive",
    "Sec-Ch-Ua": '"Google Chrome";v="113", "Chromium";v="113", "Not-A.Brand";v="24"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"macOS"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
    "Referer": "https://www.google.com/",
}

_BINARY_TYPES = ("image/", "audio/", "video/", "application/zip")

MAX_REDIRECTS = 20


class FeedFetcher:
    """Fetches raw feed documents over HTTP.

    Args:
        timeout: Request timeout in seconds.
        insecure_tls_hosts: Named allow-list of hosts whose certificates are
            not verified. Subdomains of a listed host are covered too.
        user_agent: User-Agent header value.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        timeout: float | None = None,
        insecure_tls_hosts: list[str] | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        settings = get_settings()
        self.timeout = settings.fetch_timeout if timeout is None else timeout
        self.insecure_tls_hosts = list(
            settings.insecure_tls_hosts if insecure_tls_hosts is None else insecure_tls_hosts
        )
        self.user_agent = user_agent or settings.user_agent
        self.transport = transport
        self.log = log or logger

    def request_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, **BROWSER_HEADERS}

    def verify_tls(self, url: str) -> bool:
        """False only when the URL's host is on the insecure allow-list."""
        host = urlparse(url).hostname or ""
        return not any(host_matches(host, h) for h in self.insecure_tls_hosts)

    async def fetch(self, url: str) -> RawFeedDocument:
        """Fetch ``url`` and return its decoded text body.

        Raises:
            FetchError: on timeout, non-2xx status, transport failure, a
                malformed URL, or an empty / binary payload.
        """
        self.log.info("Fetching feed from %s", url)
        try:
            resp = await self._get(url)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                f"timeout of {self.timeout:g}s exceeded",
                url=url,
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(
                FetchErrorKind.HTTP_STATUS,
                f"Request failed with status code {status}",
                url=url,
                status_code=status,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(
                FetchErrorKind.NETWORK, str(exc) or type(exc).__name__, url=url
            ) from exc
        except ValueError as exc:
            raise FetchError(FetchErrorKind.NETWORK, f"Invalid URL: {exc}", url=url) from exc

        self.log.info("Received response from %s, status: %d", url, resp.status_code)
        return self._to_document(url, resp)

    async def _get(self, url: str) -> httpx.Response:
        if self.verify_tls(url):
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                return await client.get(url, headers=self.request_headers())
        return await self._get_relaxed(url)

    async def _get_relaxed(self, url: str) -> httpx.Response:
        """Follow redirects one hop at a time, relaxing TLS only for listed hosts."""
        for _ in range(MAX_REDIRECTS + 1):
            verify = self.verify_tls(url)
            if not verify:
                self.log.warning("TLS verification disabled for %s (allow-listed host)", url)
            async with httpx.AsyncClient(
                timeout=self.timeout,
                verify=verify,
                transport=self.transport,
            ) as client:
                resp = await client.get(url, headers=self.request_headers())
            if not resp.is_redirect or resp.next_request is None:
                return resp
            url = str(resp.next_request.url)
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects", request=resp.request)

    def _to_document(self, url: str, resp: httpx.Response) -> RawFeedDocument:
        content_type = resp.headers.get("content-type", "")
        if content_type.lower().startswith(_BINARY_TYPES):
            raise FetchError(
                FetchErrorKind.INVALID_PAYLOAD,
                f"Response was not in expected format ({content_type})",
                url=url,
            )

        text = resp.text
        if not text.strip():
            raise FetchError(
                FetchErrorKind.INVALID_PAYLOAD, "Response body was empty", url=url
            )
        if "\x00" in text:
            raise FetchError(
                FetchErrorKind.INVALID_PAYLOAD, "Response body is binary", url=url
            )
        return RawFeedDocument(url=url, text=text, content_type=content_type)
