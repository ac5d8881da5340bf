"""Feed pipeline - orchestrates fetch, parse (with fallback), and normalize."""

import logging

from rssproxy.errors import FallbackError, ParseError, ValidationError
from rssproxy.models import CanonicalFeed, ParseKind, ParseResult, RawFeedDocument
from rssproxy.pipeline.fallback import extract_fallback
from rssproxy.pipeline.fetcher import FeedFetcher
from rssproxy.pipeline.normalizer import normalize
from rssproxy.pipeline.parser import FeedParser

logger = logging.getLogger(__name__)


class FeedPipeline:
    """Runs one feed request: validate -> fetch -> parse (-> fallback) -> normalize.

    Uses dependency injection for the fetcher, parser and fallback extractor,
    making each stage testable in isolation. Holds no per-request state, so a
    single instance may serve concurrent requests.
    """

    def __init__(
        self,
        fetcher: FeedFetcher | None = None,
        parser: FeedParser | None = None,
        fallback=extract_fallback,
        log: logging.Logger | None = None,
    ) -> None:
        self.log = log or logger
        self.fetcher = fetcher or FeedFetcher(log=self.log)
        self.parser = parser or FeedParser(log=self.log)
        self.fallback = fallback

    @staticmethod
    def validate(url: str | None) -> str:
        if url is None or not url.strip():
            raise ValidationError("URL parameter is required")
        return url.strip()

    async def fetch(self, url: str) -> RawFeedDocument:
        return await self.fetcher.fetch(url)

    def parse(self, raw: RawFeedDocument) -> ParseResult:
        """Structured parse, falling back to pattern extraction on ParseError.

        Raises:
            FallbackError: if the fallback extractor itself fails.
        """
        try:
            doc = self.parser.parse(raw)
        except ParseError as exc:
            parse_error = exc.message
            self.log.warning(
                "RSS parsing failed for %s, attempting fallback parsing: %s",
                raw.url,
                parse_error,
            )
        else:
            self.log.info("Feed parsed successfully: %s", raw.url)
            return ParseResult(kind=ParseKind.STRUCTURED, document=doc)

        try:
            doc = self.fallback(raw, raw.url)
        except Exception as fallback_exc:
            self.log.error("Fallback parsing also failed for %s: %s", raw.url, fallback_exc)
            raise FallbackError(parse_error, url=raw.url) from fallback_exc
        return ParseResult(kind=ParseKind.FALLBACK, document=doc, error=parse_error)

    def normalize(self, result: ParseResult, url: str) -> CanonicalFeed:
        return normalize(result.document, url, log=self.log)

    async def run(self, url: str | None) -> CanonicalFeed:
        """Execute the full pipeline for one feed URL.

        Raises:
            ValidationError: if ``url`` is missing or blank.
            FetchError: if the feed could not be fetched.
            FallbackError: if no parse tier produced a document.
        """
        url = self.validate(url)
        raw = await self.fetch(url)
        result = self.parse(raw)
        feed = self.normalize(result, url)
        self.log.info(
            "Sending feed %s to client with %d items (%s parse)",
            url,
            len(feed.items),
            result.kind.value,
        )
        return feed
