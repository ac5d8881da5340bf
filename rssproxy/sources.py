"""Configured feed sources and source-tag lookup."""

from urllib.parse import urlparse

from rssproxy.models import DisplayOptions, FeedSource

FEED_SOURCES: list[FeedSource] = [
    FeedSource(
        id="verge",
        name="The Verge",
        url="https://www.theverge.com/rss/index.xml",
        color="#5270F8",
        icon="news",
        display_options=DisplayOptions(
            show_modal_thumbnail=False,
            max_excerpt_length=120,
            preferred_image_size="medium",
        ),
    ),
    FeedSource(
        id="wired",
        name="WIRED",
        url="https://www.wired.com/feed/rss",
        color="#000000",
        icon="tech",
        display_options=DisplayOptions(
            show_modal_thumbnail=True,
            max_excerpt_length=120,
            preferred_image_size="large",
        ),
    ),
    FeedSource(
        id="techcrunch",
        name="TechCrunch",
        url="https://techcrunch.com/feed/",
        color="#0A9E01",
        icon="startup",
        display_options=DisplayOptions(
            show_modal_thumbnail=True,
            max_excerpt_length=100,
            preferred_image_size="medium",
        ),
    ),
]

DEFAULT_DISPLAY_OPTIONS = DisplayOptions()

# Registrable domain -> source tag. Checked before the hostname fallback.
HOST_TAGS: dict[str, str] = {
    "theverge.com": "verge",
    "wired.com": "wired",
    "techcrunch.com": "techcrunch",
    "feedburner.com": "feedburner",
}


def host_matches(host: str, domain: str) -> bool:
    """True if ``host`` is ``domain`` or one of its subdomains."""
    host = host.lower().rstrip(".")
    domain = domain.lower().rstrip(".")
    return host == domain or host.endswith("." + domain)


def get_feed_source(url: str) -> str:
    """Derive the source tag for a feed URL.

    Known hosts map through HOST_TAGS; anything else uses the first label of
    the hostname with a leading ``www.`` removed.
    """
    if not url:
        return "unknown"
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"

    for domain, tag in HOST_TAGS.items():
        if host_matches(host, domain):
            return tag

    if host.startswith("www."):
        host = host[4:]
    return host.split(".")[0] or "unknown"


def get_feed_source_by_id(source_id: str | None) -> FeedSource | None:
    """Return the enabled source with this tag, if any."""
    if not source_id:
        return None
    for source in FEED_SOURCES:
        if source.id == source_id and source.enabled:
            return source
    return None


def get_active_feed_sources() -> list[FeedSource]:
    """All sources not explicitly disabled."""
    return [s for s in FEED_SOURCES if s.enabled]


def get_active_feed_urls() -> list[str]:
    return [s.url for s in get_active_feed_sources()]


def get_source_details(url: str) -> FeedSource | None:
    """Look up the configured source a feed URL belongs to."""
    return get_feed_source_by_id(get_feed_source(url))


def should_show_modal_thumbnail(source_id: str | None) -> bool:
    source = get_feed_source_by_id(source_id)
    if source is None:
        return DEFAULT_DISPLAY_OPTIONS.show_modal_thumbnail
    return source.display_options.show_modal_thumbnail


def get_max_excerpt_length(source_id: str | None) -> int:
    source = get_feed_source_by_id(source_id)
    if source is None:
        return DEFAULT_DISPLAY_OPTIONS.max_excerpt_length
    return source.display_options.max_excerpt_length
