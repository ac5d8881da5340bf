"""Normalize parsed feed documents into the canonical feed schema."""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any

from rssproxy.models import CanonicalFeed, CanonicalItem
from rssproxy.sources import get_feed_source

logger = logging.getLogger(__name__)

# Keys tried, in order, for an item list when no known wrapper is present.
ITEM_LIST_KEYS = ("entries", "items", "posts", "article")

_IMG_SRC = re.compile(r"""<img[^>]+src=["']([^"'>]+)["']""", re.IGNORECASE)


class FeedShape(str, Enum):
    """Recognized ParsedFeedDocument layouts, in detection order."""

    RSS_CHANNEL = "rss_channel"
    ATOM_FEED = "atom_feed"
    BARE_CHANNEL = "bare_channel"
    KEYED_ITEMS = "keyed_items"
    ITEM_ARRAY = "item_array"
    UNKNOWN = "unknown"


def detect_shape(doc: Any) -> FeedShape:
    """Return the first matching shape; the order here is significant."""
    if isinstance(doc, dict):
        rss = doc.get("rss")
        if isinstance(rss, dict) and rss.get("channel"):
            return FeedShape.RSS_CHANNEL
        if doc.get("feed"):
            return FeedShape.ATOM_FEED
        if doc.get("channel"):
            return FeedShape.BARE_CHANNEL
        if _item_list_key(doc) is not None:
            return FeedShape.KEYED_ITEMS
        return FeedShape.UNKNOWN
    if isinstance(doc, list):
        return FeedShape.ITEM_ARRAY
    return FeedShape.UNKNOWN


def _item_list_key(doc: dict) -> str | None:
    for key in ITEM_LIST_KEYS:
        if isinstance(doc.get(key), list):
            return key
    return None


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def _as_text(value: Any) -> str | None:
    """Coerce a loosely-typed XML value to text.

    Handles plain strings, ``{"_": ...}`` / ``{"#text": ...}`` / ``{"href": ...}``
    objects and single-element lists.
    """
    if value is None:
        return None
    if isinstance(value, list):
        return _as_text(value[0]) if value else None
    if isinstance(value, dict):
        for key in ("_", "#text", "value", "href", "url", "$"):
            if key in value:
                return _as_text(value[key])
        return None
    text = str(value).strip()
    return text or None


def _pick(item: dict, *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _media_url(value: Any) -> str | None:
    """URL out of a media:content / media:thumbnail / enclosure value."""
    if isinstance(value, list):
        for entry in value:
            url = _media_url(entry)
            if url:
                return url
        return None
    if isinstance(value, dict):
        if isinstance(value.get("$"), dict):
            return _media_url(value["$"])
        url = value.get("url") or value.get("href")
        return _as_text(url)
    return None


def _timestamp_ms(date_text: str | None) -> int | None:
    if not date_text:
        return None
    try:
        dt = parsedate_to_datetime(date_text)
    except (TypeError, ValueError):
        try:
            dt = datetime.fromisoformat(date_text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


# ---------------------------------------------------------------------------
# Per-item derivations
# ---------------------------------------------------------------------------


def _item_link(item: dict) -> str:
    return _as_text(item.get("link")) or ""


def _item_date(item: dict) -> str | None:
    return _as_text(
        _pick(item, "pub_date", "pubDate", "iso_date", "isoDate", "published", "updated")
    )


def derive_id(item: dict, index: int) -> str:
    """guid -> id -> link -> ``item-<index>-<timestamp>``.

    The synthesized timestamp comes from the item's own date so the id is
    stable across fetches; undated items use 0.
    """
    ident = _as_text(item.get("guid")) or _as_text(item.get("id")) or _item_link(item)
    if ident:
        return ident
    stamp = _timestamp_ms(_item_date(item)) or 0
    return f"item-{index}-{stamp}"


def derive_content(item: dict) -> str:
    return (
        _as_text(_pick(item, "content"))
        or _as_text(_pick(item, "content_snippet", "contentSnippet"))
        or _as_text(_pick(item, "description"))
        or _as_text(_pick(item, "summary"))
        or ""
    )


def derive_author(item: dict) -> str:
    creator = _as_text(_pick(item, "creator", "dc:creator"))
    if creator:
        return creator
    author = item.get("author")
    if isinstance(author, list):
        author = author[0] if author else None
    if isinstance(author, dict):
        name = _as_text(author.get("name"))
        if name:
            return name
    elif isinstance(author, str) and author.strip():
        return author.strip()
    return "Unknown"


def derive_categories(item: dict) -> list[str]:
    categories = []
    for category in _as_list(item.get("categories") or item.get("category")):
        if isinstance(category, dict):
            text = _as_text(category.get("term")) or _as_text(category)
        else:
            text = _as_text(category)
        if text:
            categories.append(text)
    return categories


def _media_content(item: dict) -> Any:
    value = _pick(item, "media_content", "media:content")
    if value is None and isinstance(item.get("media"), dict):
        value = item["media"].get("content")
    return value


def extract_thumbnail(item: dict, content: str | None = None) -> str | None:
    """media content -> media thumbnail -> enclosure -> first <img> -> None."""
    candidates = (
        _media_content(item),
        _pick(item, "media_thumbnail", "mediaThumbnail", "media:thumbnail"),
        _pick(item, "enclosure"),
    )
    for value in candidates:
        url = _media_url(value)
        if url:
            return url

    html = derive_content(item) if content is None else content
    match = _IMG_SRC.search(html or "")
    if match:
        return match.group(1)
    return None


def normalize_item(item: Any, index: int, source: str) -> CanonicalItem:
    if not isinstance(item, dict):
        item = {"title": _as_text(item)}
    content = derive_content(item)
    return CanonicalItem(
        id=derive_id(item, index),
        title=_as_text(item.get("title")) or "Untitled Item",
        content=content,
        link=_item_link(item),
        pub_date=_item_date(item) or _now_iso(),
        author=derive_author(item),
        categories=derive_categories(item),
        thumbnail=extract_thumbnail(item, content),
        source=source,
    )


# ---------------------------------------------------------------------------
# Feed-level normalization
# ---------------------------------------------------------------------------


def _locate(doc: Any, shape: FeedShape) -> tuple[dict, list]:
    """Return (feed metadata object, raw item list) for a detected shape."""
    if shape is FeedShape.RSS_CHANNEL:
        channel = doc["rss"]["channel"]
        # XML-to-JSON converters often wrap the channel in a one-element list
        if isinstance(channel, list) and channel:
            channel = channel[0]
        if not isinstance(channel, dict):
            return {}, []
        return channel, _as_list(channel.get("item"))
    if shape is FeedShape.ATOM_FEED:
        feed = doc["feed"]
        if not isinstance(feed, dict):
            return {}, []
        return feed, _as_list(feed.get("entry"))
    if shape is FeedShape.BARE_CHANNEL:
        channel = doc["channel"]
        if not isinstance(channel, dict):
            return {}, []
        return channel, _as_list(channel.get("item"))
    if shape is FeedShape.KEYED_ITEMS:
        return doc, doc[_item_list_key(doc)]
    if shape is FeedShape.ITEM_ARRAY:
        return {}, doc
    return (doc if isinstance(doc, dict) else {}), []


def normalize(
    doc: Any, source_url: str, log: logging.Logger | None = None
) -> CanonicalFeed:
    """Map any recognized ParsedFeedDocument onto a CanonicalFeed.

    Unrecognized shapes yield an empty item list rather than an error.
    """
    log = log or logger
    shape = detect_shape(doc)
    meta, raw_items = _locate(doc, shape)
    source = get_feed_source(source_url)

    items: list[CanonicalItem] = []
    seen: set[str] = set()
    for index, raw_item in enumerate(raw_items):
        item = normalize_item(raw_item, index, source)
        while item.id in seen:
            item.id = f"{item.id}-{index}"
        seen.add(item.id)
        items.append(item)

    log.debug("Normalized %s document from %s into %d items", shape.value, source_url, len(items))
    return CanonicalFeed(
        title=_as_text(meta.get("title")) or "Unknown Feed",
        description=_as_text(meta.get("description")) or _as_text(meta.get("subtitle")) or "",
        link=_as_text(meta.get("link")) or source_url,
        source=source,
        items=items,
    )
