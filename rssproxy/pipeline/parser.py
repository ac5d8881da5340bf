"""RSS/Atom feed parser built on feedparser and a declarative field map."""

import logging
import xml.sax
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import feedparser
from bs4 import BeautifulSoup

from rssproxy.errors import ParseError
from rssproxy.models import RawFeedDocument

logger = logging.getLogger(__name__)

# (feedparser key or keys tried in order, output key, converter)
FieldSpec = tuple[str | tuple[str, ...], str, Callable[[Any], Any] | None]

# feedparser prefers the HTTP charset over the XML declaration. The body has
# already been decoded to str and is re-encoded as UTF-8 before parsing.
_RESPONSE_HEADERS = {"content-type": "application/xml; charset=utf-8"}


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _href(value: Any) -> str | None:
    """itunes:image and friends arrive as ``{"href": ...}``."""
    if isinstance(value, dict):
        return _text(value.get("href") or value.get("url"))
    return _text(value)


def _terms(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    terms = [_text(t.get("term") or t.get("label")) for t in value if isinstance(t, dict)]
    return [t for t in terms if t] or None


def _content_value(value: Any) -> str | None:
    if isinstance(value, list) and value:
        return _text(value[0].get("value"))
    return None


def _content_snippet(value: Any) -> str | None:
    html = _content_value(value)
    if not html:
        return None
    return _text(BeautifulSoup(html, "html.parser").get_text(" ", strip=True))


def _first_media(value: Any) -> dict | None:
    """media:content / media:thumbnail arrive as lists of attribute dicts."""
    if isinstance(value, list):
        for media in value:
            if isinstance(media, dict) and media.get("url"):
                return dict(media)
    return None


def _enclosure(value: Any) -> dict | None:
    if not isinstance(value, list):
        return None
    for enclosure in value:
        href = enclosure.get("href") or enclosure.get("url")
        if href:
            return {
                "url": href,
                "type": enclosure.get("type", ""),
                "length": enclosure.get("length", ""),
            }
    return None


def _iso_date(value: Any) -> str | None:
    """struct_time (UTC) -> ISO-8601 string."""
    if value is None:
        return None
    try:
        dt = datetime(*value[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _author(value: Any) -> dict | None:
    if isinstance(value, dict) and value.get("name"):
        return {"name": value["name"]}
    return None


# ---------------------------------------------------------------------------
# Field maps
# ---------------------------------------------------------------------------

FEED_FIELDS: tuple[FieldSpec, ...] = (
    ("title", "title", _text),
    ("link", "link", _text),
    ("subtitle", "subtitle", _text),
    ("icon", "icon", _text),
    ("logo", "logo", _text),
    ("updated", "updated", _text),
    ("generator", "generator", _text),
    ("language", "language", _text),
    # itunes:author / itunes:summary / itunes:image / itunes:category
    ("author", "author", _text),
    ("summary", "summary", _text),
    ("image", "image", _href),
    ("tags", "categories", _terms),
)

RSS_FEED_FIELDS: tuple[FieldSpec, ...] = (("subtitle", "description", _text),)

ITEM_FIELDS: tuple[FieldSpec, ...] = (
    ("title", "title", _text),
    ("link", "link", _text),
    ("content", "content", _content_value),
    ("content", "content_snippet", _content_snippet),
    ("updated", "updated", _text),
    (("published_parsed", "updated_parsed"), "iso_date", _iso_date),
    ("tags", "categories", _terms),
    ("media_content", "media_content", _first_media),
    ("media_thumbnail", "media_thumbnail", _first_media),
    ("media_description", "media_description", _text),
    ("enclosures", "enclosure", _enclosure),
    ("itunes_duration", "itunes_duration", _text),
    ("itunes_episode", "itunes_episode", _text),
    ("itunes_season", "itunes_season", _text),
    ("itunes_explicit", "itunes_explicit", None),
    ("image", "itunes_image", _href),
)

RSS_ITEM_FIELDS: tuple[FieldSpec, ...] = (
    ("id", "guid", _text),
    ("summary", "description", _text),
    ("published", "pub_date", _text),
    ("author", "creator", _text),
)

ATOM_ITEM_FIELDS: tuple[FieldSpec, ...] = (
    ("id", "id", _text),
    ("summary", "summary", _text),
    ("published", "published", _text),
    ("author_detail", "author", _author),
)


def apply_fields(source: Any, fields: tuple[FieldSpec, ...]) -> dict:
    """Transcribe ``source`` through a field map, skipping absent values."""
    out: dict = {}
    for keys, name, convert in fields:
        if isinstance(keys, str):
            keys = (keys,)
        for key in keys:
            value = source.get(key)
            if value is None:
                continue
            if convert is not None:
                value = convert(value)
            if value is not None:
                out[name] = value
                break
    return out


class FeedParser:
    """Parses RSS 2.0 / RSS 1.0 / Atom bodies into a flat feed dict.

    The output keeps every recognized field under its own name; resolving
    synonyms such as content vs. description is left to the normalizer.
    Extra ``(source, output, converter)`` specs can be appended per level.
    """

    def __init__(
        self,
        feed_fields: tuple[FieldSpec, ...] = (),
        item_fields: tuple[FieldSpec, ...] = (),
        log: logging.Logger | None = None,
    ) -> None:
        self.feed_fields = FEED_FIELDS + tuple(feed_fields)
        self.item_fields = ITEM_FIELDS + tuple(item_fields)
        self.log = log or logger

    def parse(self, raw: RawFeedDocument) -> dict:
        """Parse a raw feed body.

        Returns:
            ``{title, description, link, items: [...], ...}``.

        Raises:
            ParseError: if the body is not well-formed XML or not a feed.
        """
        try:
            result = feedparser.parse(raw.text.encode("utf-8"), response_headers=_RESPONSE_HEADERS)
        except Exception as exc:  # feedparser internals; surface as domain error
            raise ParseError(f"Failed to parse feed: {exc}") from exc

        exc = result.get("bozo_exception")
        if isinstance(exc, xml.sax.SAXException):
            raise ParseError(f"Malformed XML: {exc}")

        version = result.get("version", "")
        entries = result.get("entries") or []
        if not version and not entries:
            raise ParseError("Feed not recognized as RSS 1 or 2, or Atom")

        is_atom = version.startswith("atom")
        feed_fields = self.feed_fields + (() if is_atom else RSS_FEED_FIELDS)
        item_fields = self.item_fields + (ATOM_ITEM_FIELDS if is_atom else RSS_ITEM_FIELDS)

        doc = apply_fields(result.get("feed", {}), feed_fields)
        doc["version"] = version
        doc["items"] = [apply_fields(entry, item_fields) for entry in entries]

        self.log.debug(
            "Parsed %s feed %s with %d items", version or "unknown", raw.url, len(doc["items"])
        )
        return doc
