"""Pattern-based recovery of a minimal feed from malformed XML."""

import logging
import re
from datetime import datetime, timezone

from rssproxy.models import RawFeedDocument

logger = logging.getLogger(__name__)

_TITLE = re.compile(r"<title(?:\s[^>]*)?>\s*(?:<!\[CDATA\[)?(.*?)(?:\]\]>)?\s*</title>", re.IGNORECASE | re.DOTALL)
_LINK = re.compile(r"<link(?:\s[^>]*)?>\s*(?:<!\[CDATA\[)?(.*?)(?:\]\]>)?\s*</link>", re.IGNORECASE | re.DOTALL)
_ITEM = re.compile(r"<item(?:\s[^>]*)?>(.*?)</item>", re.IGNORECASE | re.DOTALL)


def _first(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def extract_fallback(raw: RawFeedDocument, url: str, now: datetime | None = None) -> dict:
    """Recover ``{title, description, link, items}`` from a raw body.

    Never raises on text input. Items get the extraction time as their
    publication date, since none can be recovered reliably.
    """
    text = raw.text or ""
    extracted_at = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    # Feed title is the first <title> outside any <item> block.
    title = _first(_TITLE, _ITEM.sub("", text)) or url

    items = []
    for block in _ITEM.finditer(text):
        body = block.group(1)
        item_title = _first(_TITLE, body)
        item_link = _first(_LINK, body)
        if not item_title or not item_link:
            continue
        items.append({"title": item_title, "link": item_link, "pub_date": extracted_at})

    logger.info("Fallback parsing created %d items for %s", len(items), url)
    return {
        "title": title,
        "description": f"Feed from {url}",
        "link": url,
        "items": items,
    }
