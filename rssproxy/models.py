"""Pydantic models and value types for rssproxy."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Pipeline values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawFeedDocument:
    """Decoded text body of a remote feed, before parsing."""

    url: str
    text: str
    content_type: str = ""


class ParseKind(str, Enum):
    """Which parse tier produced a document."""

    STRUCTURED = "structured"
    FALLBACK = "fallback"


@dataclass
class ParseResult:
    """Output of the parse tier.

    ``document`` is a ParsedFeedDocument: a dict or list whose layout depends
    on the feed dialect. ``error`` holds the structured parser's message when
    the fallback extractor had to take over.
    """

    kind: ParseKind
    document: Any
    error: str | None = None


# ---------------------------------------------------------------------------
# Canonical feed
# ---------------------------------------------------------------------------


class CanonicalItem(BaseModel):
    """One feed entry in dialect-independent form."""

    id: str = Field(..., description="Stable identifier, unique within the feed")
    title: str = Field(default="Untitled Item")
    content: str = Field(default="", description="Item body; HTML allowed")
    link: str = Field(default="")
    pub_date: str = Field(
        default="",
        alias="pubDate",
        description="Best-effort date string, not guaranteed parseable",
    )
    author: str = Field(default="Unknown")
    categories: list[str] = Field(default_factory=list)
    thumbnail: str | None = Field(default=None)
    source: str = Field(default="unknown", description="Source tag of the feed")

    model_config = {"populate_by_name": True}


class CanonicalFeed(BaseModel):
    """The stable output contract of the proxy endpoint."""

    title: str = Field(default="Unknown Feed")
    description: str = Field(default="")
    link: str = Field(default="")
    source: str = Field(default="unknown")
    items: list[CanonicalItem] = Field(default_factory=list)


class ErrorBody(BaseModel):
    """Structured error returned across the HTTP boundary."""

    error: str
    message: str | None = None
    url: str | None = None


# ---------------------------------------------------------------------------
# Source configuration
# ---------------------------------------------------------------------------


class DisplayOptions(BaseModel):
    """Per-source presentation policy."""

    show_modal_thumbnail: bool = Field(default=True)
    max_excerpt_length: int = Field(default=120, ge=1)
    preferred_image_size: str = Field(default="medium")


class FeedSource(BaseModel):
    """A configured feed source."""

    id: str = Field(..., min_length=1, description="Source tag")
    name: str = Field(..., min_length=1, description="Human-readable source name")
    url: str = Field(..., min_length=1, description="Feed URL")
    color: str = Field(default="#000000", description="Brand color")
    icon: str = Field(default="news")
    enabled: bool = Field(default=True)
    display_options: DisplayOptions = Field(default_factory=DisplayOptions)
