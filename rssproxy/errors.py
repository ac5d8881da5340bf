"""Domain errors raised by the feed pipeline."""

from enum import Enum


class RssProxyError(Exception):
    """Base class for all rssproxy errors."""


class ValidationError(RssProxyError):
    """Raised when the inbound request is missing or malformed."""


class FetchErrorKind(str, Enum):
    """Transport-level failure categories."""

    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    INVALID_PAYLOAD = "invalid_payload"
    NETWORK = "network"


class FetchError(RssProxyError):
    """Raised when a feed URL cannot be fetched as a text document."""

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        url: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.url = url
        self.status_code = status_code


class ParseError(RssProxyError):
    """Raised when a feed body cannot be read as RSS or Atom XML."""

    kind = "malformed_xml"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FallbackError(RssProxyError):
    """Raised when neither the parser nor the fallback extractor produced a feed."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.url = url
