"""Error taxonomy for the ingestion pipeline.

Every failure the pipeline reports is a FeedError carrying a closed ErrorKind
and a human-readable detail, so callers branch on the kind instead of
matching message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories."""

    NETWORK = "network"
    PARSE = "parse"
    DISCOVERY = "discovery"
    SCRAPE_EMPTY = "scrape_empty"
    EXTRACTION = "extraction"
    NOT_FOUND = "not_found"


class FeedError(Exception):
    """Base class for pipeline failures."""

    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"

    def to_dict(self) -> dict:
        return {"error_kind": self.kind.value, "error": self.detail}


class NetworkError(FeedError):
    """A fetch failed; aborts the whole attempt."""

    kind = ErrorKind.NETWORK


class ParseError(FeedError):
    """Bytes did not yield a usable feed."""

    kind = ErrorKind.PARSE


class DiscoveryFailure(FeedError):
    """No feed link found, or the linked feed was unusable."""

    kind = ErrorKind.DISCOVERY


class ScrapeEmptyResult(FeedError):
    """Website fallback produced no usable article links."""

    kind = ErrorKind.SCRAPE_EMPTY


class ExtractionError(FeedError):
    """Readability extraction found no main content."""

    kind = ErrorKind.EXTRACTION


class FeedNotFound(FeedError):
    """A feed or folder id does not exist in storage."""

    kind = ErrorKind.NOT_FOUND
