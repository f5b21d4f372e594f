"""Services for feedmee."""

from .content_extractor import extract_content
from .feed_discovery import discover_feed_url
from .feed_parser import parse_feed, ParsedEntry, ParsedFeed
from .fetcher import fetch, FetchResult
from .ingestion import add_feed, refresh_feed, refresh_all_feeds
from .normalizer import normalize_entry, synthetic_url
from .scraper import scrape_website

__all__ = [
    "extract_content",
    "discover_feed_url",
    "parse_feed",
    "ParsedEntry",
    "ParsedFeed",
    "fetch",
    "FetchResult",
    "add_feed",
    "refresh_feed",
    "refresh_all_feeds",
    "normalize_entry",
    "synthetic_url",
    "scrape_website",
]
