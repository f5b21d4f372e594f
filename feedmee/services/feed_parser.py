"""Feed parser service.

This module turns raw bytes into a ParsedFeed. RSS and Atom go through
feedparser; JSON Feed documents are read directly. A parse only counts as
usable when it has a title or at least one entry.
"""

import calendar
import io
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple

import feedparser

from feedmee.log_system.unified_logger import UnifiedLogger


JSON_FEED_VERSION_PREFIX = "https://jsonfeed.org/version/"
UTF8_BOM = b"\xef\xbb\xbf"


@dataclass
class ParsedEntry:
    """One entry of a structured feed, before normalization."""

    id: str = ""
    title: str = ""
    authors: List[str] = field(default_factory=list)
    summary: str = ""
    content: str = ""
    published: Optional[int] = None
    updated: Optional[int] = None
    # (href, rel) pairs in document order
    links: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class ParsedFeed:
    """A structured feed: title plus entries."""

    title: str = ""
    entries: List[ParsedEntry] = field(default_factory=list)

    @property
    def is_usable(self) -> bool:
        return bool(self.title.strip() or self.entries)


def parse_feed(data: bytes) -> Optional[ParsedFeed]:
    """Parse bytes as RSS, Atom or JSON Feed.

    Content type is deliberately not consulted: servers mislabel feeds, so
    every body gets a direct parse attempt.

    Args:
        data: Raw response body

    Returns:
        ParsedFeed if the document is a usable feed, None otherwise
    """
    logger = UnifiedLogger.get_logger(__name__)

    if not data or not data.strip():
        return None

    if data.lstrip().removeprefix(UTF8_BOM).lstrip()[:1] == b"{":
        parsed = _parse_json_feed(data)
    else:
        parsed = _parse_xml_feed(data)

    if parsed is None or not parsed.is_usable:
        logger.info("Document is not a usable feed")
        return None

    logger.info(f"Parsed feed '{parsed.title}' with {len(parsed.entries)} entries")
    return parsed


def _parse_xml_feed(data: bytes) -> Optional[ParsedFeed]:
    logger = UnifiedLogger.get_logger(__name__)

    # A stream, never raw bytes: feedparser treats a bytes argument as a
    # possible local file path or URL to open.
    feed = feedparser.parse(io.BytesIO(data))

    # feedparser accepts almost anything; an unidentified format is HTML
    # or other markup that happened to be readable.
    if not feed.get("version"):
        if feed.bozo:
            logger.debug(f"Feed parsing error: {feed.get('bozo_exception')}")
        return None

    entries = [_entry_from_feedparser(entry) for entry in feed.entries]
    return ParsedFeed(title=(feed.feed.get("title") or "").strip(), entries=entries)


def _entry_from_feedparser(entry: Any) -> ParsedEntry:
    authors = [
        author.get("name", "")
        for author in entry.get("authors", [])
        if author.get("name")
    ]
    if not authors and entry.get("author"):
        authors = [entry.get("author")]

    content = ""
    for item in entry.get("content", []):
        if item.get("value"):
            content = item["value"]
            break

    links = [
        (link.get("href", ""), link.get("rel", "alternate"))
        for link in entry.get("links", [])
        if link.get("href")
    ]
    # feedparser promotes permalink guids to entry.link without adding a
    # links item; only keep that when it is an actual web URL
    if not links and str(entry.get("link", "")).startswith(("http://", "https://")):
        links = [(entry["link"], "alternate")]

    return ParsedEntry(
        id=entry.get("id", "") or "",
        title=(entry.get("title") or "").strip(),
        authors=authors,
        summary=entry.get("summary", "") or "",
        content=content,
        published=_struct_to_epoch(entry.get("published_parsed")),
        updated=_struct_to_epoch(entry.get("updated_parsed")),
        links=links,
    )


def _struct_to_epoch(value: Any) -> Optional[int]:
    """Convert feedparser's UTC time tuple to epoch seconds."""
    if not value:
        return None
    try:
        return calendar.timegm(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _parse_json_feed(data: bytes) -> Optional[ParsedFeed]:
    logger = UnifiedLogger.get_logger(__name__)

    try:
        document = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.debug(f"Not a JSON document: {e}")
        return None

    if not isinstance(document, dict):
        return None

    version = document.get("version")
    items = document.get("items")
    if not (isinstance(version, str) and version.startswith(JSON_FEED_VERSION_PREFIX)):
        if not isinstance(items, list):
            return None

    entries = [
        _entry_from_json_item(item)
        for item in (items or [])
        if isinstance(item, dict)
    ]
    title = document.get("title")
    return ParsedFeed(title=title.strip() if isinstance(title, str) else "", entries=entries)


def _entry_from_json_item(item: dict) -> ParsedEntry:
    # JSON Feed 1.1 uses "authors"; 1.0 used a single "author"
    raw_authors = item.get("authors")
    if not isinstance(raw_authors, list):
        raw_authors = [item["author"]] if isinstance(item.get("author"), dict) else []
    authors = [a["name"] for a in raw_authors if isinstance(a, dict) and a.get("name")]

    links = []
    if item.get("url"):
        links.append((str(item["url"]), "alternate"))
    if item.get("external_url"):
        links.append((str(item["external_url"]), "related"))

    return ParsedEntry(
        id="" if item.get("id") is None else str(item["id"]),
        title=str(item.get("title") or "").strip(),
        authors=authors,
        summary=str(item.get("summary") or ""),
        content=str(item.get("content_html") or item.get("content_text") or ""),
        published=_iso_to_epoch(item.get("date_published")),
        updated=_iso_to_epoch(item.get("date_modified")),
        links=links,
    )


def _iso_to_epoch(value: Any) -> Optional[int]:
    """Parse an RFC 3339 date string to epoch seconds.

    Args:
        value: Date string from a JSON Feed item

    Returns:
        Epoch seconds, or None when missing or unparseable
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return calendar.timegm(parsed.timetuple())
    return int(parsed.timestamp())
