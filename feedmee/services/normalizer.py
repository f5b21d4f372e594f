"""Article normalization.

Maps parsed feed entries onto the canonical Article. Every article leaves
here with a URL, because article URLs are the only deduplication key in
storage. Entries without a link get a synthetic URL derived from their id
or title, so repeated fetches of the same feed produce the same keys.

Two id-less entries that share a title get the same synthetic URL and are
stored as one article. That is a known limitation.
"""

import hashlib
from typing import List, Optional

from feedmee.models.schemas import Article
from feedmee.services.feed_parser import ParsedEntry, ParsedFeed


DEFAULT_ARTICLE_TITLE = "No Title"
SYNTHETIC_HASH_LENGTH = 16


def entry_url(entry: ParsedEntry) -> Optional[str]:
    """Return the alternate link of an entry, else its first link."""
    for href, rel in entry.links:
        if rel == "alternate" and href:
            return href
    for href, _ in entry.links:
        if href:
            return href
    return None


def synthetic_url(feed_url: str, entry: ParsedEntry) -> str:
    """Build a stable stand-in URL for an entry that has no link.

    Args:
        feed_url: URL of the feed the entry came from
        entry: The link-less entry

    Returns:
        ``<feed_url without trailing slash>/#<hash of id or title>``
    """
    key = entry.id if entry.id else entry.title
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:SYNTHETIC_HASH_LENGTH]
    return f"{feed_url.rstrip('/')}/#{digest}"


def normalize_entry(entry: ParsedEntry, feed_url: str, feed_id: Optional[int] = None) -> Article:
    """Convert one parsed entry into an Article."""
    if entry.published is not None:
        timestamp = entry.published
    elif entry.updated is not None:
        timestamp = entry.updated
    else:
        timestamp = 0

    return Article(
        feed_id=feed_id,
        title=entry.title or DEFAULT_ARTICLE_TITLE,
        author=entry.authors[0] if entry.authors else "",
        summary=entry.summary or entry.content or "",
        url=entry_url(entry) or synthetic_url(feed_url, entry),
        timestamp=timestamp,
    )


def normalize_feed(feed: ParsedFeed, feed_url: str, feed_id: Optional[int] = None) -> List[Article]:
    return [normalize_entry(entry, feed_url, feed_id) for entry in feed.entries]
