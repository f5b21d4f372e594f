"""Data models for feedmee.

This module defines the persisted shapes of folders, feed sources and
articles.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


DEFAULT_FOLDER_ID = 1
DEFAULT_FOLDER_NAME = "Uncategorized"


class FeedType(str, Enum):
    """How a feed source is ingested."""

    RSS = "rss"
    WEBSITE = "website"


@dataclass
class FeedSource:
    """Represents a subscribed feed or scraped website."""

    id: int
    name: str
    url: str
    folder_id: int
    feed_type: FeedType
    has_error: bool = False
    content_hash: Optional[str] = None


@dataclass
class Article:
    """Represents one article, from a feed entry or a scraped link.

    ``id`` and ``feed_id`` stay None until the article is stored.
    """

    title: str
    url: str
    author: str = ""
    summary: str = ""
    timestamp: int = 0
    feed_id: Optional[int] = None
    id: Optional[int] = None
    is_read: bool = False
    is_saved: bool = False
