"""Data models for feedmee."""

from .schemas import Article, FeedSource, FeedType, DEFAULT_FOLDER_ID

__all__ = ["Article", "FeedSource", "FeedType", "DEFAULT_FOLDER_ID"]
