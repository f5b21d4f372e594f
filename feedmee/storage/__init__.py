"""Storage layer for feedmee."""

from .database import (
    FeedStore,
    init_database,
    get_store,
    close_store,
)

__all__ = [
    "FeedStore",
    "init_database",
    "get_store",
    "close_store",
]
