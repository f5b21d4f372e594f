"""Database storage for feedmee.

This module provides the async SQLite data-access object for folders, feeds
and articles. Database location: ~/.feedmee/feedmee.sqlite (or
FEEDMEE_DB_PATH env var).

One connection is shared by the whole process and guarded by one lock.
Each method holds the lock only for its own statements; callers must never
keep it across a network call.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple, Union

import aiosqlite

from feedmee.config import get_config
from feedmee.log_system.unified_logger import UnifiedLogger
from feedmee.models.schemas import (
    DEFAULT_FOLDER_ID,
    DEFAULT_FOLDER_NAME,
    Article,
    FeedSource,
    FeedType,
)


async def init_database(db: aiosqlite.Connection) -> None:
    """Create tables and the default folder if they don't exist.

    Args:
        db: Open database connection
    """
    await db.execute("PRAGMA foreign_keys = ON")

    await db.execute("""
        CREATE TABLE IF NOT EXISTS folders (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL UNIQUE
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS feeds (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            url TEXT NOT NULL UNIQUE,
            folder_id INTEGER NOT NULL,
            feed_type TEXT NOT NULL DEFAULT 'rss',
            has_error BOOLEAN NOT NULL DEFAULT 0,
            content_hash TEXT,
            FOREIGN KEY (folder_id) REFERENCES folders(id)
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS articles (
            id INTEGER PRIMARY KEY,
            feed_id INTEGER NOT NULL,
            title TEXT NOT NULL,
            author TEXT,
            summary TEXT,
            url TEXT NOT NULL UNIQUE,
            timestamp INTEGER,
            is_read BOOLEAN NOT NULL DEFAULT 0,
            is_saved BOOLEAN NOT NULL DEFAULT 0,
            FOREIGN KEY (feed_id) REFERENCES feeds(id) ON DELETE CASCADE
        )
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS idx_articles_feed_id ON articles(feed_id)
    """)

    await db.execute(
        "INSERT OR IGNORE INTO folders (id, name) VALUES (?, ?)",
        (DEFAULT_FOLDER_ID, DEFAULT_FOLDER_NAME),
    )

    await db.commit()


def _row_to_feed(row: aiosqlite.Row) -> FeedSource:
    return FeedSource(
        id=row["id"],
        name=row["name"],
        url=row["url"],
        folder_id=row["folder_id"],
        feed_type=FeedType(row["feed_type"]),
        has_error=bool(row["has_error"]),
        content_hash=row["content_hash"],
    )


def _row_to_article(row: aiosqlite.Row) -> Article:
    return Article(
        id=row["id"],
        feed_id=row["feed_id"],
        title=row["title"],
        author=row["author"] or "",
        summary=row["summary"] or "",
        url=row["url"],
        timestamp=row["timestamp"] or 0,
        is_read=bool(row["is_read"]),
        is_saved=bool(row["is_saved"]),
    )


class FeedStore:
    """Single-writer access to the feedmee database."""

    def __init__(self, db: aiosqlite.Connection):
        self._db = db
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, path: Union[str, Path]) -> "FeedStore":
        """Connect to a database file (or ":memory:") and initialize it."""
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        db = await aiosqlite.connect(path)
        db.row_factory = aiosqlite.Row
        await init_database(db)
        return cls(db)

    @property
    def connection(self) -> aiosqlite.Connection:
        return self._db

    async def close(self) -> None:
        await self._db.close()

    async def create_feed(
        self,
        name: str,
        url: str,
        folder_id: int,
        feed_type: FeedType,
    ) -> int:
        """Insert a feed, or update the type of the feed already at this URL.

        Returns:
            ID of the new or existing feed
        """
        async with self._lock:
            await self._db.execute(
                """
                INSERT INTO feeds (name, url, folder_id, feed_type, has_error)
                VALUES (?, ?, ?, ?, 0)
                ON CONFLICT(url) DO UPDATE SET feed_type = excluded.feed_type
                """,
                (name, url, folder_id, feed_type.value),
            )
            await self._db.commit()

            cursor = await self._db.execute("SELECT id FROM feeds WHERE url = ?", (url,))
            row = await cursor.fetchone()

        return row["id"]

    async def insert_article(self, article: Article) -> bool:
        """Insert an article unless one with the same URL exists.

        Returns:
            True if a row was added, False if the URL was already stored
        """
        async with self._lock:
            cursor = await self._db.execute(
                """
                INSERT OR IGNORE INTO articles
                    (feed_id, title, author, summary, url, timestamp, is_read, is_saved)
                VALUES (?, ?, ?, ?, ?, ?, 0, 0)
                """,
                (
                    article.feed_id,
                    article.title,
                    article.author,
                    article.summary,
                    article.url,
                    article.timestamp,
                ),
            )
            await self._db.commit()

        return cursor.rowcount > 0

    async def update_feed_error(self, feed_id: int, has_error: bool) -> None:
        async with self._lock:
            await self._db.execute(
                "UPDATE feeds SET has_error = ? WHERE id = ?",
                (1 if has_error else 0, feed_id),
            )
            await self._db.commit()

    async def get_feed(self, feed_id: int) -> Optional[FeedSource]:
        async with self._lock:
            cursor = await self._db.execute("SELECT * FROM feeds WHERE id = ?", (feed_id,))
            row = await cursor.fetchone()

        return _row_to_feed(row) if row is not None else None

    async def folder_exists(self, folder_id: int) -> bool:
        async with self._lock:
            cursor = await self._db.execute("SELECT 1 FROM folders WHERE id = ?", (folder_id,))
            row = await cursor.fetchone()

        return row is not None

    async def get_feed_by_url(self, url: str) -> Optional[FeedSource]:
        async with self._lock:
            cursor = await self._db.execute("SELECT * FROM feeds WHERE url = ?", (url,))
            row = await cursor.fetchone()

        return _row_to_feed(row) if row is not None else None

    async def list_feeds(self) -> List[dict]:
        """List all feeds with total and unread article counts."""
        async with self._lock:
            cursor = await self._db.execute("""
                SELECT f.*,
                       COUNT(a.id) as total_articles,
                       SUM(CASE WHEN a.is_read = 0 THEN 1 ELSE 0 END) as unread_articles
                FROM feeds f
                LEFT JOIN articles a ON f.id = a.feed_id
                GROUP BY f.id
                ORDER BY f.name COLLATE NOCASE
            """)
            rows = await cursor.fetchall()

        return [
            {
                "id": row["id"],
                "name": row["name"],
                "url": row["url"],
                "folder_id": row["folder_id"],
                "feed_type": row["feed_type"],
                "has_error": bool(row["has_error"]),
                "total_articles": row["total_articles"],
                "unread_articles": row["unread_articles"] or 0,
            }
            for row in rows
        ]

    async def list_articles(self, feed_id: int, limit: int = 50) -> List[Article]:
        """List a feed's articles, newest first."""
        async with self._lock:
            cursor = await self._db.execute(
                """
                SELECT * FROM articles
                WHERE feed_id = ?
                ORDER BY timestamp DESC, id DESC
                LIMIT ?
                """,
                (feed_id, limit),
            )
            rows = await cursor.fetchall()

        return [_row_to_article(row) for row in rows]

    async def delete_feed(self, feed_id: int) -> Tuple[bool, int]:
        """Delete a feed and all its articles.

        Returns:
            Tuple of (success, article_count_deleted)
        """
        async with self._lock:
            cursor = await self._db.execute("SELECT id FROM feeds WHERE id = ?", (feed_id,))
            if await cursor.fetchone() is None:
                return (False, 0)

            cursor = await self._db.execute(
                "DELETE FROM articles WHERE feed_id = ?", (feed_id,)
            )
            article_count = cursor.rowcount
            await self._db.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
            await self._db.commit()

        return (True, article_count)


# Singleton store
_store: Optional[FeedStore] = None


async def get_store() -> FeedStore:
    """Get or create the process-wide FeedStore.

    Returns:
        Open FeedStore backed by the configured database file
    """
    global _store

    if _store is None:
        db_path = get_config().db_path
        UnifiedLogger.get_logger(__name__).info(f"Opening database at: {db_path}")
        _store = await FeedStore.open(db_path)

    return _store


async def close_store() -> None:
    """Close the process-wide store."""
    global _store

    if _store is not None:
        await _store.close()
        _store = None
