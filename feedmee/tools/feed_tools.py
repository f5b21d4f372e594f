"""Feed reader MCP tools.

This module provides MCP tools for adding, refreshing and reading feeds.

NOTE: Never use Optional parameters in MCP tools - they break MCP clients.
Use 0 for "not given" integers.
"""

from typing import Any, Dict

from mcp.server.fastmcp import Context

from feedmee.config import get_config
from feedmee.errors import FeedError
from feedmee.log_system.unified_logger import UnifiedLogger
from feedmee.models.schemas import DEFAULT_FOLDER_ID
from feedmee.services import ingestion
from feedmee.services.content_extractor import extract_content
from feedmee.storage import database


def _error_response(error: FeedError) -> Dict[str, Any]:
    return {"success": False, **error.to_dict()}


async def add_feed(
    url: str,
    folder_id: int = DEFAULT_FOLDER_ID,
    ctx: Context = None,
) -> Dict[str, Any]:
    """Subscribe to a feed or website by URL.

    The URL is fetched and parsed as RSS/Atom/JSON Feed. If it is an HTML page,
    a feed advertised by its <link> tags is used instead. If the page has no
    feed, its same-site article links are scraped and the source is stored as
    a website.

    Args:
        url: Feed or page URL (https:// is assumed when no scheme is given)
        folder_id: Folder to file the feed under (default: Uncategorized)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feed: object with id, name, url, feed_type
        - new_articles: number of articles stored
        - error_kind / error: strings if success is False
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"add_feed called: url={url}, folder_id={folder_id}")

    config = get_config()
    store = await database.get_store()

    try:
        result = await ingestion.add_feed(
            store,
            url,
            folder_id=folder_id or DEFAULT_FOLDER_ID,
            timeout=config.fetch_timeout,
        )
    except FeedError as e:
        return _error_response(e)

    return {
        "success": True,
        "feed": {
            "id": result.feed_id,
            "name": result.name,
            "url": result.url,
            "feed_type": result.feed_type.value,
        },
        "new_articles": result.new_articles,
    }


async def refresh_feed(feed_id: int, ctx: Context = None) -> Dict[str, Any]:
    """Fetch new articles for one feed.

    Previously stored articles are never changed. On failure the feed is
    flagged with has_error until a later refresh succeeds.

    Args:
        feed_id: Database ID of the feed (from list_feeds response)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - new_articles: count of articles added
        - error_kind / error: strings if success is False
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"refresh_feed called: feed_id={feed_id}")

    store = await database.get_store()

    try:
        added = await ingestion.refresh_feed(store, feed_id, timeout=get_config().fetch_timeout)
    except FeedError as e:
        return _error_response(e)

    return {
        "success": True,
        "feed_id": feed_id,
        "new_articles": added,
    }


async def refresh_all_feeds(ctx: Context = None) -> Dict[str, Any]:
    """Refresh every feed in turn.

    Args:
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feeds_refreshed: number of feeds refreshed without error
        - total_new_articles: articles added across all feeds
        - failures: list of {feed_id, error} for feeds that failed
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info("refresh_all_feeds called")

    store = await database.get_store()
    summary = await ingestion.refresh_all_feeds(store, timeout=get_config().fetch_timeout)

    return {
        "success": True,
        "feeds_refreshed": summary.feeds_refreshed,
        "total_new_articles": summary.new_articles,
        "failures": [
            {"feed_id": feed_id, "error": error}
            for feed_id, error in summary.failures.items()
        ],
    }


async def get_article_content(url: str, ctx: Context = None) -> Dict[str, Any]:
    """Fetch an article page and extract its readable main content.

    Args:
        url: Article URL (from list_articles response)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - url: the article URL
        - content: sanitized HTML fragment
        - error_kind / error: strings if success is False
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"get_article_content called: url={url}")

    config = get_config()

    try:
        content = await extract_content(
            url,
            timeout=config.fetch_timeout,
            min_content_length=config.min_content_length,
        )
    except FeedError as e:
        return _error_response(e)

    return {
        "success": True,
        "url": url,
        "content": content,
    }


async def list_feeds(ctx: Context = None) -> Dict[str, Any]:
    """List all feeds with article counts and error state.

    Args:
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - count: number of feeds
        - feeds: list of feed objects with id, name, url, folder_id, feed_type,
          has_error, total_articles, unread_articles
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info("list_feeds called")

    store = await database.get_store()
    feeds = await store.list_feeds()

    return {
        "success": True,
        "count": len(feeds),
        "feeds": feeds,
    }


async def list_articles(feed_id: int, limit: int = 50, ctx: Context = None) -> Dict[str, Any]:
    """List a feed's articles, newest first.

    Args:
        feed_id: Database ID of the feed
        limit: Maximum number of articles to return (default: 50)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - count: number of articles returned
        - articles: list of article objects
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"list_articles called: feed_id={feed_id}, limit={limit}")

    store = await database.get_store()
    articles = await store.list_articles(feed_id, limit=limit)

    return {
        "success": True,
        "count": len(articles),
        "articles": [
            {
                "id": a.id,
                "feed_id": a.feed_id,
                "title": a.title,
                "author": a.author,
                "summary": a.summary,
                "url": a.url,
                "timestamp": a.timestamp,
                "is_read": a.is_read,
                "is_saved": a.is_saved,
            }
            for a in articles
        ],
    }


async def delete_feed(feed_id: int, ctx: Context = None) -> Dict[str, Any]:
    """Delete a feed and all of its articles.

    Args:
        feed_id: Database ID of the feed
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - articles_deleted: count of articles removed
        - error: string if the feed was not found
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"delete_feed called: feed_id={feed_id}")

    store = await database.get_store()
    success, article_count = await store.delete_feed(feed_id)

    if success:
        return {
            "success": True,
            "message": f"Removed feed {feed_id} and {article_count} articles",
            "articles_deleted": article_count,
        }
    else:
        return {
            "success": False,
            "error_kind": "not_found",
            "error": f"Feed {feed_id} not found",
        }


# List of feed tools for registration
feed_tools = [
    add_feed,
    refresh_feed,
    refresh_all_feeds,
    get_article_content,
    list_feeds,
    list_articles,
    delete_feed,
]
