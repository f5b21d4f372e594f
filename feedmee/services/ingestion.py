"""Feed ingestion pipeline.

Adding or refreshing a feed runs an ordered list of stages over one fetched
page:

1. direct parse of the fetched body as a feed
2. discovery of a linked feed, re-fetched and parsed (skipped for websites)
3. scraping the page's own links as articles

The first stage that produces a result wins. A stage returning None hands
over to the next one; a NetworkError from any stage aborts the attempt.
Storage is touched only before and after the stages run, never while a
fetch is in flight.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from feedmee.errors import (
    DiscoveryFailure,
    FeedError,
    FeedNotFound,
    ParseError,
    ScrapeEmptyResult,
)
from feedmee.log_system.unified_logger import UnifiedLogger
from feedmee.models.schemas import DEFAULT_FOLDER_ID, Article, FeedType
from feedmee.services.feed_discovery import discover_feed_url
from feedmee.services.feed_parser import parse_feed
from feedmee.services.fetcher import DEFAULT_TIMEOUT, FetchResult, create_client, fetch
from feedmee.services.normalizer import normalize_feed
from feedmee.services.scraper import scrape_website, website_title
from feedmee.storage.database import FeedStore


DEFAULT_FEED_TITLE = "Untitled Feed"


@dataclass
class IngestResult:
    """Outcome of a successful pipeline run, before anything is stored."""

    feed_type: FeedType
    name: str
    url: str
    articles: List[Article]


@dataclass
class PipelineContext:
    """State shared by the stages of one add/refresh attempt."""

    url: str
    page: FetchResult
    client: httpx.AsyncClient
    timeout: float = DEFAULT_TIMEOUT
    reasons: List[FeedError] = field(default_factory=list)


@dataclass
class AddFeedResult:
    feed_id: int
    name: str
    url: str
    feed_type: FeedType
    new_articles: int


@dataclass
class RefreshSummary:
    feeds_refreshed: int = 0
    new_articles: int = 0
    failures: Dict[int, str] = field(default_factory=dict)


Stage = Callable[[PipelineContext], Awaitable[Optional[IngestResult]]]


async def direct_parse_stage(ctx: PipelineContext) -> Optional[IngestResult]:
    """Treat the fetched body itself as a feed."""
    parsed = parse_feed(ctx.page.body)
    if parsed is None:
        ctx.reasons.append(ParseError(f"{ctx.url} is not a usable RSS, Atom or JSON feed"))
        return None

    return IngestResult(
        feed_type=FeedType.RSS,
        name=parsed.title or DEFAULT_FEED_TITLE,
        url=ctx.url,
        articles=normalize_feed(parsed, ctx.url),
    )


async def discovery_stage(ctx: PipelineContext) -> Optional[IngestResult]:
    """Follow a feed <link> advertised by the page."""
    logger = UnifiedLogger.get_logger(__name__)

    feed_url = discover_feed_url(ctx.page.body, ctx.page.final_url)
    if feed_url is None:
        ctx.reasons.append(DiscoveryFailure(f"No feed link advertised by {ctx.page.final_url}"))
        return None

    discovered = await fetch(feed_url, client=ctx.client, timeout=ctx.timeout)
    parsed = parse_feed(discovered.body)
    if parsed is None:
        logger.warning(f"Discovered feed {feed_url} is not a usable feed")
        ctx.reasons.append(DiscoveryFailure(f"Discovered feed {feed_url} is not a usable feed"))
        return None

    return IngestResult(
        feed_type=FeedType.RSS,
        name=parsed.title or DEFAULT_FEED_TITLE,
        url=feed_url,
        articles=normalize_feed(parsed, feed_url),
    )


async def scrape_stage(ctx: PipelineContext) -> Optional[IngestResult]:
    """Scrape the page's links; raises ScrapeEmptyResult when none qualify."""
    articles = scrape_website(ctx.page.body, ctx.page.final_url)
    return IngestResult(
        feed_type=FeedType.WEBSITE,
        name=website_title(ctx.page.body, ctx.url),
        url=ctx.url,
        articles=articles,
    )


FEED_STAGES: List[Stage] = [direct_parse_stage, discovery_stage, scrape_stage]
WEBSITE_STAGES: List[Stage] = [direct_parse_stage, scrape_stage]


def stages_for(feed_type: FeedType) -> List[Stage]:
    return WEBSITE_STAGES if feed_type == FeedType.WEBSITE else FEED_STAGES


async def run_pipeline(
    url: str,
    stages: List[Stage],
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> IngestResult:
    """Fetch a URL and run stages until one yields a result.

    Args:
        url: URL to ingest
        stages: Ordered stages to try
        client: Optional shared HTTP client
        timeout: Fetch timeout in seconds

    Returns:
        IngestResult of the first successful stage

    Raises:
        NetworkError: If any fetch fails
        ScrapeEmptyResult: If no stage produces articles
        ParseError, DiscoveryFailure: The last reason recorded when the
            stages run out without a scrape stage
    """
    logger = UnifiedLogger.get_logger(__name__)

    if client is None:
        async with create_client(timeout) as own_client:
            return await run_pipeline(url, stages, client=own_client, timeout=timeout)

    page = await fetch(url, client=client, timeout=timeout)
    ctx = PipelineContext(url=url, page=page, client=client, timeout=timeout)

    for stage in stages:
        result = await stage(ctx)
        if result is not None:
            logger.info(
                f"{stage.__name__} succeeded for {url}: {result.feed_type.value} "
                f"with {len(result.articles)} articles"
            )
            return result
        logger.info(f"{stage.__name__} found nothing for {url}")

    for reason in ctx.reasons:
        logger.debug(f"{url}: {reason}")
    if ctx.reasons:
        raise ctx.reasons[-1]
    raise ScrapeEmptyResult(f"No feed or articles found at {url}")


def normalize_url(url: str) -> str:
    url = url.strip()
    if urlparse(url).scheme.lower() not in ("http", "https"):
        url = "https://" + url
    return url


async def _store_articles(store: FeedStore, feed_id: int, articles: List[Article]) -> int:
    added = 0
    for article in articles:
        article.feed_id = feed_id
        if await store.insert_article(article):
            added += 1
    return added


async def add_feed(
    store: FeedStore,
    url: str,
    folder_id: int = DEFAULT_FOLDER_ID,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AddFeedResult:
    """Classify a URL, create its feed and store its articles.

    No feed row is created when the pipeline fails.

    Raises:
        FeedNotFound: If the folder does not exist; nothing is fetched
        NetworkError: If a fetch fails
        ScrapeEmptyResult: If the URL is neither a feed nor a page with articles
    """
    logger = UnifiedLogger.get_logger(__name__)
    url = normalize_url(url)

    if not await store.folder_exists(folder_id):
        raise FeedNotFound(f"Folder {folder_id} not found")

    logger.info(f"Adding feed: {url}")

    result = await run_pipeline(url, FEED_STAGES, client=client, timeout=timeout)

    feed_id = await store.create_feed(result.name, result.url, folder_id, result.feed_type)
    added = await _store_articles(store, feed_id, result.articles)
    await store.update_feed_error(feed_id, False)

    logger.info(f"Added feed {feed_id} '{result.name}' ({result.feed_type.value}), {added} new articles")
    return AddFeedResult(
        feed_id=feed_id,
        name=result.name,
        url=result.url,
        feed_type=result.feed_type,
        new_articles=added,
    )


async def refresh_feed(
    store: FeedStore,
    feed_id: int,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> int:
    """Re-ingest a stored feed.

    Returns:
        Number of newly stored articles

    Raises:
        FeedNotFound: If the feed id is unknown
        FeedError: If the pipeline fails; the feed's error flag is set first
    """
    logger = UnifiedLogger.get_logger(__name__)

    feed = await store.get_feed(feed_id)
    if feed is None:
        raise FeedNotFound(f"Feed {feed_id} not found")

    logger.info(f"Refreshing feed {feed_id}: {feed.url} ({feed.feed_type.value})")

    try:
        result = await run_pipeline(
            feed.url, stages_for(feed.feed_type), client=client, timeout=timeout
        )
    except FeedError as e:
        logger.error(f"Refresh of feed {feed_id} failed: {e}")
        await store.update_feed_error(feed_id, True)
        raise

    added = await _store_articles(store, feed_id, result.articles)
    await store.update_feed_error(feed_id, False)

    logger.info(f"Refreshed feed {feed_id}: {added} new articles")
    return added


async def refresh_all_feeds(
    store: FeedStore,
    timeout: float = DEFAULT_TIMEOUT,
) -> RefreshSummary:
    """Refresh every stored feed, one after another.

    A failing feed is recorded in the summary and does not stop the loop.
    """
    logger = UnifiedLogger.get_logger(__name__)

    feeds = await store.list_feeds()
    summary = RefreshSummary()

    async with create_client(timeout) as client:
        for feed in feeds:
            try:
                added = await refresh_feed(store, feed["id"], client=client, timeout=timeout)
            except FeedError as e:
                summary.failures[feed["id"]] = str(e)
                continue
            summary.feeds_refreshed += 1
            summary.new_articles += added

    logger.info(
        f"Refreshed {summary.feeds_refreshed}/{len(feeds)} feeds, "
        f"{summary.new_articles} new articles"
    )
    return summary
