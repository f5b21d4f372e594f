"""Website scraper service.

When a page offers no structured feed, its same-site links are treated as
article entries. Each anchor must earn a readable title from its text, its
title attribute or its URL slug; shallow navigation links are dropped.
"""

import time
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from feedmee.errors import ScrapeEmptyResult
from feedmee.log_system.unified_logger import UnifiedLogger
from feedmee.models.schemas import Article


MIN_TITLE_LENGTH = 10
MIN_SLUG_SEGMENT_LENGTH = 3
MIN_PATH_DEPTH = 2


def scrape_website(html: bytes, page_url: str, now: Optional[int] = None) -> List[Article]:
    """Extract candidate articles from an arbitrary HTML page.

    Args:
        html: Raw HTML bytes
        page_url: URL the page was fetched from
        now: Timestamp for the scraped entries (defaults to current time)

    Returns:
        Articles without a feed id, in document order

    Raises:
        ScrapeEmptyResult: If no anchor qualifies
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"Scraping website: {page_url}")

    timestamp = int(time.time()) if now is None else now

    base = urlparse(page_url)
    base_host = base.hostname
    base_path = base.path or "/"

    soup = BeautifulSoup(html, "lxml")

    articles = []
    seen_urls = set()

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()

        try:
            absolute_url = urljoin(page_url, href)
            target = urlparse(absolute_url)
            target_host = target.hostname
        except ValueError:
            continue

        if target_host is None or target_host != base_host:
            continue

        target_path = target.path or "/"
        if target_path == base_path:
            continue

        if absolute_url in seen_urls:
            continue

        text = " ".join(anchor.get_text().split())
        segments = [segment for segment in target_path.split("/") if segment]

        # Shallow links with short text are navigation, whatever the slug says
        if len(segments) < MIN_PATH_DEPTH and len(text) < MIN_TITLE_LENGTH:
            continue

        title = _resolve_title(text, anchor.get("title"), segments)
        if title is None:
            continue

        seen_urls.add(absolute_url)
        articles.append(Article(
            title=title,
            url=absolute_url,
            author="",
            summary="",
            timestamp=timestamp,
        ))

    if not articles:
        logger.warning(f"No articles found on {page_url}")
        raise ScrapeEmptyResult(f"No articles found on {page_url}")

    logger.info(f"Scraped {len(articles)} articles from page")
    return articles


def _resolve_title(text: str, title_attr: Optional[str], segments: List[str]) -> Optional[str]:
    """Pick the first title source long enough to be meaningful."""
    if len(text) >= MIN_TITLE_LENGTH:
        return text

    if title_attr:
        title_attr = title_attr.strip()
        if len(title_attr) >= MIN_TITLE_LENGTH:
            return title_attr

    if segments:
        slug = segments[-1]
        if len(slug) > MIN_SLUG_SEGMENT_LENGTH:
            words = slug.replace("-", " ").replace("_", " ").split()
            slug_title = " ".join(word[:1].upper() + word[1:] for word in words)
            if len(slug_title) >= MIN_TITLE_LENGTH:
                return slug_title

    return None


def website_title(html: bytes, default: str) -> str:
    """Return the trimmed <title> of a page, or default when it has none."""
    soup = BeautifulSoup(html, "lxml")
    if soup.title is not None:
        title = soup.title.get_text().strip()
        if title:
            return title
    return default
