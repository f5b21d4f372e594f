"""Feed discovery service.

This module finds a feed URL advertised by an HTML page through its
<link> elements.
"""

from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from feedmee.log_system.unified_logger import UnifiedLogger


# Feed MIME types looked for in <link type="...">
FEED_MIME_TYPES = [
    "application/rss+xml",
    "application/atom+xml",
    "application/feed+json",
]


def discover_feed_url(html: bytes, base_url: str) -> Optional[str]:
    """Find the first feed advertised by an HTML document.

    Every <link> element is enumerated in document order and its type
    attribute checked by substring, rather than through a selector query,
    so quoted or non-ASCII attribute values still match. The check is
    case-sensitive.

    Args:
        html: Raw HTML bytes
        base_url: Post-redirect URL the document was served from

    Returns:
        Absolute feed URL, or None if no link matches, the first match has
        no href, or the href cannot be resolved
    """
    logger = UnifiedLogger.get_logger(__name__)

    soup = BeautifulSoup(html, "lxml")

    match = None
    for link in soup.find_all("link"):
        link_type = link.get("type") or ""
        if any(mime in link_type for mime in FEED_MIME_TYPES):
            match = link
            break

    if match is None:
        logger.info(f"No feed <link> found on {base_url}")
        return None

    href = (match.get("href") or "").strip()
    if not href:
        logger.info(f"Feed <link> on {base_url} has no href")
        return None

    feed_url = _resolve(base_url, href)
    if feed_url is None:
        logger.warning(f"Could not resolve feed href {href!r} against {base_url}")
        return None

    logger.info(f"Found feed via link tag: {feed_url}")
    return feed_url


def _resolve(base_url: str, href: str) -> Optional[str]:
    try:
        base = urlparse(base_url)
        if not base.scheme or not base.netloc:
            return None
        resolved = urljoin(base_url, href)
        parsed = urlparse(resolved)
    except ValueError:
        return None

    if not parsed.scheme or not parsed.netloc:
        return None
    return resolved
