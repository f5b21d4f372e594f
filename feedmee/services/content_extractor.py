"""Article content extraction.

Re-fetches an article page and pulls out its main content with
readability, then strips whatever non-content markup survived.
"""

from typing import Optional

import httpx
from bs4 import BeautifulSoup
from readability import Document

from feedmee.errors import ExtractionError
from feedmee.log_system.unified_logger import UnifiedLogger
from feedmee.services.fetcher import DEFAULT_TIMEOUT, fetch


DEFAULT_MIN_CONTENT_LENGTH = 25

# Elements that never belong in a reader view
STRIP_TAGS = [
    "script",
    "style",
    "noscript",
    "nav",
    "aside",
    "footer",
    "header",
    "form",
    "iframe",
    "object",
    "embed",
    "button",
    "input",
    "select",
    "textarea",
]


async def extract_content(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
    min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH,
) -> str:
    """Fetch an article and return its main content as an HTML fragment.

    Args:
        url: Article URL
        client: Optional shared HTTP client
        timeout: Fetch timeout in seconds
        min_content_length: Minimum visible text length to accept

    Returns:
        Sanitized HTML fragment

    Raises:
        NetworkError: If the page cannot be fetched
        ExtractionError: If no node meets the content threshold
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"Extracting content from: {url}")

    page = await fetch(url, client=client, timeout=timeout)
    return extract_main_content(page.text, min_content_length=min_content_length, url=url)


def extract_main_content(
    html: str,
    min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH,
    url: Optional[str] = None,
) -> str:
    """Run readability over an HTML document and sanitize the result.

    Raises:
        ExtractionError: If the document is empty or yields too little text
    """
    logger = UnifiedLogger.get_logger(__name__)
    source = url or "document"

    if not html or not html.strip():
        raise ExtractionError(f"No content extracted from {source}")

    try:
        summary_html = Document(html, url=url).summary(html_partial=True)
    except Exception as e:
        # readability raises its own Unparseable plus assorted lxml errors
        logger.warning(f"Readability failed on {source}: {e}")
        raise ExtractionError(f"No content extracted from {source}") from e

    fragment = BeautifulSoup(summary_html, "lxml")
    for element in fragment.find_all(STRIP_TAGS):
        element.decompose()

    text = " ".join(fragment.get_text().split())
    if len(text) < min_content_length:
        logger.warning(f"Extracted text from {source} below threshold ({len(text)} chars)")
        raise ExtractionError(f"No content extracted from {source}")

    # lxml wraps fragments in <html><body>; return only the content
    body = fragment.body if fragment.body is not None else fragment
    content = "".join(str(child) for child in body.children)

    logger.info(f"Extracted {len(text)} characters of content from {source}")
    return content
