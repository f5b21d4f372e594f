"""HTTP fetcher.

Every network read in the pipeline goes through fetch(): one GET with a
browser user agent, redirects followed, and a fixed timeout.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from feedmee.errors import NetworkError
from feedmee.log_system.unified_logger import UnifiedLogger


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 10.0


@dataclass
class FetchResult:
    """Body and metadata of a completed GET."""

    body: bytes
    final_url: str
    content_type: str
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding or "utf-8", errors="replace")


def create_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Build an AsyncClient with the fetcher's defaults."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )


async def fetch(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> FetchResult:
    """Fetch a URL.

    Args:
        url: Absolute URL to GET
        client: Optional shared client; a short-lived one is created otherwise
        timeout: Request timeout in seconds when a client is created here

    Returns:
        FetchResult with body bytes, post-redirect URL and content type

    Raises:
        NetworkError: On transport failure, timeout, invalid URL or HTTP error status
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.debug(f"Fetching {url}")

    try:
        if client is None:
            async with create_client(timeout) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        logger.warning(f"Timed out fetching {url}: {e}")
        raise NetworkError(f"Request to {url} timed out") from e
    except httpx.HTTPStatusError as e:
        logger.warning(f"HTTP {e.response.status_code} fetching {url}")
        raise NetworkError(f"HTTP {e.response.status_code} from {url}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Failed to fetch {url}: {e}")
        raise NetworkError(f"Failed to fetch {url}: {e}") from e

    return FetchResult(
        body=response.content,
        final_url=str(response.url),
        content_type=response.headers.get("content-type", ""),
        encoding=response.encoding,
    )
