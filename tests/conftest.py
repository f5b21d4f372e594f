"""Shared fixtures: a mocked HTTP layer and an in-memory store."""

from typing import Dict, List, Optional, Union
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from feedmee.storage.database import FeedStore


def make_response(
    body: Union[str, bytes],
    url: str,
    content_type: str = "text/html; charset=utf-8",
    status_code: int = 200,
) -> MagicMock:
    """Build a MagicMock shaped like an httpx.Response."""
    if isinstance(body, str):
        body = body.encode("utf-8")

    response = MagicMock()
    response.status_code = status_code
    response.content = body
    response.url = url
    response.headers = {"content-type": content_type}
    response.encoding = "utf-8"

    if status_code >= 400:
        response.raise_for_status = MagicMock(side_effect=httpx.HTTPStatusError(
            f"HTTP {status_code}", request=MagicMock(), response=response,
        ))
    else:
        response.raise_for_status = MagicMock()

    return response


class MockHttp:
    """Routes mocked GET requests to canned responses by URL."""

    def __init__(self):
        self.responses: Dict[str, MagicMock] = {}
        self.failures: Dict[str, Exception] = {}
        self.requested: List[str] = []
        self.on_request = None

    def serve(
        self,
        url: str,
        body: Union[str, bytes],
        content_type: str = "text/html; charset=utf-8",
        final_url: Optional[str] = None,
        status_code: int = 200,
    ) -> None:
        self.failures.pop(url, None)
        self.responses[url] = make_response(body, final_url or url, content_type, status_code)

    def fail(self, url: str, error: Optional[Exception] = None) -> None:
        self.responses.pop(url, None)
        self.failures[url] = error or httpx.ConnectError(f"Connection refused: {url}")

    async def get(self, url, **kwargs):
        self.requested.append(url)
        if self.on_request is not None:
            self.on_request(url)
        if url in self.failures:
            raise self.failures[url]
        if url not in self.responses:
            raise httpx.ConnectError(f"Connection refused: {url}")
        return self.responses[url]


@pytest.fixture
def mock_http():
    """Patch httpx.AsyncClient so every fetch is served from MockHttp."""
    http = MockHttp()

    with patch("feedmee.services.fetcher.httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.get = http.get
        mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
        mock_instance.__aexit__ = AsyncMock(return_value=None)
        mock_client.return_value = mock_instance

        yield http


@pytest.fixture
async def store():
    """Create an in-memory FeedStore for testing."""
    feed_store = await FeedStore.open(":memory:")
    yield feed_store
    await feed_store.close()


@pytest.fixture
def anyio_backend():
    """Run anyio-marked tests on asyncio only."""
    return "asyncio"
