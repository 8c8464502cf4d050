"""aiohttp implementation of the upstream fetcher."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from imgproxy.proxy_service.upstream.base_fetcher import UpstreamFetcher, UpstreamResponse
from imgproxy.shared.errors import TransferFailedError, UpstreamUnreachableError
from imgproxy.shared.logging import get_logger

logger = get_logger(__name__)


class AiohttpFetcher(UpstreamFetcher):
    """Fetches upstream resources over a shared aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession, chunk_size: int = 64 * 1024):
        """
        Initialize the fetcher.

        Args:
            session: Open client session
            chunk_size: Body read size in bytes
        """
        self._session = session
        self._chunk_size = chunk_size

    @asynccontextmanager
    async def fetch(self, method: str, url: str) -> AsyncIterator[UpstreamResponse]:
        """Send the request and hold the response open for the caller."""
        logger.debug(f"Sending {method} to upstream", extra={"url": url})

        try:
            response = await self._session.request(method, url, allow_redirects=False)
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            logger.error(f"failed to make http request: {exc!r}")
            raise UpstreamUnreachableError("failed to make http request") from exc

        try:
            logger.debug(f"Upstream answered {response.status}", extra={"url": url})
            yield UpstreamResponse(
                status=response.status,
                content_type=response.headers.get("Content-Type", ""),
                body=self._iter_body(response),
            )
        finally:
            # closes the connection instead of pooling it when the body was not read to the end
            response.release()

    async def _iter_body(self, response: aiohttp.ClientResponse) -> AsyncGenerator[bytes, None]:
        try:
            async for chunk in response.content.iter_chunked(self._chunk_size):
                yield chunk
        except (aiohttp.ClientError, TimeoutError) as exc:
            logger.error(f"error reading from response body: {exc!r}")
            raise TransferFailedError("error reading from response body") from exc
