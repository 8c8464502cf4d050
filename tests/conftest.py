import asyncio
from contextlib import asynccontextmanager

import pytest

from imgproxy.proxy_service.buffer_pool import BufferPool
from imgproxy.proxy_service.pipeline import ImageProxyPipeline
from imgproxy.proxy_service.upstream.base_fetcher import UpstreamFetcher, UpstreamResponse
from imgproxy.shared.config import ProxyConfig
from imgproxy.shared.errors import UpstreamUnreachableError

ALLOWED_HOST = "images.example.com"


class FakeFetcher(UpstreamFetcher):
    """In-memory upstream that records calls, reads and closes."""

    def __init__(
        self,
        body: bytes = b"",
        content_type: str = "image/png",
        chunk_size: int = 7,
        hang: bool = False,
        unreachable: bool = False,
        fail_after_chunks: int | None = None,
    ):
        self.body = body
        self.content_type = content_type
        self.chunk_size = chunk_size
        self.hang = hang
        self.unreachable = unreachable
        self.fail_after_chunks = fail_after_chunks
        self.calls: list[tuple[str, str]] = []
        self.chunks_read = 0
        self.closed = 0

    @asynccontextmanager
    async def fetch(self, method: str, url: str):
        self.calls.append((method, url))
        if self.unreachable:
            raise UpstreamUnreachableError("failed to make http request")
        if self.hang:
            await asyncio.Event().wait()

        try:
            yield UpstreamResponse(status=200, content_type=self.content_type, body=self._chunks())
        finally:
            self.closed += 1

    async def _chunks(self):
        for start in range(0, len(self.body), self.chunk_size):
            if self.fail_after_chunks is not None and self.chunks_read >= self.fail_after_chunks:
                raise ConnectionResetError("connection reset by peer")
            self.chunks_read += 1
            yield self.body[start : start + self.chunk_size]


@pytest.fixture
def pool() -> BufferPool:
    return BufferPool()


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_pipeline(pool):
    def factory(fetcher: UpstreamFetcher, **overrides) -> ImageProxyPipeline:
        options = {"allowed_hosts": frozenset({ALLOWED_HOST})}
        options.update(overrides)
        return ImageProxyPipeline(ProxyConfig(**options), fetcher, pool)

    return factory
