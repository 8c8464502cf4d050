"""The fetch-and-transcode pipeline."""

import asyncio

from imgproxy.proxy_service.assembler import assemble_success
from imgproxy.proxy_service.buffer_pool import BufferPool
from imgproxy.proxy_service.content_type import ContentTypeGate
from imgproxy.proxy_service.transcoder import transcode
from imgproxy.proxy_service.upstream.base_fetcher import UpstreamFetcher
from imgproxy.proxy_service.url_resolver import URLResolver
from imgproxy.proxy_service.whitelist import HostWhitelist
from imgproxy.shared.config import ProxyConfig
from imgproxy.shared.errors import ProxyError, UpstreamUnreachableError
from imgproxy.shared.logging import get_logger
from imgproxy.shared.models import ProxyRequest, ProxyResponse

logger = get_logger(__name__)


class ImageProxyPipeline:
    """
    Resolves, authorizes, fetches and transcodes one upstream resource per call.

    Stages run strictly in order and the first failure ends the call. The
    upstream body and the pooled buffer are released on every exit path.
    """

    def __init__(self, config: ProxyConfig, fetcher: UpstreamFetcher, pool: BufferPool):
        self._config = config
        self._fetcher = fetcher
        self._pool = pool
        self._resolver = URLResolver(config.input_encoding)
        self._whitelist = HostWhitelist(config.allowed_hosts)
        self._content_type_gate = ContentTypeGate(config.content_type_prefixes)

    async def run(self, request: ProxyRequest) -> ProxyResponse:
        """
        Process one request.

        Returns:
            The 200 response with the base64 body

        Raises:
            ProxyError: Subclass matching the first stage that failed
        """
        target = self._resolver.resolve(request.url)
        logger.info(f"Processing request for {target.raw}")

        self._whitelist.authorize(target.host)

        method = request.upstream_method
        try:
            async with asyncio.timeout(self._deadline(request)):
                async with self._fetcher.fetch(method, target.raw) as upstream:
                    content_type = self._content_type_gate.check(upstream.content_type)

                    with self._pool.borrow() as buffer:
                        await transcode(upstream.body, buffer)
                        return assemble_success(content_type, buffer, self._config.static_headers)

        except TimeoutError as exc:
            logger.error(f"failed to make http request: deadline exceeded for {target.raw}")
            raise UpstreamUnreachableError("failed to make http request") from exc

    async def handle(self, request: ProxyRequest) -> ProxyResponse:
        """Like run(), but renders a classified failure as an empty-body response."""
        try:
            return await self.run(request)
        except ProxyError as exc:
            return ProxyResponse.failure(exc)

    def _deadline(self, request: ProxyRequest) -> float | None:
        limits = [limit for limit in (request.deadline, self._config.upstream_timeout) if limit is not None]
        return min(limits) if limits else None
