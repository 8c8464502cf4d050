"""HTTP server entry point for running the proxy outside Lambda."""

from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette
from starlette.routing import Route

from imgproxy.proxy_service.buffer_pool import BufferPool
from imgproxy.proxy_service.handlers import proxy_request_handler
from imgproxy.proxy_service.middleware import RequestIdMiddleware
from imgproxy.proxy_service.pipeline import ImageProxyPipeline
from imgproxy.proxy_service.upstream.aio.client import cleanup_session, setup_session
from imgproxy.proxy_service.upstream.aio.fetcher import AiohttpFetcher
from imgproxy.proxy_service.upstream.base_fetcher import UpstreamFetcher
from imgproxy.shared.config import ProxyConfig, Settings, get_settings
from imgproxy.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, fetcher: UpstreamFetcher | None = None) -> Starlette:
    """
    Create and configure the proxy application.

    Args:
        settings: Settings to use instead of the environment
        fetcher: Upstream fetcher to use instead of an aiohttp session
    """
    settings = settings or get_settings()
    config = ProxyConfig.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        """Manage application lifecycle (startup/shutdown)."""
        logger.info("Starting image proxy")
        logger.info(f"Whitelisted hosts: {', '.join(sorted(config.allowed_hosts)) or '(none)'}")

        session = None
        upstream = fetcher
        if upstream is None:
            session = await setup_session(config.upstream_timeout)
            upstream = AiohttpFetcher(session, config.chunk_size)

        app.state.pipeline = ImageProxyPipeline(config, upstream, BufferPool())
        app.state.request_timeout = settings.request_timeout

        yield

        await cleanup_session(session)
        logger.info("Image proxy stopped")

    app = Starlette(
        debug=False,
        routes=[
            Route("/", proxy_request_handler, methods=["GET", "HEAD"]),
        ],
        lifespan=lifespan,
    )

    app.add_middleware(RequestIdMiddleware)

    return app


def main() -> None:
    """Serve the proxy with uvicorn on uvloop."""
    settings = get_settings()
    setup_logging(settings.log_level)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        loop="uvloop",
        log_config=None,
    )


if __name__ == "__main__":
    main()
