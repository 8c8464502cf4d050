"""AWS Lambda entry point behind an API Gateway proxy integration."""

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

import uvloop

from imgproxy.proxy_service.buffer_pool import BufferPool
from imgproxy.proxy_service.pipeline import ImageProxyPipeline
from imgproxy.proxy_service.upstream.aio.client import cleanup_session, setup_session
from imgproxy.proxy_service.upstream.aio.fetcher import AiohttpFetcher
from imgproxy.proxy_service.upstream.base_fetcher import UpstreamFetcher
from imgproxy.shared.config import ProxyConfig, Settings
from imgproxy.shared.logging import get_logger, request_id_var, setup_logging
from imgproxy.shared.models import ProxyRequest

logger = get_logger(__name__)

# Lambda stops the clock hard; leave room to return the envelope.
DEADLINE_MARGIN_MS = 250

# Survives across warm invocations of the same execution environment.
buffer_pool = BufferPool()

setup_logging(Settings().log_level)


def build_request(event: Mapping[str, Any], context: Any = None) -> ProxyRequest:
    """Map an API Gateway proxy event onto a ProxyRequest."""
    params = event.get("queryStringParameters") or {}
    deadline = None

    if context is not None and hasattr(context, "get_remaining_time_in_millis"):
        remaining_ms = context.get_remaining_time_in_millis() - DEADLINE_MARGIN_MS
        deadline = max(remaining_ms, 1) / 1000

    return ProxyRequest(
        method=event.get("httpMethod") or "GET",
        url=params.get("url") or "",
        deadline=deadline,
    )


async def handle_event(
    event: Mapping[str, Any],
    context: Any = None,
    fetcher: UpstreamFetcher | None = None,
) -> dict[str, Any]:
    """
    Run one invocation.

    Settings are re-read on every call so a changed WHITELISTED_HOSTS applies
    to warm environments without a redeploy.

    Raises:
        ProxyError: On any pipeline failure; Lambda reports it as the invocation error
    """
    request_id_var.set(getattr(context, "aws_request_id", None) or str(uuid4()))
    config = ProxyConfig.from_settings(Settings())
    request = build_request(event, context)

    if fetcher is not None:
        response = await ImageProxyPipeline(config, fetcher, buffer_pool).run(request)
        return response.to_envelope()

    session = await setup_session(config.upstream_timeout)
    try:
        pipeline = ImageProxyPipeline(config, AiohttpFetcher(session, config.chunk_size), buffer_pool)
        response = await pipeline.run(request)
        return response.to_envelope()
    finally:
        await cleanup_session(session)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    return uvloop.run(handle_event(event, context))
