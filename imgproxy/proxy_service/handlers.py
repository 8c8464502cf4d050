import base64

from starlette.requests import Request
from starlette.responses import Response

from imgproxy.proxy_service.pipeline import ImageProxyPipeline
from imgproxy.shared.logging import get_logger
from imgproxy.shared.models import ProxyRequest, ProxyResponse

logger = get_logger(__name__)

ERROR_HEADER = "X-Proxy-Error"


class ProxyRequestHandler:
    """
    Serves the pipeline over plain HTTP, rendering responses the way API
    Gateway would deliver them to the caller.
    """

    def _get_pipeline(self, request: Request) -> ImageProxyPipeline:
        """Get the pipeline from the application state."""
        pipeline = getattr(request.app.state, "pipeline", None)
        if pipeline is None:
            raise RuntimeError("Proxy pipeline is not initialized")
        return pipeline

    async def handle(self, request: Request) -> Response:
        """Public entry point used by Starlette router."""
        proxy_request = ProxyRequest(
            method=request.method,
            url=request.query_params.get("url", ""),
            deadline=getattr(request.app.state, "request_timeout", None),
        )

        proxy_response = await self._get_pipeline(request).handle(proxy_request)

        return self._build_http_response(proxy_response)

    def _build_http_response(self, proxy_response: ProxyResponse) -> Response:
        """
        Translate ProxyResponse → Starlette Response.

        Base64 bodies are decoded back to bytes, failures carry an empty body
        and the failure kind in a header.
        """
        headers = dict(proxy_response.headers)
        if proxy_response.error is not None:
            headers[ERROR_HEADER] = proxy_response.error.value

        if proxy_response.is_base64_encoded:
            body_bytes = base64.b64decode(proxy_response.body)
        else:
            body_bytes = proxy_response.body.encode()

        return Response(
            content=body_bytes,
            status_code=proxy_response.status_code,
            headers=headers,
        )


proxy_request_handler = ProxyRequestHandler().handle
