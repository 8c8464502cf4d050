"""Outbound response assembly."""

from collections.abc import Mapping

from imgproxy.proxy_service.buffer_pool import PooledBuffer
from imgproxy.shared.models import ProxyResponse


def assemble_success(
    content_type: str,
    buffer: PooledBuffer,
    static_headers: Mapping[str, str] | None = None,
) -> ProxyResponse:
    """
    Build the 200 response from a transcoded buffer.

    The body is copied out as an owned string, so the buffer may be released
    as soon as this returns.
    """
    headers = dict(static_headers or {})
    headers["Content-Type"] = content_type

    return ProxyResponse(
        status_code=200,
        headers=headers,
        is_base64_encoded=True,
        body=buffer.text(),
    )
