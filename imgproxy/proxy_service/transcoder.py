"""Streaming base64 transcoding of the upstream body into a pooled buffer."""

import base64
from collections.abc import AsyncGenerator
from contextlib import aclosing

from imgproxy.proxy_service.buffer_pool import PooledBuffer
from imgproxy.shared.errors import ProxyError, TransferFailedError
from imgproxy.shared.logging import get_logger

logger = get_logger(__name__)


class Base64StreamEncoder:
    """
    Incremental base64 encoder writing into a buffer.

    Whole 3-byte groups are encoded as chunks arrive; up to two trailing bytes
    are carried into the next write. close() flushes the tail with padding.
    """

    def __init__(self, target: PooledBuffer):
        self._target = target
        self._pending = b""
        self._closed = False

    def write(self, chunk: bytes) -> None:
        if self._closed:
            raise ValueError("write to closed encoder")
        if not chunk:
            return

        data = self._pending + chunk if self._pending else chunk
        cut = len(data) - len(data) % 3
        if cut:
            self._target.write(base64.b64encode(data[:cut]))
        self._pending = bytes(data[cut:])

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._pending:
            self._target.write(base64.b64encode(self._pending))
            self._pending = b""


async def transcode(body: AsyncGenerator[bytes, None], buffer: PooledBuffer) -> int:
    """
    Copy the whole body through a base64 encoder into the buffer.

    Args:
        body: Upstream chunk iterator
        buffer: Checked-out buffer, reset before writing

    Returns:
        Number of raw bytes read from the body

    Raises:
        TransferFailedError: If reading or finalizing fails
    """
    buffer.reset()
    encoder = Base64StreamEncoder(buffer)
    total = 0

    try:
        async with aclosing(body) as chunks:
            async for chunk in chunks:
                encoder.write(chunk)
                total += len(chunk)
    except ProxyError:
        raise
    except Exception as exc:
        logger.error(f"error reading from response body: {exc!r}")
        raise TransferFailedError("error reading from response body") from exc

    try:
        encoder.close()
    except Exception as exc:
        logger.error(f"error closing base64 encoder: {exc!r}")
        raise TransferFailedError("error closing base64 encoder") from exc

    logger.debug(f"Transcoded {total} bytes into {len(buffer)} base64 characters")
    return total
