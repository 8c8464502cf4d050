"""aiohttp session lifecycle for upstream fetching."""

import aiohttp
from aiohttp.client import DEFAULT_TIMEOUT

from imgproxy.shared.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "imgproxy/0.1"


async def setup_session(timeout: float | None = None) -> aiohttp.ClientSession:
    """Open the shared client session. Without a timeout, aiohttp's defaults apply."""
    client_timeout = DEFAULT_TIMEOUT if timeout is None else aiohttp.ClientTimeout(total=timeout)
    session = aiohttp.ClientSession(
        timeout=client_timeout,
        headers={"User-Agent": USER_AGENT},
    )
    logger.info(f"Opened upstream HTTP session (timeout: {client_timeout.total})")

    return session


async def cleanup_session(session: aiohttp.ClientSession | None):
    """Close the shared client session."""
    if session and not session.closed:
        await session.close()
        logger.info("Closed upstream HTTP session")
