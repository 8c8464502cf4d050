"""Host whitelist gate."""

from collections.abc import Iterable

from imgproxy.shared.errors import ForbiddenError
from imgproxy.shared.logging import get_logger

logger = get_logger(__name__)


class HostWhitelist:
    """Case-insensitive exact-match host allow list. Empty allows nothing."""

    def __init__(self, hosts: Iterable[str]):
        self._hosts = frozenset(host.lower() for host in hosts if host)

    def is_allowed(self, host: str) -> bool:
        return bool(host) and host.lower() in self._hosts

    def authorize(self, host: str) -> None:
        if not self.is_allowed(host):
            logger.error(f"host is not whitelisted: {host}")
            raise ForbiddenError(f"host is not whitelisted: {host}")
