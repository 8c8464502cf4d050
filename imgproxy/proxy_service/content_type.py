"""Upstream content type gate."""

from collections.abc import Iterable

from imgproxy.shared.errors import UnsupportedMediaTypeError
from imgproxy.shared.logging import get_logger

logger = get_logger(__name__)


class ContentTypeGate:
    """Accepts content types starting with one of the configured prefixes (case-sensitive)."""

    def __init__(self, prefixes: Iterable[str]):
        self._prefixes = tuple(prefixes)

    def check(self, content_type: str) -> str:
        if not content_type.startswith(self._prefixes):
            logger.error(f"invalid content type: {content_type!r}")
            raise UnsupportedMediaTypeError(f"invalid content type: {content_type}")
        return content_type
