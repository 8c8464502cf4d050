"""Decoding and parsing of the target URL parameter."""

import base64
import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import SplitResult, urlsplit

from imgproxy.shared.errors import InvalidInputError
from imgproxy.shared.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_SCHEMES = frozenset({"http", "https"})

URL_SAFE_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


@dataclass(frozen=True)
class TargetURL:
    """A parsed, host-bearing target URL."""

    raw: str
    parts: SplitResult

    @property
    def host(self) -> str:
        """Host with optional port, without user info."""
        return self.parts.netloc.rpartition("@")[2]


class URLResolver:
    """Turns the inbound url parameter into a TargetURL."""

    def __init__(self, input_encoding: Literal["base64", "raw"] = "base64"):
        self._input_encoding = input_encoding

    def resolve(self, param: str) -> TargetURL:
        text = decode_param(param) if self._input_encoding == "base64" else param
        return parse_target(text)


def decode_param(param: str) -> str:
    """Decode URL-safe base64 without padding into URL text."""
    if not URL_SAFE_ALPHABET.fullmatch(param) or len(param) % 4 == 1:
        logger.error(f"failed decoding base64 string: {param!r}")
        raise InvalidInputError("failed decoding base64 string")

    padded = param + "=" * (-len(param) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True).decode("utf-8")
    except ValueError as exc:
        logger.error(f"failed decoding base64 string: {exc}")
        raise InvalidInputError("failed decoding base64 string") from exc


def parse_target(text: str) -> TargetURL:
    """Parse URL text, requiring an http(s) scheme, a host and a valid port."""
    try:
        parts = urlsplit(text.strip())
        parts.port
    except ValueError as exc:
        logger.error(f"failed to parse url {text!r}: {exc}")
        raise InvalidInputError("failed to parse url") from exc

    if parts.scheme.lower() not in SUPPORTED_SCHEMES or not parts.hostname:
        logger.error(f"failed to parse url {text!r}: missing scheme or host")
        raise InvalidInputError("failed to parse url")

    return TargetURL(raw=text.strip(), parts=parts)
