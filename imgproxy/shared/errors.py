"""Error taxonomy for the image proxy pipeline."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of pipeline failures."""

    INVALID_INPUT = "InvalidInput"
    FORBIDDEN = "Forbidden"
    UPSTREAM_UNREACHABLE = "UpstreamUnreachable"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    TRANSFER_FAILED = "TransferFailed"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UPSTREAM_UNREACHABLE: 502,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: 415,
    ErrorKind.TRANSFER_FAILED: 502,
}


class ProxyError(Exception):
    """Base class for every classified pipeline failure."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        """HTTP status used when the failure is rendered by the web server."""
        return HTTP_STATUS_BY_KIND[self.kind]


class InvalidInputError(ProxyError):
    """Malformed encoding or unparsable target URL."""

    kind = ErrorKind.INVALID_INPUT


class ForbiddenError(ProxyError):
    """Target host is not whitelisted."""

    kind = ErrorKind.FORBIDDEN


class UpstreamUnreachableError(ProxyError):
    """Outbound request could not be completed (network error, canceled, deadline)."""

    kind = ErrorKind.UPSTREAM_UNREACHABLE


class UnsupportedMediaTypeError(ProxyError):
    """Upstream answered with a content type outside the accepted prefixes."""

    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE


class TransferFailedError(ProxyError):
    """Body read or base64 finalization failed mid-stream."""

    kind = ErrorKind.TRANSFER_FAILED
