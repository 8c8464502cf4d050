"""Abstract base classes for upstream fetching."""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass


@dataclass
class UpstreamResponse:
    """An open upstream response. The body is single-read and owned by whoever holds the context."""

    status: int
    content_type: str
    body: AsyncGenerator[bytes, None]


class UpstreamFetcher(ABC):
    """Abstract interface for the outbound HTTP call."""

    @abstractmethod
    def fetch(self, method: str, url: str) -> AbstractAsyncContextManager[UpstreamResponse]:
        """
        Issue exactly one request to the upstream.

        Args:
            method: GET or HEAD
            url: Validated target URL

        Returns:
            Async context manager yielding the open response; exiting it closes
            the body stream whether or not it was consumed

        Raises:
            UpstreamUnreachableError: If the request could not be completed
            TransferFailedError: (while iterating the body) if reading fails
        """
        pass
