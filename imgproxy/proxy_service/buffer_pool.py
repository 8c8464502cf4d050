"""Reusable byte buffers shared across invocations."""

import threading
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager




class PooledBuffer:
    """
    A byte accumulator checked out from a BufferPool.

    The holder owns it exclusively between acquire and release.
    """

    __slots__ = ("_data", "_pool", "_released")

    def __init__(self, pool: "BufferPool", data: bytearray):
        self._pool = pool
        self._data = data
        self._released = False

    def write(self, chunk: bytes) -> None:
        self._ensure_held()
        self._data += chunk

    def reset(self) -> None:
        self._ensure_held()
        del self._data[:]

    def getvalue(self) -> bytes:
        self._ensure_held()
        return bytes(self._data)

    def text(self) -> str:
        """Contents as an owned ASCII string, safe to keep after release."""
        self._ensure_held()
        return self._data.decode("ascii")

    @property
    def released(self) -> bool:
        return self._released

    def __len__(self) -> int:
        return len(self._data)

    def _ensure_held(self) -> None:
        if self._released:
            raise RuntimeError("buffer used after release")


class BufferPool:
    """Thread-safe free list of byte buffers."""

    def __init__(self, max_idle: int = 16):
        """
        Initialize the pool.

        Args:
            max_idle: Number of idle buffers kept for reuse; extra returns are dropped
        """
        self._free: deque[bytearray] = deque()
        self._lock = threading.Lock()
        self._max_idle = max_idle
        self._in_use = 0

    def acquire(self) -> PooledBuffer:
        """Check out a buffer, reset to empty."""
        with self._lock:
            data = self._free.pop() if self._free else bytearray()
            self._in_use += 1

        buffer = PooledBuffer(self, data)
        buffer.reset()
        return buffer

    def release(self, buffer: PooledBuffer) -> None:
        """Return a buffer to the pool. Releasing twice is an error."""
        if buffer._pool is not self:
            raise ValueError("buffer does not belong to this pool")
        if buffer._released:
            raise RuntimeError("buffer released twice")

        data = buffer._data
        buffer._released = True
        del data[:]

        with self._lock:
            self._in_use -= 1
            if len(self._free) < self._max_idle:
                self._free.append(data)

    @contextmanager
    def borrow(self) -> Iterator[PooledBuffer]:
        """Scoped checkout; the buffer goes back on every exit path."""
        buffer = self.acquire()
        try:
            yield buffer
        finally:
            self.release(buffer)

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._free)

    @property
    def in_use(self) -> int:
        with self._lock:
            return self._in_use
