import threading

import pytest

from imgproxy.proxy_service.buffer_pool import BufferPool


def test_acquired_buffer_starts_empty_after_reuse():
    pool = BufferPool()

    buffer = pool.acquire()
    buffer.write(b"stale bytes")
    pool.release(buffer)

    reused = pool.acquire()
    assert len(reused) == 0
    assert reused.getvalue() == b""
    pool.release(reused)


def test_release_twice_is_rejected():
    pool = BufferPool()
    buffer = pool.acquire()
    pool.release(buffer)

    with pytest.raises(RuntimeError, match="released twice"):
        pool.release(buffer)
    assert pool.in_use == 0
    assert pool.idle_count == 1


def test_buffer_unusable_after_release():
    pool = BufferPool()
    buffer = pool.acquire()
    pool.release(buffer)

    assert buffer.released
    with pytest.raises(RuntimeError):
        buffer.write(b"x")
    with pytest.raises(RuntimeError):
        buffer.text()


def test_release_to_foreign_pool_is_rejected():
    buffer = BufferPool().acquire()

    with pytest.raises(ValueError):
        BufferPool().release(buffer)


def test_borrow_releases_on_error():
    pool = BufferPool()

    with pytest.raises(KeyError):
        with pool.borrow() as buffer:
            buffer.write(b"partial")
            raise KeyError("boom")

    assert pool.in_use == 0
    assert pool.idle_count == 1


def test_idle_buffers_are_capped():
    pool = BufferPool(max_idle=2)
    buffers = [pool.acquire() for _ in range(4)]
    assert pool.in_use == 4

    for buffer in buffers:
        pool.release(buffer)

    assert pool.in_use == 0
    assert pool.idle_count == 2


def test_concurrent_borrowers_never_share_contents():
    pool = BufferPool(max_idle=4)
    errors = []

    def worker(marker: bytes):
        for _ in range(200):
            with pool.borrow() as buffer:
                if len(buffer):
                    errors.append("buffer not reset")
                buffer.write(marker * 50)
                if buffer.getvalue() != marker * 50:
                    errors.append("buffer shared between borrowers")

    threads = [threading.Thread(target=worker, args=(bytes([65 + index]),)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert pool.in_use == 0
