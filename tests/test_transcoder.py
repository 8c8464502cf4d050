import base64

import pytest

from imgproxy.proxy_service.buffer_pool import BufferPool
from imgproxy.proxy_service.transcoder import Base64StreamEncoder, transcode
from imgproxy.shared.errors import TransferFailedError


async def chunked(data: bytes, size: int):
    for start in range(0, len(data), size):
        yield data[start : start + size]


@pytest.mark.parametrize("length", [0, 1, 2, 3, 4, 5, 1000, 1001, 1002])
@pytest.mark.parametrize("chunk_size", [1, 2, 4, 64])
async def test_streamed_encoding_matches_one_shot(length, chunk_size):
    data = bytes(index % 251 for index in range(length))
    pool = BufferPool()

    with pool.borrow() as buffer:
        total = await transcode(chunked(data, chunk_size), buffer)
        encoded = buffer.text()

    assert total == length
    assert encoded == base64.b64encode(data).decode()


async def test_transcode_clears_residual_contents():
    pool = BufferPool()

    with pool.borrow() as buffer:
        buffer.write(b"leftover")
        await transcode(chunked(b"hi", 1), buffer)
        assert buffer.text() == "aGk="


async def test_read_failure_is_classified():
    async def broken():
        yield b"abc"
        raise OSError("socket closed")

    with BufferPool().borrow() as buffer:
        with pytest.raises(TransferFailedError, match="error reading from response body"):
            await transcode(broken(), buffer)


async def test_body_generator_is_closed_when_consumed():
    closed = []

    async def body():
        try:
            yield b"data"
        finally:
            closed.append(True)

    with BufferPool().borrow() as buffer:
        await transcode(body(), buffer)

    assert closed == [True]


def test_encoder_close_is_idempotent_and_final():
    pool = BufferPool()

    with pool.borrow() as buffer:
        encoder = Base64StreamEncoder(buffer)
        encoder.write(b"a")
        encoder.close()
        encoder.close()

        assert buffer.text() == "YQ=="
        with pytest.raises(ValueError):
            encoder.write(b"b")
