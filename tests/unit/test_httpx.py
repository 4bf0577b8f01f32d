import logging

import httpx
import pytest

from sse_frames import BufferCapacityExceeded, ScannerConfig, SourceReadError, aiter_frames, iter_frames

EVENT_STREAM = {"content-type": "text/event-stream"}


def test_iter_frames_from_loaded_response():
    resp = httpx.Response(200, headers=EVENT_STREAM, content=b"data: 1\n\ndata: 2\n\n")

    assert list(iter_frames(resp)) == [b"data: 1", b"data: 2"]


def test_iter_frames_from_chunked_response():
    resp = httpx.Response(200, headers=EVENT_STREAM, content=iter([b"data: 1\r", b"\n\r\ndata", b": 2"]))

    assert list(iter_frames(resp)) == [b"data: 1", b"data: 2"]


def test_iter_frames_through_mock_transport():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/events"
        return httpx.Response(200, headers=EVENT_STREAM, content=b"id: 1\ndata: a\n\nid: 2\ndata: b\n\n")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with client.stream("GET", "https://example.com/events") as r:
            frames = list(iter_frames(r))

    assert frames == [b"id: 1\ndata: a", b"id: 2\ndata: b"]


def test_iter_frames_wraps_transport_errors():
    def body():
        yield b"data: 1\n\n"
        raise httpx.ReadError("connection reset")

    resp = httpx.Response(200, headers=EVENT_STREAM, content=body())
    frames = iter_frames(resp)

    assert next(frames) == b"data: 1"
    with pytest.raises(SourceReadError) as exc:
        next(frames)

    assert isinstance(exc.value.cause, httpx.ReadError)


def test_iter_frames_respects_config():
    resp = httpx.Response(200, headers=EVENT_STREAM, content=b"0123456789")

    with pytest.raises(BufferCapacityExceeded) as exc:
        list(iter_frames(resp, config=ScannerConfig(max_buffer_size=4)))

    assert exc.value.limit == 4


def test_iter_frames_logs_unexpected_content_type(monkeypatch, caplog):
    monkeypatch.setenv("SSE_FRAMES_DEBUG", "yes")
    resp = httpx.Response(200, headers={"content-type": "application/json"}, content=b"{}")

    with caplog.at_level(logging.WARNING, logger="sse_frames"):
        frames = list(iter_frames(resp))

    assert frames == [b"{}"]
    assert "is not text/event-stream" in caplog.text


@pytest.mark.asyncio
async def test_aiter_frames_from_async_stream():
    async def body():
        yield b"data: 1\n"
        yield b"\ndata: 2\n"
        yield b"\n"

    resp = httpx.Response(200, headers=EVENT_STREAM, content=body())

    frames = [frame async for frame in aiter_frames(resp)]

    assert frames == [b"data: 1", b"data: 2"]


@pytest.mark.asyncio
async def test_aiter_frames_through_async_mock_transport():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers=EVENT_STREAM, content=b"data: x\r\n\r\ndata: y")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        async with client.stream("GET", "https://example.com/events") as r:
            frames = [frame async for frame in aiter_frames(r)]

    assert frames == [b"data: x", b"data: y"]
