from __future__ import annotations

import logging
from typing import AsyncIterator, Iterator

import httpx

from sse_frames._config import ScannerConfig, debug_enabled
from sse_frames.scanner import AsyncFrameScanner, FrameScanner

logger = logging.getLogger("sse_frames")

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


def _log_response(response: httpx.Response) -> None:
    if not debug_enabled():
        return
    ctype = response.headers.get("content-type", "")
    logger.warning("SSE RESPONSE status=%s content-type=%s", response.status_code, ctype or "(none)")
    if EVENT_STREAM_CONTENT_TYPE not in ctype.lower():
        logger.warning("SSE RESPONSE is not %s; splitting anyway", EVENT_STREAM_CONTENT_TYPE)


def iter_frames(response: httpx.Response, *, config: ScannerConfig | None = None) -> Iterator[bytes]:
    """
    Yield the frames of an httpx streaming response.

    Usage:
        with httpx.stream("GET", url) as r:
            for frame in iter_frames(r):
                ...

    Transport failures surface as SourceReadError. The response stays owned
    by the caller; only the byte iterator is closed here.
    """
    _log_response(response)
    with FrameScanner(response.iter_bytes(), config=config) as scanner:
        yield from scanner


async def aiter_frames(
    response: httpx.Response,
    *,
    config: ScannerConfig | None = None,
) -> AsyncIterator[bytes]:
    """
    Async version of iter_frames().

    Usage:
        async with client.stream("GET", url) as r:
            async for frame in aiter_frames(r):
                ...
    """
    _log_response(response)
    async with AsyncFrameScanner(response.aiter_bytes(), config=config) as scanner:
        async for frame in scanner:
            yield frame
