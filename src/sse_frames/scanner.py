from __future__ import annotations

import asyncio
import concurrent.futures
import dataclasses
import enum
import logging
from typing import IO, Any, AsyncIterable, AsyncIterator, Iterable, Iterator

from sse_frames._config import ScannerConfig, debug_enabled
from sse_frames._errors import BufferCapacityExceeded, ScannerClosedError, SourceReadError
from sse_frames._sse import MAX_BOUNDARY_OVERLAP, BytesLike, find_boundary, trailing_newline_run

logger = logging.getLogger("sse_frames")

# A cancelled source read ends the stream, it does not fail it.
_CANCELLED = (asyncio.CancelledError, concurrent.futures.CancelledError)


class ScannerState(str, enum.Enum):
    """
    Observable scanner states. Frame-ready is transient: it lasts only while
    ``read_frame()`` returns, after which the scanner is awaiting data again
    or drained if that was the final frame.
    """

    AWAITING_DATA = "awaiting-data"
    DRAINED = "drained"
    FAILED = "failed"


class _FrameBuffer:
    """
    Accumulation buffer plus the split rule.
    ``_scan_from`` marks where the next search may start: everything before it
    is known to hold no boundary.
    """

    __slots__ = ("_buf", "_scan_from", "_limit")

    def __init__(self, limit: int | None) -> None:
        self._buf = bytearray()
        self._scan_from = 0
        self._limit = limit

    def __len__(self) -> int:
        return len(self._buf)

    def feed(self, chunk: BytesLike) -> None:
        self._buf += chunk

    def pop_frame(self) -> bytes | None:
        pos, nlen = find_boundary(self._buf, self._scan_from)
        if pos < 0:
            self._scan_from = max(0, len(self._buf) - MAX_BOUNDARY_OVERLAP)
            pending = len(self._buf) - trailing_newline_run(self._buf)
            self._check_limit(pending)
            return None

        self._check_limit(pos)
        frame = bytes(self._buf[:pos])
        del self._buf[: pos + nlen]
        self._scan_from = 0
        return frame

    def pop_remainder(self) -> bytes | None:
        if not self._buf:
            return None
        self._check_limit(len(self._buf))
        frame = bytes(self._buf)
        self.discard()
        return frame

    def discard(self) -> None:
        self._buf.clear()
        self._scan_from = 0

    def _check_limit(self, frame_len: int) -> None:
        if self._limit is not None and frame_len > self._limit:
            raise BufferCapacityExceeded(limit=self._limit, buffered=len(self._buf))


def _resolve_config(
    config: ScannerConfig | None,
    max_buffer_size: int | None,
    chunk_size: int | None = None,
) -> ScannerConfig:
    if config is None:
        return ScannerConfig.from_env_or_value(max_buffer_size=max_buffer_size, chunk_size=chunk_size)
    changes: dict[str, Any] = {}
    if max_buffer_size is not None:
        changes["max_buffer_size"] = max_buffer_size
    if chunk_size is not None:
        changes["chunk_size"] = chunk_size
    return dataclasses.replace(config, **changes) if changes else config


def _iter_reader(reader: IO[bytes], chunk_size: int) -> Iterator[bytes]:
    read = getattr(reader, "read1", None) or reader.read
    while True:
        chunk = read(chunk_size)
        if not chunk:
            return
        yield chunk


class _ScannerBase:
    """State transitions shared by the sync and async scanners."""

    def __init__(self, source: Any, config: ScannerConfig) -> None:
        self._source = source
        self._config = config
        self._frames = _FrameBuffer(config.max_buffer_size)
        self._state = ScannerState.AWAITING_DATA
        self._debug = debug_enabled()

    @property
    def config(self) -> ScannerConfig:
        return self._config

    @property
    def state(self) -> ScannerState:
        return self._state

    @property
    def buffered(self) -> int:
        """Bytes read from the source but not yet emitted as a frame."""
        return len(self._frames)

    def _log(self, msg: str, *args: Any) -> None:
        if self._debug:
            logger.warning(msg, *args)

    def _ensure_readable(self) -> bool:
        if self._state is ScannerState.FAILED:
            raise ScannerClosedError("scanner failed earlier; start a new scanner for a new stream")
        return self._state is ScannerState.AWAITING_DATA

    def _next_buffered_frame(self) -> bytes | None:
        try:
            frame = self._frames.pop_frame()
        except BufferCapacityExceeded as e:
            self._fail(e)
            raise
        if frame is not None:
            self._log("SSE FRAME len=%d buffered=%d", len(frame), len(self._frames))
        return frame

    def _on_chunk(self, chunk: BytesLike) -> None:
        self._log("SSE CHUNK len=%d", len(chunk))
        if chunk:
            self._frames.feed(chunk)

    def _on_end(self) -> bytes | None:
        try:
            frame = self._frames.pop_remainder()
        except BufferCapacityExceeded as e:
            self._fail(e)
            raise
        self._state = ScannerState.DRAINED
        if frame is None:
            self._log("SSE END")
        else:
            self._log("SSE END final frame len=%d", len(frame))
        return frame

    def _on_cancel(self) -> None:
        # Partial data is dropped: only a true end of input flushes a remainder.
        self._log("SSE CANCELLED dropped=%d", len(self._frames))
        self._frames.discard()
        self._state = ScannerState.DRAINED

    def _on_error(self, exc: Exception) -> SourceReadError:
        err = SourceReadError("byte source read failed", cause=exc)
        self._fail(err)
        return err

    def _fail(self, exc: Exception) -> None:
        self._log("SSE FAILED %r", exc)
        self._frames.discard()
        self._state = ScannerState.FAILED

    def _mark_closed(self) -> None:
        self._frames.discard()
        if self._state is ScannerState.AWAITING_DATA:
            self._state = ScannerState.DRAINED


class FrameScanner(_ScannerBase):
    """
    Pull-based splitter of a byte stream into SSE frames.

    The source is any iterable of byte chunks, for example
    ``httpx.Response.iter_bytes()``. Chunk sizes do not affect the frames
    produced. Not safe for use by more than one reader at a time.

    Usage:
        with FrameScanner(resp.iter_bytes()) as scanner:
            for frame in scanner:
                ...
    """

    def __init__(
        self,
        source: Iterable[BytesLike],
        *,
        config: ScannerConfig | None = None,
        max_buffer_size: int | None = None,
    ) -> None:
        super().__init__(source, _resolve_config(config, max_buffer_size))
        self._chunks = iter(source)

    @classmethod
    def from_reader(
        cls,
        reader: IO[bytes],
        *,
        config: ScannerConfig | None = None,
        max_buffer_size: int | None = None,
        chunk_size: int | None = None,
    ) -> FrameScanner:
        """
        Build a scanner over a binary file-like object.

        ``read1`` is preferred over ``read`` so that a partially filled pipe or
        socket does not block until a whole chunk arrives. The reader is owned
        by the caller and is not closed by the scanner.
        """
        cfg = _resolve_config(config, max_buffer_size, chunk_size)
        return cls(_iter_reader(reader, cfg.chunk_size), config=cfg)

    def read_frame(self) -> bytes | None:
        """
        Return the next frame, or None once the stream is exhausted.

        Raises:
            SourceReadError: The source failed; the scanner is unusable after.
            BufferCapacityExceeded: A frame exceeded ``max_buffer_size``.
            ScannerClosedError: A previous read already failed.
        """
        if not self._ensure_readable():
            return None

        while True:
            frame = self._next_buffered_frame()
            if frame is not None:
                return frame

            try:
                chunk = next(self._chunks)
            except StopIteration:
                return self._on_end()
            except _CANCELLED:
                self._on_cancel()
                return None
            except Exception as e:
                raise self._on_error(e) from e

            self._on_chunk(chunk)

    def close(self) -> None:
        self._mark_closed()
        close = getattr(self._source, "close", None)
        if callable(close):
            close()

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        frame = self.read_frame()
        if frame is None:
            raise StopIteration
        return frame

    def __enter__(self) -> FrameScanner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncFrameScanner(_ScannerBase):
    """
    Async version of FrameScanner over an async iterable of byte chunks,
    for example ``httpx.Response.aiter_bytes()``.

    A ``CancelledError`` raised by the source ends the stream like a clean
    end of input would, without flushing partial data. A cancel aimed at the
    task awaiting ``aread_frame()`` still propagates.
    """

    def __init__(
        self,
        source: AsyncIterable[BytesLike],
        *,
        config: ScannerConfig | None = None,
        max_buffer_size: int | None = None,
    ) -> None:
        super().__init__(source, _resolve_config(config, max_buffer_size))
        self._chunks = source.__aiter__()

    async def aread_frame(self) -> bytes | None:
        """Async version of ``FrameScanner.read_frame()``."""
        if not self._ensure_readable():
            return None

        while True:
            frame = self._next_buffered_frame()
            if frame is not None:
                return frame

            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                return self._on_end()
            except _CANCELLED:
                self._on_cancel()
                task = asyncio.current_task()
                if task is not None and task.cancelling():
                    # The cancel targets the caller, not the source.
                    raise
                return None
            except Exception as e:
                raise self._on_error(e) from e

            self._on_chunk(chunk)

    async def aclose(self) -> None:
        self._mark_closed()
        aclose = getattr(self._source, "aclose", None)
        if callable(aclose):
            await aclose()
            return
        close = getattr(self._source, "close", None)
        if callable(close):
            close()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        frame = await self.aread_frame()
        if frame is None:
            raise StopAsyncIteration
        return frame

    async def __aenter__(self) -> AsyncFrameScanner:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def split_frames(data: BytesLike) -> list[bytes]:
    """
    Split a complete in-memory stream into frames.

    Uses a default ScannerConfig: the SSE_FRAMES_* environment variables are
    ignored and frame size is unbounded.
    """
    return list(FrameScanner([bytes(data)], config=ScannerConfig()))
