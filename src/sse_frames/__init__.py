from __future__ import annotations

from sse_frames._config import ScannerConfig
from sse_frames._errors import BufferCapacityExceeded, ScannerClosedError, SourceReadError, SSEFramesError
from sse_frames._httpx import aiter_frames, iter_frames
from sse_frames._sse import Event, find_boundary
from sse_frames.scanner import AsyncFrameScanner, FrameScanner, ScannerState, split_frames

__all__ = [
    "AsyncFrameScanner",
    "BufferCapacityExceeded",
    "Event",
    "FrameScanner",
    "ScannerClosedError",
    "ScannerConfig",
    "ScannerState",
    "SourceReadError",
    "SSEFramesError",
    "aiter_frames",
    "find_boundary",
    "iter_frames",
    "split_frames",
]

__version__ = "0.1.0"
