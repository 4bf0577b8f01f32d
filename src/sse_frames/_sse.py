"""
Boundary detection for Server-Sent Events (SSE) byte streams.
A frame ends at the first blank line, whatever newline convention produced it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

CRCR = b"\r\r"
LFLF = b"\n\n"
CRLFLF = b"\r\n\n"
LFCRLF = b"\n\r\n"
CRLFCRLF = b"\r\n\r\n"

# Longest boundary minus one: how far back a boundary may straddle two reads.
MAX_BOUNDARY_OVERLAP = len(CRLFCRLF) - 1

_NEWLINE_BYTES = frozenset(b"\r\n")

# Longest pattern first: at the leftmost offset the 4-byte CRLFCRLF wins over
# shorter patterns, as a plain min-of-finds would report it. The search stops
# at the first match, so each frame costs only its own length.
_BOUNDARY_RE = re.compile(
    b"|".join(re.escape(p) for p in (CRLFCRLF, CRLFLF, LFCRLF, CRCR, LFLF))
)


@dataclass(frozen=True, slots=True)
class Event:
    """
    Field-level decomposition of one frame.
    Produced by downstream field parsers, never by the scanner itself.
    """

    id: bytes = b""
    data: bytes = b""
    event: bytes = b""
    retry: bytes = b""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def find_boundary(data: BytesLike, start: int = 0) -> tuple[int, int]:
    """
    Locate the earliest double newline in a buffer.

    Args:
        data: Buffered bytes, possibly empty.
        start: Offset where the search begins.

    Returns:
        A ``(position, length)`` tuple. ``position`` is the smallest offset
        at which any boundary pattern starts, or -1 when there is none.
        ``length`` is the byte size of the pattern found there.
    """
    if isinstance(data, memoryview):
        data = data.tobytes()

    match = _BOUNDARY_RE.search(data, start)
    if match is None:
        return -1, 2
    return match.start(), match.end() - match.start()


def trailing_newline_run(data: BytesLike) -> int:
    """
    Count the CR/LF bytes at the end of ``data``, capped at the longest
    partial boundary. Those bytes may still open a boundary on the next read.
    """
    run = 0
    end = len(data)
    while run < MAX_BOUNDARY_OVERLAP and run < end and data[end - 1 - run] in _NEWLINE_BYTES:
        run += 1
    return run
