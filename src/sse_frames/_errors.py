from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class SSEFramesError(RuntimeError):
    """Base error of the library."""


class ScannerClosedError(SSEFramesError):
    """The scanner already failed and can no longer be read."""


@dataclass(slots=True)
class SourceReadError(SSEFramesError):
    """
    The underlying byte source failed while the scanner was reading from it.

    The original exception is kept in ``cause`` and is also chained as
    ``__cause__`` when the error is raised.
    """
    message: str
    cause: BaseException | None = None

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause!r}"


@dataclass(slots=True)
class BufferCapacityExceeded(SSEFramesError):
    """
    A frame grew past the configured ``max_buffer_size`` without a boundary.

    ``buffered`` is the number of unterminated bytes held when the limit was
    detected.
    """
    limit: int
    buffered: int

    def __str__(self) -> str:
        return (
            f"BufferCapacityExceeded(limit={self.limit}, buffered={self.buffered}): "
            "no frame boundary within the buffer limit"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dict for structured logging."""
        return {
            "error": "buffer_capacity_exceeded",
            "limit": self.limit,
            "buffered": self.buffered,
        }
