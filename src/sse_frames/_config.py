"""
This module manages scanner configuration.
Values come from explicit arguments first, then from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_MAX_BUFFER_SIZE = "SSE_FRAMES_MAX_BUFFER_SIZE"
ENV_CHUNK_SIZE = "SSE_FRAMES_CHUNK_SIZE"
ENV_DEBUG = "SSE_FRAMES_DEBUG"

DEFAULT_CHUNK_SIZE = 4096


def debug_enabled() -> bool:
    return os.getenv(ENV_DEBUG, "").lower() in {"1", "true", "yes", "on"}


def _positive_int(name: str, value: int | str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


@dataclass(frozen=True, slots=True)
class ScannerConfig:
    """
    Configuration container for frame scanners.

    ``max_buffer_size`` bounds the size of a single frame; ``None`` means
    unbounded. ``chunk_size`` is the read size used when the source is a
    file-like object.
    """

    max_buffer_size: int | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.max_buffer_size is not None:
            _positive_int("max_buffer_size", self.max_buffer_size)
        _positive_int("chunk_size", self.chunk_size)

    @staticmethod
    def from_env_or_value(
        max_buffer_size: int | None = None,
        chunk_size: int | None = None,
    ) -> ScannerConfig:
        """
        Create a ScannerConfig from provided values or environment variables.

        Args:
            max_buffer_size: Optional frame size limit in bytes.
            chunk_size: Optional read size in bytes.

        Returns:
            An initialized ScannerConfig.

        Raises:
            ValueError: If a value is not a positive integer.
        """
        if max_buffer_size is None:
            env_max = os.getenv(ENV_MAX_BUFFER_SIZE)
            if env_max:
                max_buffer_size = _positive_int(ENV_MAX_BUFFER_SIZE, env_max)

        if chunk_size is None:
            env_chunk = os.getenv(ENV_CHUNK_SIZE)
            chunk_size = _positive_int(ENV_CHUNK_SIZE, env_chunk) if env_chunk else DEFAULT_CHUNK_SIZE

        return ScannerConfig(max_buffer_size=max_buffer_size, chunk_size=chunk_size)
