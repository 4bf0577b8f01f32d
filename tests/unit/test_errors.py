"""
Tests unitarios para la jerarquía de errores.
"""

import pytest

from sse_frames import BufferCapacityExceeded, ScannerClosedError, SourceReadError, SSEFramesError


@pytest.mark.parametrize("cls", [BufferCapacityExceeded, ScannerClosedError, SourceReadError])
def test_errors_share_base(cls):
    assert issubclass(cls, SSEFramesError)
    assert issubclass(cls, RuntimeError)


def test_source_read_error_without_cause():
    err = SourceReadError("byte source read failed")

    assert err.cause is None
    assert str(err) == "byte source read failed"


def test_source_read_error_with_cause():
    cause = TimeoutError("read timed out")
    err = SourceReadError("byte source read failed", cause=cause)

    assert err.cause is cause
    assert str(err) == "byte source read failed: TimeoutError('read timed out')"


def test_capacity_error_fields():
    err = BufferCapacityExceeded(limit=1024, buffered=2048)

    assert err.limit == 1024
    assert err.buffered == 2048
    assert str(err).startswith("BufferCapacityExceeded(limit=1024, buffered=2048)")
