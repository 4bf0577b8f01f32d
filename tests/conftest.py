import pytest

from sse_frames._config import ENV_CHUNK_SIZE, ENV_DEBUG, ENV_MAX_BUFFER_SIZE


@pytest.fixture(autouse=True)
def clean_scanner_env(monkeypatch):
    # Evitar que el entorno del desarrollador cambie los límites en los tests.
    for name in (ENV_MAX_BUFFER_SIZE, ENV_CHUNK_SIZE, ENV_DEBUG):
        monkeypatch.delenv(name, raising=False)
    yield
