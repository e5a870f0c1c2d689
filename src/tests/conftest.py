# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from streamfile.config import Config
from streamfile.utils.logging import setup_logger

# Setup logger for tests to ensure custom log levels are available
setup_logger("DEBUG")

FILE_SIZE = 1000


@pytest.fixture()
def file_bytes() -> bytes:
    """Binary content with no recognisable signature, so MIME sniffing falls back."""
    return bytes((i * 7 + 3) % 251 for i in range(FILE_SIZE))


@pytest.fixture()
def make_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    def _make_file(name: str, content: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _make_file


@pytest.fixture()
def media_file(make_file, file_bytes: bytes) -> Path:
    return make_file("clip.bin", file_bytes)


@pytest.fixture()
def config() -> Config:
    """Small buffers so a 1000 byte file spans several chunks."""
    return Config(buffer_size=64)
