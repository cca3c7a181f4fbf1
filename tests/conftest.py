"""Shared fixtures for FileStream tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from filestream import FileStream

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture
def sample(tmp_path: Path) -> Path:
    """A three-line file whose last line has no terminator."""
    path = tmp_path / "sample.txt"
    path.write_bytes(b"a\nb\nc")
    return path


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing *content* to a file under tmp_path."""

    def _make(name: str = "data.txt", content: bytes = b"") -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def stream(sample: Path) -> Iterator[FileStream]:
    """Read/write stream on the sample file, closed after each test."""
    with FileStream(sample, "r+") as s:
        yield s
