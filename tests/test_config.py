"""Tests for StreamConfig defaults and validation."""

from __future__ import annotations

import dataclasses

import pytest

from filestream.config import DEFAULT_MAX_LINE_LENGTH, DEFAULT_TEMP_PREFIX, StreamConfig


class TestStreamConfig:
    def test_defaults(self):
        config = StreamConfig()
        assert config.temp_dir is None
        assert config.temp_prefix == DEFAULT_TEMP_PREFIX == "tmp."
        assert config.encoding == "utf-8"
        assert config.max_line_length == DEFAULT_MAX_LINE_LENGTH == 8012

    def test_unlimited_line_length(self):
        assert StreamConfig(max_line_length=None).max_line_length is None

    def test_unknown_encoding(self):
        with pytest.raises(ValueError, match="Unknown encoding"):
            StreamConfig(encoding="not-a-codec")

    @pytest.mark.parametrize(
        "kwargs",
        [
            pytest.param({"max_line_length": 0}, id="line-length-zero"),
            pytest.param({"chunk_size": 0}, id="chunk-size-zero"),
        ],
    )
    def test_rejects_non_positive(self, kwargs: dict[str, int]):
        with pytest.raises(ValueError):
            StreamConfig(**kwargs)

    def test_frozen(self):
        config = StreamConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.encoding = "latin-1"  # type: ignore[misc]
