"""StreamConfig — tunables shared by FileStream instances."""

from __future__ import annotations

import codecs
from dataclasses import dataclass

DEFAULT_TEMP_PREFIX = "tmp."
DEFAULT_MAX_LINE_LENGTH = 8012
DEFAULT_CHUNK_SIZE = 64 * 1024  # 64KB


@dataclass(frozen=True)
class StreamConfig:
    """Configuration for FileStream instances."""

    temp_dir: str | None = None
    """Directory for anonymous temp files.  ``None`` uses the system temp dir."""

    temp_prefix: str = DEFAULT_TEMP_PREFIX
    """Name prefix for anonymous temp files."""

    encoding: str = "utf-8"
    """Encoding for ``str`` writes and delimited-record decoding."""

    max_line_length: int | None = DEFAULT_MAX_LINE_LENGTH
    """Default per-line byte limit for ``read_delimited``.  ``None`` means unlimited."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """Read size used when hashing content and when scanning for line ends."""

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding}") from None
        if self.max_line_length is not None and self.max_line_length < 1:
            raise ValueError("max_line_length must be positive or None")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be positive")
