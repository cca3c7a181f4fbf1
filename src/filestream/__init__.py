"""FileStream: filesystem handles behind an object interface.

Open, read, write, seek, lock, rename and delete a single file, with typed
failures and advisory locking around compound operations.
"""

__version__ = "0.1.0"

from filestream.config import StreamConfig
from filestream.exceptions import (
    AttributeUnavailableError,
    CopyFailedError,
    FileStreamError,
    ImmutableAttributeError,
    InvalidModeError,
    LockFailedError,
    NotAFileError,
    OpenFailedError,
    ReadFailedError,
    RenameFailedError,
    SeekFailedError,
    TruncateFailedError,
    UnsupportedOperationError,
    WriteFailedError,
)
from filestream.stream import FileStream
from filestream.types import FileStat, FileType, LockFlag, SeekOrigin

__all__ = [
    "AttributeUnavailableError",
    "CopyFailedError",
    "FileStat",
    "FileStream",
    "FileStreamError",
    "FileType",
    "ImmutableAttributeError",
    "InvalidModeError",
    "LockFailedError",
    "LockFlag",
    "NotAFileError",
    "OpenFailedError",
    "ReadFailedError",
    "RenameFailedError",
    "SeekFailedError",
    "StreamConfig",
    "TruncateFailedError",
    "UnsupportedOperationError",
    "WriteFailedError",
    "__version__",
]
