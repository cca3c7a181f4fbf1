"""Custom exception hierarchy for FileStream."""


class FileStreamError(Exception):
    """Base exception for all FileStream errors."""


class NotAFileError(FileStreamError):
    """Raised when the target path exists but is not a regular file."""


class OpenFailedError(FileStreamError):
    """Raised when a descriptor could not be obtained for a path."""


class AttributeUnavailableError(FileStreamError):
    """Raised when a metadata query fails (e.g. the file vanished)."""


class ImmutableAttributeError(FileStreamError, AttributeError):
    """Raised on any attempt to set or delete a public attribute."""


class ReadFailedError(FileStreamError):
    """Raised when reading from the descriptor fails."""


class WriteFailedError(FileStreamError):
    """Raised when writing to the descriptor fails."""


class SeekFailedError(FileStreamError):
    """Raised when the requested offset is not a valid target."""


class TruncateFailedError(FileStreamError):
    """Raised when the file could not be resized."""


class LockFailedError(FileStreamError):
    """Raised when flock fails for a reason other than contention."""


class CopyFailedError(FileStreamError):
    """Raised when duplicating the file content fails."""


class RenameFailedError(FileStreamError):
    """Raised when the source persists or the destination is absent after rename."""


class InvalidModeError(FileStreamError, ValueError):
    """Raised when a permission string is not exactly four octal digits."""


class UnsupportedOperationError(FileStreamError, NotImplementedError):
    """Raised for iteration operations the stream cannot support (key, prev)."""
