"""FileStream — one open file wrapped behind an object interface."""

from __future__ import annotations

import codecs
import contextlib
import csv
import fcntl
import logging
import os
import shutil
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .config import StreamConfig
from .exceptions import (
    AttributeUnavailableError,
    CopyFailedError,
    ImmutableAttributeError,
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
from .types import FileStat, FileType, LockFlag, SeekOrigin, format_perms
from .utils import md5_file, parse_octal_mode, split_name

if TYPE_CHECKING:
    import io
    from collections.abc import Iterator
    from types import TracebackType

logger = logging.getLogger(__name__)

DEFAULT_MODE = "r"
TEMP_FILE_MODE = "w"


class FileStream:
    """A single open file: descriptor, path and mode.

    The descriptor is opened unbuffered and owned exclusively by this object.
    It is released exactly once, on ``close()``, on context-manager exit, or
    when the object is garbage collected.  Teardown always drops any advisory
    lock before closing.

    Metadata is exposed as read-only properties, each doing one live OS
    lookup.  Assigning or deleting any public attribute raises
    ``ImmutableAttributeError``; state changes only through the explicit
    operations (``write``, ``seek``, ``truncate``, ``lock``, ``rename``, ...).

    Line reads fetch ``StreamConfig.chunk_size`` bytes at a time and seek
    back over whatever follows the terminator, so the offset always sits
    right after the line returned.

    Locks are ``flock`` advisory locks on this stream's open file
    description.  Two ``FileStream`` objects on the same path conflict with
    each other; re-locking through the same stream never blocks.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        mode: str = DEFAULT_MODE,
        *,
        config: StreamConfig | None = None,
    ) -> None:
        self._file: io.FileIO | None = None
        self._config = config or StreamConfig()
        self._held_lock: LockFlag | None = None
        self._eof = False
        self._current: bytes | None = None

        if path is None:
            self._path = self._create_temp_file()
            mode = TEMP_FILE_MODE
        else:
            self._path = os.fspath(path)
            if os.path.exists(self._path) and not os.path.isfile(self._path):
                raise NotAFileError(f"Path is not a file: {self._path}")

        self._mode = mode
        self._file = self._open(self._path, mode)
        logger.debug("Opened %s (mode=%s)", self._path, mode)

    def _create_temp_file(self) -> str:
        try:
            fd, path = tempfile.mkstemp(
                prefix=self._config.temp_prefix, dir=self._config.temp_dir
            )
        except OSError as e:
            raise OpenFailedError(f"Cannot create temp file: {e}") from e
        os.close(fd)
        return path

    @staticmethod
    def _open(path: str, mode: str) -> io.FileIO:
        raw_mode = mode if "b" in mode else f"{mode}b"
        try:
            return open(path, raw_mode, buffering=0)  # noqa: SIM115
        except (OSError, ValueError) as e:
            raise OpenFailedError(f"Cannot open {path} (mode={mode!r}): {e}") from e

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Unlock (best-effort) and release the descriptor.  Idempotent."""
        file = self._file
        if file is None or file.closed:
            return
        try:
            fcntl.flock(file, fcntl.LOCK_UN)
        except OSError:
            logger.debug("Unlock during close failed for %s", self._path, exc_info=True)
        self._held_lock = None
        file.close()
        logger.debug("Closed %s", self._path)

    def __enter__(self) -> FileStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        with contextlib.suppress(OSError):
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"FileStream(path={self._path!r}, mode={self._mode!r}, {state})"

    # =========================================================================
    # Attribute Protection
    # =========================================================================

    def __setattr__(self, name: str, value: object) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        raise ImmutableAttributeError(f"{type(self).__name__}.{name} cannot be set")

    def __delattr__(self, name: str) -> None:
        raise ImmutableAttributeError(f"{type(self).__name__}.{name} cannot be unset")

    # =========================================================================
    # Metadata
    # =========================================================================

    def _stat(self, *, follow_symlinks: bool = True) -> os.stat_result:
        try:
            return os.stat(self._path, follow_symlinks=follow_symlinks)
        except OSError as e:
            raise AttributeUnavailableError(f"Cannot stat {self._path}: {e}") from e

    @property
    def path(self) -> str:
        return self._path

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def closed(self) -> bool:
        return self._file is None or self._file.closed

    @property
    def held_lock(self) -> LockFlag | None:
        """The lock this stream last acquired and has not released, if any."""
        return self._held_lock

    @property
    def exists(self) -> bool:
        return os.path.exists(self._path)

    @property
    def size(self) -> int:
        return self._stat().st_size

    @property
    def empty(self) -> bool:
        return self.size == 0

    @property
    def eof(self) -> bool:
        """True once a read has run into the end of the stream.

        Cleared by ``seek``.  Reading exactly the remaining bytes does not set
        it; the next read does.
        """
        return self._eof

    @property
    def offset(self) -> int:
        try:
            return self._file.tell()
        except (OSError, ValueError) as e:
            raise AttributeUnavailableError(f"Cannot get offset of {self._path}: {e}") from e

    @property
    def at_end(self) -> bool:
        """True when the offset is at or past the current file size."""
        return self.offset >= self.size

    @property
    def atime(self) -> datetime:
        return datetime.fromtimestamp(self._stat().st_atime, tz=UTC)

    @property
    def ctime(self) -> datetime:
        return datetime.fromtimestamp(self._stat().st_ctime, tz=UTC)

    @property
    def mtime(self) -> datetime:
        return datetime.fromtimestamp(self._stat().st_mtime, tz=UTC)

    @property
    def owner(self) -> int:
        return self._stat().st_uid

    @property
    def group(self) -> int:
        return self._stat().st_gid

    @property
    def perms(self) -> str:
        """Permission bits as a 4-digit octal string, e.g. ``"0644"``."""
        return format_perms(self._stat().st_mode)

    @property
    def inode(self) -> int:
        return self._stat().st_ino

    @property
    def type(self) -> FileType:
        """File type of ``path`` itself; symlinks report ``FileType.LINK``."""
        return FileType.from_mode(self._stat(follow_symlinks=False).st_mode)

    @property
    def basename(self) -> str:
        return os.path.basename(self._path)

    @property
    def dirname(self) -> str:
        return os.path.dirname(self._path)

    @property
    def filename(self) -> str:
        """Base name without its extension."""
        return split_name(self._path)[0]

    @property
    def extension(self) -> str:
        """Extension without the leading dot; empty when there is none."""
        return split_name(self._path)[1]

    @property
    def realpath(self) -> str:
        try:
            return str(Path(self._path).resolve(strict=True))
        except (OSError, RuntimeError) as e:
            raise AttributeUnavailableError(f"Cannot resolve {self._path}: {e}") from e

    @property
    def executable(self) -> bool:
        return os.access(self._path, os.X_OK)

    @property
    def writable(self) -> bool:
        return os.access(self._path, os.W_OK)

    @property
    def readable(self) -> bool:
        return os.access(self._path, os.R_OK)

    def md5(self) -> str:
        """Hex MD5 digest of the file content at ``path``."""
        try:
            return md5_file(self._path, self._config.chunk_size)
        except OSError as e:
            raise AttributeUnavailableError(f"Cannot hash {self._path}: {e}") from e

    def stat(self) -> FileStat:
        """Snapshot of every stat-backed attribute from a single ``stat`` call."""
        return FileStat.from_stat_result(self._path, self._stat())

    def fileno(self) -> int:
        try:
            return self._file.fileno()
        except (OSError, ValueError) as e:
            raise AttributeUnavailableError(f"No descriptor for {self._path}: {e}") from e

    # =========================================================================
    # Read / Write
    # =========================================================================

    def _readline(self, limit: int = -1) -> bytes:
        chunks: list[bytes] = []
        remaining = limit
        try:
            while remaining != 0:
                want = self._config.chunk_size
                if remaining > 0:
                    want = min(want, remaining)
                chunk = self._file.read(want)
                if not chunk:
                    break
                end = chunk.find(b"\n")
                if end >= 0:
                    # Give back the bytes read past the terminator
                    overshoot = len(chunk) - end - 1
                    if overshoot:
                        self._file.seek(-overshoot, os.SEEK_CUR)
                    chunks.append(chunk[: end + 1])
                    break
                chunks.append(chunk)
                if remaining > 0:
                    remaining -= len(chunk)
        except (OSError, ValueError) as e:
            raise ReadFailedError(f"Cannot read {self._path}: {e}") from e
        line = b"".join(chunks)
        # A line cut short by *limit* is not the end of the stream
        self._eof = not line or (not line.endswith(b"\n") and len(line) != limit)
        return line

    def read(self, size: int | None = None) -> bytes:
        """Read *size* bytes, or one line when *size* is omitted.

        A line includes its ``\\n`` terminator; the last line of a file may
        lack one.  Returns ``b""`` at end of stream.
        """
        if size is None:
            return self._readline()
        try:
            data = self._file.read(size)
        except (OSError, ValueError) as e:
            raise ReadFailedError(f"Cannot read {self._path}: {e}") from e
        data = data or b""
        self._eof = size < 0 or len(data) < size
        return data

    def read_all(self) -> bytes:
        """Return the whole content of ``path`` without moving the offset."""
        try:
            return Path(self._path).read_bytes()
        except OSError as e:
            raise ReadFailedError(f"Cannot read {self._path}: {e}") from e

    def read_delimited(
        self,
        delimiter: str = ",",
        quotechar: str = '"',
        max_line_length: int | None = None,
    ) -> list[str] | None:
        """Parse one delimited record starting at the current offset.

        Quoted fields may span lines; only the lines the record needs are
        consumed.  Malformed quoting is split best-effort, as ``csv`` does
        in non-strict mode.

        Args:
            delimiter: Field separator.
            quotechar: Field enclosure character.
            max_line_length: Bytes read per physical line.  ``None`` uses
                ``StreamConfig.max_line_length``; ``0`` means unlimited.  A
                multibyte character straddling the limit is read whole.

        Returns:
            The record's fields (``[]`` for a blank line), or ``None`` at end
            of stream.
        """
        if max_line_length is None:
            max_line_length = self._config.max_line_length or 0
        limit = max_line_length if max_line_length > 0 else -1
        encoding = self._config.encoding

        def lines() -> Iterator[str]:
            decoder = codecs.getincrementaldecoder(encoding)()
            while line := self._readline(limit):
                text = decoder.decode(line)
                # Complete a multibyte character split by *limit*
                while decoder.getstate()[0] and (extra := self.read(1)):
                    text += decoder.decode(extra)
                if self._eof:
                    text += decoder.decode(b"", final=True)
                yield text

        reader = csv.reader(lines(), delimiter=delimiter, quotechar=quotechar)
        try:
            return next(reader, None)
        except (csv.Error, UnicodeDecodeError) as e:
            raise ReadFailedError(f"Cannot parse record in {self._path}: {e}") from e

    def write(self, data: bytes | str) -> int:
        """Write *data* at the current offset and return the bytes written.

        ``str`` data is encoded with ``StreamConfig.encoding``.  Short writes
        from the OS are retried until all of *data* is written.
        """
        try:
            if isinstance(data, str):
                data = data.encode(self._config.encoding)
            view = memoryview(data).cast("B")
            written = 0
            while written < len(view):
                count = self._file.write(view[written:])
                if not count:
                    break
                written += count
        except (OSError, ValueError) as e:
            raise WriteFailedError(f"Cannot write to {self._path}: {e}") from e
        return written

    def flush(self) -> None:
        """Commit written bytes to stable storage."""
        try:
            os.fsync(self._file.fileno())
        except (OSError, ValueError) as e:
            raise WriteFailedError(f"Cannot sync {self._path}: {e}") from e

    def seek(self, offset: int, origin: SeekOrigin | int = SeekOrigin.START) -> int:
        """Move the offset relative to *origin* and return the new offset."""
        try:
            position = self._file.seek(offset, SeekOrigin(origin))
        except (OSError, ValueError) as e:
            raise SeekFailedError(
                f"Cannot seek {self._path} to {offset} from {origin!r}: {e}"
            ) from e
        self._eof = False
        return position

    def truncate(self, size: int) -> None:
        """Resize the file to exactly *size* bytes.  The offset is unchanged."""
        try:
            self._file.truncate(size)
        except (OSError, ValueError) as e:
            raise TruncateFailedError(f"Cannot truncate {self._path} to {size}: {e}") from e

    def touch(self) -> None:
        """Update mtime by truncating to the current size under an exclusive lock.

        ``os.utime`` refuses files the caller does not own even with write
        permission; ``ftruncate`` only needs a writable descriptor.
        """
        self.lock()
        try:
            self.truncate(self.size)
        finally:
            self.unlock()

    # =========================================================================
    # Locking
    # =========================================================================

    def lock(self, flags: LockFlag = LockFlag.EXCLUSIVE) -> bool:
        """Acquire an advisory lock.

        Blocking requests wait until the lock is granted and return True.
        Requests with ``LockFlag.NONBLOCKING`` return False immediately when
        the lock is held elsewhere.

        Raises:
            ValueError: if *flags* is not exactly one of SHARED or EXCLUSIVE.
            LockFailedError: if flock fails for any reason but contention.
        """
        flags = LockFlag(flags)
        operation = flags.to_flock()
        kind = flags & ~LockFlag.NONBLOCKING
        try:
            fcntl.flock(self._file, operation)
        except BlockingIOError:
            # flock drops the existing lock before a conversion that fails
            if self._held_lock is not None and self._held_lock != kind:
                self._held_lock = None
            logger.debug("Lock %s on %s would block", kind.name, self._path)
            return False
        except (OSError, ValueError) as e:
            raise LockFailedError(f"Cannot lock {self._path}: {e}") from e
        self._held_lock = kind
        logger.debug("Locked %s (%s)", self._path, kind.name)
        return True

    def unlock(self) -> None:
        """Release any lock held by this stream.  Safe to call when unlocked."""
        try:
            fcntl.flock(self._file, fcntl.LOCK_UN)
        except (OSError, ValueError) as e:
            raise LockFailedError(f"Cannot unlock {self._path}: {e}") from e
        if self._held_lock is not None:
            logger.debug("Unlocked %s", self._path)
        self._held_lock = None

    def is_locked(self) -> bool:
        """Probe whether another descriptor holds a lock on this file.

        Attempts a non-blocking exclusive lock and releases it again.  A
        lock held through this stream is never reported, since flock lets a
        descriptor re-acquire its own lock.  A shared lock held by this
        stream is re-established after the probe.
        """
        held = self._held_lock
        if held == LockFlag.EXCLUSIVE:
            return False
        acquired = self.lock(LockFlag.EXCLUSIVE | LockFlag.NONBLOCKING)
        if held is not None:
            if not self.lock(held | LockFlag.NONBLOCKING):
                logger.warning("Lost %s lock on %s while probing", held.name, self._path)
        elif acquired:
            self.unlock()
        return not acquired

    # =========================================================================
    # Filesystem Operations
    # =========================================================================

    def copy(self, new_path: str | os.PathLike[str]) -> FileStream:
        """Copy the content to *new_path* under an exclusive lock.

        Returns a new stream opened for reading on the copy.
        """
        new_path = os.fspath(new_path)
        self.lock()
        try:
            shutil.copyfile(self._path, new_path)
        except OSError as e:
            raise CopyFailedError(f"Cannot copy {self._path} to {new_path}: {e}") from e
        finally:
            self.unlock()
        logger.debug("Copied %s to %s", self._path, new_path)
        return FileStream(new_path, "r", config=self._config)

    def rename(self, new_path: str | os.PathLike[str]) -> None:
        """Rename the file to *new_path* under an exclusive lock.

        On success the stream rebinds to a fresh read-only descriptor on
        *new_path* and ``mode`` reports ``"r"``.  On failure ``path`` and the
        descriptor are left as they were.

        Raises:
            RenameFailedError: if the source still exists afterwards, or the
                destination does not.
        """
        new_path = os.fspath(new_path)
        old_path = self._path
        self.lock()
        try:
            cause: OSError | None = None
            try:
                os.rename(old_path, new_path)
            except OSError as e:
                cause = e
            if os.path.exists(old_path):
                raise RenameFailedError(
                    f"Rename of {old_path} to {new_path} failed: source still exists"
                ) from cause
            if not os.path.exists(new_path):
                raise RenameFailedError(
                    f"Rename of {old_path} to {new_path} failed: destination missing"
                ) from cause
            # The old descriptor now refers to the file at new_path
            self._path = new_path
            new_file = self._open(new_path, "r")
        finally:
            self.unlock()

        old_file = self._file
        self._file = new_file
        self._mode = "r"
        self._eof = False
        self._current = None
        old_file.close()
        logger.debug("Renamed %s to %s", old_path, new_path)

    def unlink(self) -> bool:
        """Remove ``path`` from the filesystem.  Returns whether it succeeded.

        The descriptor stays open.  On POSIX systems the data remains
        readable and writable through it until ``close()``; other systems
        may refuse the unlink or invalidate the descriptor.
        """
        try:
            os.unlink(self._path)
        except OSError:
            logger.warning("Failed to delete %s", self._path, exc_info=True)
            return False
        logger.debug("Deleted %s", self._path)
        return True

    def delete(self) -> bool:
        """Alias for ``unlink()``."""
        return self.unlink()

    def chmod(self, mode: str) -> bool:
        """Apply a 4-digit octal permission string such as ``"0644"``.

        Raises:
            InvalidModeError: if *mode* is not exactly four octal digits.
        """
        bits = parse_octal_mode(mode)
        try:
            os.chmod(self._path, bits)
        except OSError:
            logger.warning("Failed to chmod %s to %s", self._path, mode, exc_info=True)
            return False
        return True

    def chgrp(self, group: int | str) -> bool:
        """Change the owning group (gid or group name) of ``path``."""
        try:
            shutil.chown(self._path, group=group)
        except (OSError, LookupError):
            logger.warning("Failed to chgrp %s to %s", self._path, group, exc_info=True)
            return False
        return True

    # =========================================================================
    # Line Iteration
    # =========================================================================

    def rewind(self) -> bytes:
        """Read and return the next line.

        This does NOT seek back to offset 0; it behaves exactly like
        ``next()``.  Call ``seek(0)`` first to restart from the beginning.
        """
        return self.next()

    def current(self) -> bytes | None:
        """The most recently read line, without consuming another."""
        return self._current

    def next(self) -> bytes:
        """Read the next line and make it ``current()``."""
        self._current = self.read()
        return self._current

    def valid(self) -> bool:
        """True until a read has hit the end of the stream."""
        return not self._eof

    def key(self) -> int:
        raise UnsupportedOperationError("FileStream lines have no index")

    def prev(self) -> bytes:
        raise UnsupportedOperationError("FileStream cannot move backwards")

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        line = self.next()
        if not line:
            raise StopIteration
        return line
