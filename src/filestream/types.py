"""Enumerations and result types: LockFlag, SeekOrigin, FileType, FileStat."""

from __future__ import annotations

import fcntl
import os
import stat as stat_module
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum, IntEnum, IntFlag


class LockFlag(IntFlag):
    """Advisory lock request.

    Exactly one of ``SHARED`` or ``EXCLUSIVE`` must be set.  ``NONBLOCKING``
    may be OR-ed in to attempt the lock without waiting.
    """

    SHARED = 1
    EXCLUSIVE = 2
    NONBLOCKING = 4

    def to_flock(self) -> int:
        """Translate to the ``operation`` argument of ``fcntl.flock``."""
        kind = self & (LockFlag.SHARED | LockFlag.EXCLUSIVE)
        if kind == LockFlag.SHARED:
            op = fcntl.LOCK_SH
        elif kind == LockFlag.EXCLUSIVE:
            op = fcntl.LOCK_EX
        else:
            raise ValueError(f"Lock must be exactly one of SHARED or EXCLUSIVE, got {self!r}")
        if self & LockFlag.NONBLOCKING:
            op |= fcntl.LOCK_NB
        return op


class SeekOrigin(IntEnum):
    """Reference point for ``FileStream.seek``."""

    START = os.SEEK_SET
    CURRENT = os.SEEK_CUR
    END = os.SEEK_END


class FileType(str, Enum):
    """Classification of a path as reported by ``lstat``."""

    FILE = "file"
    DIRECTORY = "dir"
    LINK = "link"
    FIFO = "fifo"
    CHAR = "char"
    BLOCK = "block"
    SOCKET = "socket"
    UNKNOWN = "unknown"

    @classmethod
    def from_mode(cls, mode: int) -> FileType:
        if stat_module.S_ISREG(mode):
            return cls.FILE
        if stat_module.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat_module.S_ISLNK(mode):
            return cls.LINK
        if stat_module.S_ISFIFO(mode):
            return cls.FIFO
        if stat_module.S_ISCHR(mode):
            return cls.CHAR
        if stat_module.S_ISBLK(mode):
            return cls.BLOCK
        if stat_module.S_ISSOCK(mode):
            return cls.SOCKET
        return cls.UNKNOWN


def format_perms(mode: int) -> str:
    """Render the permission bits of *mode* as a 4-digit octal string."""
    return f"{stat_module.S_IMODE(mode):04o}"


@dataclass(frozen=True, slots=True)
class FileStat:
    """Immutable snapshot of a single ``stat`` call.

    Attributes:
        path: Path the snapshot was taken for.
        size: Size in bytes.
        atime: Last access time (UTC).
        mtime: Last modification time (UTC).
        ctime: Last status change time (UTC).
        owner: Owning user id.
        group: Owning group id.
        perms: Permission bits as a 4-digit octal string, e.g. ``"0644"``.
        inode: Inode number.
        type: File type classification.
    """

    path: str
    size: int
    atime: datetime
    mtime: datetime
    ctime: datetime
    owner: int
    group: int
    perms: str
    inode: int
    type: FileType

    @classmethod
    def from_stat_result(cls, path: str, st: os.stat_result) -> FileStat:
        return cls(
            path=path,
            size=st.st_size,
            atime=datetime.fromtimestamp(st.st_atime, tz=UTC),
            mtime=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            ctime=datetime.fromtimestamp(st.st_ctime, tz=UTC),
            owner=st.st_uid,
            group=st.st_gid,
            perms=format_perms(st.st_mode),
            inode=st.st_ino,
            type=FileType.from_mode(st.st_mode),
        )
