"""Tests for types.py — lock flags, seek origins, file types, stat snapshots."""

from __future__ import annotations

import fcntl
import os
import stat
from datetime import UTC

import pytest

from filestream.types import FileStat, FileType, LockFlag, SeekOrigin, format_perms

# ---------------------------------------------------------------------------
# LockFlag
# ---------------------------------------------------------------------------


class TestLockFlag:
    @pytest.mark.parametrize(
        ("flags", "expected"),
        [
            pytest.param(LockFlag.SHARED, fcntl.LOCK_SH, id="shared"),
            pytest.param(LockFlag.EXCLUSIVE, fcntl.LOCK_EX, id="exclusive"),
            pytest.param(
                LockFlag.SHARED | LockFlag.NONBLOCKING,
                fcntl.LOCK_SH | fcntl.LOCK_NB,
                id="shared-nb",
            ),
            pytest.param(
                LockFlag.EXCLUSIVE | LockFlag.NONBLOCKING,
                fcntl.LOCK_EX | fcntl.LOCK_NB,
                id="exclusive-nb",
            ),
        ],
    )
    def test_to_flock(self, flags: LockFlag, expected: int):
        assert flags.to_flock() == expected

    def test_requires_a_kind(self):
        with pytest.raises(ValueError):
            LockFlag.NONBLOCKING.to_flock()

    def test_rejects_both_kinds(self):
        with pytest.raises(ValueError):
            (LockFlag.SHARED | LockFlag.EXCLUSIVE).to_flock()

    def test_flags_are_distinct_bits(self):
        values = [flag.value for flag in LockFlag]
        assert sum(values) == LockFlag.SHARED | LockFlag.EXCLUSIVE | LockFlag.NONBLOCKING
        assert len(set(values)) == 3


# ---------------------------------------------------------------------------
# SeekOrigin
# ---------------------------------------------------------------------------


class TestSeekOrigin:
    def test_matches_os_constants(self):
        assert SeekOrigin.START == os.SEEK_SET
        assert SeekOrigin.CURRENT == os.SEEK_CUR
        assert SeekOrigin.END == os.SEEK_END


# ---------------------------------------------------------------------------
# FileType
# ---------------------------------------------------------------------------


class TestFileType:
    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            pytest.param(stat.S_IFREG | 0o644, FileType.FILE, id="file"),
            pytest.param(stat.S_IFDIR | 0o755, FileType.DIRECTORY, id="dir"),
            pytest.param(stat.S_IFLNK | 0o777, FileType.LINK, id="link"),
            pytest.param(stat.S_IFIFO | 0o600, FileType.FIFO, id="fifo"),
            pytest.param(stat.S_IFCHR | 0o600, FileType.CHAR, id="char"),
            pytest.param(stat.S_IFBLK | 0o600, FileType.BLOCK, id="block"),
            pytest.param(stat.S_IFSOCK | 0o600, FileType.SOCKET, id="socket"),
            pytest.param(0, FileType.UNKNOWN, id="unknown"),
        ],
    )
    def test_from_mode(self, mode: int, expected: FileType):
        assert FileType.from_mode(mode) is expected

    def test_values_are_strings(self):
        assert FileType.DIRECTORY == "dir"


# ---------------------------------------------------------------------------
# Permissions / FileStat
# ---------------------------------------------------------------------------


class TestFormatPerms:
    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            pytest.param(stat.S_IFREG | 0o644, "0644", id="regular"),
            pytest.param(stat.S_IFREG | 0o4755, "4755", id="setuid"),
            pytest.param(0o7, "0007", id="padded"),
        ],
    )
    def test_format(self, mode: int, expected: str):
        assert format_perms(mode) == expected


class TestFileStat:
    def test_from_stat_result(self, tmp_path):
        path = tmp_path / "f.txt"
        path.write_bytes(b"12345")
        path.chmod(0o640)
        st = os.stat(path)

        snap = FileStat.from_stat_result(str(path), st)

        assert snap.size == 5
        assert snap.perms == "0640"
        assert snap.inode == st.st_ino
        assert snap.owner == st.st_uid
        assert snap.group == st.st_gid
        assert snap.type is FileType.FILE
        assert snap.mtime.tzinfo is UTC

    def test_frozen(self, tmp_path):
        path = tmp_path / "f.txt"
        path.write_bytes(b"")
        snap = FileStat.from_stat_result(str(path), os.stat(path))
        with pytest.raises(AttributeError):
            snap.size = 10  # type: ignore[misc]
