"""Path parts, permission-string parsing, content digests."""

from __future__ import annotations

import hashlib
import os
import posixpath
import string
from pathlib import Path

from .exceptions import InvalidModeError

OCTAL_DIGITS = frozenset(string.octdigits)
PERMISSION_STRING_LENGTH = 4


# =============================================================================
# Path Utilities
# =============================================================================


def split_name(path: str) -> tuple[str, str]:
    """Split the base name of *path* into (filename, extension).

    The extension is returned without its leading dot.  Dotfiles without a
    further suffix have no extension.

    Examples:
        split_name("/tmp/report.csv") -> ("report", "csv")
        split_name("/tmp/archive.tar.gz") -> ("archive.tar", "gz")
        split_name("/tmp/.bashrc") -> (".bashrc", "")
        split_name("/tmp/README") -> ("README", "")
    """
    name = posixpath.basename(path)
    stem, ext = posixpath.splitext(name)
    return stem, ext.lstrip(".")


# =============================================================================
# Permissions
# =============================================================================


def parse_octal_mode(mode: str) -> int:
    """Parse a 4-character octal permission string such as ``"0644"``.

    Raises:
        InvalidModeError: if *mode* is not exactly four octal digits.
    """
    if not isinstance(mode, str) or len(mode) != PERMISSION_STRING_LENGTH:
        raise InvalidModeError(f"Invalid mode {mode!r}: expected 4 octal digits, e.g. '0644'")
    if not set(mode) <= OCTAL_DIGITS:
        raise InvalidModeError(f"Invalid mode {mode!r}: contains non-octal characters")
    return int(mode, 8)


# =============================================================================
# Digests
# =============================================================================


def md5_file(path: str | os.PathLike[str], chunk_size: int = 64 * 1024) -> str:
    """Return the hex MD5 digest of the file at *path*, read in chunks."""
    digest = hashlib.md5(usedforsecurity=False)
    with Path(path).open("rb") as f:
        while chunk := f.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()
