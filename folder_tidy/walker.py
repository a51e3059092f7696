"""Directory traversal producing :class:`FileDescriptor` objects."""

from __future__ import annotations

import datetime
import os
import stat
from pathlib import Path
from typing import Iterator, List

from .models import FileDescriptor


HIDDEN_PREFIX = "."


class ScanError(Exception):
    """Raised when a scan cannot produce a result at all."""


class DirectoryNotFoundError(ScanError):
    def __init__(self) -> None:
        super().__init__("Directory does not exist")


class WalkError(ScanError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Error walking directory: {cause}")
        self.cause = cause


def _is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def _describe(file_path: Path) -> FileDescriptor:
    """Build a descriptor from ``lstat``; raises ``OSError`` if unreadable."""
    info = file_path.lstat()
    if not stat.S_ISREG(info.st_mode):
        raise IsADirectoryError(f"not a regular file: {file_path}")
    return FileDescriptor(
        path=str(file_path),
        name=file_path.name,
        size=info.st_size,
        extension=file_path.suffix.lower(),
        modified_time=datetime.datetime.fromtimestamp(info.st_mtime),
        parent_dir=file_path.parent.name,
        metadata={},
    )


def iter_files(root: Path) -> Iterator[FileDescriptor]:
    """Yield a descriptor for every visible regular file below ``root``.

    Hidden files are skipped and hidden directories are not descended
    into.  Entries that fail to stat below the root are omitted; a
    failure listing ``root`` itself raises :class:`WalkError`.
    Traversal order is sorted so repeated scans are deterministic.
    """
    root = Path(root)
    if not root.exists():
        raise DirectoryNotFoundError()

    def _on_error(exc: OSError) -> None:
        if exc.filename is not None and Path(exc.filename) == root:
            raise WalkError(exc)
        # unreadable subdirectory: skipped

    for current, dirs, files in os.walk(root, onerror=_on_error):
        dirs[:] = sorted(d for d in dirs if not _is_hidden(d))
        current_path = Path(current)
        for fname in sorted(files):
            if _is_hidden(fname):
                continue
            try:
                yield _describe(current_path / fname)
            except OSError:
                continue


def walk_directory(root: Path) -> List[FileDescriptor]:
    """Return the full descriptor list for ``root`` (see :func:`iter_files`)."""
    return list(iter_files(root))
