"""
File system utilities for GraalKit.

This module provides:
- Gzip-compressed tarball extraction with path validation
- Safe directory removal guarded by a required prefix
- Executable checks
"""

import logging
import os
import shutil
import tarfile
from pathlib import Path
from typing import Callable, Optional, Union

from graalkit.core.exceptions import (
    ExtractionError,
    GraalKitError,
    InsecureArchiveError,
    UnsupportedArchiveEntryError,
)

logger = logging.getLogger(__name__)


class FilesystemError(GraalKitError):
    """Base exception for filesystem operations."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent (Path.is_relative_to for older Pythons).

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def is_executable(path: Union[str, Path]) -> bool:
    """Check that path is a regular file the current user may execute."""
    path = Path(path)
    return path.is_file() and os.access(path, os.X_OK)


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_member(member: tarfile.TarInfo, destination: Path) -> None:
    """
    Validate that a tar member is safe and supported.

    Raises:
        InsecureArchiveError: If the member or its link target escapes destination
        UnsupportedArchiveEntryError: If the member is a device, FIFO or other
            special file
    """
    if not (member.isreg() or member.isdir() or member.issym() or member.islnk()):
        raise UnsupportedArchiveEntryError(
            f"Archive member '{member.name}' has unsupported type {member.type!r}"
        )

    root = destination.resolve()
    target = (destination / member.name).resolve()
    if not is_relative_to(target, root):
        raise InsecureArchiveError(
            f"Archive member '{member.name}' attempts directory traversal. "
            "Extraction has been blocked."
        )

    if member.issym():
        if os.path.isabs(member.linkname):
            raise InsecureArchiveError(
                f"Archive member '{member.name}' links to absolute path "
                f"'{member.linkname}'"
            )
        link_target = (target.parent / member.linkname).resolve()
        if not is_relative_to(link_target, root):
            raise InsecureArchiveError(
                f"Archive member '{member.name}' links outside the destination"
            )
    elif member.islnk():
        link_target = (destination / member.linkname).resolve()
        if not is_relative_to(link_target, root):
            raise InsecureArchiveError(
                f"Archive member '{member.name}' hard-links outside the destination"
            )


def extract_tar_gz(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """
    Extract a .tar.gz archive, preserving file permissions.

    Every member is validated before anything is written.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)
        progress_callback: Optional callback(current, total) for progress

    Raises:
        ExtractionError: If the archive is missing, malformed or cannot be written
        InsecureArchiveError: If the archive contains paths escaping destination
        UnsupportedArchiveEntryError: If the archive contains special files

    Example:
        >>> extract_tar_gz('graalvm-ce-1.0.0-rc6-amd64.tar.gz', '/tmp/graal')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise ExtractionError(f"Archive not found: {archive_path}")

    try:
        destination.mkdir(parents=True, exist_ok=True)

        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()
            total = len(members)

            # Validate all paths first
            for member in members:
                _validate_member(member, destination)

            for i, member in enumerate(members):
                _extract_member(tar, member, destination)
                if progress_callback:
                    progress_callback(i + 1, total)
    except (InsecureArchiveError, UnsupportedArchiveEntryError):
        raise
    except Exception as e:
        raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_member(tar: tarfile.TarFile, member: tarfile.TarInfo, destination: Path):
    # The "data" filter keeps the owner's execute bits and drops setuid/setgid.
    if hasattr(tarfile, "data_filter"):
        tar.extract(member, destination, filter="data")
    else:
        # Members have already been validated above
        tar.extract(member, destination)


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/build', require_prefix='/tmp')
        >>> safe_rmtree('/usr/bin', require_prefix='/home')  # ValueError
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


__all__ = [
    "FilesystemError",
    "is_relative_to",
    "is_executable",
    "extract_tar_gz",
    "safe_rmtree",
]
