"""
Version-keyed archive cache.

Each GraalVM version owns one directory under the cache root. The presence of
a final path inside it is the only completeness signal: writers always produce
final paths by renaming a fully written staging file or directory into place,
so an existing path is never a partial one.
"""

import logging
import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from graalkit.core.directory import get_global_cache_dir, get_lock_dir
from graalkit.core.exceptions import CacheDirectoryUnavailableError
from graalkit.core.locking import DEFAULT_LOCK_TIMEOUT, LockManager

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".staging-"


class ArchiveCache:
    """
    Filesystem-backed cache for one GraalVM version.

    Example:
        >>> cache = ArchiveCache(Path("~/.graalkit/cache").expanduser(), "1.0.0-rc6")
        >>> cache.exists("graalvm-ce-1.0.0-rc6-amd64.tar.gz")
        False
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]],
        version: str,
        lock_manager: Optional[LockManager] = None,
    ):
        """
        Args:
            root: Cache root. Uses the global cache directory if None.
            version: GraalVM version keying this entry
            lock_manager: Lock manager for entry locks. Defaults to one whose
                lock directory sits beside the cache root.
        """
        if not version:
            raise ValueError("Version cannot be empty")

        self.root = get_global_cache_dir(root)
        self.version = version
        self.lock_manager = lock_manager or LockManager(get_lock_dir(self.root))

    @property
    def version_dir(self) -> Path:
        """
        Directory for this version, created on demand.

        Raises:
            CacheDirectoryUnavailableError: If the directory cannot be created
                and does not already exist
        """
        path = self.root / self.version
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            if not path.is_dir():
                raise CacheDirectoryUnavailableError(path, str(e)) from e
        if not path.is_dir():
            raise CacheDirectoryUnavailableError(path, "not a directory")
        return path

    def path(self, relative: Union[str, Path]) -> Path:
        """Resolve a path inside this entry without creating anything."""
        return self.root / self.version / relative

    def exists(self, relative: Union[str, Path]) -> bool:
        """Check whether a final path exists in this entry."""
        return self.path(relative).exists()

    def staging_path(self, name: str) -> Path:
        """
        Unique hidden sibling of a final path, used for temp-then-rename writes.

        Lives inside the version directory so the final rename never crosses
        filesystems.
        """
        return self.version_dir / f"{STAGING_PREFIX}{name}.{os.getpid()}.{uuid.uuid4().hex[:8]}"

    @contextmanager
    def entry_lock(
        self, platform: str, stage: str = "entry", timeout: int = DEFAULT_LOCK_TIMEOUT
    ):
        """Hold the cross-process lock for this version and platform."""
        with self.lock_manager.entry_lock(self.version, platform, stage, timeout):
            yield

    def __repr__(self) -> str:
        return f"ArchiveCache(root={self.root!r}, version={self.version!r})"


__all__ = ["ArchiveCache", "STAGING_PREFIX"]
