"""
Concurrent access control for the GraalKit cache.

Several builds on one machine may share a cache entry. A file lock keyed by
version and platform is held while an archive is downloaded or extracted, so
a concurrent run either waits for the writer or sees the finished entry.

Usage:
    from graalkit.core.locking import LockManager

    lock_manager = LockManager(lock_dir)
    with lock_manager.entry_lock("1.0.0-rc6", "linux-amd64", timeout=600):
        # Download or extract
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout as LockTimeout

from graalkit.core.directory import get_global_cache_dir, get_lock_dir
from graalkit.core.exceptions import (
    CacheDirectoryUnavailableError,
    CacheLockTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 600


def _sanitize(value: str) -> str:
    return value.replace("/", "-").replace("\\", "-").replace(":", "-")


class LockManager:
    """
    Manages cache-entry locks.

    Uses file-based locking with the `filelock` library for cross-platform
    compatibility and automatic cleanup on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Optional[Path] = None):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (default: .locks in the global cache)
        """
        if lock_dir is None:
            lock_dir = get_lock_dir(get_global_cache_dir())

        self.lock_dir = Path(lock_dir)

    def lock_path(self, version: str, platform: str, stage: str) -> Path:
        """Path of the lock file for one stage of one cache entry."""
        return self.lock_dir / f"{stage}-{_sanitize(version)}-{_sanitize(platform)}.lock"

    @contextmanager
    def entry_lock(
        self,
        version: str,
        platform: str,
        stage: str = "entry",
        timeout: int = DEFAULT_LOCK_TIMEOUT,
    ):
        """
        Acquire the lock for a cache entry.

        Args:
            version: GraalVM version
            platform: Platform string (e.g., 'linux-amd64')
            stage: Which stage of the entry is being written
            timeout: Maximum wait time in seconds

        Yields:
            None

        Raises:
            CacheLockTimeoutError: If the lock can't be acquired within timeout
            CacheDirectoryUnavailableError: If the lock directory cannot be created
        """
        try:
            self.lock_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheDirectoryUnavailableError(self.lock_dir, str(e)) from e
        lock_path = self.lock_path(version, platform, stage)
        lock = FileLock(str(lock_path), timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired cache lock: {lock_path}")
                yield
                logger.debug(f"Released cache lock: {lock_path}")
        except LockTimeout as e:
            logger.error(
                f"Could not acquire {stage} lock for {version} ({platform}) "
                f"after {timeout}s. Another build may be populating this entry."
            )
            raise CacheLockTimeoutError(
                f"Could not acquire {stage} lock for {version} ({platform}) "
                f"after {timeout}s"
            ) from e


__all__ = ["LockManager", "LockTimeout", "DEFAULT_LOCK_TIMEOUT"]
