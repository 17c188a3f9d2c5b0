"""
GraalVM archive download stage.

Fetches the platform- and version-specific release tarball into the cache.
The stage is skipped entirely when the archive is already cached; that check
is exposed as should_run() so it can be answered without starting a transfer.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from graalkit.core.cache import ArchiveCache
from graalkit.core.download import DownloadProgress, download_file, format_progress
from graalkit.core.locking import DEFAULT_LOCK_TIMEOUT
from graalkit.core.platform import PlatformKey
from graalkit.toolchain.coordinates import DistributionCoordinates

logger = logging.getLogger(__name__)


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(format_progress(progress))


class Downloader:
    """
    Downloads GraalVM CE archives into an ArchiveCache.

    Example:
        >>> cache = ArchiveCache(None, "1.0.0-rc6")
        >>> coords = DistributionCoordinates(
        ...     DEFAULT_DOWNLOAD_BASE_URL, "1.0.0-rc6", "linux", "amd64"
        ... )
        >>> downloader = Downloader(cache, coords)
        >>> if downloader.should_run():
        ...     downloader.download()
    """

    def __init__(
        self,
        cache: ArchiveCache,
        coordinates: DistributionCoordinates,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
        lock_timeout: int = DEFAULT_LOCK_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if cache.version != coordinates.version:
            raise ValueError(
                f"Cache version {cache.version} does not match "
                f"distribution version {coordinates.version}"
            )
        self.cache = cache
        self.coordinates = coordinates
        self.progress_callback = progress_callback or _log_progress
        self.lock_timeout = lock_timeout
        self.session = session

    def output(self) -> Path:
        """Cache path the archive is downloaded to."""
        return self.cache.path(self.coordinates.archive_file_name())

    def should_run(self) -> bool:
        """True unless the archive is already in the cache."""
        return not self.output().exists()

    def download(self) -> Path:
        """
        Download the archive into the cache.

        Returns:
            Path to the cached archive

        Raises:
            CacheDirectoryUnavailableError: If the version directory is unusable
            CacheLockTimeoutError: If another process holds the entry too long
            TransferError: If the transfer fails
        """
        target = self.cache.version_dir / self.coordinates.archive_file_name()

        with self.cache.entry_lock(
            self.coordinates.platform.platform_string(),
            stage="download",
            timeout=self.lock_timeout,
        ):
            # Another process may have finished while we waited
            if target.exists():
                logger.info(f"Archive already cached: {target}")
                return target

            download_file(
                self.coordinates.archive_url(),
                target,
                progress_callback=self.progress_callback,
                session=self.session,
            )

        return target


def download(
    version: str,
    platform: PlatformKey,
    base_url: str,
    cache_root: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Convenience function to download a GraalVM archive unless already cached.

    Args:
        version: GraalVM version
        platform: Resolved platform key
        base_url: Release download base URL
        cache_root: Cache root (default: global cache)

    Returns:
        Path to the cached archive
    """
    downloader = Downloader(
        ArchiveCache(cache_root, version),
        DistributionCoordinates.for_platform(platform, version, base_url),
    )
    if not downloader.should_run():
        logger.info(f"Skipping download, archive cached: {downloader.output()}")
        return downloader.output()
    return downloader.download()
