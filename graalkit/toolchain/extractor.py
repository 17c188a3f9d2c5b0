"""
GraalVM archive extraction stage.

Unpacks the cached tarball into ``<cache>/<version>/graalvm-ce-<version>/``.
The archive is first extracted into a staging directory and then renamed into
place, so the final directory only ever appears complete. Extraction is
skipped when that directory already exists, unless forced.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from graalkit.core.cache import ArchiveCache
from graalkit.core.exceptions import ExtractionError
from graalkit.core.filesystem import extract_tar_gz, safe_rmtree
from graalkit.core.locking import DEFAULT_LOCK_TIMEOUT
from graalkit.core.platform import PlatformKey
from graalkit.toolchain.coordinates import (
    DEFAULT_DOWNLOAD_BASE_URL,
    DistributionCoordinates,
)

logger = logging.getLogger(__name__)

# Progress is logged every N extracted entries, and for the last one
PROGRESS_LOG_INTERVAL = 500


def _log_progress(current: int, total: int) -> None:
    if current == total or current % PROGRESS_LOG_INTERVAL == 0:
        logger.debug(f"Extracted {current}/{total} entries")


class Extractor:
    """
    Extracts a cached GraalVM archive.

    Example:
        >>> extractor = Extractor(cache, coords)
        >>> if extractor.should_run():
        ...     extractor.extract(archive_path)
        >>> print(extractor.output())
    """

    def __init__(
        self,
        cache: ArchiveCache,
        coordinates: DistributionCoordinates,
        force: bool = False,
        lock_timeout: int = DEFAULT_LOCK_TIMEOUT,
    ):
        self.cache = cache
        self.coordinates = coordinates
        self.force = force
        self.lock_timeout = lock_timeout

    def output(self) -> Path:
        """Directory the toolkit is extracted to."""
        return self.cache.path(self.coordinates.toolkit_dir_name())

    def should_run(self) -> bool:
        """True if forced or if the toolkit has not been extracted yet."""
        return self.force or not self.output().exists()

    def extract(self, archive_path: Optional[Path] = None) -> Path:
        """
        Extract the archive into the cache.

        Args:
            archive_path: Archive to extract (default: the cached download)

        Returns:
            Path to the extracted toolkit directory

        Raises:
            ExtractionError: If the archive is malformed or cannot be written
            CacheLockTimeoutError: If another process holds the entry too long
        """
        if archive_path is None:
            archive_path = self.cache.path(self.coordinates.archive_file_name())
        archive_path = Path(archive_path)

        version_dir = self.cache.version_dir
        install_dir = version_dir / self.coordinates.toolkit_dir_name()

        with self.cache.entry_lock(
            self.coordinates.platform.platform_string(),
            stage="extract",
            timeout=self.lock_timeout,
        ):
            if install_dir.exists() and not self.force:
                logger.info(f"Toolkit already extracted: {install_dir}")
                return install_dir

            staging_dir = self.cache.staging_path(self.coordinates.toolkit_dir_name())
            logger.info(f"Extracting {archive_path} to {install_dir}")
            start = time.time()

            try:
                extract_tar_gz(archive_path, staging_dir, _log_progress)
                root = self._normalize_root_directory(staging_dir)

                if install_dir.exists():
                    logger.info(f"Replacing existing toolkit: {install_dir}")
                    safe_rmtree(install_dir, require_prefix=version_dir)

                try:
                    root.rename(install_dir)
                except OSError as e:
                    raise ExtractionError(
                        f"Failed to move extracted toolkit into {install_dir}: {e}"
                    ) from e
            finally:
                if staging_dir.exists():
                    safe_rmtree(staging_dir, require_prefix=version_dir)

        logger.info(f"Extraction complete in {time.time() - start:.2f}s")
        return install_dir

    def _normalize_root_directory(self, extract_dir: Path) -> Path:
        """
        Return the toolkit root inside an extraction directory.

        Release archives wrap everything in a single top-level folder; if so,
        that folder is the root. Otherwise the extraction directory is.
        """
        items = list(extract_dir.iterdir())

        if len(items) == 1 and items[0].is_dir() and not items[0].is_symlink():
            return items[0]

        return extract_dir


def extract(
    archive_path: Union[str, Path],
    version: str,
    platform: PlatformKey,
    cache_root: Optional[Union[str, Path]] = None,
    force: bool = False,
) -> Path:
    """
    Convenience function to extract an archive unless already extracted.

    Args:
        archive_path: Archive to extract
        version: GraalVM version keying the cache entry
        platform: Platform the archive was built for
        cache_root: Cache root (default: global cache)
        force: Re-extract even if the toolkit directory exists

    Returns:
        Path to the extracted toolkit directory
    """
    coordinates = DistributionCoordinates.for_platform(
        platform, version, DEFAULT_DOWNLOAD_BASE_URL
    )
    extractor = Extractor(ArchiveCache(cache_root, version), coordinates, force=force)
    if not extractor.should_run():
        logger.info(f"Skipping extraction, toolkit present: {extractor.output()}")
        return extractor.output()
    return extractor.extract(Path(archive_path))
