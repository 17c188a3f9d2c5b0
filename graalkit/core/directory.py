"""
Directory structure management for GraalKit.

Directory Structure:
    Global Cache (~/.graalkit/):
        - cache/                               : cache root
            - <version>/                        : one entry per GraalVM version
                - graalvm-ce-<version>-<arch>.tar.gz : downloaded archive
                - graalvm-ce-<version>/         : extracted toolkit
            - .locks/                           : cross-process lock files

The cache root can be moved with the GRAALKIT_CACHE_DIR environment variable
or the ``cache_dir`` configuration key.
"""

import os
from pathlib import Path
from typing import Optional, Union

CACHE_DIR_ENV = "GRAALKIT_CACHE_DIR"


def get_global_dir() -> Path:
    """
    Get the per-user GraalKit directory.

    Returns:
        Path: ~/.graalkit
    """
    return Path.home() / ".graalkit"


def get_global_cache_dir(override: Optional[Union[str, Path]] = None) -> Path:
    """
    Get the cache root that holds one directory per GraalVM version.

    Args:
        override: Explicit cache root (e.g. from configuration). Takes
            precedence over the environment.

    Returns:
        Path: The cache root. Nothing is created.

    Example:
        >>> get_global_cache_dir()
        PosixPath('/home/user/.graalkit/cache')
    """
    if override:
        return Path(override).expanduser()

    from_env = os.environ.get(CACHE_DIR_ENV)
    if from_env:
        return Path(from_env).expanduser()

    return get_global_dir() / "cache"


def get_lock_dir(cache_root: Path) -> Path:
    """Lock files live inside the cache root, so nothing is written outside it."""
    return Path(cache_root) / ".locks"
