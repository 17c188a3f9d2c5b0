"""
Core functionality for GraalKit.

This package contains the foundational modules that the stages depend on.
"""

from .cache import ArchiveCache
from .directory import get_global_cache_dir, get_global_dir
from .locking import LockManager
from .platform import (
    PlatformKey,
    clear_platform_cache,
    detect_platform,
    get_supported_platforms,
    resolve_architecture,
    resolve_operating_system,
)
from .exceptions import (
    GraalKitError,
    UnsupportedPlatformError,
    CacheError,
    CacheDirectoryUnavailableError,
    CacheLockTimeoutError,
    TransferError,
    ExtractionError,
    InsecureArchiveError,
    UnsupportedArchiveEntryError,
    CompilerError,
    CompilerNotFoundError,
    CompilerInvocationError,
    ConfigError,
    PipelineError,
    StageFailedError,
)

__all__ = [
    "ArchiveCache",
    "get_global_cache_dir",
    "get_global_dir",
    "LockManager",
    "PlatformKey",
    "clear_platform_cache",
    "detect_platform",
    "get_supported_platforms",
    "resolve_architecture",
    "resolve_operating_system",
    "GraalKitError",
    "UnsupportedPlatformError",
    "CacheError",
    "CacheDirectoryUnavailableError",
    "CacheLockTimeoutError",
    "TransferError",
    "ExtractionError",
    "InsecureArchiveError",
    "UnsupportedArchiveEntryError",
    "CompilerError",
    "CompilerNotFoundError",
    "CompilerInvocationError",
    "ConfigError",
    "PipelineError",
    "StageFailedError",
]
