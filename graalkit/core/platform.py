"""
Platform detection for GraalKit.

Maps the running host's operating system and CPU architecture to the tags
GraalVM CE uses in its release file names. GraalVM CE only ships for macOS
and Linux on x86-64, so any other host fails immediately with
UnsupportedPlatformError, before any network or filesystem work starts.

Usage:
    from graalkit.core.platform import detect_platform

    key = detect_platform()
    print(key.os, key.arch)  # e.g. 'linux', 'amd64'
"""

import functools
import logging
import platform
from dataclasses import dataclass
from typing import List, Optional

from graalkit.core.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)

# platform.system() value -> GraalVM OS tag
_OS_TAGS = {
    "darwin": "macos",
    "linux": "linux",
}

# platform.machine() value -> GraalVM architecture tag
_ARCH_TAGS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
}


@dataclass(frozen=True)
class PlatformKey:
    """
    Resolved (operating system, architecture) pair.

    Attributes:
        os: GraalVM OS tag ('macos' or 'linux')
        arch: GraalVM architecture tag ('amd64')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-amd64').

        Example:
            >>> PlatformKey('linux', 'amd64').platform_string()
            'linux-amd64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def resolve_operating_system(system: Optional[str] = None) -> str:
    """
    Resolve the GraalVM OS tag for a host operating system.

    Args:
        system: Value as reported by platform.system(). Detected if None.

    Returns:
        'macos' or 'linux'

    Raises:
        UnsupportedPlatformError: If the OS has no GraalVM distribution
    """
    if system is None:
        system = platform.system()

    tag = _OS_TAGS.get(system.lower())
    if tag is None:
        raise UnsupportedPlatformError("operating system", system or "unknown")
    return tag


def resolve_architecture(machine: Optional[str] = None) -> str:
    """
    Resolve the GraalVM architecture tag for a CPU architecture.

    Args:
        machine: Value as reported by platform.machine(). Detected if None.

    Returns:
        'amd64'

    Raises:
        UnsupportedPlatformError: If the architecture has no GraalVM distribution
    """
    if machine is None:
        machine = platform.machine()

    tag = _ARCH_TAGS.get(machine.lower())
    if tag is None:
        raise UnsupportedPlatformError("architecture", machine or "unknown")
    return tag


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformKey:
    """
    Detect the current host's platform key.

    This function is cached - it only runs detection once per process.

    Raises:
        UnsupportedPlatformError: If the host is not supported
    """
    key = PlatformKey(os=resolve_operating_system(), arch=resolve_architecture())
    logger.debug(f"Detected platform: {key}")
    return key


def get_supported_platforms() -> List[str]:
    """
    Get list of all supported platform strings.

    Example:
        >>> get_supported_platforms()
        ['linux-amd64', 'macos-amd64']
    """
    return sorted(
        f"{os_tag}-{arch_tag}"
        for os_tag in set(_OS_TAGS.values())
        for arch_tag in set(_ARCH_TAGS.values())
    )


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformKey",
    "resolve_operating_system",
    "resolve_architecture",
    "detect_platform",
    "get_supported_platforms",
    "clear_platform_cache",
]
