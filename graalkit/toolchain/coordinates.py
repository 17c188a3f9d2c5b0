"""
Names and locations of GraalVM CE release artifacts.

All rendering is done from a typed set of resolved pieces rather than by
substituting placeholders into pattern strings.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath

from graalkit.core.platform import PlatformKey

DEFAULT_DOWNLOAD_BASE_URL = "https://github.com/oracle/graal/releases/download/"
DEFAULT_GRAAL_VERSION = "1.0.0-rc6"

PRODUCT = "graalvm-ce"
COMPILER_NAME = "native-image"

# Location of bin/ inside the extracted toolkit, per OS tag
_BIN_DIRS = {
    "linux": PurePosixPath("bin"),
    "macos": PurePosixPath("Contents", "Home", "bin"),
}


@dataclass(frozen=True)
class DistributionCoordinates:
    """
    Everything needed to locate one GraalVM CE distribution.

    Example:
        >>> coords = DistributionCoordinates(
        ...     "https://example.test/", "1.0.0-rc6", "linux", "amd64"
        ... )
        >>> coords.archive_url()
        'https://example.test/vm-1.0.0-rc6/graalvm-ce-1.0.0-rc6-linux-amd64.tar.gz'
        >>> coords.archive_file_name()
        'graalvm-ce-1.0.0-rc6-amd64.tar.gz'
    """

    base_url: str
    version: str
    os: str
    arch: str

    @classmethod
    def for_platform(
        cls, platform: PlatformKey, version: str, base_url: str
    ) -> "DistributionCoordinates":
        return cls(base_url=base_url, version=version, os=platform.os, arch=platform.arch)

    @property
    def platform(self) -> PlatformKey:
        return PlatformKey(os=self.os, arch=self.arch)

    def archive_url(self) -> str:
        """Download URL of the release tarball."""
        base = self.base_url.rstrip("/")
        return (
            f"{base}/vm-{self.version}/"
            f"{PRODUCT}-{self.version}-{self.os}-{self.arch}.tar.gz"
        )

    def archive_file_name(self) -> str:
        """File name of the tarball inside the version's cache directory."""
        return f"{PRODUCT}-{self.version}-{self.arch}.tar.gz"

    def toolkit_dir_name(self) -> str:
        """Name of the extracted toolkit directory."""
        return f"{PRODUCT}-{self.version}"

    def compiler_relative_path(self) -> PurePosixPath:
        """Path of the native-image executable relative to the toolkit directory."""
        try:
            return _BIN_DIRS[self.os] / COMPILER_NAME
        except KeyError:
            raise ValueError(f"No compiler layout known for OS '{self.os}'") from None
