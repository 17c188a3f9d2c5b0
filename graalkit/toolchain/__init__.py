"""
GraalVM toolkit stages.

This module provides:
- Release artifact naming (DistributionCoordinates)
- Archive download and extraction into the cache
- native-image compiler invocation
"""

from graalkit.toolchain.coordinates import (
    DEFAULT_DOWNLOAD_BASE_URL,
    DEFAULT_GRAAL_VERSION,
    DistributionCoordinates,
)
from graalkit.toolchain.downloader import Downloader, download
from graalkit.toolchain.extractor import Extractor, extract
from graalkit.toolchain.native_image import BuildTarget, NativeImageInvoker

__all__ = [
    "DEFAULT_DOWNLOAD_BASE_URL",
    "DEFAULT_GRAAL_VERSION",
    "DistributionCoordinates",
    "Downloader",
    "download",
    "Extractor",
    "extract",
    "BuildTarget",
    "NativeImageInvoker",
]
