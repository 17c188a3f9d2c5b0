"""
Network download with progress tracking and atomic placement.

The response body is streamed byte-for-byte into a temporary file next to the
destination, which is then renamed over the destination. A reader therefore
sees either no file or a complete one. Downloads are not retried: any HTTP or
IO error surfaces as TransferError.
"""

import logging
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from graalkit.core.exceptions import TransferError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination, replacing any existing file.

    Args:
        url: URL to download from
        destination: Local path to save file
        progress_callback: Optional callback for progress updates
        timeout: Connect/read timeout in seconds
        session: Optional requests session to issue the request with

    Returns:
        Path to downloaded file

    Raises:
        TransferError: If the request or the write fails
        ValueError: If URL or destination is invalid

    Example:
        >>> download_file(
        ...     "https://example.com/graalvm-ce.tar.gz",
        ...     Path("cache/graalvm-ce.tar.gz"),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=destination.parent, prefix=f".{destination.name}.", suffix=".part"
    )
    temp_path = Path(temp_path_str)

    logger.info(f"Downloading from {url}")
    try:
        with open(temp_fd, "wb") as f:
            _stream_to(url, f, progress_callback, timeout, session)

        # Atomic rename (replaces destination if it exists)
        temp_path.replace(destination)
    except RequestException as e:
        _discard(temp_path)
        raise TransferError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        _discard(temp_path)
        raise TransferError(f"Failed to write {destination}: {e}") from e
    except BaseException:
        _discard(temp_path)
        raise

    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to(
    url: str,
    out,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
    session: Optional[requests.Session],
) -> int:
    """Stream the response body into an open binary file."""
    getter = session.get if session is not None else requests.get

    with getter(url, stream=True, timeout=timeout, allow_redirects=True) as response:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            out.write(chunk)
            downloaded += len(chunk)

            # Report progress (max once per 0.5 seconds to avoid spam)
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                elapsed = current_time - start_time
                speed = downloaded / elapsed if elapsed > 0 else 0
                remaining = total_size - downloaded if total_size > 0 else 0
                eta = remaining / speed if speed > 0 else 0

                progress_callback(
                    DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=speed,
                        eta_seconds=eta,
                    )
                )
                last_progress_time = current_time

    return downloaded


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove partial download {path}: {e}")


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


__all__ = ["DownloadProgress", "download_file", "format_progress"]
