"""
Tests for the GraalVM download stage.
"""

import pytest
import responses

from graalkit.core.cache import ArchiveCache
from graalkit.core.exceptions import TransferError
from graalkit.toolchain.coordinates import DistributionCoordinates
from graalkit.toolchain.downloader import Downloader, download


@pytest.fixture
def coords(base_url):
    return DistributionCoordinates(base_url, "1.0.0-rc6", "linux", "amd64")


@pytest.fixture
def downloader(cache_root, coords):
    return Downloader(ArchiveCache(cache_root, "1.0.0-rc6"), coords)


class TestDownloader:
    def test_output_path(self, downloader, cache_root):
        assert downloader.output() == (
            cache_root / "1.0.0-rc6" / "graalvm-ce-1.0.0-rc6-amd64.tar.gz"
        )

    def test_should_run_on_empty_cache(self, downloader):
        assert downloader.should_run() is True

    @responses.activate
    def test_should_run_makes_no_network_calls(self, downloader):
        downloader.should_run()
        assert len(responses.calls) == 0

    @responses.activate
    def test_download_into_cache(self, downloader, archive_url):
        responses.add(responses.GET, archive_url, body=b"tarball", status=200)

        path = downloader.download()

        assert path == downloader.output()
        assert path.read_bytes() == b"tarball"
        assert downloader.should_run() is False

    @responses.activate
    def test_cached_archive_is_skipped(self, downloader, archive_url):
        downloader.output().parent.mkdir(parents=True)
        downloader.output().write_bytes(b"cached")
        responses.add(responses.GET, archive_url, body=b"new", status=200)

        assert downloader.should_run() is False
        path = downloader.download()

        assert len(responses.calls) == 0
        assert path.read_bytes() == b"cached"

    @responses.activate
    def test_transfer_failure(self, downloader, archive_url):
        responses.add(responses.GET, archive_url, status=404)

        with pytest.raises(TransferError):
            downloader.download()

        assert not downloader.output().exists()
        assert downloader.should_run() is True

    def test_version_mismatch_rejected(self, cache_root, coords):
        with pytest.raises(ValueError, match="does not match"):
            Downloader(ArchiveCache(cache_root, "1.0.0-rc5"), coords)


class TestDownloadFunction:
    @responses.activate
    def test_download_and_skip(self, cache_root, linux_platform, base_url, archive_url):
        responses.add(responses.GET, archive_url, body=b"tarball", status=200)

        first = download("1.0.0-rc6", linux_platform, base_url, cache_root)
        second = download("1.0.0-rc6", linux_platform, base_url, cache_root)

        assert first == second
        assert len(responses.calls) == 1
