"""
Pytest configuration and shared fixtures for GraalKit tests.
"""

import io
import tarfile
from pathlib import Path

import pytest

from graalkit.core.platform import PlatformKey, clear_platform_cache

GRAAL_VERSION = "1.0.0-rc6"
BASE_URL = "https://example.test/"
ARCHIVE_URL = (
    "https://example.test/vm-1.0.0-rc6/graalvm-ce-1.0.0-rc6-linux-amd64.tar.gz"
)

# Stand-in for native-image: writes an executable named by -H:Name into -H:Path
FAKE_NATIVE_IMAGE = """#!/bin/sh
name=""
dir="."
for arg in "$@"; do
  case "$arg" in
    -H:Name=*) name="${arg#-H:Name=}" ;;
    -H:Path=*) dir="${arg#-H:Path=}" ;;
  esac
done
echo "[$name] classlist: building"
mkdir -p "$dir"
printf '#!/bin/sh\\necho hello\\n' > "$dir/$name"
chmod +x "$dir/$name"
echo "[$name] build finished"
"""

FAILING_NATIVE_IMAGE = """#!/bin/sh
echo "Error: Main entry point class 'com.example.Missing' not found." >&2
exit 3
"""

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def _add_dir(tar: tarfile.TarFile, name: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    tar.addfile(info)


def _add_file(tar: tarfile.TarFile, name: str, data: bytes, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tar.addfile(info, io.BytesIO(data))


def build_graal_archive(
    version: str = GRAAL_VERSION,
    compiler_script: str = FAKE_NATIVE_IMAGE,
    macos: bool = False,
) -> bytes:
    """Build an in-memory tar.gz laid out like a GraalVM CE release."""
    root = f"graalvm-ce-{version}"
    bin_dir = f"{root}/Contents/Home/bin" if macos else f"{root}/bin"

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        _add_dir(tar, root)
        if macos:
            _add_dir(tar, f"{root}/Contents")
            _add_dir(tar, f"{root}/Contents/Home")
        _add_dir(tar, bin_dir)
        _add_file(tar, f"{bin_dir}/native-image", compiler_script.encode(), 0o755)
        _add_file(tar, f"{root}/release", f'GRAALVM_VERSION="{version}"\n'.encode())
    return buffer.getvalue()


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.graalkit and reset platform detection."""
    monkeypatch.setenv("GRAALKIT_CACHE_DIR", str(tmp_path / "default-cache"))
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def cache_root(tmp_path) -> Path:
    """Cache root inside the test's temporary directory."""
    return tmp_path / "cache"


@pytest.fixture
def linux_platform() -> PlatformKey:
    return PlatformKey(os="linux", arch="amd64")


@pytest.fixture
def graal_archive():
    """Factory building GraalVM-shaped archives."""
    return build_graal_archive


@pytest.fixture
def archive_file(tmp_path) -> Path:
    """A GraalVM-shaped archive written to disk."""
    path = tmp_path / "graalvm-ce-1.0.0-rc6-amd64.tar.gz"
    path.write_bytes(build_graal_archive())
    return path


@pytest.fixture
def archive_url() -> str:
    """Download URL of the 1.0.0-rc6 linux-amd64 archive under BASE_URL."""
    return ARCHIVE_URL


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def failing_compiler_script() -> str:
    """native-image stand-in that reports an error and exits 3."""
    return FAILING_NATIVE_IMAGE


@pytest.fixture
def fake_compiler_script() -> str:
    """native-image stand-in that writes a trivial executable."""
    return FAKE_NATIVE_IMAGE
