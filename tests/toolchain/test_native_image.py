"""
Tests for native-image invocation.
"""

import io
import os
import sys
from pathlib import Path

import pytest

from graalkit.core.exceptions import (
    CompilerInvocationError,
    CompilerNotFoundError,
    ConfigError,
)
from graalkit.toolchain.coordinates import DistributionCoordinates
from graalkit.toolchain.native_image import BuildTarget, NativeImageInvoker

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="native-image stand-in is a shell script"
)


@pytest.fixture
def coords(base_url):
    return DistributionCoordinates(base_url, "1.0.0-rc6", "linux", "amd64")


@pytest.fixture
def make_toolkit(tmp_path):
    """Create a toolkit directory whose bin/native-image runs a given script."""

    def _make(script: str, executable: bool = True) -> Path:
        toolkit = tmp_path / "graalvm-ce-1.0.0-rc6"
        bin_dir = toolkit / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)
        exe = bin_dir / "native-image"
        exe.write_text(script)
        exe.chmod(0o755 if executable else 0o644)
        return toolkit

    return _make


@pytest.fixture
def target(tmp_path):
    jar = tmp_path / "app.jar"
    jar.write_bytes(b"jar")
    return BuildTarget(
        main_class="com.example.Main",
        output_name="hello",
        classpath=(jar,),
        output_dir=tmp_path / "build" / "graal",
    )


class TestBuildTarget:
    def test_output_path(self):
        target = BuildTarget("com.example.Main", "app", output_dir=Path("out"))
        assert target.output_path() == Path("out") / "app"

    def test_default_output_dir(self):
        target = BuildTarget("com.example.Main", "app")
        assert target.output_path() == Path("build") / "graal" / "app"

    def test_with_classpath(self):
        target = BuildTarget("com.example.Main", "app")
        updated = target.with_classpath(["a.jar", "classes"])

        assert updated.classpath == (Path("a.jar"), Path("classes"))
        assert updated.main_class == "com.example.Main"
        assert target.classpath == ()


class TestNativeImageInvoker:
    def test_executable_found(self, make_toolkit, coords):
        toolkit = make_toolkit("#!/bin/sh\n")
        invoker = NativeImageInvoker(toolkit, coords)

        assert invoker.executable() == toolkit / "bin" / "native-image"

    def test_missing_compiler(self, tmp_path, coords):
        invoker = NativeImageInvoker(tmp_path / "empty", coords)

        with pytest.raises(CompilerNotFoundError):
            invoker.executable()

    def test_non_executable_compiler(self, make_toolkit, coords):
        toolkit = make_toolkit("#!/bin/sh\n", executable=False)

        with pytest.raises(CompilerNotFoundError):
            NativeImageInvoker(toolkit, coords).executable()

    def test_build_arguments(self, make_toolkit, coords, tmp_path):
        toolkit = make_toolkit("#!/bin/sh\n")
        target = BuildTarget(
            "com.example.Main",
            "hello",
            classpath=(Path("a.jar"), Path("classes")),
            output_dir=tmp_path / "out",
        )

        args = NativeImageInvoker(toolkit, coords).build_arguments(target)

        assert args == [
            str(toolkit / "bin" / "native-image"),
            "-cp",
            f"a.jar{os.pathsep}classes",
            f"-H:Path={tmp_path / 'out'}",
            "-H:Name=hello",
            "com.example.Main",
        ]

    def test_missing_main_class(self, make_toolkit, coords, target):
        toolkit = make_toolkit("#!/bin/sh\n")
        bad = BuildTarget(None, "hello", target.classpath, target.output_dir)

        with pytest.raises(ConfigError, match="main class"):
            NativeImageInvoker(toolkit, coords).invoke(bad)

    def test_empty_classpath(self, make_toolkit, coords):
        toolkit = make_toolkit("#!/bin/sh\n")

        with pytest.raises(ConfigError, match="classpath"):
            NativeImageInvoker(toolkit, coords).build_arguments(
                BuildTarget("com.example.Main", "hello")
            )

    def test_successful_build(self, make_toolkit, coords, target, fake_compiler_script):
        toolkit = make_toolkit(fake_compiler_script)
        stream = io.StringIO()

        result = NativeImageInvoker(toolkit, coords, output_stream=stream).invoke(target)

        assert result == 0
        assert target.output_path().is_file()
        assert os.access(target.output_path(), os.X_OK)
        assert "[hello] build finished" in stream.getvalue()

    def test_failed_build(self, make_toolkit, coords, target, failing_compiler_script):
        toolkit = make_toolkit(failing_compiler_script)
        stream = io.StringIO()
        invoker = NativeImageInvoker(toolkit, coords, output_stream=stream)

        with pytest.raises(CompilerInvocationError) as exc_info:
            invoker.invoke(target)

        error = exc_info.value
        assert error.returncode == 3
        assert any("com.example.Missing" in line for line in error.output_tail)
        assert "exited with code 3" in str(error)
        assert "com.example.Missing" in stream.getvalue()

    def test_output_tail_is_bounded(self, make_toolkit, coords, target):
        script = "#!/bin/sh\ni=0\nwhile [ $i -lt 50 ]; do echo line$i; i=$((i+1)); done\nexit 1\n"
        toolkit = make_toolkit(script)

        with pytest.raises(CompilerInvocationError) as exc_info:
            NativeImageInvoker(toolkit, coords, output_stream=io.StringIO()).invoke(target)

        tail = exc_info.value.output_tail
        assert len(tail) == 20
        assert tail[-1] == "line49"

    def test_macos_layout(self, tmp_path, base_url, target):
        coords = DistributionCoordinates(base_url, "1.0.0-rc6", "macos", "amd64")
        exe = tmp_path / "mac" / "Contents" / "Home" / "bin" / "native-image"
        exe.parent.mkdir(parents=True)
        exe.write_text("#!/bin/sh\n")
        exe.chmod(0o755)

        assert NativeImageInvoker(tmp_path / "mac", coords).executable() == exe
