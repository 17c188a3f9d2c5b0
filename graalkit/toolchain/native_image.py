"""
native-image compiler invocation.

Runs the extracted toolkit's native-image executable against classpath inputs
assembled by an upstream build step. The compiler's own output is streamed
through unchanged; a non-zero exit becomes CompilerInvocationError carrying
the tail of that output. This stage never skips: the executable it produces
is expected fresh on every run.
"""

import collections
import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from graalkit.core.exceptions import (
    CompilerInvocationError,
    CompilerNotFoundError,
    ConfigError,
)
from graalkit.core.filesystem import is_executable
from graalkit.toolchain.coordinates import DistributionCoordinates

logger = logging.getLogger(__name__)

OUTPUT_TAIL_LINES = 20


@dataclass(frozen=True)
class BuildTarget:
    """
    What to compile and where to put it.

    Attributes:
        main_class: Fully qualified entry point class
        output_name: File name of the produced executable
        classpath: Assembled jars/directories to compile
        output_dir: Directory the executable is written to
    """

    main_class: Optional[str]
    output_name: str
    classpath: Tuple[Path, ...] = field(default_factory=tuple)
    output_dir: Path = Path("build") / "graal"

    def output_path(self) -> Path:
        return Path(self.output_dir) / self.output_name

    def with_classpath(self, classpath) -> "BuildTarget":
        return BuildTarget(
            main_class=self.main_class,
            output_name=self.output_name,
            classpath=tuple(Path(p) for p in classpath),
            output_dir=self.output_dir,
        )


class NativeImageInvoker:
    """
    Drives the native-image compiler of an extracted GraalVM toolkit.

    Example:
        >>> invoker = NativeImageInvoker(toolkit_dir, coords)
        >>> target = BuildTarget("com.example.Main", "app", (Path("app.jar"),))
        >>> invoker.invoke(target)
        0
    """

    def __init__(
        self,
        toolkit_dir: Path,
        coordinates: DistributionCoordinates,
        output_stream: Optional[TextIO] = None,
    ):
        """
        Args:
            toolkit_dir: Extracted toolkit directory
            coordinates: Distribution the toolkit belongs to (selects the layout)
            output_stream: Where compiler output is echoed (default: sys.stdout)
        """
        self.toolkit_dir = Path(toolkit_dir)
        self.coordinates = coordinates
        self.output_stream = output_stream

    def executable(self) -> Path:
        """
        Locate the native-image executable.

        Raises:
            CompilerNotFoundError: If it is missing or not executable
        """
        exe = self.toolkit_dir / self.coordinates.compiler_relative_path()
        if not is_executable(exe):
            raise CompilerNotFoundError(
                f"native-image not found or not executable at {exe}"
            )
        return exe

    def build_arguments(self, target: BuildTarget) -> List[str]:
        """Build the full compiler command line for a target."""
        _validate_target(target)
        classpath = os.pathsep.join(str(p) for p in target.classpath)
        return [
            str(self.executable()),
            "-cp",
            classpath,
            f"-H:Path={target.output_dir}",
            f"-H:Name={target.output_name}",
            target.main_class,
        ]

    def invoke(self, target: BuildTarget) -> int:
        """
        Compile a target into a native executable.

        Args:
            target: Entry point, output name and assembled classpath

        Returns:
            0 on success

        Raises:
            ConfigError: If the target has no main class or classpath
            CompilerNotFoundError: If the compiler is missing
            CompilerInvocationError: If the compiler exits non-zero
        """
        cmd = self.build_arguments(target)
        Path(target.output_dir).mkdir(parents=True, exist_ok=True)

        logger.info(f"Building native image {target.output_path()}")
        logger.debug(f"Running: {' '.join(cmd)}")

        stream = self.output_stream or sys.stdout
        tail = collections.deque(maxlen=OUTPUT_TAIL_LINES)

        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
        with process:
            for line in process.stdout:
                stream.write(line)
                tail.append(line.rstrip("\n"))
            returncode = process.wait()

        if returncode != 0:
            raise CompilerInvocationError(returncode, cmd, list(tail))

        logger.info(f"Native image written to {target.output_path()}")
        return returncode


def _validate_target(target: BuildTarget) -> None:
    if not target.main_class:
        raise ConfigError(
            "No main class configured; set 'main_class' in graalkit.yaml "
            "or pass --main-class"
        )
    if not target.output_name:
        raise ConfigError("Output name cannot be empty")
    if not target.classpath:
        raise ConfigError(
            "No classpath entries; the assembled build artifacts are required"
        )
