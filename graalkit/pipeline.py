"""
Stage pipeline for GraalKit.

A Pipeline is a small DAG of named stages. Each stage declares the stages it
depends on, the output it will produce (computable without running it), and a
skip predicate evaluated before its action. Stages run sequentially in
dependency order; each action receives the outputs of its dependencies keyed
by stage name. Any failure aborts the run with StageFailedError naming the
stage.

The native-image pipeline is wired as::

    download --> extract --+
                           +--> native-image
                assemble --+

where ``assemble`` stands in for the host build system's step that produces
the classpath to compile.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TextIO, Tuple

import requests

from graalkit.config.settings import GraalConfig
from graalkit.core.cache import ArchiveCache
from graalkit.core.exceptions import PipelineError, StageFailedError
from graalkit.core.platform import PlatformKey, detect_platform
from graalkit.toolchain.coordinates import DistributionCoordinates
from graalkit.toolchain.downloader import Downloader
from graalkit.toolchain.extractor import Extractor
from graalkit.toolchain.native_image import BuildTarget, NativeImageInvoker

logger = logging.getLogger(__name__)

DOWNLOAD_STAGE = "download"
EXTRACT_STAGE = "extract"
ASSEMBLE_STAGE = "assemble"
NATIVE_IMAGE_STAGE = "native-image"


def _always() -> bool:
    return True


@dataclass
class Stage:
    """
    One step of a pipeline.

    Attributes:
        name: Unique stage name
        action: Callable receiving {dependency name: dependency output} and
            returning this stage's output
        output: Callable returning the declared output, or None when the
            output is only known after the action runs
        depends_on: Names of stages whose outputs this stage consumes
        should_run: Skip predicate; when it returns False the action is not
            called and the declared output is used instead
        description: Human readable summary
    """

    name: str
    action: Callable[[Dict[str, Any]], Any]
    output: Optional[Callable[[], Any]] = None
    depends_on: Tuple[str, ...] = ()
    should_run: Callable[[], bool] = _always
    description: str = ""


@dataclass
class StageResult:
    """Outcome of a single stage."""

    name: str
    output: Any
    skipped: bool
    duration: float


@dataclass
class PipelineResult:
    """Outcome of a pipeline run. Only produced when every stage succeeded."""

    results: List[StageResult] = field(default_factory=list)

    def output(self, name: str) -> Any:
        for result in self.results:
            if result.name == name:
                return result.output
        raise KeyError(name)

    @property
    def executed(self) -> List[str]:
        return [r.name for r in self.results if not r.skipped]

    @property
    def skipped(self) -> List[str]:
        return [r.name for r in self.results if r.skipped]


class Pipeline:
    """
    Sequential executor for a DAG of stages.

    Example:
        >>> pipeline = Pipeline()
        >>> pipeline.add_stage(Stage("a", action=lambda inputs: 1, output=lambda: 1))
        >>> pipeline.add_stage(
        ...     Stage("b", action=lambda inputs: inputs["a"] + 1, depends_on=("a",))
        ... )
        >>> pipeline.run().output("b")
        2
    """

    def __init__(self, stages: Iterable[Stage] = ()):
        self._stages: Dict[str, Stage] = {}
        for stage in stages:
            self.add_stage(stage)

    @property
    def stages(self) -> List[Stage]:
        return list(self._stages.values())

    def stage(self, name: str) -> Stage:
        try:
            return self._stages[name]
        except KeyError:
            raise PipelineError(f"Unknown stage: {name}") from None

    def add_stage(self, stage: Stage) -> Stage:
        """
        Add a stage. Dependencies must already be present.

        Raises:
            PipelineError: On duplicate names or unknown dependencies
        """
        if stage.name in self._stages:
            raise PipelineError(f"Duplicate stage name: {stage.name}")
        for dep in stage.depends_on:
            if dep not in self._stages:
                raise PipelineError(
                    f"Stage '{stage.name}' depends on unknown stage '{dep}'"
                )
        self._stages[stage.name] = stage
        return stage

    def order(self, targets: Optional[Sequence[str]] = None) -> List[Stage]:
        """
        Stages needed for targets, in dependency order.

        Args:
            targets: Stages to run, with their dependencies. All stages if None.
        """
        if targets is None:
            targets = list(self._stages)

        ordered: List[Stage] = []
        visiting = set()
        done = set()

        def visit(name: str):
            if name in done:
                return
            if name in visiting:
                raise PipelineError(f"Dependency cycle at stage '{name}'")
            visiting.add(name)
            stage = self.stage(name)
            for dep in stage.depends_on:
                visit(dep)
            visiting.discard(name)
            done.add(name)
            ordered.append(stage)

        for name in targets:
            visit(name)
        return ordered

    def run(self, targets: Optional[Sequence[str]] = None) -> PipelineResult:
        """
        Run the stages needed for targets.

        Raises:
            StageFailedError: If a stage's predicate or action fails
            PipelineError: If a stage produces something other than its
                declared output
        """
        result = PipelineResult()
        outputs: Dict[str, Any] = {}

        for stage in self.order(targets):
            start = time.time()
            inputs = {dep: outputs[dep] for dep in stage.depends_on}

            try:
                run_it = stage.should_run()
            except Exception as e:
                raise StageFailedError(stage.name, e) from e

            if not run_it:
                if stage.output is None:
                    raise PipelineError(
                        f"Stage '{stage.name}' was skipped but declares no output"
                    )
                output = stage.output()
                logger.info(f"> {stage.name}: up to date, skipping")
                outputs[stage.name] = output
                result.results.append(StageResult(stage.name, output, True, 0.0))
                continue

            logger.info(f"> {stage.name}")
            try:
                output = stage.action(inputs)
            except Exception as e:
                logger.error(f"Stage '{stage.name}' failed: {e}")
                raise StageFailedError(stage.name, e) from e

            if stage.output is not None:
                declared = stage.output()
                if output != declared:
                    raise PipelineError(
                        f"Stage '{stage.name}' produced {output}, "
                        f"but declares {declared} as its output"
                    )

            duration = time.time() - start
            logger.debug(f"Stage '{stage.name}' finished in {duration:.2f}s")
            outputs[stage.name] = output
            result.results.append(StageResult(stage.name, output, False, duration))

        return result


def build_native_image_pipeline(
    config: GraalConfig,
    target: Optional[BuildTarget] = None,
    assemble: Optional[Callable[[], Iterable[Path]]] = None,
    platform: Optional[PlatformKey] = None,
    force_extract: bool = False,
    output_stream: Optional[TextIO] = None,
    session: Optional[requests.Session] = None,
) -> Pipeline:
    """
    Wire download -> extract -> native-image for a configuration.

    The platform is resolved before any stage is built, so an unsupported
    host fails here, before any network or filesystem activity.

    Args:
        config: GraalKit configuration
        target: What to compile (default: derived from config)
        assemble: Host build step returning the classpath to compile. When
            None, target.classpath is taken as already assembled.
        platform: Platform key (default: detected from the host)
        force_extract: Re-extract even if the toolkit is present
        output_stream: Where compiler output is echoed (default: stdout)
        session: Optional requests session for the download

    Returns:
        A Pipeline with the stages download, extract, assemble and native-image

    Raises:
        UnsupportedPlatformError: If the host platform is not supported
    """
    if platform is None:
        platform = detect_platform()
    if target is None:
        target = config.build_target()

    coordinates = DistributionCoordinates.for_platform(
        platform, config.version, config.download_base_url
    )
    cache = ArchiveCache(config.resolved_cache_dir(), config.version)
    downloader = Downloader(
        cache, coordinates, lock_timeout=config.lock_timeout, session=session
    )
    extractor = Extractor(
        cache, coordinates, force=force_extract, lock_timeout=config.lock_timeout
    )

    def run_assemble(inputs):
        if assemble is None:
            return target.classpath
        return tuple(Path(p) for p in assemble())

    def run_native_image(inputs):
        invoker = NativeImageInvoker(inputs[EXTRACT_STAGE], coordinates, output_stream)
        invoker.invoke(target.with_classpath(inputs[ASSEMBLE_STAGE]))
        return target.output_path()

    pipeline = Pipeline()
    pipeline.add_stage(
        Stage(
            DOWNLOAD_STAGE,
            action=lambda inputs: downloader.download(),
            output=downloader.output,
            should_run=downloader.should_run,
            description="Downloads and caches GraalVM binaries.",
        )
    )
    pipeline.add_stage(
        Stage(
            EXTRACT_STAGE,
            action=lambda inputs: extractor.extract(inputs[DOWNLOAD_STAGE]),
            output=extractor.output,
            depends_on=(DOWNLOAD_STAGE,),
            should_run=extractor.should_run,
            description="Extracts GraalVM tooling from the downloaded archive.",
        )
    )
    pipeline.add_stage(
        Stage(
            ASSEMBLE_STAGE,
            action=run_assemble,
            output=None if assemble else (lambda: target.classpath),
            description="Provides the assembled classpath to compile.",
        )
    )
    pipeline.add_stage(
        Stage(
            NATIVE_IMAGE_STAGE,
            action=run_native_image,
            output=target.output_path,
            depends_on=(EXTRACT_STAGE, ASSEMBLE_STAGE),
            description="Runs GraalVM's native-image command.",
        )
    )

    logger.debug(
        f"Built pipeline for GraalVM {config.version} on {platform} "
        f"(cache: {cache.root})"
    )
    return pipeline
