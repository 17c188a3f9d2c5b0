"""
Info command implementation.

Shows the resolved platform, artifact locations and whether each stage would
run, without running anything.
"""

from graalkit.cli.utils import config_from_args, format_success_message
from graalkit.core.platform import detect_platform
from graalkit.pipeline import build_native_image_pipeline


def run(args) -> int:
    config = config_from_args(args)
    platform = detect_platform()
    pipeline = build_native_image_pipeline(config, platform=platform)

    details = {
        "Platform": platform,
        "GraalVM version": config.version,
        "Download base URL": config.download_base_url,
    }
    for stage in pipeline.stages:
        if stage.output is None:
            continue
        state = "would run" if stage.should_run() else "up to date"
        details[stage.name] = f"{stage.output()} ({state}). {stage.description}".rstrip()

    print(format_success_message("GraalKit", details))
    return 0
