"""
Native-image command implementation.

Runs the full pipeline: download, extract, then native-image on the
assembled classpath.
"""

import logging

from graalkit.cli.utils import config_from_args, format_success_message
from graalkit.pipeline import NATIVE_IMAGE_STAGE, build_native_image_pipeline

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the native-image command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = config_from_args(args)
    target = config.build_target()

    missing = [str(p) for p in target.classpath if not p.exists()]
    if missing:
        logger.warning(
            "Classpath entries not found (has the build been assembled?): "
            + ", ".join(missing)
        )

    pipeline = build_native_image_pipeline(
        config, target=target, force_extract=args.force_extract
    )
    result = pipeline.run([NATIVE_IMAGE_STAGE])

    print(
        format_success_message(
            "Native image built",
            {
                "Main class": target.main_class,
                "Executable": result.output(NATIVE_IMAGE_STAGE),
            },
        )
    )
    return 0
