"""
Download command implementation.

Downloads and caches the GraalVM archive for the current platform.
"""

import logging

from graalkit.cli.utils import config_from_args, format_success_message
from graalkit.pipeline import DOWNLOAD_STAGE, build_native_image_pipeline

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the download command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = config_from_args(args)
    logger.debug(f"Arguments: {args}")

    result = build_native_image_pipeline(config).run([DOWNLOAD_STAGE])

    print(
        format_success_message(
            "GraalVM archive ready",
            {
                "Version": config.version,
                "Archive": result.output(DOWNLOAD_STAGE),
                "Downloaded": "no (cached)" if DOWNLOAD_STAGE in result.skipped else "yes",
            },
        )
    )
    return 0
