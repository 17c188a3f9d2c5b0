"""
Extract command implementation.

Downloads (if needed) and extracts GraalVM tooling into the cache.
"""

import logging

from graalkit.cli.utils import config_from_args, format_success_message
from graalkit.pipeline import EXTRACT_STAGE, build_native_image_pipeline

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the extract command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = config_from_args(args)

    pipeline = build_native_image_pipeline(config, force_extract=args.force)
    result = pipeline.run([EXTRACT_STAGE])

    print(
        format_success_message(
            "GraalVM tooling ready",
            {
                "Version": config.version,
                "Toolkit": result.output(EXTRACT_STAGE),
                "Ran": ", ".join(result.executed) or "nothing (up to date)",
            },
        )
    )
    return 0
