"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from graalkit.config.settings import GraalConfig, load_config

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def config_from_args(args) -> GraalConfig:
    """
    Load configuration and apply command-line overrides.

    Args:
        args: Parsed command-line arguments

    Returns:
        Effective configuration

    Raises:
        ConfigError: If the configuration file or an override is invalid
    """
    project_root = Path(getattr(args, "project_root", None) or Path.cwd()).resolve()
    config = load_config(getattr(args, "config", None), project_root)

    classpath = getattr(args, "classpath", None)
    return config.with_overrides(
        version=getattr(args, "graal_version", None),
        download_base_url=getattr(args, "download_base_url", None),
        cache_dir=getattr(args, "cache_dir", None),
        main_class=getattr(args, "main_class", None),
        output_name=getattr(args, "output_name", None),
        output_dir=getattr(args, "output_dir", None),
        classpath=list(classpath) if classpath else None,
    )


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def format_success_message(
    title: str,
    details: Dict[str, Any],
    width: int = 70,
) -> str:
    """
    Format a standardized success message.

    Args:
        title: Success message title
        details: Key-value pairs to display
        width: Width of message box

    Returns:
        Formatted message string
    """
    lines = ["=" * width, title, "=" * width, ""]
    for key, value in details.items():
        lines.append(f"{key}: {value}")
    lines.append("")
    return "\n".join(lines)

