"""Configuration loading for GraalKit."""

from graalkit.config.settings import CONFIG_FILE_NAME, GraalConfig, load_config

__all__ = ["CONFIG_FILE_NAME", "GraalConfig", "load_config"]
