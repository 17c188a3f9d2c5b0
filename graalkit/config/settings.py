"""YAML configuration for GraalKit.

Reads ``graalkit.yaml`` from the project root. Every key is optional:

    download_base_url: https://github.com/oracle/graal/releases/download/
    version: 1.0.0-rc6
    main_class: com.example.Main
    output_name: my-app           # default: project directory name
    output_dir: build/graal
    classpath:
      - build/libs/my-app.jar
    cache_dir: ~/.graalkit/cache
    lock_timeout: 600

Relative paths are resolved against the project root.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from graalkit.core.exceptions import ConfigError
from graalkit.core.locking import DEFAULT_LOCK_TIMEOUT
from graalkit.toolchain.coordinates import (
    DEFAULT_DOWNLOAD_BASE_URL,
    DEFAULT_GRAAL_VERSION,
)
from graalkit.toolchain.native_image import BuildTarget

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "graalkit.yaml"


@dataclass
class GraalConfig:
    """Complete GraalKit configuration."""

    project_root: Path = field(default_factory=Path.cwd)
    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL
    version: str = DEFAULT_GRAAL_VERSION
    main_class: Optional[str] = None
    output_name: Optional[str] = None
    output_dir: str = "build/graal"
    classpath: List[str] = field(default_factory=list)
    cache_dir: Optional[str] = None
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT

    def resolved_output_name(self) -> str:
        """Configured output name, or the project directory name."""
        if self.output_name:
            return self.output_name
        return Path(self.project_root).resolve().name

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path against the project root."""
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = Path(self.project_root) / path
        return path

    def resolved_cache_dir(self) -> Optional[Path]:
        """Configured cache root resolved against the project root, if set."""
        if not self.cache_dir:
            return None
        return self.resolve_path(self.cache_dir)

    def build_target(self) -> BuildTarget:
        """BuildTarget described by this configuration."""
        return BuildTarget(
            main_class=self.main_class,
            output_name=self.resolved_output_name(),
            classpath=tuple(self.resolve_path(p) for p in self.classpath),
            output_dir=self.resolve_path(self.output_dir),
        )

    def with_overrides(self, **overrides: Any) -> "GraalConfig":
        """Copy with non-None overrides applied (e.g. from CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        config = replace(self, **changes)
        _validate(config)
        return config


# Keys readable from the YAML file, with accepted types
_FILE_KEYS = {
    "download_base_url": (str,),
    "version": (str,),
    "main_class": (str,),
    "output_name": (str,),
    "output_dir": (str,),
    "classpath": (list,),
    "cache_dir": (str,),
    "lock_timeout": (int,),
}


def load_config(
    config_path: Optional[Path] = None, project_root: Optional[Path] = None
) -> GraalConfig:
    """
    Load GraalKit configuration.

    Args:
        config_path: Explicit configuration file. Must exist if given.
        project_root: Project root (default: current directory). When
            config_path is None, ``<project_root>/graalkit.yaml`` is used if
            it exists.

    Returns:
        Parsed configuration, with defaults for anything not set

    Raises:
        ConfigError: If the file is missing (when explicit) or invalid
    """
    project_root = Path(project_root) if project_root else Path.cwd()

    if config_path is None:
        candidate = project_root / CONFIG_FILE_NAME
        if not candidate.exists():
            logger.debug(f"No {CONFIG_FILE_NAME} in {project_root}, using defaults")
            return GraalConfig(project_root=project_root)
        config_path = candidate
    elif not Path(config_path).exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")

    return _parse(data, project_root)


def _parse(data: Dict[str, Any], project_root: Path) -> GraalConfig:
    values: Dict[str, Any] = {}

    for key, value in data.items():
        if key not in _FILE_KEYS:
            logger.warning(f"Ignoring unknown configuration key: {key}")
            continue
        if value is None:
            continue
        if key == "version" and isinstance(value, float):
            # YAML reads an unquoted 20.10 as the float 20.1
            raise ConfigError(
                "Configuration key 'version' must be a quoted string, "
                f"got the number {value}"
            )
        if key == "version" and isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, bool) or not isinstance(value, _FILE_KEYS[key]):
            raise ConfigError(
                f"Configuration key '{key}' must be of type "
                f"{_FILE_KEYS[key][0].__name__}, got {type(value).__name__}"
            )
        values[key] = value

    if "classpath" in values:
        entries = values["classpath"]
        if not all(isinstance(e, str) for e in entries):
            raise ConfigError("Configuration key 'classpath' must be a list of paths")

    config = GraalConfig(project_root=project_root, **values)
    _validate(config)
    return config


def _validate(config: GraalConfig) -> None:
    if not config.version or not str(config.version).strip():
        raise ConfigError("GraalVM version cannot be empty")
    if not config.download_base_url:
        raise ConfigError("Download base URL cannot be empty")
    if not config.download_base_url.startswith(("http://", "https://")):
        raise ConfigError(
            f"Download base URL must be an http(s) URL: {config.download_base_url}"
        )
    if config.lock_timeout <= 0:
        raise ConfigError("lock_timeout must be positive")

