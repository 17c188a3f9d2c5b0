"""
Tests for graalkit.yaml loading and validation.
"""

from pathlib import Path

import pytest

from graalkit.config.settings import GraalConfig, load_config
from graalkit.core.exceptions import ConfigError
from graalkit.toolchain.coordinates import (
    DEFAULT_DOWNLOAD_BASE_URL,
    DEFAULT_GRAAL_VERSION,
)


def write_config(project: Path, text: str) -> Path:
    path = project / "graalkit.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path):
        config = load_config(project_root=tmp_path)

        assert config.version == DEFAULT_GRAAL_VERSION == "1.0.0-rc6"
        assert config.download_base_url == DEFAULT_DOWNLOAD_BASE_URL
        assert config.output_dir == "build/graal"
        assert config.classpath == []
        assert config.main_class is None
        assert config.lock_timeout == 600

    def test_reads_project_file(self, tmp_path):
        write_config(
            tmp_path,
            "version: 1.0.0-rc5\n"
            "download_base_url: https://mirror.example.com/graal/\n"
            "main_class: com.example.Main\n"
            "output_name: app\n"
            "classpath:\n"
            "  - build/libs/app.jar\n"
            "lock_timeout: 30\n",
        )

        config = load_config(project_root=tmp_path)

        assert config.version == "1.0.0-rc5"
        assert config.download_base_url == "https://mirror.example.com/graal/"
        assert config.main_class == "com.example.Main"
        assert config.output_name == "app"
        assert config.classpath == ["build/libs/app.jar"]
        assert config.lock_timeout == 30

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("main_class: com.example.Other\n")

        config = load_config(path, project_root=tmp_path)

        assert config.main_class == "com.example.Other"

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", project_root=tmp_path)

    def test_empty_file(self, tmp_path):
        write_config(tmp_path, "")
        assert load_config(project_root=tmp_path).version == DEFAULT_GRAAL_VERSION

    def test_integer_version_becomes_string(self, tmp_path):
        write_config(tmp_path, "version: 20\n")
        assert load_config(project_root=tmp_path).version == "20"

    def test_unquoted_float_version_rejected(self, tmp_path):
        write_config(tmp_path, "version: 20.10\n")
        with pytest.raises(ConfigError, match="quoted string"):
            load_config(project_root=tmp_path)

    def test_quoted_version_kept_verbatim(self, tmp_path):
        write_config(tmp_path, "version: \"20.10\"\n")
        assert load_config(project_root=tmp_path).version == "20.10"

    def test_invalid_yaml(self, tmp_path):
        write_config(tmp_path, "version: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(project_root=tmp_path)

    def test_root_must_be_mapping(self, tmp_path):
        write_config(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(project_root=tmp_path)

    def test_wrong_type(self, tmp_path):
        write_config(tmp_path, "lock_timeout: soon\n")
        with pytest.raises(ConfigError, match="lock_timeout"):
            load_config(project_root=tmp_path)

    def test_bool_rejected(self, tmp_path):
        write_config(tmp_path, "lock_timeout: true\n")
        with pytest.raises(ConfigError):
            load_config(project_root=tmp_path)

    def test_classpath_entries_must_be_strings(self, tmp_path):
        write_config(tmp_path, "classpath:\n  - 1\n")
        with pytest.raises(ConfigError, match="classpath"):
            load_config(project_root=tmp_path)

    def test_non_http_base_url(self, tmp_path):
        write_config(tmp_path, "download_base_url: ftp://example.com/\n")
        with pytest.raises(ConfigError, match="http"):
            load_config(project_root=tmp_path)

    def test_unknown_keys_warned(self, tmp_path, caplog):
        write_config(tmp_path, "colour: blue\n")

        config = load_config(project_root=tmp_path)

        assert config.version == DEFAULT_GRAAL_VERSION
        assert "colour" in caplog.text


class TestGraalConfig:
    def test_relative_cache_dir_resolved_against_project(self, tmp_path):
        config = GraalConfig(project_root=tmp_path / "proj", cache_dir=".graal-cache")

        assert config.resolved_cache_dir() == tmp_path / "proj" / ".graal-cache"

    def test_absolute_cache_dir_kept(self, tmp_path):
        config = GraalConfig(project_root=tmp_path, cache_dir=str(tmp_path / "shared"))

        assert config.resolved_cache_dir() == tmp_path / "shared"

    def test_no_cache_dir(self, tmp_path):
        assert GraalConfig(project_root=tmp_path).resolved_cache_dir() is None

    def test_output_name_defaults_to_project_dir(self, tmp_path):
        project = tmp_path / "my-service"
        project.mkdir()

        assert GraalConfig(project_root=project).resolved_output_name() == "my-service"

    def test_build_target_resolves_paths(self, tmp_path):
        config = GraalConfig(
            project_root=tmp_path,
            main_class="com.example.Main",
            output_name="app",
            classpath=["build/libs/app.jar", "/abs/lib.jar"],
        )

        target = config.build_target()

        assert target.main_class == "com.example.Main"
        assert target.classpath == (
            tmp_path / "build" / "libs" / "app.jar",
            Path("/abs/lib.jar"),
        )
        assert target.output_path() == tmp_path / "build" / "graal" / "app"

    def test_overrides_ignore_none(self, tmp_path):
        config = GraalConfig(project_root=tmp_path)

        assert config.with_overrides(version=None) is config

    def test_overrides_applied_and_validated(self, tmp_path):
        config = GraalConfig(project_root=tmp_path)

        updated = config.with_overrides(version="1.0.0-rc5", main_class="a.B")
        assert updated.version == "1.0.0-rc5"
        assert updated.main_class == "a.B"

        with pytest.raises(ConfigError):
            config.with_overrides(download_base_url="not-a-url")
