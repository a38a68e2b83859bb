"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence and error handling
- get_cache_path() function
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from quell.config.loader import (
    GLOBAL_CONFIG_PATH,
    _deep_merge,
    _load_yaml,
    get_cache_path,
    load_config,
)
from quell.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads valid YAML content."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("cache:\n  default_cache_time: 30\n")

        assert _load_yaml(yaml_file) == {"cache": {"default_cache_time": 30}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("cache:\n  cache_type:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)

        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1}, {"a": 2}) == {"a": 2}

    def test_nested_merge(self) -> None:
        """Nested dicts are merged key by key."""
        base = {"cache": {"cache_type": "memory", "default_cache_time": 600}}
        override = {"cache": {"default_cache_time": 60}}

        assert _deep_merge(base, override) == {"cache": {"cache_type": "memory", "default_cache_time": 60}}

    def test_does_not_mutate_base(self) -> None:
        base = {"cache": {"cache_type": "memory"}}

        _deep_merge(base, {"cache": {"cache_type": "sqlite"}})

        assert base == {"cache": {"cache_type": "memory"}}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_default_config_when_no_files(self, tmp_path: Path) -> None:
        """Returns default config when no config files exist."""
        with patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.logging.level == "INFO"
        assert config.cache.default_cache_time == 600
        assert config.cache.cache_type == "memory"

    def test_loads_project_config(self, tmp_path: Path) -> None:
        """Loads config from the project .quell directory."""
        quell_dir = tmp_path / ".quell"
        quell_dir.mkdir()
        (quell_dir / "config.yaml").write_text("cache:\n  user_defined_id: isbn\n")

        with patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.cache.user_defined_id == "isbn"

    def test_project_config_overrides_global(self, tmp_path: Path) -> None:
        """Project YAML wins over the global file, other global keys survive."""
        global_file = tmp_path / "global.yaml"
        global_file.write_text("cache:\n  default_cache_time: 10\n  cache_type: sqlite\n")
        quell_dir = tmp_path / ".quell"
        quell_dir.mkdir()
        (quell_dir / "config.yaml").write_text("cache:\n  default_cache_time: 20\n")

        with patch("quell.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path)

        assert config.cache.default_cache_time == 20
        assert config.cache.cache_type == "sqlite"

    def test_env_vars_override_yaml(self, tmp_path: Path) -> None:
        """Environment variables override YAML config."""
        quell_dir = tmp_path / ".quell"
        quell_dir.mkdir()
        (quell_dir / "config.yaml").write_text("cache:\n  default_cache_time: 20\n")

        with (
            patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"QUELL__CACHE__DEFAULT_CACHE_TIME": "45"}),
        ):
            config = load_config(tmp_path)

        assert config.cache.default_cache_time == 45

    def test_kwargs_override_all(self, tmp_path: Path) -> None:
        """Keyword arguments override everything."""
        from quell.config.models import LoggingConfig

        with patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path, logging=LoggingConfig(level="ERROR"))

        assert config.logging.level == "ERROR"

    def test_raises_config_error_for_invalid_value(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid config values."""
        quell_dir = tmp_path / ".quell"
        quell_dir.mkdir()
        (quell_dir / "config.yaml").write_text("cache:\n  default_cache_time: -1\n")

        with (
            patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)

        assert exc_info.value.code is ErrorCode.CONFIG_INVALID_VALUE
        assert "default_cache_time" in exc_info.value.details["field"]


class TestGetCachePath:
    """Tests for get_cache_path function."""

    def test_returns_default_path(self, tmp_path: Path) -> None:
        """Default SQLite file lives under .quell."""
        with patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert get_cache_path(config, tmp_path) == tmp_path / ".quell" / "cache.db"

    def test_respects_custom_cache_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "elsewhere" / "q.db"
        quell_dir = tmp_path / ".quell"
        quell_dir.mkdir()
        (quell_dir / "config.yaml").write_text(f"cache:\n  cache_path: {custom}\n")

        with patch("quell.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert get_cache_path(config, tmp_path) == custom


class TestGlobalConfigPath:
    """Tests for GLOBAL_CONFIG_PATH constant."""

    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "quell" in str(GLOBAL_CONFIG_PATH)
