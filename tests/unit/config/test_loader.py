"""Tests for configuration loader."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from logsync.config.loader import CONFIG_ENV_VAR, default_config_path, load_config


class TestLoadConfig:
    def test_load_from_file(self, sample_config_yaml: Path):
        cfg = load_config(sample_config_yaml)
        assert cfg.app_name == "sample-app"
        assert cfg.rotation_interval == 600
        assert cfg.console is False
        assert cfg.defaults.logs_expiry == 5

    def test_missing_file_returns_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path / "nonexistent.yaml")
        assert cfg.app_name == "desktop-app"
        assert cfg.logs_dir is None

    def test_none_path_returns_defaults(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.yaml"))
        cfg = load_config(None)
        assert cfg.rotation_interval == 3600

    def test_none_path_reads_env_override(self, monkeypatch, sample_config_yaml: Path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(sample_config_yaml))
        assert load_config().app_name == "sample-app"

    def test_non_mapping_document_returns_defaults(self, tmp_path: Path):
        config = tmp_path / "list.yaml"
        config.write_text("- a\n- b\n")
        assert load_config(config).app_name == "desktop-app"

    def test_empty_yaml_returns_defaults(self, empty_config_yaml: Path):
        cfg = load_config(empty_config_yaml)
        assert cfg.defaults.logs_expiry == 7

    def test_malformed_yaml_raises(self, tmp_path: Path):
        bad = tmp_path / "bad.yaml"
        bad.write_text(":\n  :\n    - :\n      :::invalid")
        with pytest.raises(ValueError, match="Malformed YAML"):
            load_config(bad)

    def test_directory_path_returns_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.app_name == "desktop-app"

    def test_overrides(self, tmp_path: Path):
        config = tmp_path / "custom.yaml"
        config.write_text(
            """\
crash_reporting:
  api_key: "abc123"
archive:
  compresslevel: 5
"""
        )
        cfg = load_config(config)
        assert cfg.crash_reporting.api_key == "abc123"
        assert cfg.archive.compresslevel == 5
        # Other defaults preserved
        assert cfg.crash_reporting.endpoint == "https://notify.bugsnag.com"
        assert cfg.archive.password == ""

    def test_out_of_range_expiry_default_raises(self, tmp_path: Path):
        config = tmp_path / "bad-expiry.yaml"
        config.write_text("defaults:\n  logs_expiry: 45\n")
        with pytest.raises(ValidationError):
            load_config(config)


class TestDefaultConfigPath:
    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "custom.yaml"))
        assert default_config_path() == tmp_path / "custom.yaml"

    def test_under_app_data_dir(self, monkeypatch, tmp_path: Path):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setattr("logsync.config.loader.app_data_dir", lambda: tmp_path)
        assert default_config_path() == tmp_path / "logsync" / "logsync.yaml"
