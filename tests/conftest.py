"""Shared test fixtures."""

import os
from pathlib import Path

import pytest

from helpers import BASE_TIME, DAY, FakeClock

from logsync.config.schema import LogsyncConfig


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def logs_dir(tmp_path: Path) -> Path:
    return tmp_path / "logs"


@pytest.fixture
def config(logs_dir: Path) -> LogsyncConfig:
    return LogsyncConfig(app_name="test-app", logs_dir=str(logs_dir), console=False)


@pytest.fixture
def no_birth_time(monkeypatch):
    """Behave like a filesystem that does not record creation times."""
    monkeypatch.setattr("logsync.retention.partitions.birth_time", lambda stat: None)


@pytest.fixture
def make_partition(no_birth_time):
    """Create a partition directory whose files are ``age_days`` old."""

    def _make(root: Path, name: str, age_days: float, now: float = BASE_TIME) -> Path:
        partition = root / name
        partition.mkdir(parents=True, exist_ok=True)
        log_file = partition / "main.log"
        log_file.write_text(f"{name}::info::line\n")
        stamp = now - age_days * DAY
        os.utime(log_file, (stamp, stamp))
        os.utime(partition, (stamp, stamp))
        return partition

    return _make


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    """Create a minimal valid config YAML file."""
    config = tmp_path / "logsync.yaml"
    config.write_text(
        f"""\
app_name: "sample-app"
logs_dir: "{tmp_path / 'sample-logs'}"
rotation_interval: 600
console: false
defaults:
  file_logging: true
  logs_expiry: 5
"""
    )
    return config


@pytest.fixture
def empty_config_yaml(tmp_path: Path) -> Path:
    """Create an empty config YAML file."""
    config = tmp_path / "logsync.yaml"
    config.write_text("{}\n")
    return config
