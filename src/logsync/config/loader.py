"""Locating and loading the logsync YAML config."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from logsync.config.schema import LogsyncConfig
from logsync.paths import app_data_dir

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LOGSYNC_CONFIG"
CONFIG_FILE_NAME = "logsync.yaml"


def default_config_path() -> Path:
    """``$LOGSYNC_CONFIG`` when set, else ``{data_dir}/logsync/logsync.yaml``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return app_data_dir() / "logsync" / CONFIG_FILE_NAME


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Malformed YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level is %s, not a mapping", path, type(data).__name__)
        return {}
    return data


def load_config(path: Path | str | None = None) -> LogsyncConfig:
    """Load the config at ``path``, or at :func:`default_config_path` if None.

    A missing file gives the defaults. Malformed YAML raises ValueError and
    out-of-range values raise pydantic's ValidationError.
    """
    path = Path(path).expanduser() if path is not None else default_config_path()
    if not path.is_file():
        logger.debug("No config at %s; using defaults", path)
        return LogsyncConfig()
    return LogsyncConfig.model_validate(_read_mapping(path))
