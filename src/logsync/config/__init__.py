"""Configuration system for logsync."""

from logsync.config.loader import load_config
from logsync.config.schema import LoggerSettings, LogsyncConfig, Session
from logsync.config.store import ConfigStore

__all__ = ["load_config", "ConfigStore", "LoggerSettings", "LogsyncConfig", "Session"]
