"""Tests for configuration schema."""

import pytest
from pydantic import ValidationError

from logsync.config.schema import (
    ChannelConfig,
    LoggerSettings,
    LogsyncConfig,
    Session,
)


class TestLoggerSettings:
    def test_defaults(self):
        settings = LoggerSettings()
        assert settings.file_logging is True
        assert settings.logs_expiry == 7
        assert settings.session is None
        assert settings.enable_bugsnag is False

    def test_channel_aliases(self):
        settings = LoggerSettings(FILE_LOGGING=False, LOGS_EXPIRY=3)
        assert settings.file_logging is False
        assert settings.logs_expiry == 3

    @pytest.mark.parametrize("days", [0, 31, -1])
    def test_expiry_bounds(self, days):
        with pytest.raises(ValidationError):
            LoggerSettings(logs_expiry=days)

    def test_assignment_is_validated(self):
        settings = LoggerSettings()
        with pytest.raises(ValidationError):
            settings.logs_expiry = 60
        assert settings.logs_expiry == 7

    def test_session_from_dict(self):
        settings = LoggerSettings()
        settings.session = {"folder": "2025-10-09_08-00-00", "time": 1.0}
        assert isinstance(settings.session, Session)
        assert settings.session.folder == "2025-10-09_08-00-00"


class TestSession:
    def test_frozen(self):
        session = Session(folder="a", time=1.0)
        with pytest.raises(ValidationError):
            session.folder = "b"  # type: ignore[misc]

    def test_missing_fields_raise(self):
        with pytest.raises(ValidationError):
            Session()  # type: ignore[call-arg]


class TestLogsyncConfig:
    def test_full_defaults(self):
        cfg = LogsyncConfig()
        assert cfg.app_name == "desktop-app"
        assert cfg.rotation_interval == 3600
        assert cfg.console is True
        assert cfg.channel == ChannelConfig()
        assert cfg.archive.compresslevel == 9

    def test_rotation_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            LogsyncConfig(rotation_interval=0)
