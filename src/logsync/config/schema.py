"""Pydantic v2 models for logsync settings and configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MIN_LOGS_EXPIRY = 1
MAX_LOGS_EXPIRY = 30


class Session(BaseModel):
    """A time bucket of log files; ``folder`` names the partition directory."""

    model_config = ConfigDict(frozen=True)

    folder: str
    time: float


class LoggerSettings(BaseModel):
    """Live settings shared by every process.

    Field aliases are the names used on the message channel.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    file_logging: bool = Field(default=True, alias="FILE_LOGGING")
    logs_expiry: int = Field(
        default=7, ge=MIN_LOGS_EXPIRY, le=MAX_LOGS_EXPIRY, alias="LOGS_EXPIRY",
    )
    session: Session | None = Field(default=None, alias="SESSION")
    enable_bugsnag: bool = Field(default=False, alias="ENABLE_BUGSNAG")


class DefaultsConfig(BaseModel):
    file_logging: bool = True
    logs_expiry: int = Field(default=7, ge=MIN_LOGS_EXPIRY, le=MAX_LOGS_EXPIRY)
    enable_bugsnag: bool = False


class CrashReportingConfig(BaseModel):
    api_key: str = ""
    endpoint: str = "https://notify.bugsnag.com"
    release_stage: str = "production"
    app_version: str = ""
    timeout: int = 10


class ChannelConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 47200
    authkey: str = "logsync"


class ArchiveConfig(BaseModel):
    compresslevel: int = Field(default=9, ge=0, le=9)
    password: str = ""


class LogsyncConfig(BaseModel):
    """Root configuration model for logsync."""

    app_name: str = "desktop-app"
    logs_dir: str | None = None
    rotation_interval: int = Field(default=3600, gt=0)
    console: bool = True
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    crash_reporting: CrashReportingConfig = Field(default_factory=CrashReportingConfig)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
