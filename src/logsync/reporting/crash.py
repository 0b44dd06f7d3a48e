"""Crash reports via the Bugsnag notify HTTP API."""

from __future__ import annotations

import traceback
from typing import Any

import requests

from logsync import __version__
from logsync.config.schema import CrashReportingConfig

PAYLOAD_VERSION = "5"


class CrashReporter:
    """Send error reports to a Bugsnag-compatible endpoint.

    Reporting is best effort: failures return False and are never raised.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = "https://notify.bugsnag.com",
        release_stage: str = "production",
        app_version: str = "",
        timeout: int = 10,
        enabled: bool = True,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.release_stage = release_stage
        self.app_version = app_version
        self.timeout = timeout
        self.enabled = enabled

    @classmethod
    def from_config(cls, config: CrashReportingConfig) -> CrashReporter:
        """Create from CrashReportingConfig. Returns disabled instance if the key is missing."""
        if not config.api_key:
            return cls(api_key="", enabled=False)
        return cls(
            api_key=config.api_key,
            endpoint=config.endpoint,
            release_stage=config.release_stage,
            app_version=config.app_version,
            timeout=config.timeout,
        )

    def build_event(self, error: BaseException | str, context: str = "") -> dict[str, Any]:
        if isinstance(error, BaseException):
            error_class = type(error).__name__
            message = str(error)
            frames = traceback.extract_tb(error.__traceback__)
            stacktrace = [
                {"file": f.filename, "lineNumber": f.lineno, "method": f.name}
                for f in frames
            ]
        else:
            error_class = "LoggedError"
            message = error
            stacktrace = []

        event: dict[str, Any] = {
            "exceptions": [
                {"errorClass": error_class, "message": message, "stacktrace": stacktrace},
            ],
            "severity": "error",
            "unhandled": False,
            "app": {"releaseStage": self.release_stage},
        }
        if self.app_version:
            event["app"]["version"] = self.app_version
        if context:
            event["context"] = context
        return event

    def notify(self, error: BaseException | str, context: str = "") -> bool:
        """Report an error. Returns True on success or if disabled."""
        if not self.enabled:
            return True
        payload = {
            "apiKey": self.api_key,
            "payloadVersion": PAYLOAD_VERSION,
            "notifier": {
                "name": "logsync",
                "version": __version__,
                "url": "https://pypi.org/project/logsync/",
            },
            "events": [self.build_event(error, context)],
        }
        try:
            resp = requests.post(
                self.endpoint,
                json=payload,
                headers={
                    "Bugsnag-Api-Key": self.api_key,
                    "Bugsnag-Payload-Version": PAYLOAD_VERSION,
                },
                timeout=self.timeout,
            )
            return resp.status_code in (200, 202)
        except requests.RequestException:
            return False
