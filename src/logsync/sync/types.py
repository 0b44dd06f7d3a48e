"""Types shared by the settings channel and its transports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UPDATE_SETTINGS = "updateSettings"
SYNC_SETTINGS = "syncSettings"


class Role(str, Enum):
    PRIMARY = "main"
    SATELLITE = "renderer"
    EMBEDDED_VIEW = "webview"


class SettingName(str, Enum):
    FILE_LOGGING = "FILE_LOGGING"
    LOGS_EXPIRY = "LOGS_EXPIRY"
    SESSION = "SESSION"
    ENABLE_BUGSNAG = "ENABLE_BUGSNAG"

    @classmethod
    def parse(cls, name: Any) -> SettingName | None:
        """Return the matching setting, or None for unknown names."""
        try:
            return cls(name)
        except ValueError:
            return None


class TransportError(Exception):
    """Raised by a transport when a message cannot be delivered."""


@dataclass
class Message:
    event: str
    payload: dict[str, Any] = field(default_factory=dict)
    sender: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.event, "payload": self.payload, "sender": self.sender}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        return cls(
            event=data.get("event", ""),
            payload=data.get("payload") or {},
            sender=data.get("sender"),
        )
