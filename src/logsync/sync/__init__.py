"""Settings synchronization between cooperating processes."""

from logsync.sync.channel import SyncChannel, Transport
from logsync.sync.local import LocalEndpoint, LocalHub
from logsync.sync.types import Message, Role, SettingName, TransportError

__all__ = [
    "LocalEndpoint",
    "LocalHub",
    "Message",
    "Role",
    "SettingName",
    "SyncChannel",
    "Transport",
    "TransportError",
]
