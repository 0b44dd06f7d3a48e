"""Settings synchronization between the primary and satellite processes.

The primary holds the authoritative settings and broadcasts every change.
Satellites keep a replica, forward their own changes to the primary, and
ask for a full snapshot once at startup.

Messages on the wire:

    updateSettings  {"name": <SettingName>, "value": <json>, "push": bool}
    syncSettings    {}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from logsync.sync.types import (
    SYNC_SETTINGS,
    UPDATE_SETTINGS,
    Message,
    Role,
    SettingName,
    TransportError,
)

if TYPE_CHECKING:
    from logsync.config.store import ConfigStore

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Message], None]


class Transport(ABC):
    """Reliable, ordered message transport between cooperating processes."""

    endpoint_id: str

    @abstractmethod
    def subscribe(self, handler: MessageHandler) -> None:
        """Register the handler for inbound messages."""

    @abstractmethod
    def broadcast(self, message: Message) -> None:
        """Send to every satellite. Primary only."""

    @abstractmethod
    def send(self, message: Message, target: str | None = None) -> None:
        """Send point-to-point.

        From a satellite the target is always the primary. From the primary
        ``target`` names the satellite endpoint.
        """

    def start(self) -> None:
        """Open connections. Optional for in-process transports."""

    def close(self) -> None:
        """Release connections."""


class SyncChannel:
    """Applies inbound setting messages and publishes local changes."""

    def __init__(self, store: ConfigStore, transport: Transport | None = None) -> None:
        self.store = store
        self.transport = transport
        store.attach(self)
        if transport is not None:
            transport.subscribe(self.handle)

    @property
    def role(self) -> Role:
        return self.store.role

    def start(self) -> None:
        """Connect the transport; satellites then request a snapshot."""
        if self.transport is None:
            return
        try:
            self.transport.start()
        except TransportError as e:
            logger.warning("Settings channel unavailable: %s", e)
            return
        if self.role != Role.PRIMARY:
            self._deliver(Message(SYNC_SETTINGS, {}))

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()

    def publish(self, name: SettingName, value: Any) -> None:
        """Propagate a locally applied setting."""
        payload = {"name": name.value, "value": value, "push": True}
        if self.role == Role.PRIMARY:
            payload["push"] = False
            self._broadcast(Message(UPDATE_SETTINGS, payload))
        else:
            self._deliver(Message(UPDATE_SETTINGS, payload))

    def handle(self, message: Message) -> None:
        """Entry point for every inbound message."""
        try:
            if message.event == UPDATE_SETTINGS:
                self._on_update(message)
            elif message.event == SYNC_SETTINGS:
                self._on_sync(message)
            else:
                logger.debug("Ignoring unknown event %r", message.event)
        except Exception:
            logger.exception("Failed to handle %s message", message.event)

    def _on_update(self, message: Message) -> None:
        payload = message.payload
        if "name" not in payload:
            return
        name = payload["name"]
        value = payload.get("value")
        push = bool(payload.get("push"))
        if not self.store.apply(name, value):
            return

        if not push:
            return
        forward = {"name": name, "value": value}
        if self.role == Role.PRIMARY:
            forward["push"] = False
            self._broadcast(Message(UPDATE_SETTINGS, forward))
        else:
            forward["push"] = True
            self._deliver(Message(UPDATE_SETTINGS, forward))

    def _on_sync(self, message: Message) -> None:
        if self.role != Role.PRIMARY or message.sender is None:
            return
        for name, value in self.store.snapshot().items():
            self._deliver(
                Message(UPDATE_SETTINGS, {"name": name.value, "value": value, "push": False}),
                target=message.sender,
            )

    def _broadcast(self, message: Message) -> None:
        if self.transport is None:
            return
        try:
            self.transport.broadcast(message)
        except TransportError as e:
            logger.warning("Broadcast of %s failed: %s", message.payload.get("name"), e)

    def _deliver(self, message: Message, target: str | None = None) -> None:
        if self.transport is None:
            return
        try:
            self.transport.send(message, target)
        except TransportError as e:
            logger.warning("Send of %s failed: %s", message.event, e)
