"""In-process transport hub.

Useful when the primary and its satellites share one interpreter (tests,
embedded runtimes, threads standing in for processes). Delivery is
synchronous and in order.
"""

from __future__ import annotations

import itertools
import logging
import threading

from logsync.sync.channel import MessageHandler, Transport
from logsync.sync.types import Message, TransportError

logger = logging.getLogger(__name__)


class LocalHub:
    """Routes messages between one primary endpoint and its satellites."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._primary: LocalEndpoint | None = None
        self._satellites: dict[str, LocalEndpoint] = {}
        self._ids = itertools.count(1)

    def primary_endpoint(self) -> LocalEndpoint:
        with self._lock:
            if self._primary is not None:
                raise TransportError("hub already has a primary endpoint")
            self._primary = LocalEndpoint(self, "primary", is_primary=True)
            return self._primary

    def satellite_endpoint(self) -> LocalEndpoint:
        with self._lock:
            endpoint = LocalEndpoint(self, f"satellite-{next(self._ids)}", is_primary=False)
            self._satellites[endpoint.endpoint_id] = endpoint
            return endpoint

    def detach(self, endpoint: LocalEndpoint) -> None:
        with self._lock:
            if endpoint is self._primary:
                self._primary = None
            else:
                self._satellites.pop(endpoint.endpoint_id, None)

    def to_primary(self, message: Message) -> None:
        primary = self._primary
        if primary is None:
            raise TransportError("no primary endpoint attached")
        primary.deliver(message)

    def to_satellite(self, target: str, message: Message) -> None:
        endpoint = self._satellites.get(target)
        if endpoint is None:
            raise TransportError(f"unknown satellite {target!r}")
        endpoint.deliver(message)

    def to_all_satellites(self, message: Message) -> None:
        with self._lock:
            endpoints = list(self._satellites.values())
        for endpoint in endpoints:
            endpoint.deliver(message)


class LocalEndpoint(Transport):
    """One process's view of a :class:`LocalHub`."""

    def __init__(self, hub: LocalHub, endpoint_id: str, is_primary: bool) -> None:
        self.hub = hub
        self.endpoint_id = endpoint_id
        self.is_primary = is_primary
        self._handler: MessageHandler | None = None

    def subscribe(self, handler: MessageHandler) -> None:
        self._handler = handler

    def deliver(self, message: Message) -> None:
        if self._handler is None:
            logger.debug("%s dropped %s: no handler", self.endpoint_id, message.event)
            return
        self._handler(message)

    def broadcast(self, message: Message) -> None:
        if not self.is_primary:
            raise TransportError("only the primary can broadcast")
        message.sender = self.endpoint_id
        self.hub.to_all_satellites(message)

    def send(self, message: Message, target: str | None = None) -> None:
        message.sender = self.endpoint_id
        if self.is_primary:
            if target is None:
                raise TransportError("primary sends need a target")
            self.hub.to_satellite(target, message)
        else:
            self.hub.to_primary(message)

    def close(self) -> None:
        self.hub.detach(self)
