"""Cross-process transport over ``multiprocessing.connection`` sockets.

The primary listens on a local address; each satellite connects with the
shared authkey. Frames are JSON-encoded :class:`Message` dicts, read by daemon
threads.
"""

from __future__ import annotations

import itertools
import json
import logging
import os
import socket
import threading
from multiprocessing.connection import Client, Connection, Listener
from typing import Any

from logsync.sync.channel import MessageHandler, Transport
from logsync.sync.types import Message, TransportError

logger = logging.getLogger(__name__)


def _encode(message: Message) -> bytes:
    return json.dumps(message.to_dict()).encode("utf-8")


def _decode(frame: bytes) -> Message:
    return Message.from_dict(json.loads(frame.decode("utf-8")))


class _Peer:
    """A connection plus the lock that serializes writes to it."""

    def __init__(self, peer_id: str, conn: Connection) -> None:
        self.peer_id = peer_id
        self.conn = conn
        self.lock = threading.Lock()

    def send(self, message: Message) -> None:
        with self.lock:
            self.conn.send_bytes(_encode(message))

    def close(self) -> None:
        # close() alone leaves a reader blocked in recv; shutdown wakes it
        try:
            sock = socket.socket(fileno=os.dup(self.conn.fileno()))
        except OSError:
            sock = None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            finally:
                sock.close()
        self.conn.close()


class SocketHub(Transport):
    """Primary side: accepts satellites and fans broadcasts out to them."""

    endpoint_id = "primary"

    def __init__(self, host: str = "127.0.0.1", port: int = 0, authkey: str = "logsync") -> None:
        self.host = host
        self.port = port
        self.authkey = authkey.encode("utf-8")
        self._handler: MessageHandler | None = None
        self._listener: Listener | None = None
        self._accept_thread: threading.Thread | None = None
        self._peers: dict[str, _Peer] = {}
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._ids = itertools.count(1)

    @property
    def address(self) -> tuple[str, int] | None:
        if self._listener is None:
            return None
        return self._listener.address  # type: ignore[return-value]

    @property
    def peer_ids(self) -> list[str]:
        with self._lock:
            return list(self._peers)

    def subscribe(self, handler: MessageHandler) -> None:
        self._handler = handler

    def start(self) -> None:
        try:
            self._listener = Listener((self.host, self.port), authkey=self.authkey)
        except OSError as e:
            raise TransportError(f"cannot listen on {self.host}:{self.port}: {e}") from e
        self._stopping.clear()
        self._accept_thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._accept_thread.start()
        logger.debug("Settings hub listening on %s", self.address)

    def _accept_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                conn = self._listener.accept()  # type: ignore[union-attr]
            except OSError as e:
                if not self._stopping.is_set():
                    logger.warning("Settings hub accept failed: %s", e)
                    continue
                break
            except Exception as e:
                logger.warning("Rejected settings connection: %s", e)
                continue
            if self._stopping.is_set():
                conn.close()
                break
            peer = _Peer(f"satellite-{next(self._ids)}", conn)
            with self._lock:
                self._peers[peer.peer_id] = peer
            threading.Thread(target=self._read_loop, args=(peer,), daemon=True).start()
            logger.debug("Satellite %s connected", peer.peer_id)

    def _read_loop(self, peer: _Peer) -> None:
        while True:
            try:
                frame = peer.conn.recv_bytes()
            except (EOFError, OSError):
                break
            try:
                message = _decode(frame)
            except (ValueError, AttributeError) as e:
                logger.warning("Bad frame from %s: %s", peer.peer_id, e)
                continue
            message.sender = peer.peer_id
            if self._handler is not None:
                self._handler(message)
        with self._lock:
            self._peers.pop(peer.peer_id, None)
        logger.debug("Satellite %s disconnected", peer.peer_id)

    def broadcast(self, message: Message) -> None:
        message.sender = self.endpoint_id
        with self._lock:
            peers = list(self._peers.values())
        failed: list[str] = []
        for peer in peers:
            try:
                peer.send(message)
            except (OSError, ValueError):
                failed.append(peer.peer_id)
        if failed:
            raise TransportError(f"broadcast failed for {', '.join(failed)}")

    def send(self, message: Message, target: str | None = None) -> None:
        if target is None:
            raise TransportError("primary sends need a target")
        with self._lock:
            peer = self._peers.get(target)
        if peer is None:
            raise TransportError(f"unknown satellite {target!r}")
        message.sender = self.endpoint_id
        try:
            peer.send(message)
        except (OSError, ValueError) as e:
            raise TransportError(f"send to {target} failed: {e}") from e

    def close(self) -> None:
        if self._listener is None:
            return
        self._stopping.set()
        address = self.address
        # accept() does not return on close, so wake it with a throwaway client
        try:
            Client(address, authkey=self.authkey).close()
        except Exception:
            logger.debug("Wake-up connection to %s failed", address)
        self._listener.close()
        self._listener = None
        with self._lock:
            peers = list(self._peers.values())
            self._peers.clear()
        for peer in peers:
            peer.close()
        if self._accept_thread is not None:
            self._accept_thread.join(timeout=2.0)
            self._accept_thread = None


class SocketClient(Transport):
    """Satellite side: one connection to the primary's hub."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0, authkey: str = "logsync") -> None:
        self.host = host
        self.port = port
        self.authkey = authkey.encode("utf-8")
        self.endpoint_id = "satellite"
        self._handler: MessageHandler | None = None
        self._peer: _Peer | None = None
        self._reader: threading.Thread | None = None

    @property
    def connected(self) -> bool:
        return self._peer is not None

    def subscribe(self, handler: MessageHandler) -> None:
        self._handler = handler

    def start(self) -> None:
        try:
            conn = Client((self.host, self.port), authkey=self.authkey)
        except Exception as e:
            raise TransportError(f"cannot reach primary at {self.host}:{self.port}: {e}") from e
        self._peer = _Peer("primary", conn)
        self._reader = threading.Thread(target=self._read_loop, daemon=True)
        self._reader.start()

    def _read_loop(self) -> None:
        peer = self._peer
        if peer is None:
            return
        while True:
            try:
                frame = peer.conn.recv_bytes()
            except (EOFError, OSError):
                break
            try:
                message = _decode(frame)
            except (ValueError, AttributeError) as e:
                logger.warning("Bad frame from primary: %s", e)
                continue
            if self._handler is not None:
                self._handler(message)
        logger.debug("Connection to primary closed")

    def broadcast(self, message: Message) -> None:
        raise TransportError("only the primary can broadcast")

    def send(self, message: Message, target: str | None = None) -> None:
        if self._peer is None:
            raise TransportError("not connected to primary")
        message.sender = self.endpoint_id
        try:
            self._peer.send(message)
        except (OSError, ValueError) as e:
            raise TransportError(f"send to primary failed: {e}") from e

    def close(self) -> None:
        if self._peer is not None:
            self._peer.close()
            self._peer = None
        if self._reader is not None:
            self._reader.join(timeout=2.0)
            self._reader = None


def hub_from_config(config: Any) -> SocketHub:
    """Build the primary hub from a :class:`ChannelConfig`."""
    return SocketHub(config.host, config.port, config.authkey)


def client_from_config(config: Any) -> SocketClient:
    """Build a satellite client from a :class:`ChannelConfig`."""
    return SocketClient(config.host, config.port, config.authkey)
