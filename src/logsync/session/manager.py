"""Session rotation: decides when a new log partition begins.

A session is the rotation bucket that contains its creation time. The
bucket start is stored as ``Session.time`` and also names the partition
folder, so every process computes the same folder for the same bucket and
successive sessions always have strictly increasing times.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from logsync.config.schema import Session
from logsync.config.store import ConfigStore
from logsync.sync.types import Role, SettingName

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_INTERVAL = 3600

RebindHook = Callable[[Session], None]
SessionCallback = Callable[[str, "str | None"], None]
Dispatcher = Callable[..., None]


def _call_now(fn: Callable[..., Any], *args: Any) -> None:
    fn(*args)


def folder_for(bucket_start: float) -> str:
    """Filesystem-safe partition name for a bucket, sortable by time."""
    dt = datetime.fromtimestamp(bucket_start, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d_%H-%M-%S")


class SessionManager:
    """Tracks the current session and rotates it when it goes stale.

    Only the primary decides staleness; satellites adopt whatever session
    the primary broadcasts.

    ``dispatch`` decides where new-session callbacks run. The default calls
    them inline; the runtime hands them to a thread of their own so a
    callback can block without stalling writes or the transport.
    """

    def __init__(
        self,
        store: ConfigStore,
        rotation_interval: int = DEFAULT_ROTATION_INTERVAL,
        clock: Callable[[], float] = time.time,
        dispatch: Dispatcher = _call_now,
    ) -> None:
        self.store = store
        self.rotation_interval = rotation_interval
        self.clock = clock
        self.dispatch = dispatch
        self._rebind_hooks: list[RebindHook] = []
        self._callbacks: list[SessionCallback] = []
        store.add_listener(self._on_setting)

    def bucket_start(self, now: float) -> float:
        return now - (now % self.rotation_interval)

    def mint(self, now: float | None = None) -> Session:
        """Create the session for the bucket containing ``now``."""
        now = self.clock() if now is None else now
        start = self.bucket_start(now)
        return Session(folder=folder_for(start), time=start)

    @property
    def current(self) -> Session | None:
        return self.store.get().session

    def is_stale(self, now: float | None = None) -> bool:
        session = self.current
        if session is None:
            return True
        now = self.clock() if now is None else now
        return now - session.time >= self.rotation_interval

    def ensure_current(self, now: float | None = None) -> Session | None:
        """Rotate to a new session if the current one is stale.

        Returns the session in effect afterwards. Satellites never rotate.
        """
        if self.store.role != Role.PRIMARY:
            return self.current
        now = self.clock() if now is None else now
        if self.is_stale(now):
            session = self.mint(now)
            previous = self.current
            if previous is None or session.time > previous.time:
                logger.info("Rotating log session to %s", session.folder)
                self.store.update(SettingName.SESSION, session, propagate=True)
        return self.current

    def add_rebind_hook(self, hook: RebindHook) -> None:
        self._rebind_hooks.append(hook)

    def on_new_session(self, callback: SessionCallback) -> None:
        if not callable(callback):
            raise TypeError("Expected callback to be callable")
        self._callbacks.append(callback)

    def _on_setting(self, name: SettingName, new: Any, old: Any) -> None:
        if name != SettingName.SESSION or new is None:
            return
        if old is not None and new.folder == old.folder:
            return
        old_folder = old.folder if old is not None else None
        for hook in list(self._rebind_hooks):
            hook(new)
        for callback in list(self._callbacks):
            self.dispatch(self._run_callback, callback, new.folder, old_folder)

    @staticmethod
    def _run_callback(callback: SessionCallback, new_folder: str, old_folder: str | None) -> None:
        try:
            callback(new_folder, old_folder)
        except Exception:
            logger.exception("New-session callback failed")
