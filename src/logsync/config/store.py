"""Process-local replica of the live logger settings."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import ValidationError

from logsync.config.schema import DefaultsConfig, LoggerSettings, Session
from logsync.sync.types import Role, SettingName

logger = logging.getLogger(__name__)

FIELD_NAMES: dict[SettingName, str] = {
    SettingName.FILE_LOGGING: "file_logging",
    SettingName.LOGS_EXPIRY: "logs_expiry",
    SettingName.SESSION: "session",
    SettingName.ENABLE_BUGSNAG: "enable_bugsnag",
}

SettingListener = Callable[[SettingName, Any, Any], None]


class Publisher(Protocol):
    def publish(self, name: SettingName, value: Any) -> None: ...


def to_wire(value: Any) -> Any:
    """Convert a setting value to its JSON-safe channel form."""
    if isinstance(value, Session):
        return value.model_dump()
    return value


class ConfigStore:
    """Holds one process's copy of the logger settings.

    In the primary process this copy is authoritative. In a satellite it is
    a replica that converges once the primary's broadcast arrives; values
    set locally on a satellite are provisional until then.
    """

    def __init__(
        self,
        role: Role,
        defaults: DefaultsConfig | None = None,
        session: Session | None = None,
    ) -> None:
        defaults = defaults or DefaultsConfig()
        self.role = role
        self._settings = LoggerSettings(
            file_logging=defaults.file_logging,
            logs_expiry=defaults.logs_expiry,
            enable_bugsnag=defaults.enable_bugsnag,
            session=session,
        )
        self._lock = threading.RLock()
        self._listeners: list[SettingListener] = []
        self._publisher: Publisher | None = None

    @property
    def is_primary(self) -> bool:
        return self.role == Role.PRIMARY

    def attach(self, publisher: Publisher) -> None:
        """Route propagated updates through the given channel."""
        self._publisher = publisher

    def add_listener(self, listener: SettingListener) -> None:
        self._listeners.append(listener)

    def get(self) -> LoggerSettings:
        """Return a snapshot of the current settings."""
        with self._lock:
            return self._settings.model_copy()

    def snapshot(self) -> dict[SettingName, Any]:
        """Return every setting keyed by its channel name, in wire form."""
        settings = self.get()
        return {
            name: to_wire(getattr(settings, attr))
            for name, attr in FIELD_NAMES.items()
        }

    def apply(self, name: Any, value: Any) -> bool:
        """Apply a setting locally without propagating it.

        Unknown names and invalid values are ignored. Returns True if the
        value was accepted.
        """
        setting = SettingName.parse(name)
        if setting is None:
            logger.debug("Ignoring unknown setting %r", name)
            return False

        attr = FIELD_NAMES[setting]
        with self._lock:
            candidate = self._settings.model_copy()
            try:
                setattr(candidate, attr, value)
            except ValidationError as e:
                logger.debug("Rejected %s=%r: %s", setting.value, value, e)
                return False

            old = getattr(self._settings, attr)
            self._settings = candidate
            new = getattr(candidate, attr)
            listeners = list(self._listeners)

        # Listeners run unlocked so they may read or update the store.
        for listener in listeners:
            try:
                listener(setting, new, old)
            except Exception:
                logger.exception("Settings listener failed for %s", setting.value)
        return True

    def update(self, name: Any, value: Any, propagate: bool = True) -> bool:
        """Apply a setting and, if asked, propagate it to other processes.

        The primary broadcasts to every satellite; a satellite forwards the
        request to the primary, which re-broadcasts it.
        """
        if not self.apply(name, value):
            return False
        if propagate and self._publisher is not None:
            setting = SettingName.parse(name)
            self._publisher.publish(setting, to_wire(getattr(self.get(), FIELD_NAMES[setting])))
        return True
