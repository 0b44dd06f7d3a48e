"""Log instances: one per logical log source in a process."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import TYPE_CHECKING, Any

from logsync.paths import log_file_name
from logsync.sinks import LEVELS, PartitionFileHandler, console_handler, render_message
from logsync.sync.types import Role

if TYPE_CHECKING:
    from logsync.runtime import LoggingRuntime

logger = logging.getLogger(__name__)


def _done(result: Any = None) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


class LogInstance:
    """Writes one source's lines into ``{partition}/{role}[-{name}].log``.

    Level methods never raise and return a future that resolves once the
    line has been written (or skipped). Callers normally ignore it.
    """

    def __init__(self, runtime: LoggingRuntime, role: Role, name: str = "") -> None:
        self._runtime = runtime
        self.role = role
        self.name = name
        self.file_name = log_file_name(role.value, name)
        self._lock = threading.Lock()
        self._file_handler: PartitionFileHandler | None = None
        self._bound_folder: str | None = None

        self._logger = logging.Logger(f"logsync.source.{role.value}.{name or 'default'}", logging.DEBUG)
        self._logger.propagate = False
        if runtime.config.console and role != Role.EMBEDDED_VIEW:
            self._logger.addHandler(console_handler())

        session = runtime.store.get().session
        if session is not None:
            self.rebind(session.folder)

    @property
    def is_webview(self) -> bool:
        return self.role == Role.EMBEDDED_VIEW

    @property
    def bound_folder(self) -> str | None:
        return self._bound_folder

    @property
    def log_path(self) -> Path | None:
        if self._bound_folder is None:
            return None
        return self._runtime.logs_dir / self._bound_folder / self.file_name

    def rebind(self, folder: str) -> None:
        """Point the file sink at another partition; console stays as is."""
        with self._lock:
            self._bind(folder)

    def _bind(self, folder: str) -> None:
        if folder == self._bound_folder:
            return
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
        path = self._runtime.logs_dir / folder / self.file_name
        self._file_handler = PartitionFileHandler(str(path))
        self._logger.addHandler(self._file_handler)
        self._bound_folder = folder

    def close(self) -> None:
        with self._lock:
            for handler in list(self._logger.handlers):
                self._logger.removeHandler(handler)
                handler.close()
            self._file_handler = None
            self._bound_folder = None

    # Level methods

    def debug(self, *values: Any) -> Future:
        return self._submit("debug", values)

    def log(self, *values: Any) -> Future:
        return self._submit("info", values)

    def info(self, *values: Any) -> Future:
        return self._submit("info", values)

    def warn(self, *values: Any) -> Future:
        return self._submit("warn", values)

    warning = warn

    def error(self, *values: Any) -> Future:
        return self._submit("error", values)

    def _submit(self, level: str, values: tuple[Any, ...]) -> Future:
        issued_at = time.time()
        try:
            message = render_message(values)
            return self._runtime.submit_write(self._write, level, message, issued_at)
        except Exception:
            logger.warning("Dropped %s line from %s", level, self.file_name, exc_info=True)
            return _done()

    def _write(self, level: str, message: str, issued_at: float) -> None:
        runtime = self._runtime
        settings = runtime.store.get()
        if settings.file_logging:
            try:
                session = runtime.sessions.ensure_current()
                if session is None:
                    raise RuntimeError("no active log session")
                with self._lock:
                    self._bind(session.folder)
                    (runtime.logs_dir / session.folder).mkdir(parents=True, exist_ok=True)
                    self._logger.log(LEVELS[level], message, extra={"issued_at": issued_at})
            except Exception:
                logger.warning("Failed to write %s line to %s", level, self.file_name, exc_info=True)

        if level == "error" and settings.enable_bugsnag and not self.is_webview:
            runtime.report_error(message, self.file_name)

    # Administration, delegated to the runtime

    def prune_old_logs(self) -> Future:
        return self._runtime.prune()

    def get_log_archive(self) -> Future:
        return self._runtime.archive()

    def clear_log_archive(self, path: Path | str) -> Future:
        return self._runtime.clear(path)

    def create_archive(self, folder_path: str, zip_name: str | None = None) -> Future:
        if not isinstance(folder_path, str) or not isinstance(zip_name, (str, type(None))):
            raise TypeError("Expected parameters to be of type string")
        return self._runtime.archive_folder(folder_path, zip_name)

    def enable_logging(self) -> str:
        self._runtime.set_file_logging(True)
        return "Logging Enabled"

    def disable_logging(self) -> str:
        self._runtime.set_file_logging(False)
        return "Logging Disabled"

    def set_log_expiry(self, days: Any) -> str | None:
        try:
            days = int(days)
        except (TypeError, ValueError):
            return None
        if self._runtime.set_logs_expiry(days):
            return f"Logs Expiry set to {days}"
        return None

    def enable_crash_reporting(self) -> str:
        self._runtime.set_crash_reporting(True)
        return "Crash Reporting Enabled"

    def disable_crash_reporting(self) -> str:
        self._runtime.set_crash_reporting(False)
        return "Crash Reporting Disabled"

    def on_new_session(self, callback: Callable[[str, str | None], None]) -> None:
        self._runtime.on_new_session(callback)

    def get_logs_directory(self) -> Path:
        return self._runtime.logs_dir

    def open_logs_directory(self) -> None:
        self._runtime.open_logs_directory()


class InstanceRegistry:
    """Live instances of one process, keyed by ``(role, name)``.

    Embedded views are tracked for rotation but never shared.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._named: dict[tuple[Role, str], LogInstance] = {}
        self._embedded: list[LogInstance] = []

    def get_or_create(
        self, key: tuple[Role, str], factory: Callable[[], LogInstance],
    ) -> tuple[LogInstance, bool]:
        """Return the instance for ``key``, creating it if needed.

        The second element is True when a new instance was created.
        """
        with self._lock:
            existing = self._named.get(key)
            if existing is not None:
                return existing, False
            instance = factory()
            self._named[key] = instance
            return instance, True

    def add_embedded(self, instance: LogInstance) -> None:
        with self._lock:
            self._embedded.append(instance)

    def all(self) -> list[LogInstance]:
        with self._lock:
            return [*self._named.values(), *self._embedded]

    def rebind_all(self, folder: str) -> None:
        for instance in self.all():
            try:
                instance.rebind(folder)
            except Exception:
                logger.warning("Failed to rebind %s", instance.file_name, exc_info=True)

    def close_all(self) -> None:
        for instance in self.all():
            instance.close()
