"""Per-process composition of the logging subsystem.

Each process builds exactly one :class:`LoggingRuntime` with its role and
(optionally) a transport to the other processes::

    runtime = LoggingRuntime(load_config(path), Role.PRIMARY, transport=hub)
    log = runtime.get_logger()
    log.info("started", {"pid": os.getpid()})

Work runs on four single-thread queues:

* ``writer``: appends and re-binds, in call order;
* ``reporter``: crash reports, so a slow endpoint never delays a write;
* ``events``: ``on_new_session`` callbacks;
* ``maintenance``: prune, archive and clear.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any

import click

from logsync.config.schema import LogsyncConfig, Session
from logsync.config.store import ConfigStore
from logsync.instance import InstanceRegistry, LogInstance
from logsync.paths import logs_root, parse_domain, safe_name
from logsync.reporting.crash import CrashReporter
from logsync.retention.archiver import Archiver
from logsync.retention.pruner import RetentionPruner
from logsync.session.manager import SessionManager
from logsync.sync.channel import SyncChannel, Transport
from logsync.sync.types import Role, SettingName

logger = logging.getLogger(__name__)

# Name of the runtime queue the current thread serves, if any
_worker = threading.local()


def _mark_worker(queue: str) -> None:
    _worker.queue = queue


def _queue(name: str) -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=1,
        thread_name_prefix=f"logsync-{name}",
        initializer=_mark_worker,
        initargs=(name,),
    )


def default_source_name() -> str:
    """Name for a satellite's unnamed logger: ``{script}-{pid}``."""
    script = safe_name(Path(sys.argv[0]).stem) if sys.argv and sys.argv[0] else ""
    return f"{script or 'process'}-{os.getpid()}"


class LoggingRuntime:
    """Owns the settings replica, session state and instances of a process."""

    def __init__(
        self,
        config: LogsyncConfig | None = None,
        role: Role | str = Role.PRIMARY,
        transport: Transport | None = None,
        crash_reporter: CrashReporter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or LogsyncConfig()
        self.role = Role(role)
        if self.role == Role.EMBEDDED_VIEW:
            raise ValueError("a process runs as primary or satellite")
        self.clock = clock
        self.logs_dir = logs_root(self.config.app_name, self.config.logs_dir)
        self.default_name = default_source_name()

        self._writer = _queue("writer")
        self._reporter = _queue("reporter")
        self._events = _queue("events")
        self._maintenance = _queue("maintenance")
        self._closed = False

        self.store = ConfigStore(self.role, self.config.defaults)
        self.sessions = SessionManager(
            self.store, self.config.rotation_interval, clock, dispatch=self._dispatch_event,
        )
        # Satellites start with the session they would compute themselves and
        # adopt the primary's once its snapshot arrives.
        self.store.apply(SettingName.SESSION, self.sessions.mint())
        self.channel = SyncChannel(self.store, transport)
        self.registry = InstanceRegistry()

        expiry = lambda: self.store.get().logs_expiry  # noqa: E731
        self.pruner = RetentionPruner(self.logs_dir, expiry, clock)
        self.archiver = Archiver(
            self.logs_dir,
            expiry,
            compresslevel=self.config.archive.compresslevel,
            password=self.config.archive.password,
            clock=clock,
        )
        self.crash_reporter = crash_reporter or CrashReporter.from_config(self.config.crash_reporting)

        self.sessions.add_rebind_hook(self._schedule_rebind)
        self.channel.start()

    # Instances

    def get_logger(
        self,
        file_name: str | None = None,
        is_webview: bool = False,
        role: Role | str | None = None,
    ) -> LogInstance:
        """Return the instance for a log source, creating it on first use.

        Named sources are shared per ``(role, name)``; embedded views always
        get a fresh instance. Unnamed satellite sources share the runtime's
        :attr:`default_name`. A new instance schedules a prune that nobody
        waits for.
        """
        if is_webview:
            role = Role.EMBEDDED_VIEW
        else:
            role = Role(role) if role is not None else self.role

        if file_name:
            name = parse_domain(file_name)
        elif role == Role.PRIMARY:
            name = ""
        else:
            name = self.default_name

        if role == Role.EMBEDDED_VIEW:
            instance = LogInstance(self, role, name)
            self.registry.add_embedded(instance)
            created = True
        else:
            instance, created = self.registry.get_or_create(
                (role, name), lambda: LogInstance(self, role, name),
            )

        if created:
            try:
                self.prune()
            except RuntimeError:
                logger.debug("Maintenance closed; skipping prune for %s", instance.file_name)
        return instance

    def submit_write(self, fn: Callable[..., Any], *args: Any) -> Future:
        return self._writer.submit(fn, *args)

    def report_error(self, message: str, context: str) -> None:
        """Queue a crash report; the caller never waits for the HTTP call."""
        try:
            self._reporter.submit(self._safe_report, message, context)
        except RuntimeError:
            logger.debug("Reporter closed; dropping crash report from %s", context)

    def _safe_report(self, message: str, context: str) -> None:
        try:
            self.crash_reporter.notify(message, context=context)
        except Exception:
            logger.debug("Crash report failed", exc_info=True)

    def _schedule_rebind(self, session: Session) -> None:
        try:
            self._writer.submit(self.registry.rebind_all, session.folder)
        except RuntimeError:
            logger.debug("Writer closed; skipping rebind to %s", session.folder)

    def _dispatch_event(self, fn: Callable[..., Any], *args: Any) -> None:
        try:
            self._events.submit(fn, *args)
        except RuntimeError:
            logger.debug("Events closed; dropping new-session callback")

    # Maintenance

    def prune(self) -> Future:
        """Delete expired partitions. Resolves to a summary string."""
        return self._maintenance.submit(self._safe_prune)

    def _safe_prune(self) -> str:
        try:
            return self.pruner.prune()
        except Exception:
            logger.warning("Prune failed", exc_info=True)
            return "Prune failed"

    def archive(self) -> Future:
        """Bundle recent partitions. Resolves to the archive path."""
        return self._maintenance.submit(self.archiver.archive)

    def archive_folder(self, folder: Path | str, zip_name: str | None = None) -> Future:
        return self._maintenance.submit(self.archiver.archive_folder, folder, zip_name)

    def clear(self, path: Path | str) -> Future:
        """Delete an archive or partition. Resolves to True on success."""
        return self._maintenance.submit(self.archiver.clear, path)

    # Settings

    def set_file_logging(self, enabled: bool) -> bool:
        return self.store.update(SettingName.FILE_LOGGING, bool(enabled), propagate=True)

    def set_logs_expiry(self, days: int) -> bool:
        return self.store.update(SettingName.LOGS_EXPIRY, days, propagate=True)

    def set_crash_reporting(self, enabled: bool) -> bool:
        return self.store.update(SettingName.ENABLE_BUGSNAG, bool(enabled), propagate=True)

    def on_new_session(self, callback: Callable[[str, str | None], None]) -> None:
        self.sessions.on_new_session(callback)

    def open_logs_directory(self) -> None:
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        click.launch(str(self.logs_dir))

    # Lifecycle

    def flush(self, timeout: float | None = None) -> None:
        """Wait until every queued task has run.

        Called from one of the runtime's own threads (a new-session
        callback, say), that thread's queue is skipped.
        """
        if self._closed:
            return
        current = getattr(_worker, "queue", None)
        queues = (
            ("writer", self._writer),
            ("reporter", self._reporter),
            ("events", self._events),
            ("maintenance", self._maintenance),
        )
        for name, executor in queues:
            if name != current:
                executor.submit(lambda: None).result(timeout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.channel.close()
        self._writer.shutdown(wait=True)
        self._reporter.shutdown(wait=True)
        self._events.shutdown(wait=True)
        self._maintenance.shutdown(wait=True)
        self.registry.close_all()

    def __enter__(self) -> LoggingRuntime:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
