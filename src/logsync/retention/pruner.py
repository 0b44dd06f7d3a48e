"""Deletes session partitions older than the retention window."""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from pathlib import Path

from logsync.retention.partitions import iter_partitions

logger = logging.getLogger(__name__)


class RetentionPruner:
    """Removes expired partitions from the logs root.

    ``retention_days`` may be a callable so the pruner always reads the
    live setting instead of a value captured at construction.
    """

    def __init__(
        self,
        root: Path,
        retention_days: int | Callable[[], int] = 7,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.root = Path(root)
        self._retention_days = retention_days
        self.clock = clock

    @property
    def retention_days(self) -> int:
        if callable(self._retention_days):
            return self._retention_days()
        return self._retention_days

    def prune(self) -> str:
        """Delete expired partitions. Returns a summary; never raises."""
        days = self.retention_days
        now = self.clock()
        removed = 0
        try:
            partitions = list(iter_partitions(self.root))
        except OSError as e:
            logger.warning("Cannot list %s: %s", self.root, e)
            partitions = []

        for partition in partitions:
            if not partition.is_expired(now, days):
                continue
            try:
                shutil.rmtree(partition.path)
            except OSError as e:
                logger.warning("Failed to prune %s: %s", partition.path, e)
                continue
            removed += 1
            logger.debug("Pruned partition %s", partition.name)

        if removed:
            logger.info("Pruned %d partition(s) older than %d day(s)", removed, days)
        return f"Logs older than {days} day(s) cleared ({removed} removed)"
