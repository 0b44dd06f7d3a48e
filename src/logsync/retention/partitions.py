"""Traversal of session partitions under the logs root."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60
ARCHIVE_SUFFIX = ".zip"


@dataclass
class Partition:
    name: str
    path: Path
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, now: float, retention_days: int) -> bool:
        return self.age(now) > retention_days * DAY_SECONDS


def birth_time(stat: os.stat_result) -> float | None:
    """Filesystem creation time, where the platform records one."""
    return getattr(stat, "st_birthtime", None)


def created_at(path: Path) -> float:
    """Creation time of a partition directory.

    Falls back to the oldest file inside it, then to the directory's own
    mtime, on filesystems without birth times.
    """
    stat = path.stat()
    born = birth_time(stat)
    if born:
        return born
    mtimes = [child.stat().st_mtime for child in path.rglob("*") if child.is_file()]
    return min(mtimes) if mtimes else stat.st_mtime


def iter_partitions(root: Path) -> Iterator[Partition]:
    """Yield partition directories, skipping dot-entries and archives."""
    if not root.is_dir():
        return
    for entry in sorted(root.iterdir()):
        if entry.name.startswith(".") or entry.name.endswith(ARCHIVE_SUFFIX):
            continue
        try:
            if not entry.is_dir():
                continue
            yield Partition(entry.name, entry, created_at(entry))
        except OSError as e:
            logger.warning("Skipping partition %s: %s", entry, e)
