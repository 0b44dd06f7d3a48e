"""Bundles recent session partitions into a zip archive."""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from pathlib import Path

import pyzipper

from logsync.retention.partitions import ARCHIVE_SUFFIX, iter_partitions

logger = logging.getLogger(__name__)


class Archiver:
    """Writes ``logs-<ms>.zip`` bundles of every non-expired partition.

    With a password the bundle is AES-256 encrypted; otherwise it is a plain
    deflated zip.
    """

    def __init__(
        self,
        root: Path,
        retention_days: int | Callable[[], int] = 7,
        compresslevel: int = 9,
        password: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.root = Path(root)
        self._retention_days = retention_days
        self.compresslevel = compresslevel
        self.password = password
        self.clock = clock

    @property
    def retention_days(self) -> int:
        if callable(self._retention_days):
            return self._retention_days()
        return self._retention_days

    def archive(self) -> Path:
        """Archive the logs root. Returns the bundle path."""
        return self.archive_folder(self.root)

    def archive_folder(self, folder: Path | str, zip_name: str | None = None) -> Path:
        """Archive the non-expired partitions of ``folder`` into ``folder``."""
        folder = Path(folder)
        now = self.clock()
        zip_name = zip_name or f"logs-{int(now * 1000)}.zip"
        days = self.retention_days

        folder.mkdir(parents=True, exist_ok=True)
        target = folder / zip_name
        included = 0
        try:
            with self._open(target) as zf:
                for partition in iter_partitions(folder):
                    if partition.is_expired(now, days):
                        continue
                    included += 1
                    for path in sorted(partition.path.rglob("*")):
                        if not path.is_file():
                            continue
                        try:
                            zf.write(path, arcname=path.relative_to(folder).as_posix())
                        except OSError as e:
                            logger.warning("Skipping %s in archive: %s", path, e)
        except Exception:
            logger.warning("Archive %s failed; removing partial file", target)
            target.unlink(missing_ok=True)
            raise

        logger.info("Archived %d partition(s) to %s", included, target)
        return target

    def _open(self, target: Path) -> pyzipper.ZipFile:
        if self.password:
            zf = pyzipper.AESZipFile(
                target,
                "w",
                compression=pyzipper.ZIP_DEFLATED,
                compresslevel=self.compresslevel,
                encryption=pyzipper.WZ_AES,
            )
            zf.setpassword(self.password.encode("utf-8"))
            return zf
        return pyzipper.ZipFile(
            target,
            "w",
            compression=pyzipper.ZIP_DEFLATED,
            compresslevel=self.compresslevel,
        )

    def clear(self, path: Path | str) -> bool:
        """Delete an archive, or a partition inside the logs root."""
        target = Path(path).resolve()
        root = self.root.resolve()
        inside = root in target.parents
        if target == root or not (inside or target.suffix == ARCHIVE_SUFFIX):
            logger.warning("Refusing to clear %s: outside %s", target, root)
            return False
        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to clear %s: %s", target, e)
            return False
        return True
