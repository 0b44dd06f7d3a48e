"""Tests for the log archiver."""

from pathlib import Path
from unittest.mock import patch

import pyzipper
import pytest

from helpers import BASE_TIME, FakeClock

from logsync.retention.archiver import Archiver


class TestArchiver:
    def test_archive_includes_recent_excludes_expired(self, tmp_path: Path, make_partition):
        make_partition(tmp_path, "expired", age_days=10)
        make_partition(tmp_path, "recent", age_days=1)
        make_partition(tmp_path, "boundary", age_days=7)

        path = Archiver(tmp_path, retention_days=7, clock=FakeClock()).archive()

        with pyzipper.ZipFile(path) as zf:
            names = sorted(zf.namelist())
        assert names == ["boundary/main.log", "recent/main.log"]

    def test_archive_name_and_location(self, tmp_path: Path, make_partition):
        make_partition(tmp_path, "recent", age_days=1)
        path = Archiver(tmp_path, retention_days=7, clock=FakeClock()).archive()
        assert path.parent == tmp_path
        assert path.name == f"logs-{int(BASE_TIME * 1000)}.zip"

    def test_archive_content_round_trip(self, tmp_path: Path, make_partition):
        make_partition(tmp_path, "recent", age_days=1)
        path = Archiver(tmp_path, retention_days=7, clock=FakeClock()).archive()
        with pyzipper.ZipFile(path) as zf:
            assert zf.read("recent/main.log") == b"recent::info::line\n"

    def test_previous_archives_not_nested(self, tmp_path: Path, make_partition):
        make_partition(tmp_path, "recent", age_days=1)
        clock = FakeClock()
        archiver = Archiver(tmp_path, retention_days=7, clock=clock)
        first = archiver.archive()
        clock.advance(1)
        second = archiver.archive()
        with pyzipper.ZipFile(second) as zf:
            assert first.name not in zf.namelist()

    def test_encrypted_archive(self, tmp_path: Path, make_partition):
        make_partition(tmp_path, "recent", age_days=1)
        path = Archiver(tmp_path, retention_days=7, password="hunter2", clock=FakeClock()).archive()

        with pyzipper.AESZipFile(path) as zf:
            zf.setpassword(b"hunter2")
            assert zf.read("recent/main.log") == b"recent::info::line\n"

    def test_empty_root_produces_empty_archive(self, tmp_path: Path):
        root = tmp_path / "logs"
        path = Archiver(root, retention_days=7).archive()
        assert path.exists()
        with pyzipper.ZipFile(path) as zf:
            assert zf.namelist() == []

    def test_archive_folder_custom_name(self, tmp_path: Path, make_partition):
        other = tmp_path / "elsewhere"
        make_partition(other, "recent", age_days=1)
        archiver = Archiver(tmp_path / "logs", retention_days=7, clock=FakeClock())
        path = archiver.archive_folder(other, "bundle.zip")
        assert path == other / "bundle.zip"
        with pyzipper.ZipFile(path) as zf:
            assert zf.namelist() == ["recent/main.log"]


class TestClear:
    def test_clear_archive_keeps_partitions(self, tmp_path: Path, make_partition):
        partition = make_partition(tmp_path, "recent", age_days=1)
        archiver = Archiver(tmp_path, retention_days=7, clock=FakeClock())
        path = archiver.archive()

        assert archiver.clear(path) is True

        assert not path.exists()
        assert (partition / "main.log").exists()

    def test_clear_partition(self, tmp_path: Path, make_partition):
        partition = make_partition(tmp_path, "recent", age_days=1)
        archiver = Archiver(tmp_path, retention_days=7)
        assert archiver.clear(partition) is True
        assert not partition.exists()

    def test_refuses_root(self, tmp_path: Path):
        archiver = Archiver(tmp_path, retention_days=7)
        assert archiver.clear(tmp_path) is False
        assert tmp_path.exists()

    def test_refuses_non_archive_outside_root(self, tmp_path: Path):
        outside = tmp_path / "important.txt"
        outside.write_text("keep me")
        archiver = Archiver(tmp_path / "logs", retention_days=7)
        assert archiver.clear(outside) is False
        assert outside.exists()

    def test_clear_missing_archive(self, tmp_path: Path):
        archiver = Archiver(tmp_path, retention_days=7)
        assert archiver.clear(tmp_path / "logs-0.zip") is True


class TestArchiveFailure:
    def test_partial_archive_removed(self, tmp_path: Path, make_partition):
        make_partition(tmp_path, "recent", age_days=1)
        archiver = Archiver(tmp_path, retention_days=7, clock=FakeClock())

        with patch("pyzipper.ZipFile.write", side_effect=ValueError("bad entry")):
            with pytest.raises(ValueError):
                archiver.archive()

        assert list(tmp_path.glob("*.zip")) == []
