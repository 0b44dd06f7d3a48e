"""Filesystem naming for the shared log tree."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def app_data_dir() -> Path:
    """Per-user application data directory for the current platform."""
    if sys.platform.startswith("win"):
        profile = os.environ.get("USERPROFILE") or str(Path.home())
        return Path(profile) / "AppData" / "Local"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def logs_root(app_name: str, logs_dir: str | None = None) -> Path:
    """Root of the partition tree: ``{data_dir}/{app_name}-logs``."""
    if logs_dir:
        return Path(logs_dir).expanduser()
    return app_data_dir() / f"{app_name}-logs"


def parse_domain(url: str) -> str:
    """Reduce a URL to its host part; other strings pass through."""
    match = re.search(r"//(.+?)/", url) or re.search(r"//(.+)", url)
    return match.group(1) if match else url


def safe_name(name: str) -> str:
    """Make a name usable as part of a file name."""
    return _UNSAFE.sub("_", name).strip("._")


def log_file_name(role: str, name: str = "") -> str:
    name = safe_name(name) if name else ""
    return f"{role}-{name}.log" if name else f"{role}.log"
