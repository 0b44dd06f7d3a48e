"""Crash reporting sink."""

from logsync.reporting.crash import CrashReporter

__all__ = ["CrashReporter"]
