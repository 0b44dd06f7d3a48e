"""Log session rotation."""

from logsync.session.manager import SessionManager, folder_for

__all__ = ["SessionManager", "folder_for"]
