"""Exceptions raised by rclonebackup components.

Components raise these; the orchestrator turns fatal ones into a single
warning line and an exit code.
"""

from __future__ import annotations


class RcloneBackupError(Exception):
    """Base class for rclonebackup errors."""


class PathUnreachableError(RcloneBackupError):
    """A source or destination path could not be listed by the engine."""

    def __init__(self, path: str) -> None:
        super().__init__(f"input path ({path}) does not exist")
        self.path = path


class AlreadyLockedError(RcloneBackupError):
    """Another process holds the lock for the same pair."""

    def __init__(self, lock_path: str) -> None:
        super().__init__(f"lock already held: {lock_path}")
        self.lock_path = lock_path


class EngineInvocationError(RcloneBackupError):
    """The sync engine exited with a non-zero status."""

    def __init__(self, returncode: int) -> None:
        super().__init__(f"rclone sync failed with exit code {returncode}")
        self.returncode = returncode


class LogRotationError(RcloneBackupError):
    """The engine log could not be rotated."""


class CommandError(RcloneBackupError):
    """An argument cannot be passed to the engine."""
