"""Shared types for rclonebackup."""

from __future__ import annotations

from enum import Enum


class RunState(str, Enum):
    """Progress of a single backup run.

    A run moves forward through VALIDATING to DONE. ABORTED is reached when a
    path is unreachable or the pair is already locked; FAILED when the sync
    engine exits non-zero.
    """

    VALIDATING = "validating"
    LOCATING_LOG = "locating_log"
    LOCKING = "locking"
    SYNCING = "syncing"
    REPORTING = "reporting"
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"


class LogSide(str, Enum):
    """Where the engine log is kept."""

    SOURCE = "source"
    DESTINATION = "destination"
    SYSTEM = "system"
