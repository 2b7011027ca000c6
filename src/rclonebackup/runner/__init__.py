"""Backup run harness around ``rclone sync``.

Architecture:
    PathValidator → LogLocator → LockManager → EngineRunner → OutputFormatter

Components:
- **PathValidator**: Checks both sides of the pair with ``rclone lsf``
- **LogLocator**: Places the rclone log on whichever side is local
- **LockManager**: Per-pair ``flock``, released by the kernel on process exit
- **EngineRunner**: Runs RcloneCommand argument vectors without a shell
- **OutputFormatter**: Timestamp and run id prefix on every status line
- **SyncOrchestrator**: Ties the above together for one run
"""

from rclonebackup.runner.engine import (
    EngineRunner,
    RcloneCommand,
    build_list_command,
    build_sync_command,
)
from rclonebackup.runner.lock import LockHandle, LockManager
from rclonebackup.runner.logs import (
    LogLocator,
    choose_log_side,
    echo_log,
    remote_label,
    rotate_log,
)
from rclonebackup.runner.orchestrator import SyncOrchestrator
from rclonebackup.runner.output import OutputFormatter, display_duration
from rclonebackup.runner.paths import PathValidator

__all__ = [
    # Engine
    "EngineRunner",
    "RcloneCommand",
    "build_list_command",
    "build_sync_command",
    # Lock
    "LockHandle",
    "LockManager",
    # Logs
    "LogLocator",
    "choose_log_side",
    "echo_log",
    "remote_label",
    "rotate_log",
    # Orchestration
    "SyncOrchestrator",
    # Output
    "OutputFormatter",
    "display_duration",
    # Paths
    "PathValidator",
]
