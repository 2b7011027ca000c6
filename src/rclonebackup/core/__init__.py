"""Core module - Identifiers, configuration, shared types and errors."""

from rclonebackup.core.config import (
    BACKUP_DIR_FORMAT,
    SyncConfiguration,
    build_configuration,
    get_config_dir,
)
from rclonebackup.core.errors import (
    AlreadyLockedError,
    CommandError,
    EngineInvocationError,
    LogRotationError,
    PathUnreachableError,
    RcloneBackupError,
)
from rclonebackup.core.identity import (
    RunIdentity,
    derive_run_id,
    derive_stable_id,
    digest,
)
from rclonebackup.core.types import LogSide, RunState

__all__ = [
    # Config
    "BACKUP_DIR_FORMAT",
    "SyncConfiguration",
    "build_configuration",
    "get_config_dir",
    # Errors
    "AlreadyLockedError",
    "CommandError",
    "EngineInvocationError",
    "LogRotationError",
    "PathUnreachableError",
    "RcloneBackupError",
    # Identity
    "RunIdentity",
    "derive_run_id",
    "derive_stable_id",
    "digest",
    # Types
    "LogSide",
    "RunState",
]
