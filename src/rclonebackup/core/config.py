"""Run configuration for rclonebackup.

The configuration is resolved once per invocation (by the CLI, from options
and environment variables) and passed explicitly to every component.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

DEFAULT_EXCLUDE_IF_PRESENT = ".rclone-ignore"
DEFAULT_SYSTEM_LOG_DIR = "/var/log/"
DEFAULT_ENGINE = "rclone"
DEFAULT_RETRIES = 1
DEFAULT_LOW_LEVEL_RETRIES = 2
DEFAULT_LOG_CYCLES = 3
DEFAULT_LOCK_DIR = "/tmp"

BACKUP_DIR_FORMAT = "%Y-%m-%dT%H%M%SZ"
SYNC_TARGET_NAME = "latest"


def get_config_dir() -> Path:
    """Get the configuration directory for rclonebackup.

    Returns:
        Path to ~/.rclone-backup.
    """
    return Path.home() / ".rclone-backup"


def get_default_exclude_file() -> Path:
    """Get the exclusion-pattern file used when none is configured."""
    return get_config_dir() / "rclone-exclude"


def join_remote(base: str, name: str) -> str:
    """Append a path component to a local path or remote specifier.

    ``remote:`` becomes ``remote:name`` rather than ``remote:/name``, which
    rclone would resolve from the remote's root.
    """
    if base.endswith((":", "/")):
        return f"{base}{name}"
    return f"{base}/{name}"


@dataclass(frozen=True)
class SyncConfiguration:
    """Everything needed to run one backup of a pair.

    Attributes:
        source: Local path or rclone remote specifier to back up.
        destination: Local path or remote specifier receiving the backup.
        extra_args: Engine arguments appended verbatim, last.
        exclude_file: Newline-delimited exclusion patterns, or None to skip.
        exclude_if_present: Marker file name that excludes its directory.
        log_path: Directory overriding the computed engine log location.
        bwlimit: Bandwidth limit spec, optionally a timetable.
        min_age: Skip files modified more recently than this duration.
        transfers: Number of parallel file transfers.
        checkers: Number of parallel checkers.
        delete_excluded: Also delete destination files matching exclusions.
        drive_use_trash: Provider soft-delete behavior (None leaves the default).
        ignore_case: Case-insensitive filtering (None leaves the default).
        lock_dir: Directory holding per-pair lock files.
        engine: Sync engine executable.
    """

    source: str
    destination: str
    extra_args: tuple[str, ...] = ()
    exclude_file: Path | None = None
    exclude_if_present: str = DEFAULT_EXCLUDE_IF_PRESENT
    log_path: Path | None = None
    bwlimit: str | None = None
    min_age: str | None = None
    transfers: int | None = None
    checkers: int | None = None
    delete_excluded: bool = True
    drive_use_trash: bool | None = None
    ignore_case: bool | None = None
    lock_dir: Path = field(default_factory=lambda: Path(DEFAULT_LOCK_DIR))
    engine: str = DEFAULT_ENGINE
    retries: int = DEFAULT_RETRIES
    low_level_retries: int = DEFAULT_LOW_LEVEL_RETRIES
    log_cycles: int = DEFAULT_LOG_CYCLES

    @property
    def sync_target(self) -> str:
        """Destination subtree mirroring the source."""
        return join_remote(self.destination, SYNC_TARGET_NAME)

    def backup_dir(self, at: datetime | None = None) -> str:
        """Backup directory for files replaced or deleted by a sync started at ``at``.

        Args:
            at: Start of the sync; defaults to now. Naive values are taken as UTC.

        Returns:
            ``<destination>/YYYY-MM-DDTHHMMSSZ``.
        """
        if at is None:
            at = datetime.now(UTC)
        elif at.tzinfo is None:
            at = at.replace(tzinfo=UTC)
        return join_remote(self.destination, at.astimezone(UTC).strftime(BACKUP_DIR_FORMAT))


def build_configuration(
    source: str,
    destination: str,
    extra_args: tuple[str, ...] | list[str] = (),
    *,
    exclude_file: str | Path | None = None,
    exclude_if_present: str | None = None,
    log_path: str | Path | None = None,
    bwlimit: str | None = None,
    min_age: str | None = None,
    transfers: int | None = None,
    checkers: int | None = None,
    delete_excluded: bool = True,
    drive_use_trash: bool | None = None,
    ignore_case: bool | None = None,
    lock_dir: str | Path | None = None,
    engine: str | None = None,
) -> SyncConfiguration:
    """Resolve raw option values into a SyncConfiguration.

    Empty strings count as unset. When no exclusion file is given the default
    one is used only if it exists.
    """
    if exclude_file:
        resolved_exclude: Path | None = Path(exclude_file).expanduser()
    else:
        default_exclude = get_default_exclude_file()
        resolved_exclude = default_exclude if default_exclude.is_file() else None

    return SyncConfiguration(
        source=source,
        destination=destination,
        extra_args=tuple(extra_args),
        exclude_file=resolved_exclude,
        exclude_if_present=exclude_if_present or DEFAULT_EXCLUDE_IF_PRESENT,
        log_path=Path(log_path).expanduser() if log_path else None,
        bwlimit=bwlimit or None,
        min_age=min_age or None,
        transfers=transfers,
        checkers=checkers,
        delete_excluded=delete_excluded,
        drive_use_trash=drive_use_trash,
        ignore_case=ignore_case,
        lock_dir=Path(lock_dir).expanduser() if lock_dir else Path(DEFAULT_LOCK_DIR),
        engine=engine or DEFAULT_ENGINE,
    )
