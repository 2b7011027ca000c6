"""Command building and execution for the rclone sync engine.

This module provides:
- RcloneCommand: validated argument vector for one engine call
- build_sync_command: the full ``rclone sync`` call for a configuration
- build_list_command: the ``rclone lsf`` check used for path validation
- EngineRunner: runs commands as subprocesses, never through a shell
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

from rclonebackup.core.config import SyncConfiguration
from rclonebackup.core.errors import CommandError

logger = logging.getLogger(__name__)

# Exit status reported when the engine executable cannot be started,
# matching a shell's "command not found" and "permission denied".
ENGINE_NOT_FOUND = 127
ENGINE_NOT_EXECUTABLE = 126


def _check_token(token: str) -> str:
    if not isinstance(token, str):
        raise CommandError(f"Argument must be a string, got {type(token).__name__}")
    if not token:
        raise CommandError("Empty argument")
    if "\x00" in token:
        raise CommandError(f"Argument contains a NUL byte: {token!r}")
    return token


class RcloneCommand:
    """Argument vector for a single engine invocation.

    Each argument is checked when added; the vector is handed to the OS as-is.
    """

    def __init__(self, engine: str, subcommand: str) -> None:
        self._argv = [_check_token(engine), _check_token(subcommand)]

    def arg(self, *values: str) -> RcloneCommand:
        """Append positional arguments."""
        for value in values:
            self._argv.append(_check_token(value))
        return self

    def flag(self, name: str) -> RcloneCommand:
        """Append a bare flag such as ``--delete-excluded``."""
        self._argv.append(_check_token(name))
        return self

    def option(self, name: str, value: str | int | Path) -> RcloneCommand:
        """Append a flag followed by its value."""
        self._argv.append(_check_token(name))
        self._argv.append(_check_token(str(value)))
        return self

    def passthrough(self, args: Iterable[str]) -> RcloneCommand:
        """Append caller-supplied arguments verbatim."""
        for value in args:
            self._argv.append(_check_token(value))
        return self

    @property
    def argv(self) -> list[str]:
        return list(self._argv)

    def __repr__(self) -> str:
        return f"RcloneCommand({self._argv!r})"


def build_list_command(config: SyncConfiguration, path: str) -> RcloneCommand:
    """Build ``rclone lsf <path>``."""
    return RcloneCommand(config.engine, "lsf").arg(path)


def build_sync_command(
    config: SyncConfiguration,
    log_file: Path,
    backup_dir: str,
) -> RcloneCommand:
    """Build the ``rclone sync`` call for a run.

    Args:
        config: Resolved run configuration.
        log_file: Engine log file.
        backup_dir: Directory receiving overwritten or deleted files.

    Returns:
        The command, with ``config.extra_args`` last so they override
        anything set before them.
    """
    command = (
        RcloneCommand(config.engine, "sync")
        .arg(config.source, config.sync_target)
        .option("--log-file", log_file)
        .option("--exclude-if-present", config.exclude_if_present)
    )
    if config.exclude_file is not None:
        command.option("--exclude-from", config.exclude_file)
    command.option("--backup-dir", backup_dir)
    if config.delete_excluded:
        command.flag("--delete-excluded")
    command.option("--retries", config.retries)
    command.option("--low-level-retries", config.low_level_retries)

    if config.bwlimit:
        command.option("--bwlimit", config.bwlimit)
    if config.min_age:
        command.option("--min-age", config.min_age)
    if config.transfers is not None:
        command.option("--transfers", config.transfers)
    if config.checkers is not None:
        command.option("--checkers", config.checkers)
    if config.drive_use_trash is not None:
        command.flag(f"--drive-use-trash={str(config.drive_use_trash).lower()}")
    if config.ignore_case:
        command.flag("--ignore-case")

    return command.passthrough(config.extra_args)


class EngineRunner:
    """Runs engine commands and reports their exit status."""

    def run(
        self, command: RcloneCommand, quiet: bool = False, pass_fds: tuple[int, ...] = ()
    ) -> int:
        """Run a command to completion.

        Args:
            command: Command to run.
            quiet: Discard the command's stdout and stderr.
            pass_fds: Descriptors the command inherits, e.g. a held lock.

        Returns:
            The exit status; ENGINE_NOT_FOUND if the executable is missing.
        """
        logger.debug(f"Running {command.argv}")
        output = subprocess.DEVNULL if quiet else None
        try:
            result = subprocess.run(
                command.argv,
                stdout=output,
                stderr=output,
                pass_fds=pass_fds,
                check=False,
            )
        except FileNotFoundError:
            logger.debug(f"Engine executable not found: {command.argv[0]}")
            return ENGINE_NOT_FOUND
        except PermissionError:
            logger.debug(f"Engine executable not runnable: {command.argv[0]}")
            return ENGINE_NOT_EXECUTABLE
        return result.returncode
