"""Top-level control flow of a backup run.

Architecture:
    PathValidator → LogLocator → LockManager → rclone sync → report

States:
    VALIDATING → LOCATING_LOG → LOCKING → SYNCING → REPORTING → DONE

A run ends in ABORTED when a path is unreachable or the pair is already
locked (nothing is synced), and in FAILED when the engine exits non-zero.
The lock is held from LOCKING until the run ends, whatever the outcome.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from rclonebackup.core.config import SyncConfiguration
from rclonebackup.core.errors import (
    AlreadyLockedError,
    EngineInvocationError,
    LogRotationError,
    PathUnreachableError,
)
from rclonebackup.core.identity import RunIdentity
from rclonebackup.core.types import RunState
from rclonebackup.runner.engine import EngineRunner, build_sync_command
from rclonebackup.runner.lock import LockHandle, LockManager
from rclonebackup.runner.logs import LogLocator, echo_log, rotate_log
from rclonebackup.runner.output import OutputFormatter, display_duration
from rclonebackup.runner.paths import PathValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_FAILED = 1


class SyncOrchestrator:
    """Runs one backup of a (source, destination) pair.

    Args:
        config: Resolved configuration for the run.
        runner: Executes engine commands.
        identity: Run identity; derived from the pair when omitted.
        locator: Engine log placement policy.
        locks: Lock manager; defaults to one rooted at ``config.lock_dir``.
        output: Status line writer; defaults to one bound to ``identity``.
        clock: Epoch-seconds clock used for timing.
    """

    def __init__(
        self,
        config: SyncConfiguration,
        runner: EngineRunner | None = None,
        identity: RunIdentity | None = None,
        locator: LogLocator | None = None,
        locks: LockManager | None = None,
        output: OutputFormatter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._runner = runner or EngineRunner()
        self._clock = clock
        self._identity = identity or RunIdentity.create(
            config.source, config.destination, now=clock()
        )
        self._validator = PathValidator(config, self._runner)
        self._locator = locator or LogLocator()
        self._locks = locks or LockManager(config.lock_dir)
        self._output = output or OutputFormatter(self._identity)
        self._state = RunState.VALIDATING
        self._log_file: Path | None = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def identity(self) -> RunIdentity:
        return self._identity

    @property
    def output(self) -> OutputFormatter:
        return self._output

    @property
    def log_file(self) -> Path | None:
        """Engine log file, once located."""
        return self._log_file

    def _transition(self, state: RunState) -> None:
        logger.debug(f"{self._identity.short_id}: {self._state.value} -> {state.value}")
        self._state = state

    def _abort(self, message: str) -> int:
        self._output.emit(f"warning: {message}, script will exit")
        self._transition(RunState.ABORTED)
        return EXIT_ABORTED

    def run(self) -> int:
        """Run the backup.

        Returns:
            Process exit code: 0 on success, 1 when aborted or when the sync
            fails. The engine's own code is reported in the warning line.

        Raises:
            OSError: If the engine log directory cannot be created.
            CommandError: If an argument cannot be passed to the engine.
        """
        config = self._config

        self._transition(RunState.VALIDATING)
        for path in (config.source, config.destination):
            try:
                self._validator.validate(path)
            except PathUnreachableError as e:
                return self._abort(str(e))

        self._transition(RunState.LOCATING_LOG)
        log_file = self._locator.locate(config.source, config.destination, config.log_path)
        self._log_file = log_file

        self._transition(RunState.LOCKING)
        lock_path = self._locks.lock_path(self._identity.stable_id)
        try:
            lock = self._locks.try_acquire(lock_path)
        except AlreadyLockedError:
            return self._abort("another sync is already in progress")

        with lock:
            return self._sync(log_file, lock)

    def _sync(self, log_file: Path, lock: LockHandle) -> int:
        config = self._config
        self._transition(RunState.SYNCING)

        try:
            rotate_log(log_file, config.log_cycles)
        except LogRotationError as e:
            logger.debug(f"Ignoring log rotation failure: {e}")

        start = self._clock()
        backup_dir = config.backup_dir(datetime.fromtimestamp(start, UTC))
        command = build_sync_command(config, log_file, backup_dir)

        self._output.emit(
            f"starting rclone sync ({config.source} -> {config.destination})"
        )
        # rclone inherits the lock so the pair stays locked until it exits,
        # even if this process is killed first.
        returncode = self._runner.run(command, pass_fds=(lock.fileno(),))
        duration = display_duration(self._clock() - start)

        self._transition(RunState.REPORTING)
        echo_log(log_file)

        if returncode != 0:
            error = EngineInvocationError(returncode)
            self._output.emit(f"warning: {error} (took {duration})")
            self._transition(RunState.FAILED)
            return EXIT_FAILED

        self._output.emit(f"success: rclone sync complete! (took {duration})")
        self._transition(RunState.DONE)
        return EXIT_OK
