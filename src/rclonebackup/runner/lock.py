"""Per-pair exclusive locking.

Locks are ``flock`` locks on an open file descriptor. The kernel drops them
when the descriptor is closed, including when the holding process dies, so
a crashed run never leaves a pair locked. A descriptor passed on to the
engine keeps the lock until the engine exits as well. The lock file itself is
left in place; its existence means nothing.
"""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path
from types import TracebackType

from rclonebackup.core.errors import AlreadyLockedError

logger = logging.getLogger(__name__)

LOCK_FILE_PREFIX = "rclone-"
LOCK_FILE_SUFFIX = ".lock"


class LockHandle:
    """An acquired lock. Closing it releases the lock."""

    def __init__(self, path: Path, fd: int) -> None:
        self._path = path
        self._fd: int | None = fd

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._fd is not None

    def fileno(self) -> int:
        """Descriptor holding the lock.

        Raises:
            ValueError: If the lock has been released.
        """
        if self._fd is None:
            raise ValueError(f"lock {self._path} is not held")
        return self._fd

    def release(self) -> None:
        """Release the lock. Safe to call more than once."""
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug(f"Released lock {self._path}")

    def __enter__(self) -> LockHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


class LockManager:
    """Hands out non-blocking exclusive locks keyed by pair identifier.

    Args:
        lock_dir: Directory holding the lock files.
    """

    def __init__(self, lock_dir: Path) -> None:
        self._lock_dir = Path(lock_dir)

    def lock_path(self, stable_id: str) -> Path:
        """Lock file for a pair."""
        return self._lock_dir / f"{LOCK_FILE_PREFIX}{stable_id}{LOCK_FILE_SUFFIX}"

    def try_acquire(self, path: Path) -> LockHandle:
        """Take the lock at ``path`` without waiting.

        Raises:
            AlreadyLockedError: If another open file description holds it.
            OSError: If the lock file cannot be opened.
        """
        fd = os.open(path, os.O_WRONLY | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            os.close(fd)
            raise AlreadyLockedError(str(path)) from e
        except BaseException:
            os.close(fd)
            raise
        logger.debug(f"Acquired lock {path}")
        return LockHandle(path, fd)
