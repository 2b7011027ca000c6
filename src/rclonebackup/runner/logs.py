"""Engine log placement, rotation and echo.

This module provides:
- choose_log_side: which side of the pair hosts the engine log
- remote_label: file-name label derived from a remote specifier
- LogLocator: resolves (and creates the parent of) the engine log file
- rotate_log: keeps a few compressed generations of the log
- echo_log: copies the log to stdout
"""

from __future__ import annotations

import gzip
import logging
import os
import shutil
from pathlib import Path

import click

from rclonebackup.core.config import DEFAULT_LOG_CYCLES, DEFAULT_SYSTEM_LOG_DIR
from rclonebackup.core.errors import LogRotationError
from rclonebackup.core.types import LogSide

logger = logging.getLogger(__name__)

LOCAL_LOG_DIR_NAME = ".rclone"
LOG_FILE_STEM = "rclone"

# (source is local, destination is local) -> side hosting the log
_LOG_SIDE_TABLE: dict[tuple[bool, bool], LogSide] = {
    (True, True): LogSide.SOURCE,
    (True, False): LogSide.SOURCE,
    (False, True): LogSide.DESTINATION,
    (False, False): LogSide.SYSTEM,
}


def choose_log_side(source_is_local: bool, destination_is_local: bool) -> LogSide:
    """Pick the side of the pair that keeps the engine log."""
    return _LOG_SIDE_TABLE[(source_is_local, destination_is_local)]


def sanitize_label(name: str) -> str:
    """Make a label safe for file names.

    Only allows alphanumeric characters, hyphens, and underscores.
    Other characters are replaced with underscores.
    """
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in name)


def remote_label(specifier: str) -> str:
    """Label of a remote specifier: the text before its first ``:``.

    Plain local paths have no label.
    """
    name, sep, _ = specifier.partition(":")
    if not sep or not name:
        return ""
    return sanitize_label(name)


def log_file_name(label: str) -> str:
    """``rclone.log`` or ``rclone-<label>.log``."""
    return f"{LOG_FILE_STEM}-{label}.log" if label else f"{LOG_FILE_STEM}.log"


class LogLocator:
    """Decides where the engine log lives for a pair.

    Args:
        system_log_dir: Fallback directory when neither side is local.
    """

    def __init__(self, system_log_dir: str | Path = DEFAULT_SYSTEM_LOG_DIR) -> None:
        self._system_log_dir = Path(system_log_dir)

    def resolve(
        self,
        source: str,
        destination: str,
        override: Path | None = None,
    ) -> Path:
        """Compute the log file path without touching the filesystem.

        Args:
            source: Source path or specifier.
            destination: Destination path or specifier.
            override: Directory replacing the computed one.
        """
        side = choose_log_side(os.path.isdir(source), os.path.isdir(destination))
        if side is LogSide.SOURCE:
            directory = Path(source) / LOCAL_LOG_DIR_NAME
            label = remote_label(destination)
        elif side is LogSide.DESTINATION:
            directory = Path(destination) / LOCAL_LOG_DIR_NAME
            label = remote_label(source)
        else:
            directory = self._system_log_dir
            label = ""

        if override is not None:
            directory = override
        return directory / log_file_name(label)

    def locate(
        self,
        source: str,
        destination: str,
        override: Path | None = None,
    ) -> Path:
        """Resolve the log file path and create its parent directory.

        Raises:
            OSError: If the directory cannot be created.
        """
        log_file = self.resolve(source, destination, override)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Engine log: {log_file}")
        return log_file


def _generation(log_file: Path, n: int) -> Path:
    suffix = f".{n}" if n == 0 else f".{n}.gz"
    return log_file.with_name(log_file.name + suffix)


def rotate_log(log_file: Path, cycles: int = DEFAULT_LOG_CYCLES) -> None:
    """Rotate a log file, keeping ``cycles`` previous generations.

    The newest generation is ``<log>.0``; older ones are gzipped as
    ``<log>.1.gz`` and up. Missing or empty logs are left alone.

    Raises:
        LogRotationError: If any file operation fails.
    """
    try:
        if not log_file.is_file() or log_file.stat().st_size == 0:
            return
        cycles = max(cycles, 1)

        # Generations at or past the last slot would be shifted out.
        for stale in log_file.parent.glob(f"{log_file.name}.*.gz"):
            index = stale.name[len(log_file.name) + 1 : -len(".gz")]
            if index.isdigit() and int(index) >= cycles - 1:
                stale.unlink()

        for n in range(cycles - 2, 0, -1):
            older = _generation(log_file, n)
            if older.exists():
                older.replace(_generation(log_file, n + 1))

        previous = _generation(log_file, 0)
        if previous.exists():
            if cycles > 1:
                with open(previous, "rb") as src, gzip.open(_generation(log_file, 1), "wb") as dst:
                    shutil.copyfileobj(src, dst)
            previous.unlink()

        log_file.replace(previous)
    except OSError as e:
        raise LogRotationError(f"Failed to rotate {log_file}: {e}") from e


def echo_log(log_file: Path) -> None:
    """Write the log file to stdout unchanged. Unreadable logs print nothing."""
    try:
        content = log_file.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return
    except OSError as e:
        logger.debug(f"Not echoing unreadable log {log_file}: {e}")
        return
    if content:
        click.echo(content, nl=not content.endswith("\n"))
