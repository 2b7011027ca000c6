"""Shared fixtures: a stand-in rclone and recorded engine calls."""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path

import pytest

from rclonebackup.core.config import SyncConfiguration
from rclonebackup.runner.engine import RcloneCommand

# Minimal rclone: ``lsf`` succeeds for existing paths, ``sync`` copies the
# source into the target after moving the previous target contents into
# --backup-dir, and appends a line to --log-file. Every call is recorded.
FAKE_RCLONE = r"""#!/bin/sh
calls="$(dirname "$0")/calls.log"
echo "$*" >> "$calls"
cmd="$1"
shift
case "$cmd" in
  lsf)
    [ -e "$1" ]
    exit $?
    ;;
  sync)
    src="$1"
    dst="$2"
    shift 2
    log=""
    backup=""
    while [ $# -gt 0 ]; do
      case "$1" in
        --log-file) log="$2"; shift 2 ;;
        --backup-dir) backup="$2"; shift 2 ;;
        --exclude-if-present|--exclude-from|--retries|--low-level-retries|--bwlimit|--min-age|--transfers|--checkers) shift 2 ;;
        *) shift ;;
      esac
    done
    mkdir -p "$backup"
    if [ -d "$dst" ]; then
      cp -R "$dst"/. "$backup"/
      rm -rf "$dst"
    fi
    mkdir -p "$dst"
    cp -R "$src"/. "$dst"/
    echo "$(date -u +%Y/%m/%d\ %H:%M:%S) NOTICE: synced $src to $dst" >> "$log"
    exit "${FAKE_RCLONE_EXIT:-0}"
    ;;
esac
exit 2
"""


@dataclass
class FakeEngine:
    """Handle on the stand-in rclone script."""

    path: Path

    @property
    def calls(self) -> list[str]:
        calls_file = self.path.parent / "calls.log"
        if not calls_file.exists():
            return []
        return calls_file.read_text().splitlines()

    @property
    def sync_calls(self) -> list[str]:
        return [c for c in self.calls if c.startswith("sync ")]


@pytest.fixture
def fake_engine(tmp_path: Path) -> FakeEngine:
    """Write an executable fake rclone into its own directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "rclone"
    script.write_text(FAKE_RCLONE)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return FakeEngine(path=script)


class RecordingRunner:
    """EngineRunner double returning scripted exit codes."""

    def __init__(self, lsf: dict[str, int] | None = None, sync: int = 0) -> None:
        self.lsf = lsf or {}
        self.sync = sync
        self.commands: list[list[str]] = []
        self.quiet: list[bool] = []
        self.pass_fds: list[tuple[int, ...]] = []

    def run(
        self, command: RcloneCommand, quiet: bool = False, pass_fds: tuple[int, ...] = ()
    ) -> int:
        argv = command.argv
        self.commands.append(argv)
        self.quiet.append(quiet)
        self.pass_fds.append(tuple(pass_fds))
        if argv[1] == "lsf":
            return self.lsf.get(argv[2], 0)
        return self.sync

    @property
    def sync_commands(self) -> list[list[str]]:
        return [argv for argv in self.commands if argv[1] == "sync"]


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def local_pair(tmp_path: Path) -> tuple[Path, Path]:
    """Local source with two files and an empty local destination."""
    source = tmp_path / "source"
    source.mkdir()
    (source / "a.txt").write_text("alpha")
    (source / "sub").mkdir()
    (source / "sub" / "b.txt").write_text("beta")
    destination = tmp_path / "destination"
    destination.mkdir()
    return source, destination


@pytest.fixture
def make_config(tmp_path: Path):
    """Build a SyncConfiguration with lock files kept under tmp_path."""
    lock_dir = tmp_path / "locks"
    lock_dir.mkdir(exist_ok=True)

    def _make(source: str, destination: str, **kwargs) -> SyncConfiguration:
        kwargs.setdefault("lock_dir", lock_dir)
        return SyncConfiguration(source=source, destination=destination, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo logging changes made by CLI invocations."""
    package_logger = logging.getLogger("rclonebackup")
    handlers = package_logger.handlers[:]
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
