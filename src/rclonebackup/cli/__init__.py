"""Command-line interface for rclone-backup.

Usage:
    rclone-backup [OPTIONS] SOURCE DESTINATION [EXTRA_ARGS]...

Designed to be run from cron, e.g.::

    30 2 * * * rclone-backup /src remote:backups >> /var/log/rclone-backup.log 2>&1

Every option can also be set through the environment variable named in its
help text. Anything after DESTINATION is passed to ``rclone sync`` as-is.
"""

from __future__ import annotations

import logging
import sys

import click

from rclonebackup.core.config import (
    DEFAULT_ENGINE,
    DEFAULT_EXCLUDE_IF_PRESENT,
    build_configuration,
)
from rclonebackup.core.errors import CommandError
from rclonebackup.runner.orchestrator import EXIT_ABORTED, SyncOrchestrator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool) -> None:
    """Send rclonebackup diagnostics to stderr.

    Stdout is reserved for status lines and the engine log.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    root_logger = logging.getLogger("rclonebackup")
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stderr_handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root_logger.propagate = False


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": ["-h", "--help"],
    }
)
@click.version_option(package_name="rclone-backup")
@click.argument("source")
@click.argument("destination")
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--exclude-file",
    envvar="EXCLUDE_FILE",
    type=click.Path(dir_okay=False),
    help="File of exclusion patterns [env: EXCLUDE_FILE; default: ~/.rclone-backup/rclone-exclude if present].",
)
@click.option(
    "--exclude-if-present",
    envvar="EXCLUDE_IF_PRESENT",
    default=DEFAULT_EXCLUDE_IF_PRESENT,
    show_default=True,
    help="Skip directories containing this file [env: EXCLUDE_IF_PRESENT].",
)
@click.option(
    "--log-path",
    envvar="LOG_PATH",
    type=click.Path(file_okay=False),
    help="Directory for the rclone log instead of the computed one [env: LOG_PATH].",
)
@click.option("--bwlimit", envvar="BWLIMIT", help="Bandwidth limit, e.g. '08:00,2M 00:00,off' [env: BWLIMIT].")
@click.option("--min-age", envvar="MIN_AGE", help="Skip files newer than this, e.g. 15m [env: MIN_AGE].")
@click.option(
    "--transfers",
    envvar="TRANSFERS",
    type=click.IntRange(min=1),
    help="Parallel file transfers [env: TRANSFERS].",
)
@click.option(
    "--checkers",
    envvar="CHECKERS",
    type=click.IntRange(min=1),
    help="Parallel checkers [env: CHECKERS].",
)
@click.option(
    "--delete-excluded",
    envvar="DELETE_EXCLUDED",
    type=click.BOOL,
    default=True,
    show_default=True,
    metavar="BOOL",
    help="Delete excluded files from the destination [env: DELETE_EXCLUDED].",
)
@click.option(
    "--provider-trash",
    envvar="PROVIDER_TRASH_FLAG",
    type=click.BOOL,
    default=None,
    metavar="BOOL",
    help="Send deleted files to the provider's trash (Google Drive) [env: PROVIDER_TRASH_FLAG].",
)
@click.option(
    "--ignore-case",
    envvar="IGNORE_CASE",
    type=click.BOOL,
    default=None,
    metavar="BOOL",
    help="Ignore case when matching exclusions [env: IGNORE_CASE].",
)
@click.option(
    "--lock-dir",
    envvar="LOCK_DIR",
    type=click.Path(file_okay=False),
    help="Directory for lock files [env: LOCK_DIR; default: /tmp].",
)
@click.option(
    "--engine",
    envvar="RCLONE_BACKUP_ENGINE",
    default=DEFAULT_ENGINE,
    show_default=True,
    help="rclone executable [env: RCLONE_BACKUP_ENGINE].",
)
@click.option("--verbose", "-v", is_flag=True, help="Log diagnostics to stderr.")
def cli(
    source: str,
    destination: str,
    extra_args: tuple[str, ...],
    exclude_file: str | None,
    exclude_if_present: str,
    log_path: str | None,
    bwlimit: str | None,
    min_age: str | None,
    transfers: int | None,
    checkers: int | None,
    delete_excluded: bool,
    provider_trash: bool | None,
    ignore_case: bool | None,
    lock_dir: str | None,
    engine: str,
    verbose: bool,
) -> None:
    """Back up SOURCE to DESTINATION with rclone, one run per pair at a time.

    DESTINATION/latest mirrors SOURCE; files replaced or deleted by a run are
    moved to DESTINATION/<YYYY-MM-DDTHHMMSSZ>.
    """
    setup_logging(verbose)

    config = build_configuration(
        source,
        destination,
        extra_args,
        exclude_file=exclude_file,
        exclude_if_present=exclude_if_present,
        log_path=log_path,
        bwlimit=bwlimit,
        min_age=min_age,
        transfers=transfers,
        checkers=checkers,
        delete_excluded=delete_excluded,
        drive_use_trash=provider_trash,
        ignore_case=ignore_case,
        lock_dir=lock_dir,
        engine=engine,
    )
    orchestrator = SyncOrchestrator(config)

    try:
        exit_code = orchestrator.run()
    except OSError as e:
        reason = f"{e.strerror} ({e.filename})" if e.filename else str(e)
        orchestrator.output.emit(f"warning: {reason}, script will exit")
        exit_code = EXIT_ABORTED
    except CommandError as e:
        orchestrator.output.emit(f"warning: {e}, script will exit")
        exit_code = EXIT_ABORTED

    sys.exit(exit_code)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = ["cli", "main", "setup_logging"]
