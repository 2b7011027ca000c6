"""Timestamped, run-correlated output lines.

Every status line printed by a run has the form::

    2024-01-31T02:30:00Z | 3f9a2c1 | message

so that output collected from cron can be grouped per run.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import click

from rclonebackup.core.identity import RunIdentity

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def display_duration(seconds: float) -> str:
    """Render a duration compactly, e.g. ``1d1m5s``.

    Days, hours and minutes are omitted when zero; seconds always appear.
    """
    total = max(int(seconds), 0)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return "".join(parts)


class OutputFormatter:
    """Prefixes messages with a UTC timestamp and the short run id.

    Args:
        identity: Identity of the active run.
        clock: Returns the current time; UTC expected.
    """

    def __init__(
        self,
        identity: RunIdentity,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._identity = identity
        self._clock = clock

    @property
    def identity(self) -> RunIdentity:
        return self._identity

    def format(self, message: str) -> str | None:
        """Format a message, or return None when there is nothing to print.

        Trailing newlines are stripped first; each remaining non-empty line
        gets its own prefix.
        """
        message = message.rstrip("\n")
        if not message:
            return None

        timestamp = self._clock().astimezone(UTC).strftime(TIMESTAMP_FORMAT)
        prefix = f"{timestamp} | {self._identity.short_id} | "
        lines = [prefix + line for line in message.split("\n") if line]
        return "\n".join(lines) if lines else None

    def emit(self, message: str) -> None:
        """Write a formatted message to stdout; empty messages print nothing."""
        line = self.format(message)
        if line is not None:
            click.echo(line)
