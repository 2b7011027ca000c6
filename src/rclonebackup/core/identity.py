"""Stable and per-run identifiers for a (source, destination) pair.

This module provides:
- digest: short hex digest of a string
- derive_stable_id: pair identifier used to name the lock file
- derive_run_id: per-invocation identifier used to correlate output lines
- RunIdentity: both identifiers for one run
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass

SHORT_ID_LENGTH = 7


def digest(text: str) -> str:
    """Hash a string into a 32-character lowercase hex digest.

    A newline is appended before hashing so that identifiers match the ones
    produced by ``echo "$text" | md5sum`` in existing cron deployments.

    Args:
        text: The string to hash.

    Returns:
        Lowercase hex MD5 digest.
    """
    return hashlib.md5((text + "\n").encode("utf-8"), usedforsecurity=False).hexdigest()


def derive_stable_id(source: str, destination: str) -> str:
    """Derive the identifier of a (source, destination) pair.

    Source and destination are concatenated without a separator, so
    ("ab", "c") and ("a", "bc") share an identifier.
    """
    return digest(f"{source}{destination}")


def derive_run_id(stable_id: str, epoch_seconds: int) -> str:
    """Derive the identifier of a single run of a pair."""
    return digest(f"{epoch_seconds}{stable_id}")


@dataclass(frozen=True)
class RunIdentity:
    """Identifiers for one run.

    Attributes:
        stable_id: Same for every run of the pair, safe as a file name.
        run_id: Unique per run (to the second), only used in output lines.
    """

    stable_id: str
    run_id: str

    @classmethod
    def create(cls, source: str, destination: str, now: float | None = None) -> RunIdentity:
        """Build the identity of a run starting at ``now`` (epoch seconds)."""
        epoch = int(time.time() if now is None else now)
        stable_id = derive_stable_id(source, destination)
        return cls(stable_id=stable_id, run_id=derive_run_id(stable_id, epoch))

    @property
    def short_id(self) -> str:
        """Run identifier prefix shown in output lines."""
        return self.run_id[:SHORT_ID_LENGTH]
