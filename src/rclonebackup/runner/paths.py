"""Reachability checks for source and destination paths."""

from __future__ import annotations

import logging

from rclonebackup.core.config import SyncConfiguration
from rclonebackup.core.errors import PathUnreachableError
from rclonebackup.runner.engine import EngineRunner, build_list_command

logger = logging.getLogger(__name__)


class PathValidator:
    """Confirms that local paths and remote specifiers can be listed.

    The engine's ``lsf`` is used for both kinds, so a remote counts as
    reachable only when its credentials and network work too.
    """

    def __init__(self, config: SyncConfiguration, runner: EngineRunner) -> None:
        self._config = config
        self._runner = runner

    def validate(self, path: str) -> None:
        """Check that a path is reachable.

        Raises:
            PathUnreachableError: If listing the path fails.
        """
        returncode = self._runner.run(build_list_command(self._config, path), quiet=True)
        if returncode != 0:
            logger.debug(f"lsf {path!r} exited with {returncode}")
            raise PathUnreachableError(path)
