"""Chart staging into the cache directory.

The chart is copied out of the templates tree before dependencies are
resolved, so that ``helm dependencies update`` only ever writes to the copy.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import ChartStagingError
from .constants import DeploymentConstants, DeploymentPaths

if TYPE_CHECKING:
    from ..shell_commands import ShellCommands


class ChartStager:
    """Copies the Che chart to the cache directory and resolves its dependencies."""

    def __init__(
        self,
        commands: ShellCommands,
        paths: DeploymentPaths,
        constants: DeploymentConstants | None = None,
    ) -> None:
        self.commands = commands
        self.paths = paths
        self.constants = constants or DeploymentConstants()

    def prepare_chart(self) -> Path:
        """Copy the chart tree into the staging directory.

        Any previously staged copy is replaced, so the result mirrors the
        source tree exactly.

        Returns:
            Path to the staged chart

        Raises:
            ChartStagingError: If the directory cannot be created or copied
        """
        source, destination = self.paths.chart_source, self.paths.staged_chart
        if not source.is_dir():
            raise ChartStagingError(
                f"Unable to stage Helm chart from {source} to {destination}",
                details=f"{source} is not a directory",
            )
        try:
            # Drop files left behind by a previously staged chart
            if destination.exists():
                shutil.rmtree(destination)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source, destination)
        except OSError as exc:
            raise ChartStagingError(
                f"Unable to stage Helm chart from {source} to {destination}",
                details=str(exc),
            ) from exc
        logger.debug(f"Staged chart {source} -> {destination}")
        return destination

    def update_dependencies(self) -> None:
        """Run ``helm dependencies update`` against the staged chart only."""
        self.commands.helm.dependency_update(
            self.paths.staged_chart, timeout=self.constants.LONG_TIMEOUT
        )
