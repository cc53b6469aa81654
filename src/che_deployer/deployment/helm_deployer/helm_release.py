"""Helm release deployment with failure recovery.

An upgrade that fails is recovered at most once:

    ATTEMPT -> SUCCESS
    ATTEMPT -> RECOVER (purge or rollback) -> RETRY -> SUCCESS | fatal

The recovery action is chosen from the release history. A release whose
latest revision is "1" has never been deployed successfully and is purged;
any other release is rolled back to its latest revision. History is read and
acted upon without a lock, so a concurrent change to the release between the
two can lead to a stale decision.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import (
    CommandError,
    DeploymentError,
    EmptyReleaseHistoryError,
    HistoryParseFailedError,
    HistoryQueryFailedError,
    UnrecoverableAfterRetryError,
)
from ..shell_commands import CommandResult, HelmHistoryEntry, parse_history, raise_for_result
from .constants import DeploymentConstants, DeploymentPaths

if TYPE_CHECKING:
    from pathlib import Path

    from che_deployer.config import InstallationConfig

    from ..pipeline import PipelineContext
    from ..shell_commands import ShellCommands


class RecoveryAction(StrEnum):
    PURGE = "purge"
    ROLLBACK = "rollback"


def choose_recovery(history: list[HelmHistoryEntry]) -> tuple[RecoveryAction, str]:
    """Pick the recovery action for a failed upgrade.

    Args:
        history: Release history, most recent first

    Returns:
        The action and the revision it applies to

    Raises:
        EmptyReleaseHistoryError: If there is no revision to act on
    """
    if not history:
        raise EmptyReleaseHistoryError(
            "Helm upgrade failed and the release has no history to recover from."
        )
    latest = history[0]
    if latest.revision == "1":
        return RecoveryAction.PURGE, latest.revision
    return RecoveryAction.ROLLBACK, latest.revision


class HelmReleaseManager:
    """Deploys the Che chart and recovers from a failed upgrade.

    Handles:
    - Building the upgrade --install command from the installation config
    - Reading release history
    - Purge-or-rollback recovery followed by a single retry
    """

    def __init__(
        self,
        commands: ShellCommands,
        paths: DeploymentPaths,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the Helm release manager.

        Args:
            commands: Shell command executor
            paths: Deployment path resolver
            constants: Optional deployment constants
        """
        self.commands = commands
        self.paths = paths
        self.constants = constants or DeploymentConstants()

    # =========================================================================
    # Command Composition
    # =========================================================================

    def build_upgrade_command(
        self, config: InstallationConfig, context: PipelineContext
    ) -> list[str]:
        """Compose the ``helm upgrade --install`` command line.

        The multi-user values file is added only in multi-user mode. TLS
        overrides and the TLS values file are added only when TLS is enabled,
        with the contact email taken from the pipeline context.

        Raises:
            DeploymentError: If TLS is enabled but no contact email is known
        """
        set_values: list[tuple[str, str]] = [("global.ingressDomain", config.domain)]
        value_files: list[Path] = []

        if config.tls:
            if context.tls_email is None:
                raise DeploymentError(
                    "TLS option is enabled but no TLS contact email was found.",
                    details="The TLS secret check must run before deploying the chart.",
                )
            set_values.append(("global.cheDomain", config.domain))
            set_values.append(("global.tls.email", context.tls_email))

        set_values.extend(
            [
                ("cheImage", config.che_image),
                ("global.cheWorkspacesNamespace", config.namespace),
                ("che.workspace.devfileRegistryUrl", config.devfile_registry_url),
                ("che.workspace.pluginRegistryUrl", config.plugin_registry_url),
            ]
        )

        if config.multiuser:
            value_files.append(self.paths.multi_user_values)
        if config.tls:
            value_files.append(self.paths.tls_values)

        return self.commands.helm.build_upgrade_install(
            config.release_name,
            self.paths.staged_chart,
            config.namespace,
            set_values=set_values,
            value_files=value_files,
        )

    # =========================================================================
    # History
    # =========================================================================

    def get_history(self, release_name: str) -> list[HelmHistoryEntry]:
        """Read release history, most recent first.

        Raises:
            HistoryQueryFailedError: If helm history fails
            HistoryParseFailedError: If its output is not valid JSON history
        """
        result = self.commands.helm.history(release_name, timeout=self.constants.LONG_TIMEOUT)
        if not result.success:
            raise HistoryQueryFailedError(
                f"Unable to read history of release {release_name}",
                details=result.stderr,
            )
        return self._parse_history(result)

    def _parse_history(self, result: CommandResult) -> list[HelmHistoryEntry]:
        try:
            return parse_history(result.stdout)
        except ValueError as exc:
            raise HistoryParseFailedError(
                f"Unable to grab helm history: {exc}", details=result.stdout
            ) from exc

    # =========================================================================
    # Deployment
    # =========================================================================

    def upgrade(self, config: InstallationConfig, context: PipelineContext) -> None:
        """Deploy the staged chart, recovering once from a failed upgrade.

        Raises:
            HistoryQueryFailedError: If history can't be read after a failure
            HistoryParseFailedError: If history output is unparseable
            EmptyReleaseHistoryError: If there is no revision to recover to
            CommandError: If the rollback itself fails
            UnrecoverableAfterRetryError: If the retried upgrade fails
        """
        timeout = self.constants.LONG_TIMEOUT
        command = self.build_upgrade_command(config, context)

        result = self.commands.runner.run(command, timeout=timeout)
        if result.success:
            return

        logger.warning(
            f"Upgrade of release {config.release_name} failed "
            f"(exit code {result.returncode}, timed out: {result.timed_out})"
        )
        self._recover(config.release_name, result)

        retry = self.commands.runner.run(command, timeout=timeout)
        try:
            raise_for_result(retry, timeout)
        except CommandError as exc:
            raise UnrecoverableAfterRetryError(
                f"Helm upgrade of release {config.release_name} failed again "
                "after recovery.",
                details=exc.message,
            ) from exc

    def _recover(self, release_name: str, failed: CommandResult) -> None:
        history_result = self.commands.helm.history(
            release_name, timeout=self.constants.LONG_TIMEOUT
        )
        if not history_result.success:
            raise HistoryQueryFailedError(
                f"Unable to execute helm command {failed.command_line} / {failed.stderr}",
                details=history_result.stderr,
            )
        history = self._parse_history(history_result)

        try:
            action, revision = choose_recovery(history)
        except EmptyReleaseHistoryError as exc:
            exc.details = (
                f"Command: {failed.command_line}\n"
                f"stderr: {failed.stderr}\n"
                f"Inspect the release with: helm history {release_name}"
            )
            raise

        logger.warning(f"Recovering release {release_name}: {action} (revision {revision})")
        if action is RecoveryAction.PURGE:
            purged = self.commands.helm.purge(
                release_name, timeout=self.constants.SHORT_TIMEOUT
            )
            if not purged.success:
                logger.warning(f"Purge of release {release_name} failed: {purged.stderr}")
        else:
            self.commands.helm.rollback(
                release_name, revision, timeout=self.constants.LONG_TIMEOUT
            )
