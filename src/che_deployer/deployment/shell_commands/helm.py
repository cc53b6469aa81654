"""Helm command abstractions.

This module provides commands for Helm 2 release management: Tiller
initialization, chart dependency resolution, upgrades, history queries,
rollbacks and purges.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult, HelmHistoryEntry

if TYPE_CHECKING:
    from .runner import CommandRunner

HELM_BINARY = "helm"


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Tiller installation (helm init)
    - Chart dependency resolution
    - Release management (upgrade --install, rollback, purge)
    - Release history queries
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Tiller and Chart Preparation
    # =========================================================================

    def init(
        self,
        service_account: str,
        *,
        wait: bool = True,
        timeout: float = 120,
    ) -> CommandResult:
        """Install Tiller bound to a service account.

        Raises:
            CommandTimedOutError: If Tiller did not come up within timeout
            CommandFailedError: If helm init exited with a non-zero code
        """
        cmd = [HELM_BINARY, "init", "--service-account", service_account]
        if wait:
            cmd.append("--wait")
        return self._runner.run_checked(cmd, timeout=timeout)

    def dependency_update(self, chart_dir: Path, *, timeout: float = 120) -> CommandResult:
        """Resolve chart dependencies from the local repository cache."""
        cmd = [HELM_BINARY, "dependencies", "update", "--skip-refresh", str(chart_dir)]
        return self._runner.run_checked(cmd, timeout=timeout)

    # =========================================================================
    # Release Management
    # =========================================================================

    def build_upgrade_install(
        self,
        release_name: str,
        chart_path: Path,
        namespace: str,
        *,
        set_values: Sequence[tuple[str, str]] = (),
        value_files: Sequence[Path] = (),
        force: bool = True,
    ) -> list[str]:
        """Build a ``helm upgrade --install`` command line.

        ``--set`` overrides keep the order they were given in, value files
        follow them and the chart path comes last.

        Example:
            >>> helm.build_upgrade_install(
            ...     "che",
            ...     Path("/cache/templates/kubernetes/helm/che"),
            ...     "che",
            ...     set_values=[("cheImage", "eclipse/che-server:nightly")],
            ... )
        """
        cmd = [HELM_BINARY, "upgrade", "--install", release_name]
        if force:
            cmd.append("--force")
        cmd.extend(["--namespace", namespace])
        for key, value in set_values:
            cmd.extend(["--set", f"{key}={value}"])
        for value_file in value_files:
            cmd.extend(["-f", str(value_file)])
        cmd.append(str(chart_path))
        return cmd

    def history(self, release_name: str, *, timeout: float = 120) -> CommandResult:
        """Query release history as JSON.

        The result is returned as-is; use ``parse_history`` on its stdout.
        """
        cmd = [HELM_BINARY, "history", release_name, "--output", "json"]
        return self._runner.run(cmd, timeout=timeout)

    def rollback(
        self, release_name: str, revision: str, *, timeout: float = 120
    ) -> CommandResult:
        """Rollback a release to a specific revision, raising on failure."""
        cmd = [HELM_BINARY, "rollback", release_name, revision]
        return self._runner.run_checked(cmd, timeout=timeout)

    def purge(self, release_name: str, *, timeout: float = 30) -> CommandResult:
        """Delete a release together with its history.

        Failures are reported in the result, never raised.
        """
        cmd = [HELM_BINARY, "delete", release_name, "--purge"]
        return self._runner.run(cmd, timeout=timeout)


def parse_history(output: str) -> list[HelmHistoryEntry]:
    """Parse ``helm history --output json`` into entries, most recent first.

    Helm prints revisions oldest first; the list is reversed unless the
    revisions are already descending.

    Raises:
        ValueError: If the output is not a JSON list of revision objects
    """
    data = json.loads(output)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON list, got {type(data).__name__}")
    try:
        entries = [HelmHistoryEntry.from_dict(item) for item in data]
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"malformed history entry: {exc!r}") from exc
    return _most_recent_first(entries)


def _most_recent_first(entries: list[HelmHistoryEntry]) -> list[HelmHistoryEntry]:
    """Reverse oldest-first output so that entry 0 is the newest revision."""
    if len(entries) < 2:
        return entries
    first, last = _as_number(entries[0].revision), _as_number(entries[-1].revision)
    if first is not None and last is not None and first < last:
        return list(reversed(entries))
    return entries


def _as_number(revision: str) -> int | None:
    try:
        return int(revision)
    except ValueError:
        return None
