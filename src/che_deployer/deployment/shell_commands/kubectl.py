"""Kubectl command abstractions.

This module provides the kubectl operations used while provisioning the
cluster-scoped resources Tiller needs: existence checks, creation of the
role binding and service account, and manifest application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner

KUBECTL_BINARY = "kubectl"


class KubectlCommands:
    """Kubectl-related shell commands.

    Provides operations for:
    - Resource existence checks (never raising)
    - ClusterRoleBinding and ServiceAccount creation
    - Applying manifests fed on stdin
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Existence Checks
    # =========================================================================

    def resource_exists(
        self,
        resource_type: str,
        name: str,
        namespace: str | None = None,
        *,
        namespace_flag: str = "-n",
        timeout: float = 30,
    ) -> bool:
        """Check if a Kubernetes resource exists.

        Exit code 0 means the resource exists. Any other outcome, including
        a timeout or a missing kubectl binary, is reported as absent.

        Args:
            resource_type: Resource type (clusterrolebinding, serviceaccounts, ...)
            name: Resource name
            namespace: Namespace for namespaced resources
            namespace_flag: Flag spelling used for the namespace
            timeout: Seconds to wait for kubectl
        """
        cmd = [KUBECTL_BINARY, "get", resource_type, name]
        if namespace:
            cmd.extend([namespace_flag, namespace])
        return self._runner.run(cmd, timeout=timeout).success

    # =========================================================================
    # Resource Creation
    # =========================================================================

    def create_cluster_role_binding(
        self,
        name: str,
        cluster_role: str,
        service_account: str,
        *,
        timeout: float = 30,
    ) -> CommandResult:
        """Bind a ClusterRole to a ``namespace:name`` service account."""
        cmd = [
            KUBECTL_BINARY,
            "create",
            "clusterrolebinding",
            name,
            f"--clusterrole={cluster_role}",
            f"--serviceaccount={service_account}",
        ]
        return self._runner.run_checked(cmd, timeout=timeout)

    def create_service_account(
        self, name: str, namespace: str, *, timeout: float = 120
    ) -> CommandResult:
        """Create a ServiceAccount in a namespace."""
        cmd = [KUBECTL_BINARY, "create", "serviceaccount", name, "--namespace", namespace]
        return self._runner.run_checked(cmd, timeout=timeout)

    def apply_manifest(self, manifest: str, *, timeout: float = 30) -> CommandResult:
        """Apply manifest content through ``kubectl apply -f -``."""
        cmd = [KUBECTL_BINARY, "apply", "-f", "-"]
        return self._runner.run_checked(cmd, timeout=timeout, input_data=manifest)
