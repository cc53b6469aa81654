"""Idempotent provisioning of the cluster resources Tiller needs.

Every resource follows check-then-create: an existence probe that never
raises, followed by a creation that does. Two concurrent runs can both see
a resource as absent; the second creation then fails with "AlreadyExists".
Deployments are expected to run one at a time per cluster.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import DeploymentError
from .constants import DeploymentConstants

if TYPE_CHECKING:
    from ..shell_commands import ShellCommands


class ResourceProvisioner:
    """Creates the Tiller role binding, service account, RBAC and service."""

    def __init__(
        self,
        commands: ShellCommands,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the provisioner.

        Args:
            commands: Shell command executor
            constants: Optional deployment constants
        """
        self.commands = commands
        self.constants = constants or DeploymentConstants()

    # =========================================================================
    # Existence Checks
    # =========================================================================

    def tiller_role_binding_exists(self) -> bool:
        return self.commands.kubectl.resource_exists(
            "clusterrolebinding",
            self.constants.TILLER_ROLE_BINDING,
            timeout=self.constants.SHORT_TIMEOUT,
        )

    def tiller_service_account_exists(self) -> bool:
        return self.commands.kubectl.resource_exists(
            "serviceaccounts",
            self.constants.TILLER_SERVICE_ACCOUNT,
            self.constants.SYSTEM_NAMESPACE,
            namespace_flag="--namespace",
            timeout=self.constants.SHORT_TIMEOUT,
        )

    def tiller_service_exists(self) -> bool:
        return self.commands.kubectl.resource_exists(
            "services",
            self.constants.TILLER_SERVICE,
            self.constants.SYSTEM_NAMESPACE,
            timeout=self.constants.SHORT_TIMEOUT,
        )

    # =========================================================================
    # Creation
    # =========================================================================

    def create_tiller_role_binding(self) -> None:
        self.commands.kubectl.create_cluster_role_binding(
            self.constants.TILLER_ROLE_BINDING,
            self.constants.TILLER_CLUSTER_ROLE,
            self.constants.TILLER_BINDING_SUBJECT,
            timeout=self.constants.SHORT_TIMEOUT,
        )

    def create_tiller_service_account(self) -> None:
        self.commands.kubectl.create_service_account(
            self.constants.TILLER_SERVICE_ACCOUNT,
            self.constants.SYSTEM_NAMESPACE,
            timeout=self.constants.LONG_TIMEOUT,
        )

    def create_tiller_service(self) -> None:
        """Install Tiller, which materializes the tiller-deploy service."""
        self.commands.helm.init(
            self.constants.TILLER_SERVICE_ACCOUNT,
            timeout=self.constants.LONG_TIMEOUT,
        )

    def apply_tiller_rbac(self, manifest_path: Path) -> None:
        """Apply the RBAC manifest; ``kubectl apply`` is safe to repeat.

        Raises:
            DeploymentError: If the manifest cannot be read
            CommandError: If kubectl apply fails
        """
        try:
            manifest = manifest_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DeploymentError(
                f"Unable to read Tiller RBAC manifest {manifest_path}",
                details=str(exc),
            ) from exc
        self.commands.kubectl.apply_manifest(manifest, timeout=self.constants.SHORT_TIMEOUT)

    # =========================================================================
    # Check-then-create
    # =========================================================================

    def ensure_tiller_role_binding(self) -> bool:
        """Create the role binding if absent. Returns True if it was created."""
        return self._ensure(
            "clusterrolebinding", self.tiller_role_binding_exists, self.create_tiller_role_binding
        )

    def ensure_tiller_service_account(self) -> bool:
        """Create the service account if absent. Returns True if it was created."""
        return self._ensure(
            "serviceaccount",
            self.tiller_service_account_exists,
            self.create_tiller_service_account,
        )

    def ensure_tiller_service(self) -> bool:
        """Install Tiller if its service is absent. Returns True if it was created."""
        return self._ensure(
            "service", self.tiller_service_exists, self.create_tiller_service
        )

    def _ensure(
        self, kind: str, exists: Callable[[], bool], create: Callable[[], None]
    ) -> bool:
        if exists():
            logger.debug(f"Tiller {kind} already exists, skipping creation")
            return False
        create()
        logger.info(f"Created Tiller {kind}")
        return True
