"""Pre-deployment prerequisite checks.

Each check only reads tool or cluster state. Failures raise errors whose
details carry a remediation example the operator can run as-is.
"""

from __future__ import annotations

from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger

from che_deployer.infra.k8s import ClusterAPIError, run_sync

from ..errors import (
    ClusterAccessError,
    InvalidSecretError,
    MissingClusterFeatureError,
    MissingSecretError,
    MissingToolError,
)
from ..shell_commands.helm import HELM_BINARY
from .constants import DeploymentConstants

if TYPE_CHECKING:
    from che_deployer.infra.k8s import KubernetesController

    from ..shell_commands import ShellCommands

T = TypeVar("T")


class PrerequisiteChecker:
    """Verifies the tool and cluster prerequisites of a deployment."""

    def __init__(
        self,
        commands: ShellCommands,
        controller: KubernetesController,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the prerequisite checker.

        Args:
            commands: Shell command executor
            controller: Cluster API client for secret and API lookups
            constants: Optional deployment constants
        """
        self.commands = commands
        self.controller = controller
        self.constants = constants or DeploymentConstants()

    @property
    def _secret_example(self) -> str:
        c = self.constants
        return (
            "Example on how to create the secret: "
            f"kubectl create secret generic {c.TLS_SECRET_NAME} "
            f"--from-literal={c.TLS_EMAIL_KEY}=my@email-address.com"
        )

    def _query(self, coro: Coroutine[Any, Any, T], message: str, details: str) -> T:
        try:
            return run_sync(coro)
        except ClusterAPIError as e:
            raise ClusterAccessError(f"{message}: {e}", details=details) from e

    def check_helm_installed(self) -> None:
        """Fail fast if the helm binary is not on PATH.

        Raises:
            MissingToolError: If helm cannot be resolved
        """
        if not self.commands.tool_exists(HELM_BINARY):
            raise MissingToolError(
                MissingToolError.code,
                details=f"'{HELM_BINARY}' was not found on PATH. "
                "Install Helm 2 and make sure the binary is executable.",
            )

    def check_tls_secret(self) -> str:
        """Verify the TLS secret and return its contact email.

        Raises:
            ClusterAccessError: If the secret cannot be read from the cluster
            MissingSecretError: If the secret doesn't exist
            InvalidSecretError: If the secret has no email field
        """
        c = self.constants
        failure = (
            f"Unable to read the {c.TLS_SECRET_NAME} secret "
            f"in {c.TLS_SECRET_NAMESPACE} namespace"
        )
        details = (
            "Check that the current kubeconfig context can read secrets in the "
            f"{c.TLS_SECRET_NAMESPACE} namespace.\n{self._secret_example}"
        )
        exists = self._query(
            self.controller.secret_exists(c.TLS_SECRET_NAME, c.TLS_SECRET_NAMESPACE),
            failure,
            details,
        )
        if not exists:
            raise MissingSecretError(
                f"TLS option is enabled but {c.TLS_SECRET_NAME} secret does not exist "
                f"in {c.TLS_SECRET_NAMESPACE} namespace.",
                details=self._secret_example,
            )

        email = self._query(
            self.controller.get_secret_value(
                c.TLS_SECRET_NAME, c.TLS_EMAIL_KEY, c.TLS_SECRET_NAMESPACE
            ),
            failure,
            details,
        )
        if email is None:
            raise InvalidSecretError(
                f"TLS option is enabled and {c.TLS_SECRET_NAME} secret is defined "
                f"but there is no {c.TLS_EMAIL_KEY} field on this secret.",
                details=self._secret_example,
            )

        logger.debug(f"Found TLS contact email in secret {c.TLS_SECRET_NAME}")
        return email

    def check_cert_manager(self) -> None:
        """Verify the cert-manager API group is served by the cluster.

        Raises:
            ClusterAccessError: If the cluster API versions cannot be listed
            MissingClusterFeatureError: If cert-manager is not installed
        """
        group = self.constants.CERT_MANAGER_API_GROUP
        found = self._query(
            self.controller.api_group_exists(group),
            f"Unable to check the cluster for the {group} API group",
            "Check that the current kubeconfig context points at a reachable "
            "cluster and that kubectl api-versions succeeds.",
        )
        if found:
            return

        raise MissingClusterFeatureError(
            "TLS option is enabled but cert-manager API has not been found. "
            "Cert Manager is probably not installed.",
            details=(
                "Example on how to install it:\n"
                "  $ kubectl create namespace cert-manager\n"
                f"  $ kubectl label namespace cert-manager {group}/disable-validation=true\n"
                "  $ kubectl apply -f https://github.com/jetstack/cert-manager/releases/"
                "download/v0.8.1/cert-manager.yaml --validate=false\n\n"
                "Please install cert-manager."
            ),
        )
