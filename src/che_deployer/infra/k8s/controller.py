"""Abstract Kubernetes controller interface.

Defines the read-only cluster queries the prerequisite checks depend on,
so that different backends can be substituted in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ClusterAPIError(Exception):
    """The cluster API could not be reached or rejected a request."""


class KubernetesController(ABC):
    """Abstract base class for cluster API lookups.

    All methods are async. Use ``run_sync()`` to call them from the
    synchronous deployment pipeline.

    Example:
        from che_deployer.infra.k8s import get_k8s_controller, run_sync

        controller = get_k8s_controller()
        exists = run_sync(controller.secret_exists("che-tls"))
    """

    # =========================================================================
    # Secrets
    # =========================================================================

    @abstractmethod
    async def secret_exists(self, name: str, namespace: str = "default") -> bool:
        """Check if a secret exists.

        Args:
            name: Secret name
            namespace: Namespace holding the secret

        Returns:
            True if the secret exists, False otherwise

        Raises:
            ClusterAPIError: If the lookup itself failed
        """
        ...

    @abstractmethod
    async def get_secret_value(
        self, name: str, key: str, namespace: str = "default"
    ) -> str | None:
        """Read and decode one field of a secret.

        Args:
            name: Secret name
            key: Field within the secret's data
            namespace: Namespace holding the secret

        Returns:
            The decoded value, or None if the secret or field is missing

        Raises:
            ClusterAPIError: If the lookup itself failed
        """
        ...

    # =========================================================================
    # API Discovery
    # =========================================================================

    @abstractmethod
    async def api_group_exists(self, group: str) -> bool:
        """Check if an API group is registered on the cluster.

        Args:
            group: API group name (e.g., "certmanager.k8s.io")

        Returns:
            True if any version of the group is served

        Raises:
            ClusterAPIError: If API discovery failed
        """
        ...
