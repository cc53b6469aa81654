"""Deployment constants and configuration.

This module centralizes all magic strings, paths, and timeouts used
throughout the install/upgrade procedure.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for the Helm/Tiller deployment.

    All attributes are class-level and immutable.
    """

    # TLS prerequisites
    TLS_SECRET_NAME: str = "che-tls"
    TLS_SECRET_NAMESPACE: str = "default"
    TLS_EMAIL_KEY: str = "ACME_EMAIL"
    CERT_MANAGER_API_GROUP: str = "certmanager.k8s.io"

    # Tiller resources
    SYSTEM_NAMESPACE: str = "kube-system"
    TILLER_ROLE_BINDING: str = "add-on-cluster-admin"
    TILLER_CLUSTER_ROLE: str = "cluster-admin"
    TILLER_BINDING_SUBJECT: str = "kube-system:default"
    TILLER_SERVICE_ACCOUNT: str = "tiller"
    TILLER_SERVICE: str = "tiller-deploy"

    # Chart layout, relative to the templates directory
    CHART_RELATIVE_PATH: str = "kubernetes/helm/che"
    RBAC_MANIFEST: str = "tiller-rbac.yaml"
    MULTI_USER_VALUES: str = "values/multi-user.yaml"
    TLS_VALUES: str = "values/tls.yaml"

    # Timeouts (seconds)
    SHORT_TIMEOUT: float = 30
    LONG_TIMEOUT: float = 120


class DeploymentPaths:
    """Path resolver for the chart source and its staged copy."""

    def __init__(
        self,
        templates: Path,
        cache_dir: Path,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize deployment paths.

        Args:
            templates: Source templates directory (read-only)
            cache_dir: Working directory the chart is staged into
            constants: Optional deployment constants
        """
        self._constants = constants or DeploymentConstants()
        self.templates = templates
        self.cache_dir = cache_dir

        self.chart_source = templates / self._constants.CHART_RELATIVE_PATH
        self.staged_chart = cache_dir / "templates" / self._constants.CHART_RELATIVE_PATH

    @property
    def rbac_manifest(self) -> Path:
        """Get path to the Tiller RBAC manifest in the source tree."""
        return self.chart_source / self._constants.RBAC_MANIFEST

    @property
    def multi_user_values(self) -> Path:
        """Get path to the staged multi-user values file."""
        return self.staged_chart / self._constants.MULTI_USER_VALUES

    @property
    def tls_values(self) -> Path:
        """Get path to the staged TLS values file."""
        return self.staged_chart / self._constants.TLS_VALUES
