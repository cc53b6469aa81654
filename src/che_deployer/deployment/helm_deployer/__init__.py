"""Helm deployer package for installing Eclipse Che.

Each concern of the install/upgrade procedure lives in its own module:

- prerequisites: helm binary, TLS secret and cert-manager checks
- provisioner: Tiller role binding, service account, RBAC and service
- chart_stager: chart copy into the cache directory and dependency update
- helm_release: upgrade --install with purge-or-rollback recovery

The HelmDeployer class in deployer.py sequences these components as a
task pipeline.

Usage:
    from che_deployer.deployment.helm_deployer import HelmDeployer

    deployer = HelmDeployer(console)
    deployer.deploy(InstallationConfig(tls=True))
"""

from .chart_stager import ChartStager
from .constants import DeploymentConstants, DeploymentPaths
from .deployer import HelmDeployer
from .helm_release import HelmReleaseManager, RecoveryAction, choose_recovery
from .prerequisites import PrerequisiteChecker
from .provisioner import ResourceProvisioner

__all__ = [
    "HelmDeployer",
    # Component classes for testing/extension
    "PrerequisiteChecker",
    "ResourceProvisioner",
    "ChartStager",
    "HelmReleaseManager",
    "RecoveryAction",
    "choose_recovery",
    "DeploymentConstants",
    "DeploymentPaths",
]
