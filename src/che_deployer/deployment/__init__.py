"""Deployment of Eclipse Che via Helm.

The package is organized into subpackages:
- shell_commands: Abstractions for external command execution
- helm_deployer: Components of the install/upgrade procedure
"""

from .errors import DeploymentError
from .helm_deployer import HelmDeployer
from .pipeline import PipelineContext, Step, TaskPipeline

__all__ = ["HelmDeployer", "DeploymentError", "PipelineContext", "Step", "TaskPipeline"]
