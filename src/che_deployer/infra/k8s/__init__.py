"""Kubernetes infrastructure abstraction layer.

Example:
    from che_deployer.infra.k8s import get_k8s_controller, run_sync

    controller = get_k8s_controller()
    installed = run_sync(controller.api_group_exists("certmanager.k8s.io"))
"""

from .controller import ClusterAPIError, KubernetesController
from .helpers import get_k8s_controller
from .utils import run_sync

__all__ = [
    "ClusterAPIError",
    "KubernetesController",
    "get_k8s_controller",
    "run_sync",
]
