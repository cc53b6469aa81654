"""Che deployer using Helm 2.

This module provides the HelmDeployer class which assembles the fixed
install/upgrade procedure as a task pipeline and runs it.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext

from loguru import logger
from rich.console import Console

from che_deployer.config import InstallationConfig
from che_deployer.infra.k8s import KubernetesController, get_k8s_controller

from ..pipeline import PipelineContext, Step, TaskPipeline
from ..shell_commands import HelmHistoryEntry, ShellCommands
from .chart_stager import ChartStager
from .constants import DeploymentConstants, DeploymentPaths
from .helm_release import HelmReleaseManager
from .prerequisites import PrerequisiteChecker
from .provisioner import ResourceProvisioner

LeaseFactory = Callable[[InstallationConfig], AbstractContextManager[object]]


class HelmDeployer:
    """Deployer for Eclipse Che on Kubernetes using Helm.

    The deployment workflow consists of:
    1. Verify helm is installed
    2. Check the TLS secret and cert-manager (TLS only)
    3. Create the Tiller role binding, service account, RBAC and service
    4. Stage the Che chart and update its dependencies
    5. Deploy via helm upgrade --install, recovering once on failure

    Attributes:
        console: Rich console for progress output
        commands: Shell command executor
        controller: Cluster API client
        constants: Deployment configuration constants
    """

    def __init__(
        self,
        console: Console,
        commands: ShellCommands | None = None,
        controller: KubernetesController | None = None,
        constants: DeploymentConstants | None = None,
    ) -> None:
        self.console = console
        self.commands = commands or ShellCommands()
        self.controller = controller or get_k8s_controller()
        self.constants = constants or DeploymentConstants()

    # =========================================================================
    # Pipeline Definition
    # =========================================================================

    def build_steps(self, config: InstallationConfig) -> list[Step]:
        """Build the ordered steps for one install/upgrade run."""
        paths = DeploymentPaths(config.templates, config.cache_dir, self.constants)
        prerequisites = PrerequisiteChecker(self.commands, self.controller, self.constants)
        provisioner = ResourceProvisioner(self.commands, self.constants)
        stager = ChartStager(self.commands, paths, self.constants)
        release = HelmReleaseManager(self.commands, paths, self.constants)

        def tls_enabled() -> bool:
            return config.tls

        def verify_helm(_ctx: PipelineContext, _step: Step) -> None:
            prerequisites.check_helm_installed()

        def check_tls_secret(ctx: PipelineContext, step: Step) -> None:
            ctx.tls_email = prerequisites.check_tls_secret()
            step.annotate(f"{self.constants.TLS_SECRET_NAME} secret found.")

        def check_cert_manager(_ctx: PipelineContext, step: Step) -> None:
            prerequisites.check_cert_manager()
            step.annotate("done")

        def ensure(create: Callable[[], bool]) -> Callable[[PipelineContext, Step], None]:
            def action(_ctx: PipelineContext, step: Step) -> None:
                step.annotate("done." if create() else "it already exist.")

            return action

        def create_rbac(_ctx: PipelineContext, _step: Step) -> None:
            provisioner.apply_tiller_rbac(paths.rbac_manifest)

        def prepare_chart(_ctx: PipelineContext, step: Step) -> None:
            stager.prepare_chart()
            step.annotate("done.")

        def update_dependencies(_ctx: PipelineContext, step: Step) -> None:
            stager.update_dependencies()
            step.annotate("done.")

        def deploy_chart(ctx: PipelineContext, step: Step) -> None:
            release.upgrade(config, ctx)
            step.annotate("done.")

        return [
            Step("Verify if helm is installed", verify_helm),
            Step("Check for TLS secret prerequisites", check_tls_secret, tls_enabled),
            Step("Check for cert-manager", check_cert_manager, tls_enabled),
            Step("Create Tiller Role Binding", ensure(provisioner.ensure_tiller_role_binding)),
            Step(
                "Create Tiller Service Account",
                ensure(provisioner.ensure_tiller_service_account),
            ),
            Step("Create Tiller RBAC", create_rbac),
            Step("Create Tiller Service", ensure(provisioner.ensure_tiller_service)),
            Step("Preparing Che Helm Chart", prepare_chart),
            Step("Updating Helm Chart dependencies", update_dependencies),
            Step("Deploying Che Helm Chart", deploy_chart),
        ]

    # =========================================================================
    # Public Interface
    # =========================================================================

    def deploy(
        self, config: InstallationConfig, *, lease: LeaseFactory | None = None
    ) -> PipelineContext:
        """Install or upgrade Che.

        No lock is taken by default. Callers that may run concurrently
        against the same release can pass ``lease``, a factory returning a
        context manager held for the whole run.

        Args:
            config: Installation options
            lease: Optional lock/lease factory

        Returns:
            The pipeline context produced by the run

        Raises:
            DeploymentError: If any step fails
        """
        logger.info(
            f"Deploying release {config.release_name} to namespace {config.namespace}"
        )
        pipeline = TaskPipeline(self.build_steps(config), console=self.console)
        with lease(config) if lease is not None else nullcontext():
            return pipeline.run(PipelineContext())

    def show_history(self, config: InstallationConfig) -> list[HelmHistoryEntry]:
        """Return the release history, most recent first."""
        paths = DeploymentPaths(config.templates, config.cache_dir, self.constants)
        return HelmReleaseManager(self.commands, paths, self.constants).get_history(
            config.release_name
        )
