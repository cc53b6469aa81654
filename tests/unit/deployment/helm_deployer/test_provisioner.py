"""Tests for idempotent Tiller resource provisioning."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from che_deployer.deployment.errors import CommandFailedError, DeploymentError
from che_deployer.deployment.helm_deployer.provisioner import ResourceProvisioner
from che_deployer.deployment.shell_commands.types import CommandResult


class TestResourceProvisioner:
    @pytest.fixture
    def mock_commands(self) -> MagicMock:
        commands = MagicMock()
        commands.kubectl = MagicMock()
        commands.helm = MagicMock()
        return commands

    @pytest.fixture
    def provisioner(self, mock_commands: MagicMock) -> ResourceProvisioner:
        return ResourceProvisioner(mock_commands)

    def test_existing_role_binding_is_not_recreated(
        self, provisioner, mock_commands
    ) -> None:
        mock_commands.kubectl.resource_exists.return_value = True

        assert provisioner.ensure_tiller_role_binding() is False

        mock_commands.kubectl.resource_exists.assert_called_once_with(
            "clusterrolebinding", "add-on-cluster-admin", timeout=30
        )
        mock_commands.kubectl.create_cluster_role_binding.assert_not_called()

    def test_missing_role_binding_is_created(self, provisioner, mock_commands) -> None:
        mock_commands.kubectl.resource_exists.return_value = False

        assert provisioner.ensure_tiller_role_binding() is True

        mock_commands.kubectl.create_cluster_role_binding.assert_called_once_with(
            "add-on-cluster-admin", "cluster-admin", "kube-system:default", timeout=30
        )

    def test_missing_service_account_is_created(
        self, provisioner, mock_commands
    ) -> None:
        mock_commands.kubectl.resource_exists.return_value = False

        assert provisioner.ensure_tiller_service_account() is True

        mock_commands.kubectl.resource_exists.assert_called_once_with(
            "serviceaccounts",
            "tiller",
            "kube-system",
            namespace_flag="--namespace",
            timeout=30,
        )
        mock_commands.kubectl.create_service_account.assert_called_once_with(
            "tiller", "kube-system", timeout=120
        )

    def test_existing_service_skips_helm_init(self, provisioner, mock_commands) -> None:
        mock_commands.kubectl.resource_exists.return_value = True

        assert provisioner.ensure_tiller_service() is False

        mock_commands.kubectl.resource_exists.assert_called_once_with(
            "services", "tiller-deploy", "kube-system", timeout=30
        )
        mock_commands.helm.init.assert_not_called()

    def test_missing_service_runs_helm_init(self, provisioner, mock_commands) -> None:
        mock_commands.kubectl.resource_exists.return_value = False

        assert provisioner.ensure_tiller_service() is True

        mock_commands.helm.init.assert_called_once_with("tiller", timeout=120)

    def test_creation_failure_propagates(self, provisioner, mock_commands) -> None:
        mock_commands.kubectl.resource_exists.return_value = False
        mock_commands.kubectl.create_service_account.side_effect = CommandFailedError(
            "forbidden", CommandResult(returncode=1, stderr="forbidden")
        )

        with pytest.raises(CommandFailedError):
            provisioner.ensure_tiller_service_account()

    def test_apply_rbac_feeds_manifest(
        self, provisioner, mock_commands, tmp_path: Path
    ) -> None:
        manifest = tmp_path / "tiller-rbac.yaml"
        manifest.write_text("kind: ClusterRoleBinding\n")

        provisioner.apply_tiller_rbac(manifest)

        mock_commands.kubectl.apply_manifest.assert_called_once_with(
            "kind: ClusterRoleBinding\n", timeout=30
        )
        mock_commands.kubectl.resource_exists.assert_not_called()

    def test_apply_rbac_missing_manifest(
        self, provisioner, mock_commands, tmp_path: Path
    ) -> None:
        with pytest.raises(DeploymentError, match="Unable to read Tiller RBAC manifest"):
            provisioner.apply_tiller_rbac(tmp_path / "missing.yaml")

        mock_commands.kubectl.apply_manifest.assert_not_called()
