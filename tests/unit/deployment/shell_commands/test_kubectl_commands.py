"""Tests for kubectl command abstractions."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from che_deployer.deployment.shell_commands.kubectl import KubectlCommands
from che_deployer.deployment.shell_commands.runner import CommandRunner
from che_deployer.deployment.shell_commands.types import CommandResult


class TestResourceExists:
    """Existence checks map exit codes to booleans and never raise."""

    @pytest.fixture
    def mock_runner(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def kubectl(self, mock_runner: MagicMock) -> KubectlCommands:
        return KubectlCommands(mock_runner)

    def test_zero_exit_means_exists(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult(returncode=0)

        assert kubectl.resource_exists("clusterrolebinding", "add-on-cluster-admin") is True

    @pytest.mark.parametrize("returncode", [1, 2, 127])
    def test_non_zero_exit_means_absent(
        self, kubectl: KubectlCommands, mock_runner: MagicMock, returncode: int
    ) -> None:
        mock_runner.run.return_value = CommandResult(
            returncode=returncode, stderr='Error from server (NotFound)'
        )

        assert kubectl.resource_exists("services", "tiller-deploy", "kube-system") is False

    def test_timeout_means_absent(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult(returncode=-1, timed_out=True)

        assert kubectl.resource_exists("services", "tiller-deploy", "kube-system") is False
        mock_runner.run_checked.assert_not_called()

    def test_unspawnable_binary_means_absent(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult(
            returncode=127, stderr="[Errno 13] Permission denied"
        )

        assert kubectl.resource_exists("serviceaccounts", "tiller", "kube-system") is False

    def test_cluster_scoped_command(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult()

        kubectl.resource_exists("clusterrolebinding", "add-on-cluster-admin", timeout=30)

        mock_runner.run.assert_called_once_with(
            ["kubectl", "get", "clusterrolebinding", "add-on-cluster-admin"], timeout=30
        )

    def test_namespace_flag_spelling(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult()

        kubectl.resource_exists(
            "serviceaccounts", "tiller", "kube-system", namespace_flag="--namespace"
        )

        assert mock_runner.run.call_args[0][0] == [
            "kubectl",
            "get",
            "serviceaccounts",
            "tiller",
            "--namespace",
            "kube-system",
        ]


class TestResourceCreation:
    """Creation commands go through run_checked so failures raise."""

    @pytest.fixture
    def mock_runner(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def kubectl(self, mock_runner: MagicMock) -> KubectlCommands:
        return KubectlCommands(mock_runner)

    def test_create_cluster_role_binding(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        kubectl.create_cluster_role_binding(
            "add-on-cluster-admin", "cluster-admin", "kube-system:default"
        )

        mock_runner.run_checked.assert_called_once_with(
            [
                "kubectl",
                "create",
                "clusterrolebinding",
                "add-on-cluster-admin",
                "--clusterrole=cluster-admin",
                "--serviceaccount=kube-system:default",
            ],
            timeout=30,
        )

    def test_create_service_account(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        kubectl.create_service_account("tiller", "kube-system")

        mock_runner.run_checked.assert_called_once_with(
            ["kubectl", "create", "serviceaccount", "tiller", "--namespace", "kube-system"],
            timeout=120,
        )

    def test_apply_manifest_feeds_stdin(
        self, kubectl: KubectlCommands, mock_runner: MagicMock
    ) -> None:
        kubectl.apply_manifest("apiVersion: v1\nkind: List\n")

        mock_runner.run_checked.assert_called_once_with(
            ["kubectl", "apply", "-f", "-"],
            timeout=30,
            input_data="apiVersion: v1\nkind: List\n",
        )


@pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")
class TestResourceExistsWithRealProcess:
    """Existence checks against a fake kubectl binary on PATH."""

    @pytest.fixture
    def kubectl_script(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        script = tmp_path / "kubectl"
        monkeypatch.setenv("PATH", f"{tmp_path}{os.pathsep}{os.environ.get('PATH', '')}")
        return script

    def test_invalid_utf8_output_means_absent(self, kubectl_script: Path) -> None:
        kubectl_script.write_text("#!/bin/sh\nprintf '\\377\\376' >&2\nexit 1\n")
        kubectl_script.chmod(0o755)

        kubectl = KubectlCommands(CommandRunner())

        assert kubectl.resource_exists("serviceaccounts", "tiller", "kube-system") is False

    def test_non_executable_binary_means_absent(self, kubectl_script: Path) -> None:
        kubectl_script.write_text("#!/bin/sh\nexit 0\n")
        kubectl_script.chmod(0o400)

        kubectl = KubectlCommands(CommandRunner())

        assert kubectl.resource_exists("serviceaccounts", "tiller", "kube-system") is False
