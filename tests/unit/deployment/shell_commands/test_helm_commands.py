"""Tests for Helm command construction and history parsing."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from che_deployer.deployment.shell_commands.helm import HelmCommands, parse_history
from che_deployer.deployment.shell_commands.types import CommandResult


class TestHelmCommands:
    """Tests for HelmCommands."""

    @pytest.fixture
    def mock_runner(self) -> MagicMock:
        """Create a mock command runner."""
        return MagicMock()

    @pytest.fixture
    def helm_commands(self, mock_runner: MagicMock) -> HelmCommands:
        """Create HelmCommands instance with mock runner."""
        return HelmCommands(mock_runner)

    def test_init_binds_service_account_and_waits(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.init("tiller", timeout=120)

        mock_runner.run_checked.assert_called_once_with(
            ["helm", "init", "--service-account", "tiller", "--wait"], timeout=120
        )

    def test_dependency_update_targets_chart_dir(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.dependency_update(Path("/cache/templates/kubernetes/helm/che"))

        cmd = mock_runner.run_checked.call_args[0][0]
        assert cmd == [
            "helm",
            "dependencies",
            "update",
            "--skip-refresh",
            "/cache/templates/kubernetes/helm/che",
        ]

    def test_build_upgrade_install_orders_arguments(
        self, helm_commands: HelmCommands
    ) -> None:
        """Set values keep their order, value files follow, chart path is last."""
        cmd = helm_commands.build_upgrade_install(
            "che",
            Path("/chart"),
            "che-ns",
            set_values=[("a", "1"), ("b", "2")],
            value_files=[Path("/chart/values/tls.yaml")],
        )

        assert cmd == [
            "helm",
            "upgrade",
            "--install",
            "che",
            "--force",
            "--namespace",
            "che-ns",
            "--set",
            "a=1",
            "--set",
            "b=2",
            "-f",
            "/chart/values/tls.yaml",
            "/chart",
        ]

    def test_build_upgrade_install_without_force(self, helm_commands: HelmCommands) -> None:
        cmd = helm_commands.build_upgrade_install("che", Path("/chart"), "che", force=False)

        assert "--force" not in cmd

    def test_history_requests_json_and_never_raises(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult(returncode=1, stderr="Error")

        result = helm_commands.history("che")

        assert result.returncode == 1
        assert mock_runner.run.call_args[0][0] == [
            "helm",
            "history",
            "che",
            "--output",
            "json",
        ]

    def test_rollback_raises_through_run_checked(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.rollback("che", "3", timeout=60)

        mock_runner.run_checked.assert_called_once_with(
            ["helm", "rollback", "che", "3"], timeout=60
        )
        mock_runner.run.assert_not_called()

    def test_purge_tolerates_failure(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        mock_runner.run.return_value = CommandResult(returncode=1, stderr="not found")

        result = helm_commands.purge("che")

        assert not result.success
        mock_runner.run.assert_called_once_with(
            ["helm", "delete", "che", "--purge"], timeout=30
        )
        mock_runner.run_checked.assert_not_called()


class TestParseHistory:
    """Tests for parse_history."""

    def test_descending_history_is_kept(self) -> None:
        output = """[
            {"revision": "3", "status": "failed", "chart": "che-7.0.0"},
            {"revision": "2", "status": "superseded", "chart": "che-7.0.0"},
            {"revision": "1", "status": "superseded", "chart": "che-7.0.0"}
        ]"""

        entries = parse_history(output)

        assert [e.revision for e in entries] == ["3", "2", "1"]
        assert entries[0].status == "failed"
        assert entries[0].chart == "che-7.0.0"

    def test_ascending_history_is_reversed(self) -> None:
        """Helm prints oldest first; the latest revision must come first."""
        output = '[{"revision": 1}, {"revision": 2}, {"revision": 10}]'

        entries = parse_history(output)

        assert [e.revision for e in entries] == ["10", "2", "1"]

    def test_integer_revisions_are_strings(self) -> None:
        entries = parse_history('[{"revision": 1, "status": "failed"}]')

        assert entries[0].revision == "1"

    def test_empty_list(self) -> None:
        assert parse_history("[]") == []

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_history("Error: release: not found")

    def test_non_list_raises(self) -> None:
        with pytest.raises(ValueError, match="expected a JSON list"):
            parse_history('{"revision": "1"}')

    def test_entry_without_revision_raises(self) -> None:
        with pytest.raises(ValueError, match="malformed history entry"):
            parse_history('[{"status": "deployed"}]')
