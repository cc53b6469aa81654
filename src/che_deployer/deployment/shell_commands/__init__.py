"""Shell command abstractions for Helm/kubectl deployment operations.

This package provides a typed interface over the external tools used
during deployment. It is organized into specialized modules per tool:

- runner: Process execution with timeouts
- helm: Helm release management
- kubectl: Kubernetes resource management

Usage:
    from che_deployer.deployment.shell_commands import ShellCommands

    commands = ShellCommands()
    if not commands.kubectl.resource_exists("serviceaccounts", "tiller", "kube-system"):
        commands.kubectl.create_service_account("tiller", "kube-system")
"""

from pathlib import Path

from .helm import HelmCommands, parse_history
from .kubectl import KubectlCommands
from .runner import CommandRunner, raise_for_result
from .types import CommandResult, HelmHistoryEntry


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        runner: Low-level command runner shared by all modules
        helm: Helm-related commands
        kubectl: Kubernetes kubectl commands
    """

    def __init__(self, working_dir: Path | None = None) -> None:
        """Initialize the shell commands executor.

        Args:
            working_dir: Default working directory for commands.
        """
        self.runner = CommandRunner(working_dir)
        self.helm = HelmCommands(self.runner)
        self.kubectl = KubectlCommands(self.runner)

    def tool_exists(self, name: str) -> bool:
        """Check whether a binary is resolvable on PATH."""
        return self.runner.tool_exists(name)


__all__ = [
    "ShellCommands",
    "CommandResult",
    "HelmHistoryEntry",
    "HelmCommands",
    "KubectlCommands",
    "CommandRunner",
    "parse_history",
    "raise_for_result",
]
