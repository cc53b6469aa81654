"""Deployment error hierarchy.

Every failure that aborts a deployment is a ``DeploymentError``. The CLI
renders ``message`` and ``details`` verbatim and exits with a non-zero code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .shell_commands.types import CommandResult


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    code: str = "E_DEPLOYMENT_FAILED"

    def __init__(
        self, message: str, details: str | None = None, code: str | None = None
    ):
        self.message = message
        self.details = details
        if code is not None:
            self.code = code
        super().__init__(message)


# =============================================================================
# Prerequisites
# =============================================================================


class MissingToolError(DeploymentError):
    """A required binary could not be resolved on PATH."""

    code = "E_REQUISITE_NOT_FOUND"


class MissingSecretError(DeploymentError):
    """The TLS secret does not exist."""

    code = "E_MISSING_SECRET"


class InvalidSecretError(DeploymentError):
    """The TLS secret exists but lacks the required field."""

    code = "E_INVALID_SECRET"


class MissingClusterFeatureError(DeploymentError):
    """A required API group is not registered on the cluster."""

    code = "E_MISSING_CLUSTER_FEATURE"


class ClusterAccessError(DeploymentError):
    """The cluster API could not be queried during a prerequisite check."""

    code = "E_CLUSTER_ACCESS"


# =============================================================================
# Command execution
# =============================================================================


class CommandError(DeploymentError):
    """An external command did not complete successfully."""

    def __init__(self, message: str, result: CommandResult):
        self.result = result
        super().__init__(message)

    @property
    def returncode(self) -> int:
        return self.result.returncode

    @property
    def stdout(self) -> str:
        return self.result.stdout

    @property
    def stderr(self) -> str:
        return self.result.stderr


class CommandTimedOutError(CommandError):
    code = "E_TIMEOUT"


class CommandFailedError(CommandError):
    code = "E_COMMAND_FAILED"


# =============================================================================
# Chart staging and release recovery
# =============================================================================


class ChartStagingError(DeploymentError):
    """The chart template tree could not be copied to the cache directory."""

    code = "E_CHART_STAGING"


class HistoryQueryFailedError(DeploymentError):
    """``helm history`` could not be executed after a failed upgrade."""

    code = "E_HISTORY_QUERY_FAILED"


class HistoryParseFailedError(DeploymentError):
    """``helm history`` output was not valid structured data."""

    code = "E_HISTORY_PARSE_FAILED"


class EmptyReleaseHistoryError(DeploymentError):
    """The upgrade failed and the release has no revision to roll back to."""

    code = "E_EMPTY_HISTORY"


class UnrecoverableAfterRetryError(DeploymentError):
    """The upgrade failed again after purge or rollback."""

    code = "E_UNRECOVERABLE"
