"""Data types for shell command results.

This module contains the dataclasses shared across the shell command modules.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Any

__all__ = ["CommandResult", "HelmHistoryEntry"]


@dataclass
class CommandResult:
    """Result of a command execution.

    Attributes:
        command: Command and arguments that were executed
        returncode: Process exit code (-1 if the process never exited)
        stdout: Captured standard output
        stderr: Captured standard error
        timed_out: Whether the process was killed after its timeout elapsed
    """

    command: list[str] = field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return not self.timed_out and self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


@dataclass
class HelmHistoryEntry:
    """One revision of a Helm release, as reported by ``helm history``.

    Attributes:
        revision: Revision identifier, kept as a string ("1", "2", ...)
        status: Release status (deployed, failed, superseded, ...)
        chart: Chart name and version
        description: Human-readable description of the revision
        updated: Timestamp of the revision
    """

    revision: str
    status: str = ""
    chart: str = ""
    description: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HelmHistoryEntry:
        return cls(
            revision=str(data["revision"]),
            status=str(data.get("status", "")),
            chart=str(data.get("chart", "")),
            description=str(data.get("description", "")),
            updated=str(data.get("updated", "")),
        )
