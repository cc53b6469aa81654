"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
all specialized command modules.
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from ..errors import CommandFailedError, CommandTimedOutError
from .types import CommandResult

DEFAULT_TIMEOUT = 30.0


class CommandRunner:
    """Low-level command executor with consistent result handling.

    ``run`` never raises for a non-zero exit, a timeout or a binary that
    cannot be started, and undecodable output bytes are replaced. Callers
    inspect the returned ``CommandResult``. ``run_checked`` is the raising
    variant used where a failure must abort the deployment.
    """

    def __init__(self, working_dir: Path | None = None) -> None:
        """Initialize the command runner.

        Args:
            working_dir: Default working directory for commands.
                         The current directory is used when omitted.
        """
        self.working_dir = working_dir

    def tool_exists(self, name: str) -> bool:
        """Check whether a binary is resolvable on PATH."""
        return shutil.which(name) is not None

    def run(
        self,
        cmd: Sequence[str],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        cwd: Path | None = None,
        input_data: str | None = None,
    ) -> CommandResult:
        """Execute a command and return a structured result.

        Args:
            cmd: Command and arguments as a sequence
            timeout: Seconds to wait before the process is killed
            cwd: Working directory (defaults to the runner's working_dir)
            input_data: Optional text fed to the process on stdin

        Returns:
            CommandResult with exit code, captured output and timeout flag
        """
        command = list(cmd)
        logger.debug(f"Running: {shlex.join(command)} (timeout {timeout}s)")
        try:
            completed = subprocess.run(
                command,
                cwd=cwd or self.working_dir,
                capture_output=True,
                text=True,
                errors="replace",
                input=input_data,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            logger.debug(f"Timed out after {timeout}s: {shlex.join(command)}")
            return CommandResult(
                command=command,
                returncode=-1,
                stdout=_decode(exc.stdout),
                stderr=_decode(exc.stderr),
                timed_out=True,
            )
        except OSError as exc:
            # Unspawnable binary behaves like a command that ran and failed
            logger.debug(f"Unable to start {shlex.join(command)}: {exc}")
            return CommandResult(command=command, returncode=127, stderr=str(exc))

        logger.debug(f"Exit code {completed.returncode}: {shlex.join(command)}")
        return CommandResult(
            command=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run_checked(
        self,
        cmd: Sequence[str],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        cwd: Path | None = None,
        input_data: str | None = None,
    ) -> CommandResult:
        """Execute a command, raising on timeout or non-zero exit.

        Raises:
            CommandTimedOutError: If the command did not finish within timeout
            CommandFailedError: If the command exited with a non-zero code
        """
        result = self.run(cmd, timeout=timeout, cwd=cwd, input_data=input_data)
        return raise_for_result(result, timeout)


def raise_for_result(result: CommandResult, timeout: float) -> CommandResult:
    """Raise the matching CommandError for an unsuccessful result."""
    if result.timed_out:
        raise CommandTimedOutError(
            f'Command "{result.command_line}" timed out after '
            f"{int(timeout * 1000)}ms\n"
            f"stderr: {result.stderr}\n"
            f"stdout: {result.stdout}\n"
            f"error: {CommandTimedOutError.code}",
            result,
        )
    if result.returncode != 0:
        raise CommandFailedError(
            f'Command "{result.command_line}" failed with return code '
            f"{result.returncode}\n"
            f"stderr: {result.stderr}\n"
            f"stdout: {result.stdout}\n"
            f"error: {CommandFailedError.code}",
            result,
        )
    return result


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
