"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
all specialized command modules.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from .types import CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    All specialized command modules (Docker, OpenSSL, host filesystem) use
    this runner for actual command execution.
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the command runner.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self.project_root = project_root

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
        check: bool = False,
    ) -> CommandResult:
        """Execute a shell command and return structured result.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to project_root)
            capture_output: Whether to capture stdout/stderr
            check: Whether to raise exception on non-zero exit code

        Returns:
            CommandResult with success status, output, and return code

        Raises:
            subprocess.CalledProcessError: If check=True and command fails
            FileNotFoundError: If the executable does not exist
        """
        result = subprocess.run(
            list(cmd),
            cwd=cwd or self.project_root,
            capture_output=capture_output,
            text=True,
            check=check,
        )
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def run_ignoring_errors(self, cmd: Sequence[str]) -> CommandResult:
        """Execute a best-effort command.

        Non-zero exits and missing executables are reported in the result,
        never raised. Used by the host-wide cleanup path, which must be safe
        to re-run on a partially clean host.
        """
        try:
            return self.run(cmd, capture_output=True, check=False)
        except OSError as e:
            return CommandResult(success=False, stderr=str(e), returncode=127)
