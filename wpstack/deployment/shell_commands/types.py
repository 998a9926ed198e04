"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CommandResult", "ContainerState"]


@dataclass
class CommandResult:
    """Outcome of a shell command.

    Attributes:
        success: True when the command exited with status 0
        stdout: Captured standard output ("" when not captured)
        stderr: Captured standard error ("" when not captured)
        returncode: Process exit status
    """

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def lines(self) -> list[str]:
        """Non-empty, stripped stdout lines."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]


@dataclass
class ContainerState:
    """Runtime state of a container as reported by ``docker inspect``.

    Attributes:
        name: Container name
        running: Whether the container process is up
        health: Health status ("healthy", "starting", "unhealthy"),
                or "no-healthcheck" when the image defines none
    """

    name: str
    running: bool
    health: str
